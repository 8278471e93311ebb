"""Content digests over canonical asset bytes.

md5 is the default because clients already hold md5 digests for published
assets. It is an integrity checksum here, not a security boundary; deployments
that need one can switch to sha256.
"""

from __future__ import annotations

import hashlib

DEFAULT_ALGORITHM = "md5"

# algorithm -> hex length
ALGORITHMS = {
    "md5": 32,
    "sha256": 64,
}


def check_algorithm(algorithm: str) -> str:
    name = algorithm.strip().lower()
    if name not in ALGORITHMS:
        raise ValueError(
            f"unsupported digest algorithm {algorithm!r} (expected one of: {', '.join(sorted(ALGORITHMS))})"
        )
    return name


def content_digest(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("content_digest expects bytes-like input")
    name = check_algorithm(algorithm)
    if name == "md5":
        h = hashlib.md5(usedforsecurity=False)
    else:
        h = hashlib.new(name)
    h.update(bytes(data))
    return h.hexdigest()


def is_hex_digest(s: str, algorithm: str = DEFAULT_ALGORITHM) -> bool:
    if not isinstance(s, str):
        return False
    if len(s) != ALGORITHMS[check_algorithm(algorithm)]:
        return False
    return all(c in "0123456789abcdef" for c in s)
