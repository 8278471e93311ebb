"""Canonical bytes for stored assets.

Canonical form is the asset text with insignificant whitespace between tokens
removed. Nothing else changes: key order, duplicate keys, string escapes and
number spellings are kept exactly as written, so two files that differ only in
indentation or line endings compact to identical bytes.

This is *not* sorted-key canonical JSON. Assets are published verbatim and
clients compare digests against bytes they have already seen.
"""

from __future__ import annotations

import json

from .errors import AssetCorrupt

JSON_WHITESPACE = frozenset(" \t\r\n")


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant: {name}")


def check_well_formed(text: str) -> None:
    """Raise ValueError unless `text` is exactly one strict JSON value."""
    json.loads(text, parse_constant=_reject_constant)


def compact_json(data: bytes) -> bytes:
    try:
        text = data.decode("utf-8")
        check_well_formed(text)
    except (ValueError, RecursionError) as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors;
        # RecursionError means nesting deeper than the decoder allows.
        raise AssetCorrupt(f"asset is not well-formed JSON: {e}") from e

    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch in JSON_WHITESPACE:
            continue
        else:
            out.append(ch)
            if ch == '"':
                in_string = True
    return "".join(out).encode("utf-8")
