from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Protocol, Sequence

from .digest import content_digest

log = logging.getLogger(__name__)


class ReadPermission(IntEnum):
    NO_READ = 0
    OWNER_READ = 1
    PUBLIC_READ = 2


class WritePermission(IntEnum):
    NO_WRITE = 0
    OWNER_WRITE = 1


@dataclass(frozen=True)
class StorageWrite:
    collection: str
    key: str
    value: bytes
    permission_read: ReadPermission = ReadPermission.PUBLIC_READ
    permission_write: WritePermission = WritePermission.OWNER_WRITE


@dataclass(frozen=True)
class StorageAck:
    collection: str
    key: str
    # Version tag of the stored value (md5 of the bytes, like the server's object version).
    version: str


class StorageSink(Protocol):
    def write(self, writes: Sequence[StorageWrite]) -> List[StorageAck]: ...


def _ack(w: StorageWrite) -> StorageAck:
    return StorageAck(collection=w.collection, key=w.key, version=content_digest(w.value))


@dataclass
class MemoryStorage:
    """In-process sink. Keeps every write in order; last write wins in `objects`."""

    writes: List[StorageWrite] = field(default_factory=list)
    fail_with: Exception | None = None

    def write(self, writes: Sequence[StorageWrite]) -> List[StorageAck]:
        if self.fail_with is not None:
            raise self.fail_with
        self.writes.extend(writes)
        return [_ack(w) for w in writes]

    @property
    def objects(self) -> dict:
        return {(w.collection, w.key): w for w in self.writes}


@dataclass(frozen=True)
class FileStorage:
    """Filesystem sink.

    Layout:
      <root>/<collection>/<key>.json       stored value, verbatim
      <root>/<collection>/<key>.json.meta  permissions + version (JSON)

    Value names end in ".json" and metadata names in ".json.meta", so no
    key can land on another key's metadata.
    """

    root: Path

    def object_path(self, collection: str, key: str) -> Path:
        return Path(self.root) / collection / f"{key}.json"

    def meta_path(self, collection: str, key: str) -> Path:
        return Path(self.root) / collection / f"{key}.json.meta"

    def _write_atomic(self, dst: Path, data: bytes) -> None:
        # temp -> rename so readers never see a partial value. Each writer gets
        # its own temp file; concurrent writers to one key race only on rename.
        dst.parent.mkdir(parents=True, exist_ok=True)
        f = tempfile.NamedTemporaryFile(dir=dst.parent, prefix=dst.name + ".", suffix=".tmp", delete=False)
        tmp = Path(f.name)
        try:
            with f:
                f.write(data)
            os.replace(tmp, dst)
        finally:
            if tmp.exists():
                tmp.unlink()

    def write(self, writes: Sequence[StorageWrite]) -> List[StorageAck]:
        acks: List[StorageAck] = []
        for w in writes:
            ack = _ack(w)
            meta = {
                "collection": w.collection,
                "key": w.key,
                "permission_read": int(w.permission_read),
                "permission_write": int(w.permission_write),
                "version": ack.version,
            }
            self._write_atomic(self.object_path(w.collection, w.key), w.value)
            self._write_atomic(
                self.meta_path(w.collection, w.key),
                (json.dumps(meta, indent=2, sort_keys=True) + "\n").encode("utf-8"),
            )
            log.debug("Stored %s/%s (version %s)", w.collection, w.key, ack.version)
            acks.append(ack)
        return acks
