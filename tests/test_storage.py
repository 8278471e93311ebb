from __future__ import annotations

import hashlib
import json
import tempfile
import threading
from pathlib import Path

import pytest

from assetgate.storage import (
    FileStorage,
    MemoryStorage,
    ReadPermission,
    StorageWrite,
    WritePermission,
)


def test_permission_values_match_server() -> None:
    assert int(ReadPermission.PUBLIC_READ) == 2
    assert int(WritePermission.OWNER_WRITE) == 1
    w = StorageWrite(collection="core", key="1.0.0", value=b"{}")
    assert w.permission_read is ReadPermission.PUBLIC_READ
    assert w.permission_write is WritePermission.OWNER_WRITE


def test_memory_storage_records_writes() -> None:
    sink = MemoryStorage()
    acks = sink.write([StorageWrite(collection="core", key="1.0.0", value=b'{"a":1}')])
    assert len(sink.writes) == 1
    assert acks[0].collection == "core"
    assert acks[0].key == "1.0.0"
    assert acks[0].version == hashlib.md5(b'{"a":1}').hexdigest()


def test_memory_storage_last_write_wins() -> None:
    sink = MemoryStorage()
    sink.write([StorageWrite(collection="core", key="1.0.0", value=b"1")])
    sink.write([StorageWrite(collection="core", key="1.0.0", value=b"2")])
    assert len(sink.writes) == 2
    assert sink.objects[("core", "1.0.0")].value == b"2"


def test_memory_storage_failure() -> None:
    sink = MemoryStorage(fail_with=RuntimeError("db down"))
    with pytest.raises(RuntimeError):
        sink.write([StorageWrite(collection="core", key="1.0.0", value=b"{}")])
    assert sink.writes == []


def test_file_storage_writes_value_and_meta() -> None:
    with tempfile.TemporaryDirectory() as td:
        sink = FileStorage(root=Path(td))
        value = b'{"example_data":"My data","number":1234567890}'
        acks = sink.write([StorageWrite(collection="core", key="1.0.0", value=value)])

        assert sink.object_path("core", "1.0.0").read_bytes() == value
        meta = json.loads(sink.meta_path("core", "1.0.0").read_text(encoding="utf-8"))
        assert meta == {
            "collection": "core",
            "key": "1.0.0",
            "permission_read": 2,
            "permission_write": 1,
            "version": acks[0].version,
        }
        # No temp files left behind.
        assert sorted(p.name for p in (Path(td) / "core").iterdir()) == ["1.0.0.json", "1.0.0.json.meta"]


def test_file_storage_overwrites() -> None:
    with tempfile.TemporaryDirectory() as td:
        sink = FileStorage(root=Path(td))
        sink.write([StorageWrite(collection="core", key="1.0.0", value=b"[1]")])
        sink.write([StorageWrite(collection="core", key="1.0.0", value=b"[2]")])
        assert sink.object_path("core", "1.0.0").read_bytes() == b"[2]"


def test_file_storage_concurrent_identical_writes() -> None:
    value = b'{"example_data":"My data","number":1234567890}'
    errors: list = []

    def _writer(sink: FileStorage) -> None:
        for _ in range(30):
            try:
                sink.write([StorageWrite(collection="core", key="1.0.0", value=value)])
            except Exception as e:
                errors.append(e)

    with tempfile.TemporaryDirectory() as td:
        sink = FileStorage(root=Path(td))
        threads = [threading.Thread(target=_writer, args=(sink,)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        assert sink.object_path("core", "1.0.0").read_bytes() == value
        assert json.loads(sink.meta_path("core", "1.0.0").read_text(encoding="utf-8"))["key"] == "1.0.0"
        assert not list((Path(td) / "core").glob("*.tmp"))


def test_file_storage_meta_key_does_not_clobber_other_meta() -> None:
    with tempfile.TemporaryDirectory() as td:
        sink = FileStorage(root=Path(td))
        sink.write([StorageWrite(collection="core", key="1.0.0", value=b"[1]")])
        sink.write([StorageWrite(collection="core", key="1.0.0.meta", value=b"[2]")])

        meta = json.loads(sink.meta_path("core", "1.0.0").read_text(encoding="utf-8"))
        assert meta["key"] == "1.0.0"
        assert sink.object_path("core", "1.0.0").read_bytes() == b"[1]"
        assert sink.object_path("core", "1.0.0.meta").read_bytes() == b"[2]"


def test_file_storage_failed_write_leaves_no_temp_file(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(src, dst):
        raise OSError("rename failed")

    with tempfile.TemporaryDirectory() as td:
        sink = FileStorage(root=Path(td))
        monkeypatch.setattr("assetgate.storage.os.replace", _boom)
        with pytest.raises(OSError):
            sink.write([StorageWrite(collection="core", key="1.0.0", value=b"[1]")])
        assert list((Path(td) / "core").iterdir()) == []
