from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .digest import DEFAULT_ALGORITHM, check_algorithm
from .handler import FileHandler
from .resolver import AssetStore
from .storage import FileStorage, MemoryStorage, StorageSink

DEFAULT_ASSET_ROOT = "/nakama/data/json_files"

ENV_ASSET_ROOT = "ASSETGATE_ASSET_ROOT"
ENV_STORAGE_ROOT = "ASSETGATE_STORAGE_ROOT"
ENV_DIGEST_ALGORITHM = "ASSETGATE_DIGEST_ALGORITHM"
ENV_STRICT_PATHS = "ASSETGATE_STRICT_PATHS"
ENV_LOG_LEVEL = "ASSETGATE_LOG_LEVEL"


_ON_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_OFF_WORDS = frozenset({"0", "false", "no", "n", "off"})


def env_flag(value: str | None, default: bool) -> bool:
    """On/off switch from an environment value; missing or unrecognised words give `default`."""
    if value is None:
        return default
    word = value.strip().lower()
    if word in _ON_WORDS:
        return True
    if word in _OFF_WORDS:
        return False
    return default


def strict_paths_enabled(value: str | None) -> bool:
    """ASSETGATE_STRICT_PATHS: type/version may resolve outside the asset root
    only when this is explicitly switched off.
    """
    return env_flag(value, default=True)


@dataclass(frozen=True)
class Settings:
    asset_root: Path = Path(DEFAULT_ASSET_ROOT)
    # None => in-memory sink (nothing persists past the process).
    storage_root: Path | None = None
    digest_algorithm: str = DEFAULT_ALGORITHM
    strict_paths: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        object.__setattr__(self, "digest_algorithm", check_algorithm(self.digest_algorithm))
        level = self.log_level.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {self.log_level!r}")
        object.__setattr__(self, "log_level", level)

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        storage_root = env.get(ENV_STORAGE_ROOT)
        return Settings(
            asset_root=Path(env.get(ENV_ASSET_ROOT) or DEFAULT_ASSET_ROOT),
            storage_root=Path(storage_root) if storage_root else None,
            digest_algorithm=env.get(ENV_DIGEST_ALGORITHM) or DEFAULT_ALGORITHM,
            strict_paths=strict_paths_enabled(env.get(ENV_STRICT_PATHS)),
            log_level=env.get(ENV_LOG_LEVEL) or "INFO",
        )

    def asset_store(self) -> AssetStore:
        return AssetStore(root=self.asset_root, strict_paths=self.strict_paths)

    def storage_sink(self) -> StorageSink:
        if self.storage_root is None:
            return MemoryStorage()
        return FileStorage(root=self.storage_root)

    def file_handler(self, storage: StorageSink | None = None) -> FileHandler:
        return FileHandler(
            assets=self.asset_store(),
            storage=storage if storage is not None else self.storage_sink(),
            algorithm=self.digest_algorithm,
        )
