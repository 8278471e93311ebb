from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import AssetNotFound, InvalidInput

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetStore:
    """Read-only view of the JSON asset tree.

    Layout: <root>/<type>/<version>.json

    With strict_paths on, a (type, version) pair whose path would land
    outside root (e.g. "../secrets") is refused. Turning it off restores
    plain string joining.
    """

    root: Path
    strict_paths: bool = True

    def asset_path(self, asset_type: str, version: str) -> Path:
        return Path(self.root) / asset_type / f"{version}.json"

    def _check_contained(self, p: Path, logger: logging.Logger) -> None:
        root = Path(self.root).resolve()
        try:
            resolved = p.resolve()
        except (OSError, ValueError) as e:
            # A NUL in type/version cannot name any file.
            logger.error("Failed to resolve asset path %r: %s", str(p), e)
            raise AssetNotFound() from e
        try:
            resolved.relative_to(root)
        except ValueError:
            logger.warning("Refusing asset path outside store root: %s", p)
            raise InvalidInput() from None

    def read(self, asset_type: str, version: str, logger: logging.Logger | None = None) -> bytes:
        logger = logger or log
        p = self.asset_path(asset_type, version)
        if self.strict_paths:
            self._check_contained(p, logger)

        try:
            data = p.read_bytes()
        except (OSError, ValueError) as e:
            # Missing file, directory in its place, no permission, or a NUL in the name.
            logger.error("Failed to read file at %s: %s", p, e)
            raise AssetNotFound() from e
        logger.debug("Read file content: %s", data.decode("utf-8", errors="replace"))
        return data
