from __future__ import annotations

import json
from dataclasses import dataclass

from .errors import InternalError


@dataclass(frozen=True)
class AssetResponse:
    type: str
    version: str
    digest: str
    # Canonical asset bytes when published, else None (serialized as null).
    content: bytes | None = None

    def to_json(self) -> str:
        """Compact JSON with `content` embedded as raw JSON, not as a string."""
        try:
            head = [
                f"{json.dumps(k)}:{json.dumps(v, ensure_ascii=False)}"
                for k, v in (("type", self.type), ("version", self.version), ("hash", self.digest))
            ]
            raw = "null" if self.content is None else self.content.decode("utf-8")
        except (TypeError, ValueError) as e:
            raise InternalError() from e
        return "{" + ",".join(head) + ',"content":' + raw + "}"
