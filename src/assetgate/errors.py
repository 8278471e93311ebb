"""Typed failures surfaced to the caller.

Each error carries the status code the host runtime reports back to the
client. Codes follow the gRPC numbering used by the game server.
"""

from __future__ import annotations

INVALID_ARGUMENT = 3
NOT_FOUND = 5
INTERNAL = 13


class RpcError(Exception):
    code: int = INTERNAL
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class InvalidInput(RpcError):
    code = INVALID_ARGUMENT
    default_message = "input contained invalid data"


class AssetNotFound(RpcError):
    code = NOT_FOUND
    default_message = "file not found"


class AssetCorrupt(RpcError):
    # The asset store is trusted; a bad file there is our fault, not the caller's.
    code = INTERNAL
    default_message = "asset is not well-formed JSON"


class PublishFailed(RpcError):
    code = INTERNAL


class InternalError(RpcError):
    code = INTERNAL
