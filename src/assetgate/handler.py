"""Verify-then-publish request pipeline.

    payload -> parse -> read asset -> compact -> digest -> gate -> response

Each step either hands its result to the next or raises an RpcError. There is
no partial success: a failed publish discards the response entirely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .canon import compact_json
from .digest import DEFAULT_ALGORITHM, check_algorithm, content_digest
from .errors import AssetCorrupt, InternalError
from .gate import publish_if_matched
from .request import parse_request
from .resolver import AssetStore
from .response import AssetResponse
from .storage import StorageSink

log = logging.getLogger(__name__)


def handle_asset_request(
    payload: str,
    assets: AssetStore,
    storage: StorageSink,
    logger: logging.Logger | None = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    logger = logger or log
    logger.debug("Asset request received with payload: %s", payload)

    req = parse_request(payload, logger=logger)
    raw = assets.read(req.type, req.version, logger=logger)

    try:
        canonical = compact_json(raw)
    except AssetCorrupt as e:
        logger.error("Failed to compact JSON content: %s", e)
        raise

    digest = content_digest(canonical, algorithm)
    logger.debug("Calculated hash: %s", digest)

    published = publish_if_matched(req, digest, canonical, storage, logger=logger)

    resp = AssetResponse(
        type=req.type,
        version=req.version,
        digest=digest,
        content=canonical if published else None,
    )
    try:
        return resp.to_json()
    except InternalError as e:
        logger.error("Failed to marshal response: %s", e.__cause__)
        raise


@dataclass(frozen=True)
class FileHandler:
    """`handle_asset_request` bound to the configuration chosen at startup."""

    assets: AssetStore
    storage: StorageSink
    algorithm: str = DEFAULT_ALGORITHM
    logger: logging.Logger | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", check_algorithm(self.algorithm))

    def __call__(self, payload: str) -> str:
        return handle_asset_request(
            payload,
            self.assets,
            self.storage,
            logger=self.logger,
            algorithm=self.algorithm,
        )
