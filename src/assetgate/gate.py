from __future__ import annotations

import logging

from .errors import PublishFailed
from .request import AssetRequest
from .storage import ReadPermission, StorageSink, StorageWrite, WritePermission

log = logging.getLogger(__name__)


def digest_matches(claimed: str, computed: str) -> bool:
    return claimed != "" and claimed == computed


def publish_if_matched(
    req: AssetRequest,
    computed_digest: str,
    canonical: bytes,
    sink: StorageSink,
    logger: logging.Logger | None = None,
) -> bool:
    """Store `canonical` under (type, version) iff the caller proved it knows the digest.

    Returns True when a write was committed. A missing or wrong claim is not
    an error; nothing is written and False is returned.
    """
    logger = logger or log
    if not digest_matches(req.claimed_digest, computed_digest):
        logger.debug("Hashes do not match or no hash provided")
        return False

    write = StorageWrite(
        collection=req.type,
        key=req.version,
        value=canonical,
        permission_read=ReadPermission.PUBLIC_READ,
        permission_write=WritePermission.OWNER_WRITE,
    )
    try:
        sink.write([write])
    except Exception as e:
        logger.error("Failed to write to storage: %s", e)
        raise PublishFailed() from e
    logger.debug("Content saved to storage")
    return True
