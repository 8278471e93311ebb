from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict

from jsonschema import Draft202012Validator

from .errors import InvalidInput

log = logging.getLogger(__name__)

DEFAULT_TYPE = "core"
DEFAULT_VERSION = "1.0.0"

# Unknown members are ignored. A null member, or a null document, means "absent".
REQUEST_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": ["object", "null"],
    "properties": {
        "type": {"type": ["string", "null"]},
        "version": {"type": ["string", "null"]},
        "hash": {"type": ["string", "null"]},
    },
}

_validator = Draft202012Validator(REQUEST_SCHEMA)


@dataclass(frozen=True)
class AssetRequest:
    type: str = DEFAULT_TYPE
    version: str = DEFAULT_VERSION
    # Empty means "no claim": look up and report, never publish.
    claimed_digest: str = ""


def apply_defaults(req: AssetRequest) -> AssetRequest:
    return replace(
        req,
        type=req.type or DEFAULT_TYPE,
        version=req.version or DEFAULT_VERSION,
    )


def _schema_errors(doc: Any) -> str:
    errs = sorted(_validator.iter_errors(doc), key=lambda e: list(e.path))
    return "; ".join(f"{list(e.path)}: {e.message}" for e in errs[:5])


def parse_request(payload: str, logger: logging.Logger | None = None) -> AssetRequest:
    """Decode a request payload and fill in defaults.

    Raises InvalidInput for an empty payload, text that is not JSON, or a
    document that is neither null nor an object whose known members are
    strings or null.
    """
    logger = logger or log
    if not payload:
        logger.error("Payload is empty")
        raise InvalidInput()

    try:
        doc = json.loads(payload)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder allows.
        logger.error("Failed to unmarshal payload: %s", e)
        raise InvalidInput() from e

    problems = _schema_errors(doc)
    if problems:
        logger.error("Payload does not match request schema: %s", problems)
        raise InvalidInput()

    doc = doc or {}
    req = AssetRequest(
        type=doc.get("type") or "",
        version=doc.get("version") or "",
        claimed_digest=doc.get("hash") or "",
    )
    return apply_defaults(req)
