from __future__ import annotations

import json
import logging

log = logging.getLogger(__name__)


def health_check(payload: str = "") -> str:
    """Liveness probe. Input is ignored."""
    log.debug("Health check invoked")
    return json.dumps({"health": "OK"}, separators=(",", ":"))
