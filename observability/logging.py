from __future__ import annotations

import json
import logging
import os
import time
import uuid
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

EVENT_LOGGER_NAME = "plugin_store.events"

_event_logger = logging.getLogger(EVENT_LOGGER_NAME)


def build_log_context(*, component: str) -> Dict[str, Any]:
    """
    Build a per-instance context object for structured logs.

    We keep this intentionally minimal to avoid leaking connection secrets.
    """
    return {
        "component": component,
        "instance_id": uuid.uuid4().hex[:12],
        "ts_ms": int(time.time() * 1000),
        "service": os.getenv("PLUGIN_STORE_SERVICE_NAME", "plugin-store"),
    }


def log_event(event: str, *, ctx: Dict[str, Any], data: Optional[Dict[str, Any]] = None, level: int = logging.INFO) -> None:
    """
    Emit a single-line JSON log event on the plugin_store.events logger.
    """
    payload = dict(ctx)
    payload["event"] = event
    if data:
        payload["data"] = data
    _event_logger.log(level, json.dumps(payload, sort_keys=True, default=str))


def configure_logging(level: Optional[str]) -> None:
    """Apply `level` to the plugin_store logger tree. None leaves it untouched."""
    if not level:
        return
    logging.getLogger("plugin_store").setLevel(level.upper())


def redact_url(url: str) -> str:
    """Mask the password in a connection URL before it is logged."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<unparseable url>"
    if not parts.password:
        return url
    netloc = parts.netloc.rsplit("@", 1)[1]
    user = parts.username or ""
    return urlunsplit((parts.scheme, f"{user}:***@{netloc}", parts.path, parts.query, parts.fragment))
