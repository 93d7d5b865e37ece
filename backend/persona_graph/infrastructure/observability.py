"""Structured Logging — one JSON object per line, carrying persona-graph context.

Invariants:
    - Every record has timestamp, level, logger and message
    - Graph context passed via extra= (persona and edge ids, account, session,
      error code, cascade step, request path) is emitted when present
    - setup_logging is idempotent: calling it twice never duplicates output

Design Decisions:
    - Hand-written formatter on stdlib logging, no logging dependency
    - UUIDs and datetimes serialized by the formatter, so call sites pass raw values
"""

import json
import logging
from datetime import datetime, timezone
from uuid import UUID

CONTEXT_FIELDS = (
    "persona_id", "follower_id", "following_id", "account",
    "session_key", "error_code", "step", "path",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access")


def _json_default(value):
    if isinstance(value, (UUID, datetime)):
        return str(value)
    return repr(value)


class JSONFormatter(logging.Formatter):
    """Render a LogRecord and its graph context as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({
            key: getattr(record, key)
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=_json_default)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install one stream handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_persona_graph", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler._persona_graph = True
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
