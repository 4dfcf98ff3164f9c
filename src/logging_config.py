"""
Logging setup for the recent usernames service.

Every record carries the request id and, inside user-scoped routes, the
user id. Production output is one JSON object per line; development output
is a single readable line.

Usage:
    from src.logging_config import get_logger
    logger = get_logger(__name__)
    logger.warning("Failed to add recent username", extra={"user_id": str(uid)})
"""

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Dict, Optional

# Fields bound for the current request (request_id, user_id)
_log_context: ContextVar[Optional[Dict[str, str]]] = ContextVar("log_context", default=None)

CONTEXT_FIELDS = ("request_id", "user_id")

# Attributes every LogRecord has; anything else came in through extra=
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def bind_log_context(**fields: str) -> Token:
    """Add fields to the log context of the current task."""
    current = _log_context.get() or {}
    return _log_context.set({**current, **fields})


def reset_log_context(token: Token) -> None:
    _log_context.reset(token)


def get_log_context() -> Dict[str, str]:
    return dict(_log_context.get() or {})


class LogContextFilter(logging.Filter):
    """Copy bound context fields onto records that do not set them already."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_log_context()
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, context.get(field, "-"))
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and value not in (None, "-")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_handler(level: int, json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(LogContextFilter())
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s %(name)s req=%(request_id)s user=%(user_id)s | %(message)s",
            datefmt="%H:%M:%S",
        ))
    return handler


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the service's log handler on the root logger.

    Args:
        log_level: Level name used unless debug is set
        environment: 'production' switches to JSON output
        debug: Force DEBUG level
    """
    level = logging.DEBUG if debug else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(_build_handler(level, json_output=environment == "production"))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; records pick up the bound request and user ids."""
    return logging.getLogger(name)
