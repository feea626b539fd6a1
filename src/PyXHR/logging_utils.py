"""Structured logging helpers shared across PyXHR components."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = ["JSONFormatter", "mask_sensitive_data", "setup_logging"]

PACKAGE_LOGGER = "PyXHR"

_SENSITIVE_KEYS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "password",
    "api_key",
    "apikey",
    "token",
    "secret",
}
_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9+/=_-]{32,}$")
_MASK = "***masked***"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def mask_sensitive_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``payload`` with credentials and cookies masked."""

    def _mask_value(value: Any, key_hint: Optional[str] = None) -> Any:
        if key_hint in _SENSITIVE_KEYS:
            return _MASK
        if isinstance(value, dict):
            return {key: _mask_value(item, str(key).lower()) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            if len(value) == 2 and isinstance(value[0], str):
                return type(value)((value[0], _mask_value(value[1], value[0].lower())))
            return type(value)(_mask_value(item) for item in value)
        if isinstance(value, str) and _TOKEN_PATTERN.match(value):
            return _MASK
        return value

    return {key: _mask_value(value, str(key).lower()) for key, value in payload.items()}


class JSONFormatter(logging.Formatter):
    """Formatter emitting one masked JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` with its ``extra=`` fields as a JSON string."""

        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(payload), default=str)


def setup_logging(
    *,
    level: str = "WARNING",
    emit_json: bool = False,
    log_file: Optional[Path] = None,
    max_log_size_mb: int = 10,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the ``PyXHR`` logger with a stderr handler and optional file.

    Handlers installed by an earlier call are replaced, so repeated calls
    never duplicate output.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, "_pyxhr_managed", False):
            logger.removeHandler(handler)
            if isinstance(handler, logging.StreamHandler):
                stream = getattr(handler, "stream", None)
                if stream in (sys.stdout, sys.stderr):
                    continue
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    if emit_json:
        stream_handler.setFormatter(JSONFormatter())
    else:
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream_handler._pyxhr_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=5,
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._pyxhr_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger
