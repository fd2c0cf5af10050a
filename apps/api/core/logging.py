"""
Logging setup for the analytics API.

Modules log through `logging.getLogger(__name__)` and attach structured
context with `extra=log_fields(...)`. Production writes one JSON object
per line; development gets a short text line.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import settings

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Third-party loggers kept at WARNING regardless of LOG_LEVEL.
QUIET_LOGGERS = ("uvicorn.access",)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with `extra_fields` merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        payload.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def log_fields(**fields: Any) -> Dict[str, Dict[str, Any]]:
    """Structured context for a log call's `extra`; None values are dropped."""
    return {"extra_fields": {k: v for k, v in fields.items() if v is not None}}


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    environment: Optional[str] = None,
) -> logging.Logger:
    """
    Install a single stdout handler on the root logger.

    Arguments default to the LOG_LEVEL, LOG_FORMAT and ENVIRONMENT settings.
    JSON output is forced in production.
    """
    level = _level(log_level or settings.LOG_LEVEL)
    json_output = (
        (log_format or settings.LOG_FORMAT) == "json"
        or (environment or settings.ENVIRONMENT) == "production"
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
