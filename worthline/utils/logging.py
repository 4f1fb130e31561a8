# worthline/utils/logging.py
"""
Logging configuration for Worthline.

One stdout handler on the root logger, carrying the request correlation
ID on every record and writing either pipe-separated text or one JSON
object per line.

Usage:
    from worthline.utils import setup_logging

    # In main.py, before creating the FastAPI app
    setup_logging()

What the engine logs, by level:
    DEBUG   - Unresolved prices / FX rates, skipped accounts, service wiring
    INFO    - One summary line per snapshot, history or change-point run
    WARNING - Rejected input (unknown accounts, malformed dates, granularities)
    ERROR   - Service failures surfaced as 500 responses

Environment Configuration:
    LOG_LEVEL=DEBUG       # see every resolution decision
    LOG_FORMAT=json       # one JSON object per line
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from worthline.config import settings
from worthline.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# Server and event-loop chatter, capped at WARNING
QUIET_LOGGERS = ("asyncio", "uvicorn.access", "multipart")

# Every attribute a bare LogRecord carries; anything else came in via extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "correlation_id"}


# =============================================================================
# FILTER & FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Stamps record.correlation_id (placeholder outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record:

        {"timestamp": "2024-03-01T09:15:02.118000+00:00", "level": "INFO",
         "logger": "worthline.services.history.service",
         "correlation_id": "3f0c...", "message": "History in USD: 12 points ...",
         "extra": {...}}

    Values passed through extra= that JSON cannot encode (Decimal, date,
    AssetId) are written as their str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """
    Install the Worthline handler on the root logger.

    Safe to call more than once: earlier root handlers are replaced.

    Args:
        level: Level name; defaults to settings.log_level
        log_format: "text" or "json"; defaults to settings.log_format

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = level or settings.log_level
    format_name = (log_format or settings.log_format).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if format_name == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_get_log_level(level_name))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured: level={level_name}, format={format_name}")


def _get_log_level(name: str) -> int:
    """Level number for a case-insensitive level name (WARN and FATAL included)."""
    levels = logging.getLevelNamesMapping()
    levels.pop("NOTSET", None)

    key = name.strip().upper()
    if key not in levels:
        raise ValueError(
            f"Invalid log level: '{name}'. Valid levels are: {', '.join(sorted(levels))}"
        )
    return levels[key]
