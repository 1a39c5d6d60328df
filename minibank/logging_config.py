"""
Structured logging configuration.

Every minibank module logs through a child of the "minibank" logger, so a
single call to setup_logging() at startup formats the whole service as JSON
lines on stderr.
"""

import json
import logging
from datetime import datetime, timezone


ROOT_LOGGER_NAME = "minibank"

# LogRecord attributes promoted into the JSON payload when present
_STRUCTURED_FIELDS = ("action", "resource", "user_email", "error_type")


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure JSON logging for the service.

    Safe to call more than once (e.g. one app per test): existing handlers
    are replaced rather than stacked.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        The configured "minibank" logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger; pass __name__ from inside the minibank package."""
    return logging.getLogger(name)
