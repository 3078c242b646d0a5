"""
FileVault logging.

Modules take a child of the ``filevault`` logger from ``get_logger``; level
and format are applied once to the parent by ``configure_logging`` from an
explicit ``VaultSettings``.
"""

import logging
import sys
import json
from datetime import datetime

ROOT_LOGGER = "filevault"


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra attributes if provided
        if hasattr(record, "extra_data"):
            log_entry.update(record.extra_data)

        return json.dumps(log_entry)


def get_logger(name: str) -> logging.Logger:
    """Returns a logger under the ``filevault`` hierarchy."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(settings) -> logging.Logger:
    """
    Apply ``settings.LOG_LEVEL`` and ``settings.ENVIRONMENT`` to the
    ``filevault`` logger, replacing any handler set by an earlier call.
    """
    logger = logging.getLogger(ROOT_LOGGER)

    for old in list(logger.handlers):
        logger.removeHandler(old)

    # stderr keeps stdout free for `filevault cat`
    handler = logging.StreamHandler(sys.stderr)

    # In production, use JSON. In dev, use standard format.
    if settings.is_production():
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    logger.addHandler(handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
    logger.propagate = False
    return logger
