"""Structured logging configuration for prop-stake.

Engine operations attach their parameters to each record through
``log_context``; ``JsonFormatter`` lifts them into top-level JSON keys so
a rejected deposit can be traced back to its user, property and amount.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

CONTEXT_ATTR = "extra"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Configure logging for prop-stake.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    format_type : str
        Format type: "standard" or "json".
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("prop_stake").setLevel(log_level)

    # Reduce noise from external libraries
    logging.getLogger("confluent_kafka").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


def log_context(**fields: Any) -> dict[str, dict[str, Any]]:
    """Build the ``extra`` mapping for a log call.

    ``None`` values are dropped so optional parameters do not clutter
    the output.

    Examples
    --------
    >>> logger.info("deposit", extra=log_context(user="alice", amount=100))
    """
    return {CONTEXT_ATTR: {k: v for k, v in fields.items() if v is not None}}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the operation context attached to a record, if any."""
    context = getattr(record, CONTEXT_ATTR, None)
    return dict(context) if isinstance(context, dict) else {}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Context never overrides the base fields
        for key, value in record_context(record).items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).

    Returns
    -------
    logging.Logger
        Configured logger.
    """
    return logging.getLogger(name)
