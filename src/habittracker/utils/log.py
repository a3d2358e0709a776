"""
Structured logging helpers.

Events are written as single-line JSON objects so they can be filtered in
CloudWatch the same way for the Lambda handler and the library services.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Keys stripped from structured context before it is logged
SENSITIVE_KEYS = frozenset({"body", "user_id", "identity_id"})


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger once.

    Repeated calls only adjust the level, so Lambda warm starts do not stack
    handlers.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    return root


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    exc_info: Optional[BaseException] = None,
    **fields: Any,
) -> None:
    """
    Emit a structured log line.

    Args:
        logger: Logger to write to
        event: Upper-case event name, e.g. ``WRITE_FAILED``
        level: Logging level for the record
        exc_info: Optional exception to attach to the record
        **fields: Additional context; sensitive keys are dropped

    Example:
        >>> log_event(logger, "BLOCK_TOGGLED", label="Spending Awareness (X)", index=3)
    """
    log_data = {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    log_data.update({k: v for k, v in fields.items() if k not in SENSITIVE_KEYS})

    logger.log(level, json.dumps(log_data, default=str), exc_info=exc_info)
