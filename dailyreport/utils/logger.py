"""
Centralized logging configuration.

Modules log structured events through structlog:

    logger = get_logger(__name__)
    logger.info("Login succeeded", sales_id=record.id)

setup_logging() routes everything through the stdlib root logger so uvicorn
and library logs share the same handler.
"""

import logging
import sys
from typing import Any, Dict

import structlog

# Values under these keys never reach a log line
MASKED_KEYS = {"password", "password_hash", "session_secret", "secret", "cookie"}


def mask_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor that replaces credential material with a mask."""
    for key in list(event_dict.keys()):
        if key.lower() in MASKED_KEYS:
            event_dict[key] = "***"
    return event_dict


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines (production) instead of console output
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            mask_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the specified module.

    Args:
        name: Module name (typically __name__)

    Returns:
        structlog logger accepting keyword event fields
    """
    return structlog.get_logger(name)
