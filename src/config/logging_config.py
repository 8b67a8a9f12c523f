"""
Logging setup shared by the API and the console commands.

The API logs JSON records (one per line) carrying the request correlation
ID; console commands log plain lines to stderr so they do not mix with the
command output.
"""

import sys
from pathlib import Path
from typing import Optional

from asgi_correlation_id import correlation_id
from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def _add_correlation_id(record):
    # Set by CorrelationIdMiddleware for the duration of a request
    record["extra"].setdefault("correlation_id", correlation_id.get() or "-")


def setup_structured_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    serialize: bool = True
) -> None:
    """
    Configure Loguru sinks.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating JSON log file
        serialize: JSON records on stdout (API); False gives readable
            lines on stderr (console commands)
    """
    logger.remove()
    logger.configure(patcher=_add_correlation_id)

    if serialize:
        logger.add(
            sys.stdout,
            serialize=True,
            level=level.upper(),
            enqueue=True,
            backtrace=True,
            diagnose=False
        )
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=None)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            serialize=True,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            compression="zip"
        )

    # Stripe SDK and HTTP client chatter
    for name in ("stripe", "httpx", "httpcore", "urllib3"):
        logger.disable(name)


def get_logger(name: str):
    """Logger bound to a module name."""
    return logger.bind(module=name)
