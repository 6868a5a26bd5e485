"""Logging setup for the ChatOps console.

One stderr handler always, plus a file handler when ``LOG_FILE`` is
set. AWS and Slack client libraries are held at WARNING or above whatever
the console level is.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from aws_chatops.config import load_settings

if TYPE_CHECKING:
    from aws_chatops.config import Settings

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_QUIET_LOGGERS = (
    "botocore",
    "boto3",
    "urllib3",
    "slack_bolt",
    "slack_sdk",
    "aiohttp.access",
)

_configured = False
_configure_lock = threading.Lock()

_logger = logging.getLogger(__name__)


def _build_handlers(log_file: str | None) -> list[logging.Handler]:
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as exc:
            _logger.warning("Cannot write log file %s, logging to stderr only: %s", log_file, exc)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(settings: Settings | None = None) -> None:
    """Install the console's handlers on the root logger."""
    global _configured

    settings = settings or load_settings()
    level = logging.getLevelName(settings.logging.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, handlers=_build_handlers(settings.logging.file), force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures logging from settings on first use."""
    if not _configured:
        with _configure_lock:
            if not _configured:
                configure_logging()
    return logging.getLogger(name)
