"""Logging setup for the command line.

The plugin modules only create module loggers; handlers are installed here,
once, by whoever runs the plugin standalone.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import colorlog

CONSOLE_FORMAT = "%(log_color)s%(levelname)-8s%(reset)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

# These libraries log full request URLs, query string included. Every
# Subsonic request carries the password or its token and salt there.
QUIET_LOGGERS = ("httpx", "httpcore")


def silence_http_loggers() -> None:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LEVEL_COLORS))
    return handler


def _file_handler(path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        path,
        maxBytes=int(os.getenv("AIRSONIC_LOG_FILE_MAX_BYTES", str(5 * 1024 * 1024))),
        backupCount=int(os.getenv("AIRSONIC_LOG_FILE_BACKUP_COUNT", "3")),
    )
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the command line.

    Args:
        level: Log level name; defaults to AIRSONIC_LOG_LEVEL, then INFO

    Environment:
        AIRSONIC_LOG_LEVEL: Level used when ``level`` is not given
        AIRSONIC_LOG_FILE: Also write plain-text logs to this rotating file
        AIRSONIC_LOG_FILE_MAX_BYTES, AIRSONIC_LOG_FILE_BACKUP_COUNT: Rotation
    """
    root = logging.getLogger()
    root.setLevel((level or os.getenv("AIRSONIC_LOG_LEVEL", "INFO")).upper())
    silence_http_loggers()

    if root.handlers:
        return

    root.addHandler(_console_handler())
    log_file = os.getenv("AIRSONIC_LOG_FILE")
    if log_file:
        root.addHandler(_file_handler(log_file))
