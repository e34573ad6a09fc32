"""Logging setup for scripts and the dbconnection CLI."""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Package loggers mirrored to a file when a log directory is given
FILE_LOGGERS = ["dbconnection"]


def _attach(logger, handler, level):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)


def setup_logging(level=logging.INFO, log_dir=None):
    """Send log records to stderr, and optionally to rotating files.

    Does nothing when the root logger already has handlers, so an embedding
    application keeps its own configuration. Query templates show up at DEBUG;
    bound values are never logged.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(level)
    _attach(root, logging.StreamHandler(), level)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    for name in FILE_LOGGERS:
        log_file = os.path.join(log_dir, f"{name.replace('.', '_')}.log")
        handler = RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        _attach(logging.getLogger(name), handler, level)
