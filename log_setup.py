"""Logging setup for the migrator CLI.

Every run writes to a session log (latest.log, truncated at startup) and a
daily rotating archive (migrate.log); the console only gets bare messages.
Set MIGRATOR_LOG_DIR to write the files somewhere other than ./logs.
"""

import logging
import os
from logging.handlers import TimedRotatingFileHandler

DIR = os.path.dirname(os.path.abspath(__file__))
LOG_DIR = os.environ.get("MIGRATOR_LOG_DIR") or os.path.join(DIR, "logs")

LATEST_LOG = os.path.join(LOG_DIR, "latest.log")
DAILY_LOG = os.path.join(LOG_DIR, "migrate.log")

# Library modules log under these names; they share the CLI's handlers.
LIBRARY_LOGGERS = ("migrator", "playlist_copy", "paging", "spotify_client", "demo_client")

_FILE_FMT = logging.Formatter(
    "%(asctime)s [%(name)s] %(levelname)-5s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
_CONSOLE_FMT = logging.Formatter("%(message)s")

_latest_handler = None
_daily_handler = None


def _get_file_handlers():
    """Lazily create shared file handlers (one instance each)."""
    global _latest_handler, _daily_handler

    os.makedirs(LOG_DIR, exist_ok=True)

    if _latest_handler is None:
        _latest_handler = logging.FileHandler(LATEST_LOG, mode="a", encoding="utf-8")
        _latest_handler.setLevel(logging.DEBUG)
        _latest_handler.setFormatter(_FILE_FMT)

    if _daily_handler is None:
        _daily_handler = TimedRotatingFileHandler(
            DAILY_LOG, when="midnight", backupCount=0, encoding="utf-8",
        )
        _daily_handler.setLevel(logging.DEBUG)
        _daily_handler.setFormatter(_FILE_FMT)
        _daily_handler.namer = lambda name: name.replace(".log.", ".") + ".log"

    return _latest_handler, _daily_handler


def get_logger(name, console=True):
    """Return a named logger with latest.log + migrate.log handlers.

    console=False leaves the console to other loggers; library modules use
    it so their DEBUG detail only reaches the files.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    if console:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(_CONSOLE_FMT)
        logger.addHandler(handler)

    latest, daily = _get_file_handlers()
    logger.addHandler(latest)
    logger.addHandler(daily)
    logger.propagate = False

    return logger


def setup_library_logging():
    """Route the library modules' loggers to the log files."""
    for name in LIBRARY_LOGGERS:
        get_logger(name, console=False)


def reset_latest():
    """Truncate latest.log at session start."""
    os.makedirs(LOG_DIR, exist_ok=True)
    open(LATEST_LOG, "w").close()
