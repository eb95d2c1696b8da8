# core/logger.py

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import config


# -------------------------------------------------------------------
# FORMATTER
# -------------------------------------------------------------------
LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)

formatter = logging.Formatter(LOG_FORMAT)


# -------------------------------------------------------------------
# HANDLER: CONSOLE
# -------------------------------------------------------------------
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
console_handler.setLevel(logging.DEBUG)


# -------------------------------------------------------------------
# HANDLER: FILE (rotating, only when LOG_FILE is set)
# -------------------------------------------------------------------
def _file_handler(path: str) -> RotatingFileHandler:
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,   # 5 MB
        backupCount=5,              # keep 5 files
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    handler.setLevel(logging.INFO)
    return handler


# -------------------------------------------------------------------
# GLOBAL LOGGER
# -------------------------------------------------------------------
logger = logging.getLogger("recommendation_core")
logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

# Prevent duplicate handlers when the module is reloaded
if not logger.handlers:
    logger.addHandler(console_handler)
    if config.LOG_FILE:
        logger.addHandler(_file_handler(config.LOG_FILE))
