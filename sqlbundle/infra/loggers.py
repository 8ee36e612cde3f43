from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


LOGGER_NAME = "sqlbundle"


def configure_logger(log_path: Path, level: str) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    resolved = getattr(logging, level.upper(), logging.INFO)
    if logger.handlers:
        logger.setLevel(resolved)
        return logger

    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.setLevel(resolved)
    handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    logger.addHandler(handler)
    return logger


def reset_logger() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
