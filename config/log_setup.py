"""
Process-wide logging configuration, applied once by the entry point.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config.settings import Settings

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5


def configure_logging(settings: Settings) -> None:
    level = settings.resolved_log_level()
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)
    for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio", "httpx", "httpcore"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        formatter = logging.Formatter(LOG_FORMAT)
        root = logging.getLogger()

        error_handler = RotatingFileHandler(
            log_dir / "error.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root.addHandler(error_handler)

        combined_handler = RotatingFileHandler(
            log_dir / "combined.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT
        )
        combined_handler.setLevel(level)
        combined_handler.setFormatter(formatter)
        root.addHandler(combined_handler)
