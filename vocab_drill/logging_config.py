"""Logging configuration for the drill service."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

from vocab_drill.config import settings


class InterceptHandler(logging.Handler):
    """Route records emitted through the standard library into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging() -> None:
    """Set up loguru sinks and forward third-party loggers."""

    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, backtrace=False, diagnose=False)

    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.LOG_FILE,
            level=settings.LOG_LEVEL,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = [InterceptHandler()]
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info("Logging configured", level=settings.LOG_LEVEL)
