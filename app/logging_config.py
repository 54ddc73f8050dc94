"""
logging_config.py — Centralized Logging Configuration for Clubhouse

Sets up Loguru as the single logging backend. Intercepts Python's stdlib
logging module so every getLogger() call in routers and services routes
through Loguru with structured output and request context.

Business Rules:
- All logs go through Loguru (no print() in app code)
- JSON format in production for machine parsing
- Human-readable format in development
- Request ID from middleware is bound onto request log lines
- Log rotation: 50MB files, 7-day retention (production only)

Called by: app/main.py (on startup)
Depends on: app/config.py (log_level, app_url)
"""

import logging
import os
import sys

from loguru import logger

from .config import settings

LOG_FILE = os.getenv("LOG_FILE", "/var/log/clubhouse/clubhouse.log")


def setup_logging() -> None:
    """Configure Loguru sinks for the current environment and intercept stdlib logging.

    Called from the app lifespan. Safe to call again; sinks are replaced.
    """
    logger.remove()
    # Lines logged outside a request still render the request_id field
    logger.configure(extra={"request_id": "-"})

    log_level = os.getenv("LOG_LEVEL", settings.log_level).upper()
    is_production = settings.is_production

    if is_production:
        logger.add(
            sys.stdout,
            level=log_level,
            format="{message}",
            serialize=True,
        )
        logger.add(
            LOG_FILE,
            level=log_level,
            rotation="50 MB",
            retention="7 days",
            compression="gz",
            serialize=True,
        )
    else:
        logger.add(
            sys.stdout,
            level=log_level,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<magenta>{extra[request_id]}</magenta> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            colorize=True,
        )

    # Route stdlib logging through Loguru
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info("Logging configured", level=log_level, production=is_production)


class _InterceptHandler(logging.Handler):
    """Route stdlib logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames from stdlib logging internals so Loguru reports the real caller
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )
