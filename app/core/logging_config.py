# app/core/logging_config.py
"""
Centralized logging configuration for the application.

Quietens the HTTP client and database loggers so that per-platform sync
results stay readable.
"""

import logging
import os


def configure_logging():
    """
    Configure logging for the application.

    - App code: INFO (or LOG_LEVEL)
    - HTTP clients (httpx, httpcore): WARNING only
    - Database (sqlalchemy, asyncpg, aiosqlite): WARNING only
    """
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Quiet noisy HTTP client loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Quiet database loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.getLogger("app").setLevel(level)
    logging.getLogger("__main__").setLevel(level)
