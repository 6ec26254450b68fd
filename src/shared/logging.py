"""Logging configuration shared by every context.

Library records and structlog events both land on the root logger, which
writes to stdout and to two rotating files under ``LOG_DIR`` (everything,
and errors only). Production and staging render JSON lines; other
environments get the coloured console renderer with rich tracebacks.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

from shared.config import get_settings

LOG_LEVELS = {"production": "INFO", "staging": "INFO", "development": "DEBUG", "test": "WARNING"}
JSON_ENVIRONMENTS = ("production", "staging")

_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5
_NOISY_LOGGERS = ("pymongo", "asyncio", "uvicorn.access")


def get_log_level(env: str | None = None) -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    env = env or get_settings().env
    return os.getenv("LOG_LEVEL", LOG_LEVELS.get(env, "INFO")).upper()


def _rotating_file(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: Path | None = None) -> None:
    level = get_log_level()
    log_dir = log_dir or Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            console,
            _rotating_file(log_dir / "storefront.log", level),
            _rotating_file(log_dir / "storefront_error.log", logging.ERROR),
        ],
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def renderer_processors(env: str) -> list:
    """Final processors: JSON with formatted tracebacks, or the dev console."""
    if env in JSON_ENVIRONMENTS:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=env == "development", max_frames=2),
        )
    ]


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            *renderer_processors(get_settings().env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    setup_stdlib_logging()
    setup_structlog()
