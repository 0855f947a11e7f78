"""
Logging configuration.

Console output is human-readable in development and JSON lines
(python-json-logger) in production. Everything under the ``bmvt`` package
also goes to a rotating file; errors from any logger land in ``errors.log``.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any

from bmvt.core.config import settings

MAX_LOG_BYTES = 10 * 1024 * 1024

# Package loggers and their level outside debug mode
PACKAGE_LOGGERS = {
    "bmvt": "INFO",
    "bmvt.api": "INFO",
    "bmvt.db": "WARNING",
    "bmvt.services": "INFO",
}


def _rotating_file(path: Path, level: str, formatter: str, backups: int) -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": backups,
        "encoding": "utf8",
    }


def build_logging_config(log_dir: Path) -> dict[str, Any]:
    formatter = "json" if settings.is_production else "console"
    loggers: dict[str, Any] = {
        name: {
            "level": "DEBUG" if settings.debug else level,
            "handlers": ["console", "file"],
            "propagate": False,
        }
        for name, level in PACKAGE_LOGGERS.items()
    }
    loggers["sqlalchemy.engine"] = {
        "level": "INFO" if settings.debug else "WARNING",
        "handlers": ["file"],
        "propagate": False,
    }
    loggers["uvicorn.access"] = {
        "level": "INFO",
        "handlers": ["file"] if settings.is_production else ["console"],
        "propagate": False,
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "{asctime} {levelname:8} {name:28} | {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(module)s %(lineno)d %(message)s",
                "rename_fields": {"levelname": "level", "asctime": "time"},
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG" if settings.debug else "INFO",
                "formatter": formatter,
                "stream": sys.stdout,
            },
            "file": _rotating_file(log_dir / "bmvt.log", "INFO", formatter, backups=5),
            "error_file": _rotating_file(log_dir / "errors.log", "ERROR", formatter, backups=10),
        },
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": ["console", "error_file"]},
    }


def setup_logging() -> None:
    """Apply the logging configuration; safe to call more than once."""
    log_dir = Path(settings.log_directory)
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir))

    logger = logging.getLogger("bmvt")
    logger.info(
        f"{settings.app_name} v{settings.app_version} "
        f"({settings.environment}, debug={settings.debug}), logs in {log_dir.absolute()}"
    )
