"""Logging bootstrap for the check-in controller."""
from __future__ import annotations

import logging
import re
from logging.config import dictConfig
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_BEARER = re.compile(r"(Bearer\s+)([A-Za-z0-9._~+/=-]{4})[A-Za-z0-9._~+/=-]+")


class BearerTokenFilter(logging.Filter):
    """Masks ``Bearer <token>`` down to its first four characters."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "Bearer" in message:
            record.msg = _BEARER.sub(r"\1\2…", message)
            record.args = None
        return True


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None, retention_days: int = 14) -> Path:
    """Console, daily runtime log and a warnings-only incident log.

    Returns the directory the files are written to.
    """
    if log_dir is None:
        log_dir = Path(__file__).resolve().parents[2] / "logs"
    log_dir = Path(log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    level = level.upper()
    backups = max(int(retention_days), 1)

    def rotating(filename: str, handler_level: str) -> dict:
        return {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "default",
            "filters": ["redact"],
            "level": handler_level,
            "filename": str(log_dir / filename),
            "when": "midnight",
            "backupCount": backups,
            "utc": True,
            "delay": True,
            "encoding": "utf-8",
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"redact": {"()": BearerTokenFilter}},
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["redact"],
                    "level": level,
                },
                "runtime_file": rotating("checkin-runtime.log", level),
                # Failed scans, 403 teardowns and storage problems only.
                "incident_file": rotating("checkin-incidents.log", "WARNING"),
            },
            "loggers": {
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
                "uvicorn.access": {"level": "WARNING"},
            },
            "root": {"level": level, "handlers": ["console", "runtime_file", "incident_file"]},
        }
    )
    return log_dir


__all__ = ["BearerTokenFilter", "configure_logging"]
