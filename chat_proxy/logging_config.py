"""Logging setup for the chat proxy and the servers and clients it drives."""

import logging.config
from typing import Any


_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s event=%(message)s"

# Pinned regardless of APP_LOG_LEVEL.
_LIBRARY_LOG_LEVELS = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "uvicorn.access": "INFO",
}


def normalize_log_level(log_level: str) -> str:
    normalized_level = log_level.strip().upper()
    if normalized_level not in _VALID_LOG_LEVELS:
        raise ValueError(f"Invalid APP_LOG_LEVEL: {log_level}")
    return normalized_level


def build_logging_config(log_level: str) -> dict[str, Any]:
    """Return the dictConfig schema for one console stream at ``log_level``."""
    level = normalize_log_level(log_level)
    loggers: dict[str, Any] = {
        "chat_proxy": {"level": level},
        "uvicorn": {"level": level},
    }
    for name, library_level in _LIBRARY_LOG_LEVELS.items():
        loggers[name] = {"level": library_level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"proxy_events": {"format": _LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "proxy_events",
            }
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(log_level: str) -> None:
    logging.config.dictConfig(build_logging_config(log_level))
