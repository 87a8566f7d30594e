"""Configuration loading from environment variables with proxy defaults."""

from dataclasses import dataclass
import logging
import os

from dotenv import load_dotenv

from chat_proxy.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_PORT,
    DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Process-wide proxy settings, read once at startup and never mutated."""

    preferred_provider: str | None
    openai_api_key: str | None
    ollama_api_key: str | None
    ollama_base_url: str
    ollama_model: str
    upstream_timeout_seconds: float
    port: int
    app_log_level: str

    @property
    def has_openai_key(self) -> bool:
        return self.openai_api_key is not None

    @property
    def has_ollama_key(self) -> bool:
        return self.ollama_api_key is not None

    @classmethod
    def from_env(cls) -> "Settings":
        preferred_provider = _optional_env("PREFERRED_PROVIDER")
        settings = cls(
            preferred_provider=(
                preferred_provider.lower() if preferred_provider is not None else None
            ),
            openai_api_key=_optional_env("OPENAI_API_KEY"),
            ollama_api_key=_optional_env("OLLAMA_API_KEY"),
            ollama_base_url=_env_with_default("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL),
            ollama_model=_env_with_default("OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL),
            upstream_timeout_seconds=_parse_positive_float(
                "UPSTREAM_TIMEOUT_SECONDS",
                DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
            ),
            port=_parse_int("PORT", DEFAULT_PORT),
            app_log_level=_env_with_default("APP_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
        logger.info(
            "settings_loaded preferred_provider=%s has_openai_key=%s has_ollama_key=%s "
            "timeout_seconds=%s port=%s",
            settings.preferred_provider,
            settings.has_openai_key,
            settings.has_ollama_key,
            settings.upstream_timeout_seconds,
            settings.port,
        )
        return settings


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_with_default(name: str, default: str) -> str:
    value = _optional_env(name)
    if value is None:
        return default
    return value


def _parse_int(name: str, default: int) -> int:
    raw_value = _optional_env(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(
            f"Invalid integer for environment variable {name}: {raw_value}"
        ) from exc


def _parse_positive_float(name: str, default: float) -> float:
    raw_value = _optional_env(name)
    if raw_value is None:
        return default
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(
            f"Invalid float for environment variable {name}: {raw_value}"
        ) from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero: {raw_value}")
    return value


def load_environment_from_dotenv(dotenv_path: str) -> bool:
    if dotenv_path.strip() == "":
        raise ValueError("dotenv_path must not be empty")
    loaded = load_dotenv(dotenv_path=dotenv_path, override=False)
    logger.info("dotenv_load_attempted dotenv_path=%s loaded=%s", dotenv_path, loaded)
    return loaded
