"""Shared pytest configuration for the project."""

from pathlib import Path
import sys
from typing import Any, Callable

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from chat_proxy.config import Settings  # noqa: E402


_PROXY_ENV_NAMES = (
    "PREFERRED_PROVIDER",
    "OPENAI_API_KEY",
    "OLLAMA_API_KEY",
    "OLLAMA_BASE_URL",
    "OLLAMA_MODEL",
    "UPSTREAM_TIMEOUT_SECONDS",
    "PORT",
    "APP_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _PROXY_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("APP_LOG_LEVEL", "INFO")


@pytest.fixture
def build_settings() -> Callable[..., Settings]:
    def _build(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "preferred_provider": None,
            "openai_api_key": None,
            "ollama_api_key": None,
            "ollama_base_url": "https://ollama.example.com/api",
            "ollama_model": "gpt-oss:120b",
            "upstream_timeout_seconds": 55.0,
            "port": 8787,
            "app_log_level": "INFO",
        }
        values.update(overrides)
        return Settings(**values)

    return _build
