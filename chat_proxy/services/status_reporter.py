"""Read-only status snapshots of the proxy's provider configuration."""

from dataclasses import dataclass
from importlib import metadata
import logging
import math
import time
from typing import Any, Callable

from chat_proxy.config import Settings
from chat_proxy.constants import DISTRIBUTION_NAME
from chat_proxy.services.provider_selector import select_provider


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusSnapshot:
    provider: str
    has_openai_key: bool
    has_ollama_key: bool
    uptime_seconds: int
    version: str | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "hasOpenAIKey": self.has_openai_key,
            "hasOllamaKey": self.has_ollama_key,
            "uptimeSeconds": self.uptime_seconds,
            "version": self.version,
        }


def build_status_snapshot(
    settings: Settings,
    started_at: float,
    now: float,
    version: str | None,
) -> StatusSnapshot:
    elapsed_seconds = max(0.0, now - started_at)
    return StatusSnapshot(
        provider=select_provider(settings),
        has_openai_key=settings.has_openai_key,
        has_ollama_key=settings.has_ollama_key,
        uptime_seconds=math.floor(elapsed_seconds),
        version=version,
    )


def resolve_version(distribution_name: str = DISTRIBUTION_NAME) -> str | None:
    try:
        return metadata.version(distribution_name)
    except metadata.PackageNotFoundError:
        logger.info("status_version_unavailable distribution=%s", distribution_name)
        return None


class StatusReporter:
    """Binds settings and the process start time for status queries."""

    def __init__(
        self,
        settings: Settings,
        started_at: float,
        version: str | None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._started_at = started_at
        self._version = version
        self._clock = clock

    def snapshot(self) -> StatusSnapshot:
        snapshot = build_status_snapshot(
            settings=self._settings,
            started_at=self._started_at,
            now=self._clock(),
            version=self._version,
        )
        logger.info(
            "status_snapshot_built provider=%s uptime_seconds=%s",
            snapshot.provider,
            snapshot.uptime_seconds,
        )
        return snapshot
