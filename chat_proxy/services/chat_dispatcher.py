"""Dispatches one prompt to the selected provider under a hard timeout."""

import asyncio
import logging
from typing import Callable

import httpx

from chat_proxy.config import Settings
from chat_proxy.constants import (
    PROVIDER_API_KEY_ENV,
    PROVIDER_NONE,
    PROVIDER_OLLAMA,
    PROVIDER_OPENAI,
    SUPPORTED_CHAT_PROVIDERS,
)
from chat_proxy.services.chat_provider_models import ChatProvider
from chat_proxy.services.errors import (
    MissingCredentialError,
    MissingPromptError,
    NoProviderConfiguredError,
    UnsupportedProviderError,
    UpstreamTimeoutError,
    UpstreamTransportError,
)
from chat_proxy.services.ollama_chat_provider import OllamaChatProvider
from chat_proxy.services.openai_chat_provider import OpenAIChatProvider


logger = logging.getLogger(__name__)

ChatProviderFactory = Callable[[str, Settings], ChatProvider]


def build_chat_provider(provider: str, settings: Settings) -> ChatProvider:
    """Build the adapter for a supported provider whose key is configured."""
    if provider == PROVIDER_OPENAI:
        return OpenAIChatProvider(
            api_key=settings.openai_api_key or "",
            timeout_seconds=settings.upstream_timeout_seconds,
        )
    if provider == PROVIDER_OLLAMA:
        return OllamaChatProvider(
            base_url=settings.ollama_base_url,
            api_key=settings.ollama_api_key or "",
            model=settings.ollama_model,
            timeout_seconds=settings.upstream_timeout_seconds,
        )
    raise ValueError(f"unsupported provider for chat adapter: {provider}")


class ChatDispatcher:
    """Validates a chat request and resolves it through exactly one upstream call."""

    def __init__(
        self,
        settings: Settings,
        provider_factory: ChatProviderFactory = build_chat_provider,
    ) -> None:
        self._settings = settings
        self._provider_factory = provider_factory

    async def dispatch(self, prompt: str | None, decision: str) -> str:
        normalized_prompt = _require_prompt(prompt)
        self._validate_decision(decision)
        provider = self._provider_factory(decision, self._settings)
        logger.info(
            "chat_dispatch_started provider=%s prompt_length=%s timeout_seconds=%s",
            decision,
            len(normalized_prompt),
            self._settings.upstream_timeout_seconds,
        )
        answer = await self._call_with_timeout(decision, provider, normalized_prompt)
        logger.info(
            "chat_dispatch_completed provider=%s answer_length=%s",
            decision,
            len(answer),
        )
        return answer

    def _validate_decision(self, decision: str) -> None:
        if decision == PROVIDER_NONE:
            logger.error("chat_dispatch_no_provider_configured")
            raise NoProviderConfiguredError("no API key configured")
        if decision not in SUPPORTED_CHAT_PROVIDERS:
            logger.warning("chat_dispatch_unsupported_provider provider=%s", decision)
            raise UnsupportedProviderError(decision)
        if not self._has_credential(decision):
            env_name = PROVIDER_API_KEY_ENV[decision]
            logger.error("chat_dispatch_missing_credential env_name=%s", env_name)
            raise MissingCredentialError(env_name)

    def _has_credential(self, decision: str) -> bool:
        if decision == PROVIDER_OPENAI:
            return self._settings.has_openai_key
        return self._settings.has_ollama_key

    async def _call_with_timeout(
        self,
        decision: str,
        provider: ChatProvider,
        prompt: str,
    ) -> str:
        # wait_for cancels the pending call on expiry, so only the first of
        # timeout, completion or failure reaches the caller.
        timeout_seconds = self._settings.upstream_timeout_seconds
        try:
            return await asyncio.wait_for(
                provider.generate_answer(prompt),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "chat_dispatch_timeout provider=%s timeout_seconds=%s",
                decision,
                timeout_seconds,
            )
            raise UpstreamTimeoutError(decision, timeout_seconds) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "chat_dispatch_transport_failed provider=%s error_type=%s error=%s",
                decision,
                type(exc).__name__,
                exc,
            )
            raise UpstreamTransportError(f"{decision} transport failure: {exc}") from exc


def _require_prompt(prompt: str | None) -> str:
    if prompt is None or prompt.strip() == "":
        raise MissingPromptError("missing prompt")
    return prompt
