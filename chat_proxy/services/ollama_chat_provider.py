"""Provider client for the Ollama single-shot generate API."""

import logging
from typing import Any

import httpx

from chat_proxy.constants import PROVIDER_OLLAMA
from chat_proxy.services.chat_provider_models import (
    build_headers,
    build_ollama_generate_payload,
    extract_ollama_answer,
    require_non_empty,
    require_success_payload,
)


logger = logging.getLogger(__name__)


class OllamaChatProvider:
    """Chat provider for Ollama's non-streamed ``/generate`` endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = require_non_empty(base_url, "base_url")
        self._api_key = require_non_empty(api_key, "api_key")
        self._model = require_non_empty(model, "model")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def generate_answer(self, prompt: str) -> str:
        payload = build_ollama_generate_payload(self._model, prompt)
        url = _build_generate_url(self._base_url)
        headers = build_headers(self._api_key)
        logger.info(
            "ollama_generate_started model=%s url=%s prompt_length=%s",
            self._model,
            url,
            len(prompt),
        )
        response = await self._post_json(url, headers, payload)
        body = require_success_payload(PROVIDER_OLLAMA, response)
        answer = extract_ollama_answer(body)
        logger.info(
            "ollama_generate_completed model=%s status=%s answer_length=%s",
            self._model,
            response.status_code,
            len(answer),
        )
        return answer

    async def _post_json(
        self,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
    ) -> Any:
        async with httpx.AsyncClient(
            timeout=self._timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            return await client.post(url, headers=headers, json=payload)


def _build_generate_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/generate"
