"""Provider client for the OpenAI chat completions API."""

import logging
from typing import Any

import httpx

from chat_proxy.constants import OPENAI_CHAT_COMPLETIONS_URL, PROVIDER_OPENAI
from chat_proxy.services.chat_provider_models import (
    build_headers,
    build_openai_chat_payload,
    extract_openai_answer,
    require_non_empty,
    require_success_payload,
)


logger = logging.getLogger(__name__)


class OpenAIChatProvider:
    """Chat provider sending one system and one user turn to OpenAI."""

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float,
        url: str = OPENAI_CHAT_COMPLETIONS_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = require_non_empty(api_key, "api_key")
        self._url = require_non_empty(url, "url")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def generate_answer(self, prompt: str) -> str:
        payload = build_openai_chat_payload(prompt)
        headers = build_headers(self._api_key)
        logger.info(
            "openai_chat_started model=%s prompt_length=%s",
            payload["model"],
            len(prompt),
        )
        response = await self._post_json(self._url, headers, payload)
        body = require_success_payload(PROVIDER_OPENAI, response)
        answer = extract_openai_answer(body)
        logger.info(
            "openai_chat_completed status=%s answer_length=%s",
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
