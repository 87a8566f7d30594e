"""Shared provider protocol, payload builders and response parsing."""

import logging
from typing import Any, Protocol

from chat_proxy.constants import (
    OPENAI_CHAT_MODEL,
    OPENAI_MAX_TOKENS,
    OPENAI_SYSTEM_PROMPT,
    OPENAI_TEMPERATURE,
)
from chat_proxy.services.errors import UpstreamError


logger = logging.getLogger(__name__)


def require_non_empty(value: str, field_name: str) -> str:
    normalized_value = value.strip()
    if normalized_value == "":
        raise ValueError(f"{field_name} must not be empty")
    return normalized_value


def build_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def build_openai_chat_payload(prompt: str) -> dict[str, Any]:
    return {
        "model": OPENAI_CHAT_MODEL,
        "messages": [
            {"role": "system", "content": OPENAI_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "temperature": OPENAI_TEMPERATURE,
        "max_tokens": OPENAI_MAX_TOKENS,
    }


def build_ollama_generate_payload(model: str, prompt: str) -> dict[str, Any]:
    return {"model": model, "prompt": prompt, "stream": False}


def decode_response_body(response: Any) -> Any:
    """Return the decoded JSON body, or None when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return None


def require_success_payload(provider: str, response: Any) -> dict[str, Any]:
    """Return the JSON object body of a 2xx response or raise UpstreamError."""
    body = decode_response_body(response)
    status_code = response.status_code
    if not 200 <= status_code < 300 or not isinstance(body, dict):
        logger.error(
            "upstream_error provider=%s status=%s body=%s",
            provider,
            status_code,
            body,
        )
        raise UpstreamError(provider=provider, upstream_status=status_code, body=body)
    return body


def extract_openai_answer(payload: dict[str, Any]) -> str:
    """Read the first choice's message content, then its legacy text field."""
    first_choice = _first_choice(payload)
    if first_choice is None:
        return ""
    message = first_choice.get("message")
    if isinstance(message, dict):
        content = _non_empty_string(message.get("content"))
        if content is not None:
            return content
    text = _non_empty_string(first_choice.get("text"))
    if text is not None:
        return text
    return ""


def extract_ollama_answer(payload: dict[str, Any]) -> str:
    response_text = _non_empty_string(payload.get("response"))
    if response_text is None:
        return ""
    return response_text


def _first_choice(payload: dict[str, Any]) -> dict[str, Any] | None:
    choices = payload.get("choices")
    if not isinstance(choices, list) or len(choices) == 0:
        return None
    first_choice = choices[0]
    if not isinstance(first_choice, dict):
        return None
    return first_choice


def _non_empty_string(value: Any) -> str | None:
    if not isinstance(value, str) or value == "":
        return None
    return value


class ChatProvider(Protocol):
    async def generate_answer(self, prompt: str) -> str:
        """Send one prompt upstream and return the normalized answer."""
