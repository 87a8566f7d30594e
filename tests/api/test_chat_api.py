import asyncio

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient
import httpx

import chat_proxy.main as main_module
from chat_proxy.main import create_app
from chat_proxy.services.ollama_chat_provider import OllamaChatProvider
from chat_proxy.services.openai_chat_provider import OpenAIChatProvider


class FakeResponse:
    def __init__(self, status_code: int, payload: object) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> object:
        return self._payload


def _stub_upstream(
    monkeypatch: pytest.MonkeyPatch,
    provider_cls: type,
    response: FakeResponse,
) -> list[dict]:
    calls: list[dict] = []

    async def fake_post_json(self, url: str, headers: dict, payload: dict) -> FakeResponse:
        calls.append({"url": url, "headers": headers, "payload": payload})
        return response

    monkeypatch.setattr(provider_cls, "_post_json", fake_post_json)
    return calls


def _forbid_upstream(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_post_json(self, url: str, headers: dict, payload: dict) -> FakeResponse:
        raise AssertionError("upstream must not be called")

    monkeypatch.setattr(OpenAIChatProvider, "_post_json", fake_post_json)
    monkeypatch.setattr(OllamaChatProvider, "_post_json", fake_post_json)


def test_chat_with_openai_returns_answer(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    calls = _stub_upstream(
        monkeypatch,
        OpenAIChatProvider,
        FakeResponse(200, {"choices": [{"message": {"content": "Hi there"}}]}),
    )
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 200
    assert response.json() == {"answer": "Hi there"}
    assert len(calls) == 1
    assert calls[0]["headers"]["Authorization"] == "Bearer openai-key"


def test_chat_with_ollama_returns_answer(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OLLAMA_API_KEY", "ollama-key")
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    calls = _stub_upstream(monkeypatch, OllamaChatProvider, FakeResponse(200, {"response": "Hi"}))
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 200
    assert response.json() == {"answer": "Hi"}
    assert calls[0]["url"] == "https://ollama.com/api/generate"
    assert calls[0]["payload"] == {"model": "gpt-oss:120b", "prompt": "Hello", "stream": False}


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   "}, {"prompt": 42}])
def test_chat_without_prompt_returns_400(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
    body: dict,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "missing prompt"}


def test_chat_without_body_returns_400(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat")

    assert response.status_code == 400
    assert response.json() == {"error": "missing prompt"}


def test_chat_with_malformed_json_returns_400(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post(
        "/api/ai/chat",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "invalid JSON body"}


def test_chat_with_unsupported_provider_returns_400(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PREFERRED_PROVIDER", "Anthropic")
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 400
    assert response.json() == {"error": "unsupported provider", "provider": "anthropic"}


def test_chat_without_any_key_returns_500(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "no API key configured"}


def test_chat_with_preferred_provider_missing_key_returns_500(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PREFERRED_PROVIDER", "ollama")
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "server missing OLLAMA_API_KEY"}


def test_chat_upstream_failure_returns_502(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _stub_upstream(
        monkeypatch,
        OpenAIChatProvider,
        FakeResponse(429, {"error": {"message": "rate limited"}}),
    )
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 502
    assert response.json() == {
        "error": "upstream error",
        "status": 429,
        "body": {"error": {"message": "rate limited"}},
    }


def test_chat_transport_failure_returns_generic_500(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OLLAMA_API_KEY", "ollama-key")

    async def fake_post_json(self, url: str, headers: dict, payload: dict) -> FakeResponse:
        raise httpx.ConnectError("connection refused to internal-host:11434")

    monkeypatch.setattr(OllamaChatProvider, "_post_json", fake_post_json)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "server error"}


def test_chat_timeout_returns_generic_500(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    monkeypatch.setenv("UPSTREAM_TIMEOUT_SECONDS", "0.05")

    async def fake_post_json(self, url: str, headers: dict, payload: dict) -> FakeResponse:
        await asyncio.sleep(1)
        return FakeResponse(200, {"choices": [{"message": {"content": "too late"}}]})

    monkeypatch.setattr(OpenAIChatProvider, "_post_json", fake_post_json)
    client = TestClient(create_app())

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "server error"}


def test_unexpected_failure_maps_to_generic_500(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_select_provider(settings) -> str:
        raise RuntimeError("unexpected")

    monkeypatch.setattr(main_module, "select_provider", broken_select_provider)
    client = TestClient(create_app(), raise_server_exceptions=False)

    response = client.post("/api/ai/chat", json={"prompt": "Hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "server error"}


def test_chat_usage_page_names_active_provider(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OLLAMA_API_KEY", "ollama-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.get("/api/ai/chat")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "AI Proxy (ollama)" in response.text
    assert "http://localhost:8787/api/ai/chat" in response.text


def test_cors_headers_allow_any_origin(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    client = TestClient(create_app())

    response = client.options(
        "/api/ai/chat",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_unexpected_failure_keeps_cors_headers(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_select_provider(settings) -> str:
        raise RuntimeError("unexpected")

    monkeypatch.setattr(main_module, "select_provider", broken_select_provider)
    client = TestClient(create_app(), raise_server_exceptions=False)

    response = client.post(
        "/api/ai/chat",
        json={"prompt": "Hello"},
        headers={"Origin": "https://app.example.com"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "server error"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_chat_with_non_json_content_type_ignores_body(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "openai-key")
    _forbid_upstream(monkeypatch)
    client = TestClient(create_app())

    response = client.post(
        "/api/ai/chat",
        content='{"prompt": "Hello"}',
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "missing prompt"}


def test_chat_with_json_suffix_content_type_is_parsed(
    clean_env: None,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OLLAMA_API_KEY", "ollama-key")
    _stub_upstream(monkeypatch, OllamaChatProvider, FakeResponse(200, {"response": "Hi"}))
    client = TestClient(create_app())

    response = client.post(
        "/api/ai/chat",
        content='{"prompt": "Hello"}',
        headers={"Content-Type": "application/vnd.api+json; charset=utf-8"},
    )

    assert response.status_code == 200
    assert response.json() == {"answer": "Hi"}
