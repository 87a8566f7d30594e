"""Chat proxy services package."""

from chat_proxy.services.chat_dispatcher import ChatDispatcher, build_chat_provider
from chat_proxy.services.ollama_chat_provider import OllamaChatProvider
from chat_proxy.services.openai_chat_provider import OpenAIChatProvider
from chat_proxy.services.provider_selector import select_provider
from chat_proxy.services.status_reporter import StatusReporter, StatusSnapshot


__all__ = [
    "ChatDispatcher",
    "OllamaChatProvider",
    "OpenAIChatProvider",
    "StatusReporter",
    "StatusSnapshot",
    "build_chat_provider",
    "select_provider",
]
