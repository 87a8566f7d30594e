"""Shared immutable constants for provider and endpoint configuration."""

PROVIDER_OPENAI = "openai"
PROVIDER_OLLAMA = "ollama"
PROVIDER_NONE = "none"

SUPPORTED_CHAT_PROVIDERS = (
    PROVIDER_OPENAI,
    PROVIDER_OLLAMA,
)

PROVIDER_API_KEY_ENV = {
    PROVIDER_OPENAI: "OPENAI_API_KEY",
    PROVIDER_OLLAMA: "OLLAMA_API_KEY",
}

OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_CHAT_MODEL = "gpt-3.5-turbo"
OPENAI_SYSTEM_PROMPT = "You are an assistant for the Jivan Swad app."
OPENAI_TEMPERATURE = 0.7
OPENAI_MAX_TOKENS = 500

DEFAULT_OLLAMA_BASE_URL = "https://ollama.com/api"
DEFAULT_OLLAMA_MODEL = "gpt-oss:120b"

DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 55.0
DEFAULT_PORT = 8787
DEFAULT_LOG_LEVEL = "INFO"

DISTRIBUTION_NAME = "chat-proxy"
