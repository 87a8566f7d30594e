"""Classified failures raised while handling one chat request.

Every error knows the HTTP status and JSON body the caller receives, so the
request boundary can map any of them to exactly one response.
"""

from typing import Any


class ChatProxyError(Exception):
    """Base class for failures that map to a caller-facing JSON error."""

    status_code = 500
    error_message = "server error"

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error_message}


class InputError(ChatProxyError):
    """Raised when the caller's request cannot be served as sent."""

    status_code = 400


class MissingPromptError(InputError):
    """Raised when the prompt is absent or empty."""

    error_message = "missing prompt"


class InvalidPayloadError(InputError):
    """Raised when the request body is not a JSON object."""

    error_message = "invalid JSON body"


class UnsupportedProviderError(InputError):
    """Raised when the preferred provider override names an unknown provider."""

    error_message = "unsupported provider"

    def __init__(self, provider: str) -> None:
        super().__init__(f"unsupported provider: {provider}")
        self.provider = provider

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error_message, "provider": self.provider}


class ConfigurationError(ChatProxyError):
    """Raised when the deployment cannot resolve a usable provider."""

    status_code = 500


class NoProviderConfiguredError(ConfigurationError):
    error_message = "no API key configured"


class MissingCredentialError(ConfigurationError):
    """Raised when the selected provider has no API key configured."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"server missing {env_name}")
        self.env_name = env_name
        self.error_message = f"server missing {env_name}"


class UpstreamError(ChatProxyError):
    """Raised when the provider answered with a failure or an unusable body."""

    status_code = 502
    error_message = "upstream error"

    def __init__(self, provider: str, upstream_status: int, body: Any) -> None:
        super().__init__(f"{provider} upstream error: {upstream_status}")
        self.provider = provider
        self.upstream_status = upstream_status
        self.body = body

    def to_payload(self) -> dict[str, Any]:
        return {
            "error": self.error_message,
            "status": self.upstream_status,
            "body": self.body,
        }


class TransportError(ChatProxyError):
    """Raised when the provider call could not complete at all."""

    status_code = 500
    error_message = "server error"


class UpstreamTransportError(TransportError):
    pass


class UpstreamTimeoutError(TransportError):
    def __init__(self, provider: str, timeout_seconds: float) -> None:
        super().__init__(f"{provider} call exceeded {timeout_seconds}s")
        self.provider = provider
        self.timeout_seconds = timeout_seconds
