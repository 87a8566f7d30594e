"""Deterministic upstream provider selection."""

import logging

from chat_proxy.config import Settings
from chat_proxy.constants import PROVIDER_NONE, PROVIDER_OLLAMA, PROVIDER_OPENAI


logger = logging.getLogger(__name__)


def select_provider(settings: Settings) -> str:
    """Pick the provider for one request.

    An explicit override wins even when its key is missing. Otherwise Ollama
    is preferred over OpenAI so that a deployment configured for Ollama does
    not drift to OpenAI just because both keys are present.
    """
    if settings.preferred_provider is not None and settings.preferred_provider != "":
        decision = settings.preferred_provider.lower()
    elif settings.has_ollama_key:
        decision = PROVIDER_OLLAMA
    elif settings.has_openai_key:
        decision = PROVIDER_OPENAI
    else:
        decision = PROVIDER_NONE
    logger.debug("provider_selected provider=%s", decision)
    return decision
