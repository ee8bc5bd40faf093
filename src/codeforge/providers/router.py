"""Model router: picks the provider that serves a completion request."""

from __future__ import annotations

import logging

from .base import (
    CompletionRequest,
    CompletionResponse,
    Provider,
    ProviderConfig,
    ProviderNotConfiguredError,
)
from .groq_provider import GROQ_BASE_URL, GroqProvider
from .huggingface_provider import HUGGINGFACE_BASE_URL, HuggingFaceProvider

logger = logging.getLogger(__name__)


class ModelRouter:
    """Selects a provider per request.

    Selection order:
    1. ``preferred_provider`` when it is registered
    2. a code-generation provider when ``require_code_generation`` is set
    3. a fast-response provider when ``require_fast_response`` is set
    4. the first registered provider
    """

    def __init__(self, providers: list[Provider] | None = None):
        self._providers: dict[str, Provider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        self._providers[provider.name] = provider
        logger.debug("Registered model provider %s", provider.name)

    def get(self, name: str) -> Provider:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderNotConfiguredError(f"Model provider {name} not found") from None

    def list_providers(self) -> list[str]:
        return list(self._providers)

    @property
    def available(self) -> bool:
        return bool(self._providers)

    def select(self, request: CompletionRequest) -> Provider:
        """Return the provider that should serve ``request``.

        Raises:
            ProviderNotConfiguredError: If no provider is registered
        """
        if request.preferred_provider and request.preferred_provider in self._providers:
            return self._providers[request.preferred_provider]

        if request.require_code_generation:
            for provider in self._providers.values():
                if provider.supports_code_generation:
                    return provider

        if request.require_fast_response:
            for provider in self._providers.values():
                if provider.fast_response:
                    return provider

        for provider in self._providers.values():
            return provider

        raise ProviderNotConfiguredError(
            "No model providers available. Please set up at least one API key."
        )

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        provider = self.select(request)
        logger.debug("Routing completion to %s", provider.name)
        return provider.complete(request)

    async def complete_async(self, request: CompletionRequest) -> CompletionResponse:
        provider = self.select(request)
        return await provider.complete_async(request)


def build_router(settings) -> ModelRouter:
    """Create a router with every provider that has an API key configured."""
    router = ModelRouter()
    if settings.huggingface_api_key:
        router.register(
            HuggingFaceProvider(
                ProviderConfig(
                    api_key=settings.huggingface_api_key,
                    base_url=HUGGINGFACE_BASE_URL,
                    model=settings.huggingface_model,
                    timeout=settings.provider_timeout,
                )
            )
        )
    else:
        logger.warning(
            "Hugging Face API key not found. Hugging Face provider will not be available."
        )

    if settings.groq_api_key:
        router.register(
            GroqProvider(
                ProviderConfig(
                    api_key=settings.groq_api_key,
                    base_url=GROQ_BASE_URL,
                    model=settings.groq_model,
                    timeout=settings.provider_timeout,
                )
            )
        )
    else:
        logger.warning("Groq API key not found. Groq provider will not be available.")

    return router
