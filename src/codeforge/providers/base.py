"""Model provider interface.

Workers never call a provider directly: they build a CompletionRequest and
hand it to the ModelRouter, which picks the provider from the request's
routing hints.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any


class ProviderError(Exception):
    """A provider could not produce a completion."""


class ProviderNotConfiguredError(ProviderError):
    """No provider is available, or the chosen one has no credentials."""


class RateLimitError(ProviderError):
    """The provider throttled the request.

    ``retry_after`` is the server's suggested wait in seconds, when it sent one.
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


@dataclass
class ProviderConfig:
    """Connection settings for one provider."""

    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    timeout: float = 120.0


@dataclass
class CompletionRequest:
    """A prompt plus sampling parameters and routing hints."""

    prompt: str
    system_prompt: str | None = None
    model: str | None = None
    temperature: float = 0.7
    max_tokens: int | None = None
    stop: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    # Routing hints, read by ModelRouter only
    preferred_provider: str | None = None
    require_code_generation: bool = False
    require_fast_response: bool = False


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class CompletionResponse:
    """Text produced by a provider for one request."""

    content: str
    model: str
    provider: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str | None = None
    latency_ms: float = 0.0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "model": self.model,
            "provider": self.provider,
            "usage": {**asdict(self.usage), "total_tokens": self.usage.total_tokens},
            "finish_reason": self.finish_reason,
            "latency_ms": self.latency_ms,
            "created_at": self.created_at.isoformat(),
        }


class Provider(ABC):
    """A language-model backend.

    Subclasses set ``name`` and ``fallback_model`` and implement complete().
    The capability flags steer ModelRouter's selection.
    """

    name: str = "provider"
    fallback_model: str = ""
    models: tuple[str, ...] = ()

    supports_code_generation: bool = False
    fast_response: bool = False

    def __init__(self, config: ProviderConfig | None = None):
        self.config = config or ProviderConfig()

    @property
    def default_model(self) -> str:
        return self.config.model or self.fallback_model

    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @abstractmethod
    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Generate a completion.

        Raises:
            ProviderNotConfiguredError: If credentials are missing
            RateLimitError: If the provider throttled the request
            ProviderError: For any other failure
        """

    async def complete_async(self, request: CompletionRequest) -> CompletionResponse:
        """Run complete() in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.complete, request)

    def list_models(self) -> list[str]:
        return list(self.models)
