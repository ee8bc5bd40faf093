"""Language-model providers.

Groq and Hugging Face over HTTP, a deterministic mock, and the router that
picks one of them per request.
"""

from .base import (
    CompletionRequest,
    CompletionResponse,
    Provider,
    ProviderConfig,
    ProviderError,
    ProviderNotConfiguredError,
    RateLimitError,
    TokenUsage,
)
from .groq_provider import GroqProvider
from .http import HTTPProvider
from .huggingface_provider import HuggingFaceProvider
from .mock_provider import MockProvider
from .router import ModelRouter, build_router

__all__ = [
    "CompletionRequest",
    "CompletionResponse",
    "Provider",
    "ProviderConfig",
    "ProviderError",
    "ProviderNotConfiguredError",
    "TokenUsage",
    "RateLimitError",
    "HTTPProvider",
    "GroqProvider",
    "HuggingFaceProvider",
    "MockProvider",
    "ModelRouter",
    "build_router",
]
