"""Groq provider over the OpenAI-compatible chat completions API."""

from __future__ import annotations

from typing import Any

from .base import CompletionRequest, CompletionResponse, ProviderError, TokenUsage
from .http import HTTPProvider

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_SYSTEM_PROMPT = "You are a helpful coding assistant."
DEFAULT_MAX_TOKENS = 1024


class GroqProvider(HTTPProvider):
    """Groq hosted inference. Preferred by the router for code generation."""

    name = "groq"
    label = "Groq"
    default_base_url = GROQ_BASE_URL
    fallback_model = "llama2-70b-4096"
    models = ("llama2-70b-4096", "mixtral-8x7b-32768", "gemma-7b-it")

    supports_code_generation = True

    def build_payload(self, request: CompletionRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": request.model or self.default_model,
            "messages": [
                {"role": "system", "content": request.system_prompt or DEFAULT_SYSTEM_PROMPT},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if request.stop:
            payload["stop"] = request.stop
        return payload

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        payload = self.build_payload(request)
        data, latency_ms = self.post_json("/chat/completions", payload)

        try:
            choice = data["choices"][0]
            content = choice["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Groq response: {data!r}") from e

        usage = data.get("usage") or {}
        return CompletionResponse(
            content=content,
            model=data.get("model", payload["model"]),
            provider=self.name,
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
            ),
            finish_reason=choice.get("finish_reason"),
            latency_ms=latency_ms,
        )
