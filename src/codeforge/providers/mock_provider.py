"""Offline provider with scripted replies."""

from __future__ import annotations

import hashlib
from collections import deque

from .base import CompletionRequest, CompletionResponse, Provider, ProviderConfig, TokenUsage


def _snippet(prompt: str) -> str:
    digest = hashlib.sha256(prompt.encode()).hexdigest()[:8]
    return (
        "Here is the result:\n\n"
        f"```python\ndef generated_{digest}():\n    return \"{digest}\"\n```\n"
    )


class MockProvider(Provider):
    """Answers without network access.

    Replies come from ``sequence`` first (one per call), then from the first
    ``responses`` key found in the prompt, and otherwise are a small valid
    Python function derived from the prompt hash. Every request is kept in
    ``requests``.
    """

    name = "mock"
    fallback_model = "mock-model"

    supports_code_generation = True
    fast_response = True

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        sequence: list[str] | None = None,
        config: ProviderConfig | None = None,
    ):
        super().__init__(config or ProviderConfig(api_key="mock"))
        self.responses = dict(responses or {})
        self.sequence = deque(sequence or [])
        self.requests: list[CompletionRequest] = []

    def is_configured(self) -> bool:
        return True

    def reply_for(self, prompt: str) -> str:
        if self.sequence:
            return self.sequence.popleft()
        for needle, reply in self.responses.items():
            if needle in prompt:
                return reply
        return _snippet(prompt)

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        content = self.reply_for(request.prompt)
        return CompletionResponse(
            content=content,
            model=request.model or self.default_model,
            provider=self.name,
            usage=TokenUsage(len(request.prompt.split()), len(content.split())),
            finish_reason="stop",
        )
