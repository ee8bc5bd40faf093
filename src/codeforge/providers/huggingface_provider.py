"""Hugging Face Inference API provider."""

from __future__ import annotations

from typing import Any

from .base import CompletionRequest, CompletionResponse
from .http import HTTPProvider

HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co"
DEFAULT_MAX_NEW_TOKENS = 512


class HuggingFaceProvider(HTTPProvider):
    """Hugging Face hosted inference. Preferred by the router for fast responses."""

    name = "huggingface"
    label = "Hugging Face"
    default_base_url = HUGGINGFACE_BASE_URL
    fallback_model = "mistralai/Mixtral-8x7B-Instruct-v0.1"
    models = (
        "mistralai/Mixtral-8x7B-Instruct-v0.1",
        "meta-llama/Llama-2-70b-chat-hf",
        "codellama/CodeLlama-34b-Instruct-hf",
        "bigcode/starcoder2-15b",
    )

    fast_response = True

    def build_payload(self, request: CompletionRequest) -> dict[str, Any]:
        # The text-generation task has no system role; prepend it to the prompt
        prompt = request.prompt
        if request.system_prompt:
            prompt = f"{request.system_prompt}\n\n{prompt}"
        parameters: dict[str, Any] = {
            "temperature": request.temperature,
            "max_new_tokens": request.max_tokens or DEFAULT_MAX_NEW_TOKENS,
            "return_full_text": False,
        }
        if request.stop:
            parameters["stop"] = request.stop
        return {"inputs": prompt, "parameters": parameters}

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        model = request.model or self.default_model
        data, latency_ms = self.post_json(f"/models/{model}", self.build_payload(request))

        content = ""
        if isinstance(data, list) and data and isinstance(data[0], dict):
            content = data[0].get("generated_text", "")

        return CompletionResponse(
            content=content,
            model=model,
            provider=self.name,
            latency_ms=latency_ms,
        )
