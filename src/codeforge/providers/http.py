"""Shared transport for providers that speak JSON over HTTPS."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .base import (
    Provider,
    ProviderConfig,
    ProviderError,
    ProviderNotConfiguredError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    try:
        return float(value) if value else None
    except ValueError:
        return None


class HTTPProvider(Provider):
    """Provider backed by a lazily created ``httpx.Client``.

    Pass ``client`` to reuse a configured client (tests hand in one with a
    mock transport).
    """

    # Human readable service name used in error messages
    label: str = "HTTP"
    default_base_url: str = ""

    def __init__(
        self,
        config: ProviderConfig | None = None,
        api_key: str | None = None,
        model: str | None = None,
        client: httpx.Client | None = None,
    ):
        super().__init__(
            config or ProviderConfig(api_key=api_key, base_url=self.default_base_url, model=model)
        )
        self._client = client

    @property
    def base_url(self) -> str:
        return self.config.base_url or self.default_base_url

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            if not self.is_configured():
                raise ProviderNotConfiguredError(f"{self.label} API key not configured")
            self._client = httpx.Client(base_url=self.base_url, timeout=self.config.timeout)
        return self._client

    def post_json(self, path: str, payload: dict[str, Any]) -> tuple[Any, float]:
        """POST ``payload`` and return the decoded body and latency in ms.

        Raises:
            ProviderNotConfiguredError: If no client exists and no key is set
            RateLimitError: On HTTP 429
            ProviderError: On any other HTTP or transport failure
        """
        client = self.client
        start = time.time()
        try:
            response = client.post(
                path,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError(
                    f"{self.label} rate limit exceeded: {e.response.text}",
                    retry_after=_retry_after(e.response),
                ) from e
            raise ProviderError(f"{self.label} API error: {e.response.text}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.label} request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{self.label} returned invalid JSON: {e}") from e

        latency_ms = (time.time() - start) * 1000
        logger.debug("%s %s answered in %.0fms", self.label, path, latency_ms)
        return data, latency_ms
