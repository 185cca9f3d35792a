"""
Ollama commit message provider for local models.
"""

import logging
from typing import Optional

import httpx

from .openai_provider import build_timeout
from .provider import BaseCommitMessageProvider, ProviderError, ProviderId

logger = logging.getLogger(__name__)


class OllamaProvider(BaseCommitMessageProvider):
    """
    Provider for a local Ollama server.

    There is no credential; the provider counts as configured once a base URL
    is set. Uses the non-streaming /api/generate endpoint.

    Request envelope: {"model", "prompt", "stream": false}
    Response path: response
    """

    DEFAULT_MODEL = "qwen2.5-coder:7b"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(api_key=None, model=model)
        self.base_url = base_url
        self.client = client
        if self.client is None and base_url:
            self.client = httpx.AsyncClient(base_url=base_url, timeout=build_timeout(timeout))

    @property
    def identity(self) -> ProviderId:
        return ProviderId.OLLAMA

    def is_configured(self) -> bool:
        return bool(self.base_url) and self.client is not None

    async def _complete(self, prompt: str, model: str) -> str:
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
        }

        logger.debug(f"Ollama request: model={model}, base_url={self.base_url}")

        try:
            response = await self.client.post("/api/generate", json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(self.identity, f"Ollama request failed: {e}") from e

        if response.is_error:
            raise ProviderError(
                self.identity,
                f"Ollama API error: {response.status_code} - {response.text}",
                status_code=response.status_code
            )

        try:
            text = response.json().get("response")
        except (ValueError, AttributeError):
            text = None

        if not text:
            raise ProviderError(self.identity, "Invalid response format from Ollama API")

        return text.strip()

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
