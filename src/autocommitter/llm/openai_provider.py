"""
OpenAI (and OpenAI-compatible) commit message provider.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .provider import BaseCommitMessageProvider, ProviderError, ProviderId

logger = logging.getLogger(__name__)


def build_timeout(timeout: Optional[float]) -> httpx.Timeout:
    """
    Build an httpx timeout.

    None or 0 disables the timeout entirely; provider calls are otherwise
    allowed to run as long as the remote takes.
    """
    if not timeout:
        return httpx.Timeout(None)
    return httpx.Timeout(timeout, connect=min(timeout, 10.0))


class OpenAIProvider(BaseCommitMessageProvider):
    """
    Provider for OpenAI's chat completions API.

    Request envelope: {"model", "messages": [{"role": "user", "content": prompt}]}
    Response path: choices[0].message.content
    """

    DEFAULT_MODEL = "gpt-4o"
    BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(api_key, model)
        self.client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=build_timeout(timeout)
        )

    @property
    def identity(self) -> ProviderId:
        return ProviderId.OPENAI

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _complete(self, prompt: str, model: str) -> str:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }

        logger.debug(f"{self.identity.display_name} request: model={model}, prompt_chars={len(prompt)}")

        try:
            response = await self.client.post(
                "/chat/completions",
                json=payload,
                headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.identity, f"{self.identity.display_name} request failed: {e}") from e

        if response.is_error:
            raise ProviderError(
                self.identity,
                f"{self.identity.display_name} API error: {response.status_code} "
                f"{response.reason_phrase} - {response.text}",
                status_code=response.status_code
            )

        return self._extract_text(self._json(response))

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                self.identity,
                f"Invalid response format from {self.identity.display_name} API"
            ) from e

    def _extract_text(self, data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not content:
            raise ProviderError(
                self.identity,
                f"Invalid response format from {self.identity.display_name} API"
            )

        return content.strip()

    async def aclose(self) -> None:
        await self.client.aclose()
