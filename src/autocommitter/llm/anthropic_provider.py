"""
Anthropic (Claude) commit message provider.
"""

import logging
from typing import Any, Optional

import anthropic

from .openai_provider import build_timeout
from .provider import BaseCommitMessageProvider, ProviderError, ProviderId

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseCommitMessageProvider):
    """
    Provider for Anthropic's Claude models via the official async SDK.

    Response path: content[0].text
    """

    DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
    MAX_TOKENS = 1024

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None
    ):
        super().__init__(api_key, model)
        self.client = client
        if self.client is None and self.api_key:
            self.client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=build_timeout(timeout)
            )

    @property
    def identity(self) -> ProviderId:
        return ProviderId.ANTHROPIC

    async def _complete(self, prompt: str, model: str) -> str:
        logger.debug(f"Anthropic request: model={model}, prompt_chars={len(prompt)}")

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=self.MAX_TOKENS,
                messages=[{"role": "user", "content": prompt}]
            )
        except anthropic.APIStatusError as e:
            raise ProviderError(
                self.identity,
                f"Anthropic API error: {e.status_code} - {e.message}",
                status_code=e.status_code
            ) from e
        except anthropic.APIError as e:
            raise ProviderError(self.identity, f"Anthropic request failed: {e}") from e

        text_blocks = [
            block.text
            for block in (response.content or [])
            if getattr(block, "type", None) == "text" and getattr(block, "text", None)
        ]
        if not text_blocks:
            raise ProviderError(self.identity, "Invalid response format from Anthropic API")

        return text_blocks[0].strip()

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()
