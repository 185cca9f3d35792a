"""
Google Gemini commit message provider.
"""

import logging
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from .provider import BaseCommitMessageProvider, ProviderError, ProviderId

logger = logging.getLogger(__name__)


class GeminiProvider(BaseCommitMessageProvider):
    """
    Provider for Google Gemini models via the google-genai SDK.

    Response path: candidates[0].content.parts[0].text
    """

    DEFAULT_MODEL = "gemini-2.0-flash"

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
            # HttpOptions.timeout is in milliseconds
            http_options = genai_types.HttpOptions(timeout=int(timeout * 1000)) if timeout else None
            self.client = genai.Client(api_key=self.api_key, http_options=http_options)

    @property
    def identity(self) -> ProviderId:
        return ProviderId.GEMINI

    async def _complete(self, prompt: str, model: str) -> str:
        logger.debug(f"Gemini request: model={model}, prompt_chars={len(prompt)}")

        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt
            )
        except genai_errors.APIError as e:
            raise ProviderError(
                self.identity,
                f"Gemini API error: {e.code} - {e.message}",
                status_code=e.code
            ) from e

        text = self._first_candidate_text(response)
        if not text:
            raise ProviderError(self.identity, "No candidates in response from Gemini API")

        return text.strip()

    @staticmethod
    def _first_candidate_text(response: Any) -> Optional[str]:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return None

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None)
        if not parts:
            return None

        return getattr(parts[0], "text", None)

    async def aclose(self) -> None:
        # The SDK client owns no connection that needs explicit release
        return None
