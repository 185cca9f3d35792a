"""
OpenRouter commit message provider.

OpenRouter exposes an OpenAI-compatible chat completions endpoint, so only
the base URL, attribution headers and default model differ.
"""

from typing import Dict

from .openai_provider import OpenAIProvider
from .provider import ProviderId


class OpenRouterProvider(OpenAIProvider):
    """Provider for models routed through openrouter.ai"""

    DEFAULT_MODEL = "google/gemini-2.0-flash-lite-preview-02-05:free"
    BASE_URL = "https://openrouter.ai/api/v1"

    @property
    def identity(self) -> ProviderId:
        return ProviderId.OPENROUTER

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        # OpenRouter uses these for app attribution
        headers["HTTP-Referer"] = "https://github.com/autocommitter/autocommitter"
        headers["X-Title"] = "autocommitter"
        return headers
