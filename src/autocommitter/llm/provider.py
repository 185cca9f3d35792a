"""
Commit message provider abstraction layer.

Provides a unified "turn a diff into free text" interface over several
interchangeable AI backends (Gemini, OpenRouter, OpenAI, Anthropic, Ollama)
so the failover orchestrator can treat them as ranked, swappable candidates.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from ..prompts.builder import build_commit_prompt


class ProviderId(Enum):
    """Supported commit message providers"""
    GEMINI = "gemini"
    OPENROUTER = "openRouter"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"

    @property
    def display_name(self) -> str:
        """Human-readable provider name for notifications and attempt logs"""
        return {
            ProviderId.GEMINI: "Gemini",
            ProviderId.OPENROUTER: "OpenRouter",
            ProviderId.OPENAI: "OpenAI",
            ProviderId.ANTHROPIC: "Anthropic",
            ProviderId.OLLAMA: "Ollama",
        }[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ProviderId"]:
        """
        Parse a configured identity.

        Matching is case-insensitive. Empty values and "none" mean unset.

        Raises:
            ValueError: If the value names an unknown provider
        """
        if value is None:
            return None
        cleaned = value.strip().lower()
        if not cleaned or cleaned == "none":
            return None
        for member in cls:
            if member.value.lower() == cleaned:
                return member
        raise ValueError(
            f"Unknown provider: {value}. "
            f"Supported: {', '.join(m.value for m in cls)}"
        )


@dataclass(frozen=True)
class ProviderConfig:
    """A provider selected for one orchestration, with its rank"""
    identity: ProviderId
    model: Optional[str] = None  # None means the provider's configured default
    rank: int = 0  # 0 = primary, 1 = backup-1, ...


class ProviderError(Exception):
    """Raised when a provider call fails (non-2xx, malformed body, SDK error)"""

    def __init__(self, provider: ProviderId, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ICommitMessageProvider(ABC):
    """
    Base interface for commit message providers.

    All providers must implement this interface to take part in failover.
    """

    @property
    @abstractmethod
    def identity(self) -> ProviderId:
        """Provider identity"""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Model used when no override is given"""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether a usable credential/configuration is present"""
        pass

    @abstractmethod
    async def generate(self, diff: str, model: Optional[str] = None) -> Optional[str]:
        """
        Generate free text describing a diff.

        Args:
            diff: Unstructured diff text
            model: Optional model override

        Returns:
            Generated text, or None when the provider is not configured

        Raises:
            ProviderError: On network, HTTP or response-shape failures
        """
        pass


class BaseCommitMessageProvider(ICommitMessageProvider):
    """
    Base implementation with common functionality.

    Subclasses implement the provider-specific request in ``_complete``.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key
        self.model = model

    @property
    def default_model(self) -> str:
        return self.model or self.DEFAULT_MODEL

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, diff: str, model: Optional[str] = None) -> Optional[str]:
        if not self.is_configured():
            # Silent: failover treats this as just another unavailable candidate
            return None

        if not diff or not diff.strip():
            raise ProviderError(self.identity, "No changes to commit")

        prompt = build_commit_prompt(diff)
        return await self._complete(prompt, model or self.default_model)

    async def _complete(self, prompt: str, model: str) -> str:
        """
        Send the prompt and extract the generated text.
        Must be implemented by subclasses.
        """
        raise NotImplementedError("Subclass must implement _complete")
