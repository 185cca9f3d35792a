"""
LLM module - Provides commit message provider abstractions.
"""

from typing import Callable, Dict, Optional

from .provider import (
    ICommitMessageProvider,
    BaseCommitMessageProvider,
    ProviderConfig,
    ProviderError,
    ProviderId,
)
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider
from .ollama_provider import OllamaProvider
from .openai_provider import OpenAIProvider
from .openrouter_provider import OpenRouterProvider
from .registry import ProviderRegistry


# Constructor per identity
_PROVIDER_FACTORIES: Dict[ProviderId, Callable[..., ICommitMessageProvider]] = {
    ProviderId.GEMINI: lambda s, timeout: GeminiProvider(api_key=s.api_key, model=s.model, timeout=timeout),
    ProviderId.OPENAI: lambda s, timeout: OpenAIProvider(api_key=s.api_key, model=s.model, timeout=timeout),
    ProviderId.OPENROUTER: lambda s, timeout: OpenRouterProvider(api_key=s.api_key, model=s.model, timeout=timeout),
    ProviderId.ANTHROPIC: lambda s, timeout: AnthropicProvider(api_key=s.api_key, model=s.model, timeout=timeout),
    ProviderId.OLLAMA: lambda s, timeout: OllamaProvider(base_url=s.base_url, model=s.model, timeout=timeout),
}


def create_provider(
    identity: ProviderId,
    provider_settings,
    timeout: Optional[float] = None
) -> ICommitMessageProvider:
    """
    Factory function to create a commit message provider.

    Args:
        identity: Provider identity
        provider_settings: ProviderSettings with credential, model and base URL
        timeout: Per-request timeout in seconds (None = no timeout)

    Returns:
        ICommitMessageProvider instance

    Raises:
        ValueError: If identity has no registered factory
    """
    factory = _PROVIDER_FACTORIES.get(identity)
    if factory is None:
        raise ValueError(f"Unknown provider identity: {identity}")
    return factory(provider_settings, timeout)


def create_registry(settings) -> ProviderRegistry:
    """
    Build the provider registry from application settings.

    Every known provider is instantiated; unconfigured ones simply report
    is_configured() == False and are filtered out at orchestration time.
    """
    providers = {}
    for identity in ProviderId:
        providers[identity] = create_provider(
            identity,
            settings.provider_settings(identity),
            timeout=settings.provider_timeout
        )

    return ProviderRegistry(
        providers,
        primary=settings.primary_provider,
        backups=settings.backup_providers
    )


__all__ = [
    # Base classes
    "ICommitMessageProvider",
    "BaseCommitMessageProvider",
    "ProviderConfig",
    "ProviderError",
    "ProviderId",
    # Providers
    "AnthropicProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    # Registry
    "ProviderRegistry",
    # Factories
    "create_provider",
    "create_registry",
]
