"""
Provider registry.

Enumerates the configured providers in rank order (primary, then backups)
and maps an identity to the concrete provider implementation.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .provider import ICommitMessageProvider, ProviderConfig, ProviderId

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Ranked view over the available commit message providers.

    Example:
        registry = ProviderRegistry(providers, primary=ProviderId.GEMINI,
                                    backups=[ProviderId.OPENROUTER])
        for config in registry.list_configured():
            provider = registry.resolve(config.identity)
    """

    def __init__(
        self,
        providers: Dict[ProviderId, ICommitMessageProvider],
        primary: Optional[ProviderId] = None,
        backups: Sequence[ProviderId] = ()
    ):
        """
        Args:
            providers: Provider implementation per identity
            primary: Configured primary provider
            backups: Backup providers in configuration order
        """
        self._providers = dict(providers)
        self.primary = primary
        self.backups = list(backups)

    def rank_order(self, primary: Optional[ProviderId] = None) -> List[ProviderId]:
        """
        Configuration order with duplicates removed.

        Rank is exactly configuration order; nothing is reordered by latency
        or past success.
        """
        order: List[ProviderId] = []
        for identity in [primary or self.primary, *self.backups]:
            if identity is not None and identity not in order:
                order.append(identity)
        return order

    def list_configured(self, primary: Optional[ProviderId] = None) -> List[ProviderConfig]:
        """
        List providers that have a usable credential, in rank order.

        Args:
            primary: Primary identity for this orchestration (defaults to the
                     configured primary)

        Returns:
            Ordered ProviderConfig list; empty when nothing is configured
        """
        configured = []
        for rank, identity in enumerate(self.rank_order(primary)):
            provider = self._providers.get(identity)
            if provider is None or not provider.is_configured():
                logger.debug(f"Skipping {identity.display_name}: not configured")
                continue
            configured.append(ProviderConfig(
                identity=identity,
                model=provider.default_model,
                rank=rank
            ))
        return configured

    def resolve(self, identity: ProviderId) -> ICommitMessageProvider:
        """
        Map an identity to its provider.

        Raises:
            KeyError: If no provider is registered for the identity
        """
        return self._providers[identity]

    async def aclose(self) -> None:
        """Release provider HTTP clients."""
        for provider in self._providers.values():
            close = getattr(provider, "aclose", None)
            if close is not None:
                await close()
