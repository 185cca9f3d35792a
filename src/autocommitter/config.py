"""
Runtime configuration for autocommitter.

All settings come from environment variables (a `.env` file is loaded by
run.py before this module reads anything). Invalid numeric values fall back
to their defaults with a warning instead of aborting startup.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .llm.provider import ProviderId
from .version.coordinator import IncrementKind

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")


@dataclass
class ProviderSettings:
    """Credential and model selection for one provider"""
    api_key: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None  # Only used by Ollama


@dataclass
class Settings:
    """Application settings"""
    repo_path: str = field(default_factory=os.getcwd)
    enabled: bool = True

    # Scheduler (seconds)
    commit_interval: float = 60.0
    inactivity_delay: float = 10.0

    # Providers
    primary_provider: Optional[ProviderId] = None
    backup_providers: List[ProviderId] = field(default_factory=list)
    providers: Dict[ProviderId, ProviderSettings] = field(default_factory=dict)
    provider_timeout: Optional[float] = None  # None = no timeout

    # Version bumping
    version_bumping_enabled: bool = False
    version_increment: IncrementKind = IncrementKind.PATCH

    # Pipeline
    auto_push: bool = True
    serialize_runs: bool = True
    smart_gitignore: bool = False
    ignored_patterns: List[str] = field(default_factory=list)
    gitattributes_patterns: List[str] = field(default_factory=list)

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    def provider_settings(self, identity: ProviderId) -> ProviderSettings:
        """Settings for a provider (empty when nothing is configured)"""
        return self.providers.get(identity, ProviderSettings())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ

        providers = {
            ProviderId.GEMINI: ProviderSettings(
                api_key=_get_str(env, "GEMINI_API_KEY"),
                model=_get_str(env, "GEMINI_MODEL"),
            ),
            ProviderId.OPENAI: ProviderSettings(
                api_key=_get_str(env, "OPENAI_API_KEY"),
                model=_get_str(env, "OPENAI_MODEL"),
            ),
            ProviderId.OPENROUTER: ProviderSettings(
                api_key=_get_str(env, "OPENROUTER_API_KEY"),
                model=_get_str(env, "OPENROUTER_MODEL"),
            ),
            ProviderId.ANTHROPIC: ProviderSettings(
                api_key=_get_str(env, "ANTHROPIC_API_KEY"),
                model=_get_str(env, "ANTHROPIC_MODEL"),
            ),
            ProviderId.OLLAMA: ProviderSettings(
                base_url=_get_str(env, "OLLAMA_BASE_URL"),
                model=_get_str(env, "OLLAMA_MODEL"),
            ),
        }

        backups = [
            identity
            for identity in (
                _get_provider(env, "AUTOCOMMITTER_BACKUP_PROVIDER_1"),
                _get_provider(env, "AUTOCOMMITTER_BACKUP_PROVIDER_2"),
            )
            if identity is not None
        ]

        increment_raw = env.get("AUTOCOMMITTER_VERSION_INCREMENT", "patch")
        try:
            increment = IncrementKind(increment_raw.strip().lower())
        except ValueError:
            logger.warning(f"Invalid AUTOCOMMITTER_VERSION_INCREMENT value: {increment_raw}, using patch")
            increment = IncrementKind.PATCH

        timeout = _get_float(env, "AUTOCOMMITTER_PROVIDER_TIMEOUT", 0.0)

        return cls(
            repo_path=_get_str(env, "AUTOCOMMITTER_REPO_PATH") or os.getcwd(),
            enabled=_get_bool(env, "AUTOCOMMITTER_ENABLED", True),
            commit_interval=_get_float(env, "AUTOCOMMITTER_COMMIT_INTERVAL", 60.0),
            inactivity_delay=_get_float(env, "AUTOCOMMITTER_INACTIVITY_DELAY", 10.0),
            primary_provider=_get_provider(env, "AUTOCOMMITTER_PRIMARY_PROVIDER"),
            backup_providers=backups,
            providers=providers,
            provider_timeout=timeout or None,
            version_bumping_enabled=_get_bool(env, "AUTOCOMMITTER_VERSION_BUMPING", False),
            version_increment=increment,
            auto_push=_get_bool(env, "AUTOCOMMITTER_AUTO_PUSH", True),
            serialize_runs=_get_bool(env, "AUTOCOMMITTER_SERIALIZE_RUNS", True),
            smart_gitignore=_get_bool(env, "AUTOCOMMITTER_SMART_GITIGNORE", False),
            ignored_patterns=_get_list(env, "AUTOCOMMITTER_IGNORED_PATTERNS"),
            gitattributes_patterns=_get_list(env, "AUTOCOMMITTER_GITATTRIBUTES_PATTERNS"),
            host=env.get("AUTOCOMMITTER_HOST", "127.0.0.1"),
            port=int(_get_float(env, "AUTOCOMMITTER_PORT", 8000)),
        )


def _get_str(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid {name} value: {value}, using default {default}")
        return default


def _get_list(env: Mapping[str, str], name: str) -> List[str]:
    value = env.get(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_provider(env: Mapping[str, str], name: str) -> Optional[ProviderId]:
    try:
        return ProviderId.parse(env.get(name))
    except ValueError as e:
        logger.warning(f"Ignoring {name}: {e}")
        return None
