"""
Provider failover for commit message generation.

Attempt order: every configured provider in rank order (primary, backup-1,
backup-2), then one last attempt with the primary on a simplified diff.
The first candidate that passes the conventional commit grammar wins.
Nothing is retried more than once and there is no delay between attempts,
so a single generation makes at most #providers + 1 calls.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..errors import ErrorFormatter
from ..llm.provider import ProviderId
from ..llm.registry import ProviderRegistry
from ..prompts.builder import simplify_diff
from .validator import normalize_candidate, validate_commit_message

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
UNKNOWN_ERROR = "Unknown error"
NO_PROVIDER_MESSAGE = (
    "No AI provider configured. Set AUTOCOMMITTER_PRIMARY_PROVIDER "
    "and the matching API key."
)


@dataclass
class FailoverAttempt:
    """One provider call made during a failover run"""
    provider: ProviderId
    model: Optional[str]
    success: bool
    message_preview: Optional[str] = None
    error: Optional[str] = None
    simplified: bool = False

    @property
    def label(self) -> str:
        """Provider name as shown in attempt details"""
        name = self.provider.display_name
        return f"{name} (Simplified)" if self.simplified else name

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "label": self.label,
            "model": self.model,
            "success": self.success,
            "message_preview": self.message_preview,
            "error": self.error,
            "simplified": self.simplified,
        }


@dataclass
class FailoverResult:
    """Outcome of a failover run; message is None on total failure"""
    message: Optional[str]
    attempts: List[FailoverAttempt] = field(default_factory=list)
    provider: Optional[ProviderId] = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.message is not None


class FailoverOrchestrator:
    """
    Drives ranked providers and the validator until one message validates.

    Example:
        orchestrator = FailoverOrchestrator(registry, notifier)
        result = await orchestrator.generate(diff, ProviderId.GEMINI)
        if result.message:
            ...
    """

    def __init__(self, registry: ProviderRegistry, notifier):
        """
        Args:
            registry: Ranked provider registry
            notifier: User notification collaborator
        """
        self.registry = registry
        self.notifier = notifier
        self.last_result: Optional[FailoverResult] = None

    async def generate(self, diff: str, primary: Optional[ProviderId]) -> FailoverResult:
        """
        Generate a validated commit message for a diff.

        Args:
            diff: Staged diff text
            primary: Requested primary provider

        Returns:
            FailoverResult carrying the message (or None) and the attempt log
        """
        start_time = time.monotonic()
        attempts: List[FailoverAttempt] = []

        configured = self.registry.list_configured(primary) if primary else []
        if not configured:
            logger.warning("No provider configured, skipping generation")
            self.notifier.error(NO_PROVIDER_MESSAGE)
            result = FailoverResult(message=None, attempts=attempts)
            self.last_result = result
            return result

        logger.info(
            f"Generating commit message with providers: "
            f"{', '.join(c.identity.display_name for c in configured)}"
        )

        for config in configured:
            message = await self._attempt(config.identity, config.model, diff, attempts)
            if message:
                result = self._finish(message, config.identity, attempts, start_time)
                if config.identity != primary:
                    self.notifier.info(
                        f"Primary AI failed, switched to {config.identity.display_name}"
                    )
                return result

        # Last resort: primary again on the first lines of the diff
        self.notifier.info("All providers failed, trying simplified prompt with primary AI...")
        primary_model = self._default_model(primary)
        message = await self._attempt(
            primary, primary_model, simplify_diff(diff), attempts, simplified=True
        )
        if message:
            result = self._finish(message, primary, attempts, start_time)
            self.notifier.info("Simplified AI prompt generated commit message successfully")
            return result

        duration_ms = _elapsed_ms(start_time)
        self._log_all_failures(attempts, duration_ms)
        self.notifier.warning(
            f"Failed to generate commit message after {len(attempts)} attempts. Skipping commit."
        )
        self.notifier.show_attempt_details(attempts)

        result = FailoverResult(message=None, attempts=attempts, duration_ms=duration_ms)
        self.last_result = result
        return result

    async def _attempt(
        self,
        identity: ProviderId,
        model: Optional[str],
        diff: str,
        attempts: List[FailoverAttempt],
        simplified: bool = False
    ) -> Optional[str]:
        """Call one provider once and record the attempt"""
        try:
            provider = self.registry.resolve(identity)
            raw = await provider.generate(diff, model)
        except Exception as e:
            error = str(e) or UNKNOWN_ERROR
            logger.warning(f"{identity.display_name} failed: {ErrorFormatter.format_error_concise(e)}")
            attempts.append(FailoverAttempt(
                provider=identity,
                model=model,
                success=False,
                error=error,
                simplified=simplified
            ))
            return None

        candidate = normalize_candidate(raw)
        validation = validate_commit_message(candidate)
        if validation.valid:
            attempts.append(FailoverAttempt(
                provider=identity,
                model=model,
                success=True,
                message_preview=candidate[:PREVIEW_LENGTH],
                simplified=simplified
            ))
            return candidate

        logger.warning(
            f"{identity.display_name} returned an unusable message: {validation.reason}"
        )
        attempts.append(FailoverAttempt(
            provider=identity,
            model=model,
            success=False,
            error=validation.reason,
            simplified=simplified
        ))
        return None

    def _default_model(self, identity: ProviderId) -> Optional[str]:
        try:
            return self.registry.resolve(identity).default_model
        except KeyError:
            return None

    def _finish(
        self,
        message: str,
        identity: ProviderId,
        attempts: List[FailoverAttempt],
        start_time: float
    ) -> FailoverResult:
        duration_ms = _elapsed_ms(start_time)
        logger.info(
            f"✓ Commit message generated successfully "
            f"(provider={identity.display_name}, attempts={len(attempts)}, "
            f"duration={duration_ms}ms)"
        )
        result = FailoverResult(
            message=message,
            attempts=attempts,
            provider=identity,
            duration_ms=duration_ms
        )
        self.last_result = result
        return result

    def _log_all_failures(self, attempts: List[FailoverAttempt], duration_ms: int) -> None:
        logger.error(
            f"✗ All AI providers failed to generate commit message "
            f"(attempts={len(attempts)}, duration={duration_ms}ms)",
            extra={"extra_data": {"attempts": [a.to_dict() for a in attempts]}}
        )
        for index, attempt in enumerate(attempts, 1):
            logger.error(f"  Attempt {index}: {attempt.label} - {attempt.error}")


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)
