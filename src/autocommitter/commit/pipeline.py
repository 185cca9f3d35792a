"""
The commit pipeline.

One run: status -> stage -> diff -> generate message -> optional version
bump -> commit -> pull/push. Steps run strictly in this order. Failures in
message generation and version bumping are contained by their components;
git failures are reported and never retried, and a push failure never rolls
back the commit that was already made.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..repository.file_operations import GitOperationError, PushRejectedError
from ..repository.ignore_rules import GITATTRIBUTES, GITIGNORE, IgnoreRules
from ..version.coordinator import IncrementKind, VersionCoordinator
from ..version.files import is_version_file
from .failover import FailoverAttempt, FailoverOrchestrator

logger = logging.getLogger(__name__)


class PipelineStatus(Enum):
    """How a pipeline run ended"""
    COMMITTED = "committed"                  # Committed (and pushed when enabled)
    NO_CHANGES = "no_changes"
    SKIPPED_VERSION_ONLY = "skipped_version_only"
    SKIPPED_BUSY = "skipped_busy"
    GENERATION_FAILED = "generation_failed"
    COMMIT_FAILED = "commit_failed"
    PULL_CONFLICT = "pull_conflict"          # Committed locally, not pushed
    PUSH_REJECTED = "push_rejected"          # Committed locally, not pushed
    SYNC_FAILED = "sync_failed"              # Committed locally, pull/push error
    GIT_ERROR = "git_error"                  # Status/stage/diff failed


@dataclass
class PipelineResult:
    """Outcome of one pipeline run"""
    status: PipelineStatus
    message: Optional[str] = None
    commit_sha: Optional[str] = None
    version: Optional[str] = None
    pushed: bool = False
    conflicted_paths: List[str] = field(default_factory=list)
    attempts: List[FailoverAttempt] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.commit_sha is not None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "commit_sha": self.commit_sha,
            "version": self.version,
            "pushed": self.pushed,
            "conflicted_paths": self.conflicted_paths,
            "attempts": [a.to_dict() for a in self.attempts],
            "error": self.error,
        }


def version_trailer(version: str) -> str:
    """Line appended to the commit message after a version bump"""
    return f"chore: bump version to {version}"


def is_bookkeeping_path(path: str) -> bool:
    """Version declarations and the files the pipeline maintains itself"""
    return (
        is_version_file(path)
        or path.endswith(GITIGNORE)
        or path.endswith(GITATTRIBUTES)
    )


class CommitPipeline:
    """
    Stage, describe, bump and commit the working tree.

    Safe to call repeatedly from both scheduler timers. With
    `settings.serialize_runs` an overlapping call returns SKIPPED_BUSY
    immediately; without it runs overlap and only the version bump is
    guarded.

    Example:
        pipeline = CommitPipeline(repository, orchestrator, coordinator, notifier, settings)
        result = await pipeline.run()
    """

    def __init__(
        self,
        repository,
        orchestrator: FailoverOrchestrator,
        version_coordinator: VersionCoordinator,
        notifier,
        settings,
        ignore_rules: Optional[IgnoreRules] = None
    ):
        """
        Args:
            repository: Git collaborator (LocalRepository or compatible)
            orchestrator: Failover orchestrator producing the message
            version_coordinator: Version bump coordinator
            notifier: User notification collaborator
            settings: Settings (primary provider, increment kind, push, guards)
            ignore_rules: Optional .gitignore/.gitattributes maintenance
        """
        self.repository = repository
        self.orchestrator = orchestrator
        self.version_coordinator = version_coordinator
        self.notifier = notifier
        self.settings = settings
        self.ignore_rules = ignore_rules

        self._running = 0
        self.last_result: Optional[PipelineResult] = None

    @property
    def running(self) -> bool:
        return self._running > 0

    async def run(self) -> PipelineResult:
        """
        Execute one pipeline run.

        Returns:
            PipelineResult describing how the run ended
        """
        if self.settings.serialize_runs and self._running:
            logger.info("Commit already in progress, skipping run")
            return PipelineResult(status=PipelineStatus.SKIPPED_BUSY)

        self._running += 1
        try:
            result = await self._run()
        except GitOperationError as e:
            logger.error(f"Git operation failed: {e}")
            self.notifier.error(f"Failed to commit changes: {e}")
            result = PipelineResult(status=PipelineStatus.GIT_ERROR, error=str(e))
        finally:
            self._running -= 1

        self.last_result = result
        return result

    async def _run(self) -> PipelineResult:
        if self.settings.smart_gitignore and self.ignore_rules is not None:
            await self._force_add_attributed()

        status = await self.repository.status()
        if status.is_clean:
            logger.info("No changes to commit")
            return PipelineResult(status=PipelineStatus.NO_CHANGES)

        if self.ignore_rules is not None:
            changed = await self.ignore_rules.apply()
            if changed:
                status = await self.repository.status()

        if all(is_bookkeeping_path(path) for path in status.changed_paths):
            logger.info("Skipping commit: only version/config files changed")
            return PipelineResult(status=PipelineStatus.SKIPPED_VERSION_ONLY)

        await self.repository.stage_all()

        diff = await self.repository.diff()
        if not diff or not diff.strip():
            logger.info("Staged diff is empty, nothing to commit")
            return PipelineResult(status=PipelineStatus.NO_CHANGES)

        generation = await self.orchestrator.generate(diff, self.settings.primary_provider)
        if generation.message is None:
            logger.warning("No valid commit message, skipping commit")
            return PipelineResult(
                status=PipelineStatus.GENERATION_FAILED,
                attempts=generation.attempts
            )

        message = generation.message
        version = None
        if self.version_coordinator.enabled:
            increment = getattr(self.settings, "version_increment", IncrementKind.PATCH)
            version = await self.version_coordinator.bump(increment)
            if version:
                message = f"{message}\n\n{version_trailer(version)}"
                # The version file changed after the first stage
                await self.repository.stage_all()

        try:
            sha = await self.repository.commit(message)
        except GitOperationError as e:
            logger.error(f"Commit failed: {e}")
            error = f"Failed to commit changes: {e}"
            if version:
                if await self.version_coordinator.revert(version):
                    error += f" (version bump to {version} reverted)"
                    version = None
                else:
                    error += f" (version file left at {version})"
            self.notifier.error(error)
            return PipelineResult(
                status=PipelineStatus.COMMIT_FAILED,
                message=message,
                version=version,
                attempts=generation.attempts,
                error=str(e)
            )

        result = PipelineResult(
            status=PipelineStatus.COMMITTED,
            message=message,
            commit_sha=sha,
            version=version,
            attempts=generation.attempts
        )

        if self.settings.auto_push:
            await self._sync(result)

        if result.status is PipelineStatus.COMMITTED:
            self.notifier.info(f"Committed in {self.repository.name}: {generation.message}")
        return result

    async def _force_add_attributed(self) -> None:
        try:
            patterns = self.ignore_rules.attributed_patterns()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {GITATTRIBUTES}: {e}")
            return
        if not patterns:
            return
        try:
            await self.repository.force_add(patterns)
        except GitOperationError as e:
            logger.info(f"Force-adding attributed files skipped: {e}")

    async def _sync(self, result: PipelineResult) -> None:
        """Pull then push; failures are reported and the commit is kept"""
        if not self.repository.has_remote():
            logger.info("No remote configured, skipping pull/push")
            return

        try:
            conflicted = await self.repository.pull()
        except GitOperationError as e:
            self._sync_failed(result, PipelineStatus.SYNC_FAILED, f"Pull failed: {e}")
            return

        if conflicted:
            result.conflicted_paths = conflicted
            self._sync_failed(
                result,
                PipelineStatus.PULL_CONFLICT,
                f"Pull conflict in {', '.join(conflicted)}. "
                "Local commit kept; resolve manually before the next push."
            )
            return

        try:
            await self.repository.push()
        except PushRejectedError as e:
            self._sync_failed(result, PipelineStatus.PUSH_REJECTED, str(e))
            return
        except GitOperationError as e:
            self._sync_failed(result, PipelineStatus.SYNC_FAILED, str(e))
            return

        result.pushed = True

    def _sync_failed(self, result: PipelineResult, status: PipelineStatus, error: str) -> None:
        logger.error(error)
        self.notifier.error(error)
        result.status = status
        result.error = error
