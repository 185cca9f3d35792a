"""
Version bump coordination.

VersionCoordinator owns the re-entrancy guard around version mutation and
the semantic-version increment algorithm. Reading and writing the actual
version declaration is delegated to a VersionStore collaborator, so the
coordinator is agnostic to file formats.

A version write is itself a working-tree change. Without the guard a bump
could re-trigger the scheduler and recurse; with it every pipeline run
performs at most one bump.
"""

import logging
import re
from enum import Enum
from typing import Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

SEMVER_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class IncrementKind(Enum):
    """Supported version increments"""
    PATCH = "patch"
    MINOR = "minor"


class VersionStore(Protocol):
    """Collaborator that locates, reads and writes a version declaration"""

    async def detect(self) -> Optional[str]:
        """Identifier of the version declaration, or None if there is none"""
        ...

    async def read(self, file: str) -> Optional[str]:
        """Current version string, or None if it cannot be read"""
        ...

    async def write(self, file: str, version: str) -> bool:
        """Write a new version; returns success"""
        ...


def increment_version(version: str, kind: IncrementKind) -> str:
    """
    Compute the next semantic version.

    Args:
        version: Current version, strictly MAJOR.MINOR.PATCH
        kind: PATCH bumps the third component; MINOR bumps the second and
              resets the third to 0

    Returns:
        New version string

    Raises:
        ValueError: If version is not MAJOR.MINOR.PATCH or kind is unsupported
    """
    match = SEMVER_PATTERN.match(version)
    if not match:
        raise ValueError(f"Invalid semantic version: {version!r}")

    major, minor, patch = (int(part) for part in match.groups())

    if kind is IncrementKind.PATCH:
        return f"{major}.{minor}.{patch + 1}"
    if kind is IncrementKind.MINOR:
        return f"{major}.{minor + 1}.0"

    raise ValueError(f"Unsupported increment kind: {kind}")


class VersionCoordinator:
    """
    Serializes version bumps and applies the increment algorithm.

    Idle -> Bumping -> Idle. The in-progress flag is set before the first
    collaborator call and cleared unconditionally on exit.

    Example:
        coordinator = VersionCoordinator(VersionFileStore(repo_path), enabled=True)
        new_version = await coordinator.bump(IncrementKind.MINOR)
    """

    def __init__(self, store: VersionStore, enabled: bool = True):
        """
        Args:
            store: Version declaration collaborator
            enabled: When False every bump is a no-op returning None
        """
        self.store = store
        self.enabled = enabled
        self._in_progress = False
        self._last_bump: Optional[Tuple[str, str, str]] = None  # (file, previous, new)

    @property
    def in_progress(self) -> bool:
        """Whether a bump is currently in flight"""
        return self._in_progress

    async def bump(self, kind: IncrementKind = IncrementKind.PATCH) -> Optional[str]:
        """
        Bump the declared version.

        Never raises: every failure is logged and reported as None.

        Args:
            kind: Increment to apply

        Returns:
            The new version, or None if disabled, already bumping, or failed
        """
        if not self.enabled:
            logger.debug("Version bumping disabled, skipping bump")
            return None

        if self._in_progress:
            logger.info("Version bump already in progress, skipping")
            return None

        self._in_progress = True
        try:
            file = await self.store.detect()
            if not file:
                logger.info("No version file detected, skipping bump")
                return None

            current = await self.store.read(file)
            if current is None:
                logger.warning(f"Could not read version from {file}")
                return None

            current = current.strip()
            if not SEMVER_PATTERN.match(current):
                logger.warning(f"Version in {file} is not MAJOR.MINOR.PATCH: {current!r}")
                return None

            new_version = increment_version(current, kind)

            if not await self.store.write(file, new_version):
                logger.error(f"Failed to write version {new_version} to {file}")
                return None

            logger.info(f"Bumped version {current} -> {new_version} ({kind.value}) in {file}")
            self._last_bump = (file, current, new_version)
            return new_version

        except Exception as e:
            logger.error(f"Version bump failed: {e}", exc_info=True)
            return None

        finally:
            self._in_progress = False

    async def revert(self, version: str) -> bool:
        """
        Restore the declaration replaced by the bump that produced `version`.

        Only the most recent bump can be reverted, and only while the file
        still holds `version`. Never raises.

        Returns:
            True if the previous version was written back
        """
        if self._last_bump is None or self._last_bump[2] != version:
            return False
        if self._in_progress:
            logger.info("Version bump in progress, not reverting")
            return False

        file, previous, _ = self._last_bump
        self._in_progress = True
        try:
            current = await self.store.read(file)
            if current is None or current.strip() != version:
                logger.warning(f"{file} no longer declares {version}, not reverting")
                return False

            if not await self.store.write(file, previous):
                logger.error(f"Failed to restore version {previous} in {file}")
                return False

            self._last_bump = None
            logger.info(f"Restored version {previous} in {file}")
            return True

        except Exception as e:
            logger.error(f"Version revert failed: {e}", exc_info=True)
            return False

        finally:
            self._in_progress = False
