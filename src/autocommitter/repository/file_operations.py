"""
Git error types and push/pull helpers with conflict detection.

Nothing here resolves a conflict or force-pushes: a diverged remote or a
conflicting pull is reported and the local commit is left in place.
"""

import asyncio
import logging
from typing import List, Optional

from git import Repo, GitCommandError

logger = logging.getLogger(__name__)


class GitOperationError(Exception):
    """Raised when a git operation fails."""
    pass


class PushRejectedError(GitOperationError):
    """Raised when the remote rejects a push because history diverged."""
    pass


def get_remote(repo: Repo, name: str = "origin"):
    """Return the named remote, falling back to the first configured one."""
    if not repo.remotes:
        return None
    for remote in repo.remotes:
        if remote.name == name:
            return remote
    return repo.remotes[0]


def _active_branch(repo: Repo):
    try:
        return repo.active_branch
    except TypeError as e:
        raise GitOperationError("HEAD is detached; check out a branch to sync") from e


async def safe_pull(repo: Repo) -> List[str]:
    """
    Merge the upstream branch into the current branch.

    A conflicting merge is aborted so the working tree returns to the local
    commit; the conflicted paths are returned for reporting.

    Args:
        repo: GitPython Repo instance

    Returns:
        Conflicted paths (empty when the pull succeeded)

    Raises:
        GitOperationError: If the pull fails for a reason other than conflicts
    """
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, _pull_sync, repo)


def _pull_sync(repo: Repo) -> List[str]:
    branch = _active_branch(repo)
    if branch.tracking_branch() is None:
        logger.info(f"Branch '{branch.name}' has no upstream, skipping pull")
        return []

    try:
        repo.git.pull("--no-rebase", "--no-edit")
        logger.info("Pulled latest changes")
        return []
    except GitCommandError as e:
        conflicted = sorted(str(path) for path in repo.index.unmerged_blobs().keys())
        if not conflicted:
            raise GitOperationError(f"Pull failed: {e}") from e

        logger.warning(f"Pull stopped on {len(conflicted)} conflicted path(s), aborting merge")
        try:
            repo.git.merge("--abort")
        except GitCommandError as abort_error:
            logger.error(f"Failed to abort merge: {abort_error}")
        return conflicted


async def safe_push(repo: Repo, branch: Optional[str] = None) -> None:
    """
    Push changes to remote with rejection detection.

    If the push is rejected because the remote has new commits
    (non-fast-forward), raises PushRejectedError. Never forces.

    Args:
        repo: GitPython Repo instance
        branch: Branch name to push (default: active branch)

    Raises:
        PushRejectedError: If push rejected due to remote changes
        GitOperationError: If push fails for other reasons

    Example:
        >>> repo = Repo("/path/to/repo")
        >>> await safe_push(repo, "main")
    """
    loop = asyncio.get_event_loop()
    await loop.run_in_executor(None, _push_sync, repo, branch)


def _push_sync(repo: Repo, branch: Optional[str]) -> None:
    remote = get_remote(repo)
    if remote is None:
        raise GitOperationError("Cannot push: repository has no remote")

    active = _active_branch(repo)
    target = branch or active.name
    # First push of a new branch also records the upstream for later pulls
    set_upstream = branch is None and active.tracking_branch() is None

    try:
        push_info = remote.push(f"{target}:{target}", set_upstream=set_upstream)
    except GitCommandError as e:
        error_msg = str(e).lower()

        if "rejected" in error_msg or "non-fast-forward" in error_msg:
            raise PushRejectedError(
                f"Cannot push to '{target}': remote branch has new commits. "
                "Pull and resolve manually; the local commit was kept."
            ) from e

        raise GitOperationError(f"Push failed: {e}") from e

    for info in push_info:
        if info.flags & (info.REJECTED | info.REMOTE_REJECTED):
            raise PushRejectedError(
                f"Cannot push to '{target}': {info.summary.strip()}"
            )
        if info.flags & info.ERROR:
            raise GitOperationError(f"Push failed: {info.summary.strip()}")

    logger.info(f"Pushed {target} to {remote.name}")
