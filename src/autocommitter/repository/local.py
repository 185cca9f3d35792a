"""
Local working tree access.

LocalRepository is the git collaborator of the commit pipeline. It drives
GitPython for status, staging, diff, commit and pull/push; every blocking
call runs in the default executor so timer callbacks keep firing while git
works.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .file_operations import GitOperationError, get_remote, safe_pull, safe_push

logger = logging.getLogger(__name__)


@dataclass
class WorkingTreeStatus:
    """Paths with pending changes, as reported by `git status`"""
    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    staged: List[str] = field(default_factory=list)
    renamed: List[str] = field(default_factory=list)  # New paths

    @property
    def is_clean(self) -> bool:
        return not self.changed_paths

    @property
    def changed_paths(self) -> List[str]:
        """Every changed path once, in first-seen order"""
        paths: List[str] = []
        for path in [*self.modified, *self.staged, *self.renamed, *self.untracked, *self.deleted]:
            if path not in paths:
                paths.append(path)
        return paths


def parse_porcelain_status(output: str) -> WorkingTreeStatus:
    """
    Parse `git status --porcelain -z` output.

    Args:
        output: NUL separated status entries

    Returns:
        WorkingTreeStatus
    """
    status = WorkingTreeStatus()
    entries = output.split("\0")
    index = 0

    while index < len(entries):
        entry = entries[index]
        index += 1
        if len(entry) < 4:
            continue

        x, y, path = entry[0], entry[1], entry[3:]

        if x in ("R", "C"):
            index += 1  # Original path follows the entry
            status.renamed.append(path)

        if x == "?":
            status.untracked.append(path)
            continue
        if x == "!":
            continue

        if x not in (" ", "R", "C"):
            status.staged.append(path)
        if "D" in (x, y):
            status.deleted.append(path)
        elif y != " ":
            status.modified.append(path)

    return status


class LocalRepository:
    """
    Async wrapper around a GitPython repository.

    Example:
        repository = LocalRepository("/path/to/repo")
        status = await repository.status()
        if not status.is_clean:
            await repository.stage_all()
            sha = await repository.commit("fix: correct off-by-one in pagination")
    """

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: Working tree root

        Raises:
            GitOperationError: If the path is not a git repository
        """
        self.path = Path(path)
        try:
            self._repo = Repo(str(self.path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise GitOperationError(f"Not a git repository: {self.path}") from e

    @property
    def repo(self) -> Repo:
        return self._repo

    @property
    def name(self) -> str:
        return self.path.resolve().name

    def has_remote(self) -> bool:
        return get_remote(self._repo) is not None

    async def _run(self, func, *args):
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except GitCommandError as e:
            raise GitOperationError(f"git {getattr(func, '__name__', 'command')} failed: {e}") from e

    async def status(self) -> WorkingTreeStatus:
        """Query working-tree status, untracked files included"""
        output = await self._run(
            self._repo.git.status, "--porcelain", "-z", "--untracked-files=all"
        )
        return parse_porcelain_status(output)

    async def stage_all(self) -> None:
        """Stage every change, deletions and untracked files included"""
        await self._run(self._repo.git.add, "--all")

    async def force_add(self, patterns: Iterable[str]) -> None:
        """Stage paths even when .gitignore excludes them"""
        patterns = [p for p in patterns if p]
        if not patterns:
            return
        await self._run(self._repo.git.add, "--force", "--", *patterns)

    async def diff(self) -> str:
        """Diff of the staged changes"""
        return await self._run(self._repo.git.diff, "--cached")

    async def commit(self, message: str) -> str:
        """
        Commit the staged changes.

        Returns:
            The new commit SHA
        """
        await self._run(self._repo.git.commit, "-m", message)
        sha = self._repo.head.commit.hexsha
        logger.info(f"Committed {sha[:8]} in {self.name}")
        return sha

    async def pull(self) -> List[str]:
        """
        Pull from the upstream branch.

        Returns:
            Conflicted paths; the merge is aborted when non-empty
        """
        try:
            return await safe_pull(self._repo)
        except GitCommandError as e:
            raise GitOperationError(f"Pull failed: {e}") from e

    async def push(self) -> None:
        """Push the active branch; PushRejectedError on diverged history"""
        await safe_push(self._repo)
