"""Fake collaborators shared by the test modules."""

import asyncio
from typing import List, Optional, Sequence

from autocommitter.llm.provider import ICommitMessageProvider, ProviderId
from autocommitter.llm.registry import ProviderRegistry
from autocommitter.repository.local import WorkingTreeStatus


class FakeProvider(ICommitMessageProvider):
    """
    Provider returning scripted responses in order.

    Each response is returned as-is, or raised when it is an exception.
    Once the script is exhausted the provider returns None.
    """

    def __init__(self, identity: ProviderId, responses: Sequence = (), configured: bool = True,
                 model: str = "fake-model", gate: Optional[asyncio.Event] = None):
        self._identity = identity
        self.responses = list(responses)
        self.configured = configured
        self.model = model
        self.gate = gate
        self.called = asyncio.Event()
        self.calls: List[dict] = []

    @property
    def identity(self) -> ProviderId:
        return self._identity

    @property
    def default_model(self) -> str:
        return self.model

    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, diff: str, model: Optional[str] = None) -> Optional[str]:
        self.calls.append({"diff": diff, "model": model})
        self.called.set()
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            return None
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_registry(*providers: FakeProvider, primary: Optional[ProviderId] = None,
                  backups: Optional[Sequence[ProviderId]] = None) -> ProviderRegistry:
    """Registry over fakes; primary defaults to the first provider."""
    table = {p.identity: p for p in providers}
    if primary is None and providers:
        primary = providers[0].identity
    if backups is None:
        backups = [p.identity for p in providers if p.identity != primary]
    return ProviderRegistry(table, primary=primary, backups=backups)


class FakeVersionStore:
    """In-memory version declaration; write can be held open with a gate."""

    def __init__(self, version: Optional[str] = "1.2.3", file: Optional[str] = "package.json",
                 write_result: bool = True, gate: Optional[asyncio.Event] = None,
                 error: Optional[Exception] = None):
        self.version = version
        self.file = file
        self.write_result = write_result
        self.gate = gate
        self.error = error
        self.write_started = asyncio.Event()
        self.writes: List[str] = []
        self.detect_calls = 0

    async def detect(self) -> Optional[str]:
        self.detect_calls += 1
        if self.error is not None:
            raise self.error
        return self.file

    async def read(self, file: str) -> Optional[str]:
        return self.version

    async def write(self, file: str, version: str) -> bool:
        self.write_started.set()
        if self.gate is not None:
            await self.gate.wait()
        if not self.write_result:
            return False
        self.writes.append(version)
        self.version = version
        return True


class FakeRepository:
    """Git collaborator recording every call."""

    def __init__(self, changed: Sequence[str] = ("src/app.py",), diff: str = "diff --git a/src/app.py b/src/app.py\n+fix",
                 conflicted: Sequence[str] = (), push_error: Optional[Exception] = None,
                 commit_error: Optional[Exception] = None, has_remote: bool = True):
        self.changed = list(changed)
        self.diff_text = diff
        self.conflicted = list(conflicted)
        self.push_error = push_error
        self.commit_error = commit_error
        self._has_remote = has_remote
        self.name = "repo"

        self.stage_calls = 0
        self.force_added: List[List[str]] = []
        self.commits: List[str] = []
        self.pulls = 0
        self.pushes = 0

    def has_remote(self) -> bool:
        return self._has_remote

    async def status(self) -> WorkingTreeStatus:
        return WorkingTreeStatus(modified=list(self.changed))

    async def stage_all(self) -> None:
        self.stage_calls += 1

    async def force_add(self, patterns) -> None:
        self.force_added.append(list(patterns))

    async def diff(self) -> str:
        return self.diff_text

    async def commit(self, message: str) -> str:
        if self.commit_error is not None:
            raise self.commit_error
        self.commits.append(message)
        return f"{len(self.commits):040x}"

    async def pull(self) -> List[str]:
        self.pulls += 1
        return list(self.conflicted)

    async def push(self) -> None:
        self.pushes += 1
        if self.push_error is not None:
            raise self.push_error


__all__ = [
    "FakeProvider",
    "FakeRepository",
    "FakeVersionStore",
    "make_registry",
]
