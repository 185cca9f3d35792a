"""
Conventional Commits grammar for autocommitter.

Standard format: type(scope): description

where:
- type: The kind of change (feat, fix, docs, etc.), case-insensitive
- scope: Optional context, lowercase alphanumerics, hyphens and underscores
- description: At least MIN_DESCRIPTION_LENGTH characters

This grammar is the only definition of a usable commit message; every
provider path is checked against it.
"""

import re
from enum import Enum
from typing import Optional
from dataclasses import dataclass


class CommitType(Enum):
    """Commit types accepted in a message header"""
    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    TEST = "test"
    CHORE = "chore"        # Also used for the version bump trailer
    BUILD = "build"
    CI = "ci"
    PERF = "perf"
    REVERT = "revert"


MIN_DESCRIPTION_LENGTH = 10

HEADER_PATTERN = re.compile(
    r"^(?P<type>" + "|".join(t.value for t in CommitType) + r")"
    r"(?:\((?P<scope>[a-z0-9_-]+)\))?"
    r": (?P<description>.{" + str(MIN_DESCRIPTION_LENGTH) + r",})$",
    re.IGNORECASE
)


@dataclass
class ConventionalCommit:
    """Header fields of a message that passed the grammar"""
    type: CommitType
    scope: Optional[str]
    description: str

    def format(self) -> str:
        scope = f"({self.scope})" if self.scope else ""
        return f"{self.type.value}{scope}: {self.description}"


def parse_conventional_commit(message: str) -> Optional[ConventionalCommit]:
    """
    Parse a single-line conventional commit message.

    Args:
        message: Candidate commit message (already normalized)

    Returns:
        ConventionalCommit or None if the message does not match the grammar
    """
    if not message:
        return None

    match = HEADER_PATTERN.match(message.strip())
    if not match:
        return None

    return ConventionalCommit(
        type=CommitType(match.group("type").lower()),
        scope=match.group("scope"),
        description=match.group("description")
    )
