"""
Commit message normalization and validation.

Provider output is normalized (quotes, newlines, code fences and
hallucinated prefixes removed) and then checked against the conventional
commit grammar in `conventional.py`.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .conventional import (
    CommitType,
    ConventionalCommit,
    MIN_DESCRIPTION_LENGTH,
    parse_conventional_commit
)

QUOTES_AND_NEWLINES = re.compile(r"[\"'\n\r]+")
CODE_FENCE = re.compile(r"```[a-zA-Z]*|`")
HALLUCINATED_PREFIX = re.compile(r"^(?:text|commit|git|output)\s*:\s*", re.IGNORECASE)
TYPE_PREFIX = re.compile(r"^([a-zA-Z]+)(\([^)]*\))?:")


@dataclass
class ValidationResult:
    """Result of commit message validation."""

    valid: bool
    reason: Optional[str] = None
    parsed_commit: Optional[ConventionalCommit] = None


def normalize_candidate(text: Optional[str]) -> str:
    """
    Normalize raw provider output into a single-line candidate.

    Args:
        text: Raw text returned by a provider

    Returns:
        Normalized candidate (possibly empty)
    """
    if not text:
        return ""

    cleaned = CODE_FENCE.sub(" ", text)
    cleaned = QUOTES_AND_NEWLINES.sub(" ", cleaned).strip()
    cleaned = HALLUCINATED_PREFIX.sub("", cleaned)
    return re.sub(r"\s{2,}", " ", cleaned).strip()


def validate_commit_message(message: Optional[str]) -> ValidationResult:
    """
    Validate a commit message against the conventional commit grammar.

    Args:
        message: Candidate message

    Returns:
        ValidationResult with the rejection reason when invalid
    """
    if not message or not message.strip():
        return ValidationResult(valid=False, reason="Empty response")

    parsed = parse_conventional_commit(message)
    if parsed:
        return ValidationResult(valid=True, parsed_commit=parsed)

    return ValidationResult(valid=False, reason=_explain_rejection(message.strip()))


def is_valid_commit_message(message: Optional[str]) -> bool:
    """
    Quick check if message follows conventional commit format.

    Args:
        message: Commit message to check

    Returns:
        True if valid conventional commit
    """
    return validate_commit_message(message).valid


def _explain_rejection(message: str) -> str:
    if "\n" in message or "\r" in message:
        return "Invalid message format: message spans multiple lines"

    prefix = TYPE_PREFIX.match(message)
    if not prefix:
        return "Invalid message format: missing 'type: ' prefix"

    known_types = {t.value for t in CommitType}
    if prefix.group(1).lower() not in known_types:
        return f"Invalid message format: unknown type '{prefix.group(1)}'"

    scope = prefix.group(2)
    if scope and not re.fullmatch(r"\([a-z0-9_-]+\)", scope, re.IGNORECASE):
        return f"Invalid message format: bad scope {scope}"

    description = message[prefix.end():]
    if not description.startswith(" "):
        return "Invalid message format: expected ': ' after type"

    return (
        f"Invalid message format: description shorter than "
        f"{MIN_DESCRIPTION_LENGTH} characters"
    )
