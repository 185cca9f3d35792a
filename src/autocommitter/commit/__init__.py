"""
Commit message validation, provider failover and the commit pipeline.

**Main Components:**
- **conventional**: Conventional commits grammar and parsing
- **validator**: Normalization and validation of provider output
- **failover**: Ranked provider attempts with a simplified last resort
- **pipeline**: status -> stage -> diff -> message -> bump -> commit -> push
"""

from .conventional import (
    CommitType,
    ConventionalCommit,
    parse_conventional_commit,
)

from .validator import (
    ValidationResult,
    normalize_candidate,
    validate_commit_message,
    is_valid_commit_message,
)

from .failover import FailoverAttempt, FailoverOrchestrator, FailoverResult

from .pipeline import CommitPipeline, PipelineResult, PipelineStatus

__all__ = [
    # Conventional commits
    "CommitType",
    "ConventionalCommit",
    "parse_conventional_commit",
    # Validation
    "ValidationResult",
    "normalize_candidate",
    "validate_commit_message",
    "is_valid_commit_message",
    # Failover
    "FailoverAttempt",
    "FailoverOrchestrator",
    "FailoverResult",
    # Pipeline
    "CommitPipeline",
    "PipelineResult",
    "PipelineStatus",
]
