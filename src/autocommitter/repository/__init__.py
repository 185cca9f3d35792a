"""
Git collaborator: working tree status, staging, commit and pull/push.
"""

from .file_operations import GitOperationError, PushRejectedError, safe_pull, safe_push
from .ignore_rules import IgnoreRules
from .local import LocalRepository, WorkingTreeStatus, parse_porcelain_status

__all__ = [
    "GitOperationError",
    "PushRejectedError",
    "safe_pull",
    "safe_push",
    "IgnoreRules",
    "LocalRepository",
    "WorkingTreeStatus",
    "parse_porcelain_status",
]
