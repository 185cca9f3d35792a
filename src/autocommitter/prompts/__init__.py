"""
Prompt templates for commit message generation.
"""

from .builder import build_commit_prompt, simplify_diff, SIMPLIFIED_DIFF_LINES

__all__ = [
    "build_commit_prompt",
    "simplify_diff",
    "SIMPLIFIED_DIFF_LINES",
]
