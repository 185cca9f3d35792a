"""
Prompt construction for commit message generation.
"""

# Lines of diff kept for the degraded last-resort prompt
SIMPLIFIED_DIFF_LINES = 50

COMMIT_PROMPT_TEMPLATE = (
    "Generate a concise commit message for the following git diff. "
    "Use conventional commit format (type(scope): description). "
    "Keep it short and descriptive. Focus on the code changes. "
    "Do not mention version bumps or lockfile updates unless they are the ONLY changes. "
    "If you must mention them, put them at the very end. "
    "Do not include any other text, explanation, or prefixes like 'commit:' or 'text:'. "
    "Output ONLY the commit message itself. Here's the diff:\n\n{diff}"
)


def build_commit_prompt(diff: str) -> str:
    """Build the user prompt sent to every provider."""
    return COMMIT_PROMPT_TEMPLATE.format(diff=diff)


def simplify_diff(diff: str, max_lines: int = SIMPLIFIED_DIFF_LINES) -> str:
    """
    Truncate a diff to its first lines for the simplified fallback attempt.

    Args:
        diff: Full diff text
        max_lines: Number of leading lines to keep

    Returns:
        The truncated diff
    """
    return "\n".join(diff.split("\n")[:max_lines])
