"""
.gitignore / .gitattributes maintenance.

Configured ignore patterns are appended to .gitignore under a marker
header, except patterns that .gitattributes tracks (those files are meant to
be committed, and with smart gitignore they are force-added). Configured
attribute patterns are appended to .gitattributes the same way.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Union

logger = logging.getLogger(__name__)

GITIGNORE = ".gitignore"
GITATTRIBUTES = ".gitattributes"
GITIGNORE_HEADER = "# Auto-committer ignored files"
GITATTRIBUTES_HEADER = "# Auto-committer gitattributes"


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def _append_block(content: str, header: str, patterns: List[str]) -> str:
    prefix = "" if not content or content.endswith("\n") else "\n"
    header_line = "" if header in content else f"\n{header}\n"
    return content + prefix + header_line + "\n".join(patterns) + "\n"


class IgnoreRules:
    """
    Keeps .gitignore and .gitattributes in line with configuration.

    Args:
        repo_path: Working tree root
        ignored_patterns: Patterns to ensure in .gitignore
        gitattributes_patterns: Patterns to ensure in .gitattributes
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        ignored_patterns: Iterable[str] = (),
        gitattributes_patterns: Iterable[str] = ()
    ):
        self.repo_path = Path(repo_path)
        self.ignored_patterns = [p.strip() for p in ignored_patterns if p.strip()]
        self.gitattributes_patterns = [p.strip() for p in gitattributes_patterns if p.strip()]

    def attributed_patterns(self) -> List[str]:
        """
        Configured attribute patterns plus the path patterns already listed
        in .gitattributes (first token of each non-comment line).
        """
        patterns = list(self.gitattributes_patterns)
        for line in _read(self.repo_path / GITATTRIBUTES).splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            pattern = stripped.split()[0]
            if pattern not in patterns:
                patterns.append(pattern)
        return patterns

    def update_gitignore(self) -> bool:
        """Append missing ignore patterns; returns whether the file changed"""
        if not self.ignored_patterns:
            return False

        path = self.repo_path / GITIGNORE
        content = _read(path)
        existing = {line.strip() for line in content.splitlines()}
        attributed = set(self.attributed_patterns())

        to_add = [
            p for p in self.ignored_patterns
            if p not in existing and p not in attributed
        ]
        if not to_add:
            return False

        path.write_text(_append_block(content, GITIGNORE_HEADER, to_add), encoding="utf-8")
        logger.info(f"Added {len(to_add)} pattern(s) to {GITIGNORE}")
        return True

    def update_gitattributes(self) -> bool:
        """Append missing attribute patterns; returns whether the file changed"""
        if not self.gitattributes_patterns:
            return False

        path = self.repo_path / GITATTRIBUTES
        content = _read(path)
        existing = {line.strip() for line in content.splitlines()}

        to_add = [p for p in self.gitattributes_patterns if p not in existing]
        if not to_add:
            return False

        path.write_text(_append_block(content, GITATTRIBUTES_HEADER, to_add), encoding="utf-8")
        logger.info(f"Added {len(to_add)} pattern(s) to {GITATTRIBUTES}")
        return True

    def apply_sync(self) -> List[str]:
        """Update both files; a file that cannot be read or written is skipped"""
        changed = []
        for name, update in ((GITIGNORE, self.update_gitignore), (GITATTRIBUTES, self.update_gitattributes)):
            try:
                if update():
                    changed.append(name)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to update {name}: {e}")
        return changed

    async def apply(self) -> List[str]:
        """
        Update both files.

        Returns:
            Names of the files that changed
        """
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.apply_sync)
