"""
Version declaration files in the repository root.

VersionFileStore is the concrete VersionStore used by the server. It detects
the well-known manifest of each build ecosystem and reads/writes its version
field with a format-specific rule (JSON documents are parsed, everything
else is matched with a regular expression so formatting is preserved).
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

# Detection order; the first file with a readable version is the source of truth
VERSION_FILES = [
    "package.json",        # Node.js
    "package-lock.json",   # npm lock file
    "pyproject.toml",      # Python
    "build.gradle",        # Gradle
    "pom.xml",             # Maven
    "Cargo.toml",          # Rust
    "composer.json",       # PHP
    "project.clj",         # Clojure
    "*.csproj",            # .NET
    "setup.py",            # Python
    "version.txt",         # Generic
    "VERSION",             # Generic
    "wxt.config.ts",       # WXT TypeScript configuration
    "wxt.config.js",       # WXT JavaScript configuration
]

PACKAGE_JSON = "package.json"
PACKAGE_LOCK = "package-lock.json"


class RegexVersionFormat:
    """Reads and rewrites the first version captured by a pattern"""

    def __init__(self, pattern: str, flags: int = 0):
        # Groups: prefix, version, suffix
        self.pattern = re.compile(pattern, flags)

    def read(self, content: str) -> Optional[str]:
        match = self.pattern.search(content)
        return match.group(2) if match else None

    def update(self, content: str, version: str) -> str:
        return self.pattern.sub(
            lambda m: f"{m.group(1)}{version}{m.group(3)}",
            content,
            count=1
        )


class JsonVersionFormat:
    """Top-level "version" key of a JSON document"""

    def read(self, content: str) -> Optional[str]:
        data = json.loads(content)
        version = data.get("version") if isinstance(data, dict) else None
        return str(version) if version else None

    def update(self, content: str, version: str) -> str:
        data = json.loads(content)
        data["version"] = version
        return _dump_json(data, content)


class PackageLockFormat(JsonVersionFormat):
    """package-lock.json keeps the root package version in two places"""

    def update(self, content: str, version: str) -> str:
        data = json.loads(content)
        root_package = data.get("packages", {}).get("")
        if isinstance(root_package, dict):
            root_package["version"] = version
        if "version" in data:
            data["version"] = version
        return _dump_json(data, content)


class PlainTextFormat:
    """The whole file is the version"""

    def read(self, content: str) -> Optional[str]:
        return content.strip() or None

    def update(self, content: str, version: str) -> str:
        return version + ("\n" if content.endswith("\n") else "")


ASSIGNMENT = r"""(version\s*=\s*["'])([^"']+)(["'])"""

# Format per file suffix
FORMATS: Dict[str, object] = {
    ".json": JsonVersionFormat(),
    ".toml": RegexVersionFormat(ASSIGNMENT),
    ".gradle": RegexVersionFormat(ASSIGNMENT),
    ".py": RegexVersionFormat(ASSIGNMENT),
    ".xml": RegexVersionFormat(r"(<version>)([^<]+)(</version>)"),
    ".csproj": RegexVersionFormat(r"(<Version>)([^<]+)(</Version>)", re.IGNORECASE),
    ".clj": RegexVersionFormat(r"""(\(defproject\s+\S+\s+")([^"]+)(")"""),
    ".yaml": RegexVersionFormat(r"""(version:\s*["']?)([^"'\s]+)(["']?)"""),
    ".yml": RegexVersionFormat(r"""(version:\s*["']?)([^"'\s]+)(["']?)"""),
    ".ts": RegexVersionFormat(r"""(version:\s*["'])([^"']+)(["'])"""),
    ".js": RegexVersionFormat(r"""(version:\s*["'])([^"']+)(["'])"""),
    ".txt": PlainTextFormat(),
    "": PlainTextFormat(),
}


def is_version_file(path: Union[str, Path]) -> bool:
    """
    Check whether a path names a known version declaration file.

    Only the file name is considered, so nested paths match too.
    """
    name = Path(path).name
    for pattern in VERSION_FILES:
        if pattern.startswith("*."):
            if name.endswith(pattern[1:]):
                return True
        elif name == pattern:
            return True
    return False


def _format_for(file: str):
    if file == PACKAGE_LOCK:
        return PackageLockFormat()
    return FORMATS.get(Path(file).suffix)


def _dump_json(data, original: str) -> str:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    return text + "\n" if original.endswith("\n") else text


class VersionFileStore:
    """
    VersionStore over the files in a repository root.

    Example:
        store = VersionFileStore("/path/to/repo")
        file = await store.detect()           # e.g. "package.json"
        current = await store.read(file)      # e.g. "1.2.3"
        await store.write(file, "1.2.4")      # package-lock.json follows
    """

    def __init__(self, repo_path: Union[str, Path]):
        self.repo_path = Path(repo_path)

    def detect_all(self) -> List[str]:
        """All version files present in the repository root, in detection order"""
        detected: List[str] = []
        if not self.repo_path.is_dir():
            return detected

        for pattern in VERSION_FILES:
            if pattern.startswith("*."):
                detected.extend(sorted(
                    entry.name for entry in self.repo_path.iterdir()
                    if entry.is_file() and entry.name.endswith(pattern[1:])
                ))
            elif (self.repo_path / pattern).is_file():
                detected.append(pattern)
        return detected

    def read_sync(self, file: str) -> Optional[str]:
        """Read the version declared in a file (None if absent or unparsable)"""
        fmt = _format_for(file)
        path = self.repo_path / file
        if fmt is None or not path.is_file():
            return None

        try:
            return fmt.read(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not parse version from {file}: {e}")
            return None

    def write_sync(self, file: str, version: str) -> bool:
        """
        Write a version into a file.

        Writing package.json also updates package-lock.json when present.

        Returns:
            True if the file now declares the version
        """
        if not self._write_one(file, version):
            return False

        if file == PACKAGE_JSON and (self.repo_path / PACKAGE_LOCK).is_file():
            if not self._write_one(PACKAGE_LOCK, version):
                logger.warning(f"Updated {file} but not {PACKAGE_LOCK}")

        return True

    def _write_one(self, file: str, version: str) -> bool:
        fmt = _format_for(file)
        path = self.repo_path / file
        if fmt is None or not path.is_file():
            logger.warning(f"Unsupported or missing version file: {file}")
            return False

        try:
            old_content = path.read_text(encoding="utf-8")
            new_content = fmt.update(old_content, version)
            if new_content != old_content:
                path.write_text(new_content, encoding="utf-8")
                logger.info(f"Wrote version {version} to {file}")
            return fmt.read(new_content) == version
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write version to {file}: {e}")
            return False

    async def detect(self) -> Optional[str]:
        """First detected version file with a readable version"""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._detect_sync)

    def _detect_sync(self) -> Optional[str]:
        for file in self.detect_all():
            if self.read_sync(file):
                return file
        return None

    async def read(self, file: str) -> Optional[str]:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.read_sync, file)

    async def write(self, file: str, version: str) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.write_sync, file, version)
