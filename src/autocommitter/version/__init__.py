"""
Version bumping: increment algorithm, re-entrancy guard and version files.
"""

from .coordinator import (
    IncrementKind,
    VersionCoordinator,
    VersionStore,
    increment_version,
)
from .files import VersionFileStore, is_version_file, VERSION_FILES

__all__ = [
    "IncrementKind",
    "VersionCoordinator",
    "VersionStore",
    "increment_version",
    "VersionFileStore",
    "is_version_file",
    "VERSION_FILES",
]
