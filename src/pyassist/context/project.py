"""Project type and workspace name detection."""

from __future__ import annotations

import fnmatch
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from ..utils.logging_config import get_logger

# Checked in order; the first marker present wins.
PROJECT_MARKERS: tuple[tuple[str, str], ...] = (
    ("package.json", "node"),
    ("requirements.txt", "python"),
    ("pom.xml", "java-maven"),
    ("build.gradle", "java-gradle"),
    ("Cargo.toml", "rust"),
    ("go.mod", "go"),
    ("*.csproj", "dotnet"),
)

UNKNOWN = "unknown"


async def detect_project_type(
    root: Path | None,
    exists: Callable[[Path], Awaitable[bool]],
    list_directory: Callable[[Path], Awaitable[list[tuple[str, bool]]]],
) -> str:
    """
    Classify the project rooted at ``root`` by its marker files.

    Glob markers are matched against the root's directory listing. Lookups
    that fail count as "marker absent".
    """
    if root is None:
        return UNKNOWN

    listing: list[str] | None = None
    for marker, project_type in PROJECT_MARKERS:
        if any(ch in marker for ch in "*?["):
            if listing is None:
                try:
                    listing = [name for name, is_file in await list_directory(root) if is_file]
                except Exception as e:
                    get_logger().debug(f"Could not list {root}: {e}")
                    listing = []
            if any(fnmatch.fnmatchcase(name, marker) for name in listing):
                return project_type
            continue

        try:
            if await exists(root / marker):
                return project_type
        except Exception as e:
            get_logger().debug(f"Marker check failed for {root / marker}: {e}")
            continue

    return UNKNOWN


def workspace_name(folders: Sequence[Path]) -> str:
    return folders[0].name if folders else UNKNOWN
