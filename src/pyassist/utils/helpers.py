"""
File and text helpers shared by the workspace, context and search packages.

Key Functions:
    read_text_safely: Size-bounded text read with encoding fallbacks
    build_pathspec: Compile include/exclude glob lists into ``pathspec`` specs
    matches_patterns: Test one path against a glob list
    iter_files: Walk workspace folders with directory pruning
    split_lines: Line splitting that drops line terminators

Example:
    >>> from pathlib import Path
    >>> from pyassist.utils.helpers import iter_files
    >>> for path in iter_files([Path(".")], ["**/*.py"], ["**/.venv/**"]):
    ...     print(path)
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from functools import lru_cache
from pathlib import Path

import pathspec

from ..analysis.language_detection import is_text_file

_ENCODINGS = ("utf-8", "utf-8-sig", "latin-1", "cp1252")


def read_text_safely(path: Path, max_bytes: int = 2_000_000) -> str | None:
    """
    Read a text file, returning None for binary, oversized or unreadable files.

    ``OSError`` is propagated so callers can classify the failure; only
    content problems (binary data, size) are reported as None.
    """
    if not is_text_file(path):
        return None

    size = path.stat().st_size
    if size > max_bytes:
        return None

    raw = path.read_bytes()
    for enc in _ENCODINGS:
        try:
            content = raw.decode(enc)
        except UnicodeDecodeError:
            continue
        if _is_likely_text_content(content):
            return content
        return None

    return raw.decode("utf-8", errors="ignore")


def _is_likely_text_content(content: str) -> bool:
    """Check if content appears to be text (not binary)."""
    if not content:
        return True
    if "\x00" in content:
        return False
    sample = content[:8192]
    printable = sum(1 for c in sample if c.isprintable() or c.isspace())
    return printable / len(sample) > 0.7


@lru_cache(maxsize=128)
def _compile_spec(patterns: tuple[str, ...]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def build_pathspec(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[pathspec.PathSpec, pathspec.PathSpec]:
    inc = _compile_spec(tuple(include or ("**/*",)))
    exc = _compile_spec(tuple(exclude or ()))
    return inc, exc


def matches_patterns(path: Path | str, patterns: Sequence[str], root: Path | None = None) -> bool:
    """Return True if the path matches any of the gitwildmatch patterns.

    The path is matched relative to ``root`` when it lies inside it, otherwise
    as given.
    """
    if not patterns:
        return False
    return _compile_spec(tuple(patterns)).match_file(_match_key(Path(path), root))


def _match_key(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def iter_files(
    roots: Iterable[Path | str],
    include: Sequence[str] | None,
    exclude: Sequence[str] | None,
    follow_symlinks: bool = False,
    *,
    limit: int | None = None,
) -> Iterator[Path]:
    """
    Walk ``roots`` yielding files accepted by ``include`` and not ``exclude``.

    Excluded directories are pruned in place so their subtrees are never
    visited. Matching is done on the root-relative POSIX path.
    """
    inc, exc = build_pathspec(include, exclude)
    yielded = 0
    for root in roots:
        root_path = Path(root)
        if not root_path.is_dir():
            continue

        for dirpath, dirnames, filenames in os.walk(root_path, followlinks=follow_symlinks):
            base = Path(dirpath)
            rel_base = base.relative_to(root_path).as_posix()
            prefix = "" if rel_base == "." else rel_base + "/"

            # prune excluded subtrees
            dirnames[:] = sorted(
                d for d in dirnames if not exc.match_file(f"{prefix}{d}/")
            )

            for name in sorted(filenames):
                rel = f"{prefix}{name}"
                if not inc.match_file(rel) or exc.match_file(rel):
                    continue
                yield base / name
                yielded += 1
                if limit is not None and yielded >= limit:
                    return


def split_lines(text: str) -> list[str]:
    """
    Split text on ``\\n`` the way editors number lines, dropping a trailing ``\\r``.

    Form feeds, vertical tabs and Unicode separators stay inside their line.
    """
    if not text:
        return []
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
