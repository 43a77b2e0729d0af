"""Glob reading, output writing, and tree operations.

Globs are node-glob compatible via wcmatch: ``**`` spans directories,
``{a,b}`` expands, and a leading ``!`` excludes. Files are returned relative
to the glob base, the longest leading part of the first positive pattern
that contains no magic characters. Source and destination keep the same
relative layout.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath

from wcmatch import glob

from themectl.domain.assets import OutputFile, SourceFile

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.NEGATE

_MAGIC = frozenset("*?[]{}!")


def _as_patterns(patterns: str | Sequence[str]) -> list[str]:
    return [patterns] if isinstance(patterns, str) else list(patterns)


def glob_base(patterns: str | Sequence[str]) -> PurePosixPath:
    """Non-magic prefix of the first positive pattern.

    Examples:
        >>> glob_base("themes/a/javascripts/**/*.js")
        PurePosixPath('themes/a/javascripts')
        >>> glob_base("themes/a/functions.php")
        PurePosixPath('themes/a')
    """
    positive = [p for p in _as_patterns(patterns) if not p.startswith("!")]
    if not positive:
        return PurePosixPath(".")
    parts = PurePosixPath(positive[0]).parts
    base: list[str] = []
    for part in parts[:-1]:
        if _MAGIC.intersection(part):
            break
        base.append(part)
    return PurePosixPath(*base) if base else PurePosixPath(".")


def match_paths(root: Path, patterns: str | Sequence[str]) -> list[PurePosixPath]:
    """Sorted project-relative paths of the *files* matching *patterns*."""
    matches = glob.glob(_as_patterns(patterns), flags=GLOB_FLAGS, root_dir=str(root))
    return sorted(PurePosixPath(m) for m in matches if (root / m).is_file())


def path_matches(path: str | PurePosixPath, patterns: str | Sequence[str]) -> bool:
    """Whether the project-relative *path* is selected by *patterns*."""
    return glob.globmatch(str(path), _as_patterns(patterns), flags=GLOB_FLAGS)


def read_glob(root: Path, patterns: str | Sequence[str]) -> list[SourceFile]:
    """Read every file matching *patterns*, addressed relative to the glob base."""
    base = glob_base(patterns)
    return [
        SourceFile(path=rel.relative_to(base), contents=(root / rel).read_bytes())
        for rel in match_paths(root, patterns)
    ]


def write_outputs(destination: Path, outputs: Iterable[OutputFile]) -> list[Path]:
    """Write *outputs* under *destination*, creating parent directories.

    Returns the absolute paths written, in order.
    """
    written: list[Path] = []
    for output in outputs:
        target = destination / output.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(output.contents)
        written.append(target)
    return written


def copy_tree(source: Path, destination: Path) -> int:
    """Copy the contents of *source* into *destination*; returns the file count."""
    shutil.copytree(source, destination, dirs_exist_ok=True)
    return sum(1 for p in source.rglob("*") if p.is_file())


def remove_trees(paths: Iterable[Path]) -> list[Path]:
    """Recursively delete each existing path; returns the ones removed."""
    removed: list[Path] = []
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()
        else:
            continue
        removed.append(path)
    return removed
