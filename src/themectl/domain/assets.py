"""Value types flowing through the compilers.

A compiler is a function from source files to output files plus per-file
warnings. Reading and writing happen outside the compiler, so every
transform can be exercised without a filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath


@dataclass(frozen=True)
class SourceFile:
    """A file read from a glob, addressed relative to the glob's base."""

    path: PurePosixPath
    contents: bytes

    @property
    def name(self) -> str:
        return self.path.name

    def text(self) -> str:
        return self.contents.decode("utf-8")


@dataclass(frozen=True)
class OutputFile:
    """A file to write, addressed relative to its destination directory."""

    path: PurePosixPath
    contents: bytes

    @classmethod
    def from_text(cls, path: str | PurePosixPath, text: str) -> OutputFile:
        return cls(PurePosixPath(path), text.encode("utf-8"))

    def text(self) -> str:
        return self.contents.decode("utf-8")


@dataclass
class Transformed:
    """Result of one compiler pass."""

    outputs: list[OutputFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
