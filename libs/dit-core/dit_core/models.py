"""Core data models for dit."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path


class RootKind(Enum):
    """Whether a root is read from or written to."""

    READ = "read"
    WRITE = "write"


class RunResult(IntEnum):
    """Overall run outcome. Ordered so that max() escalates."""

    OK = 0
    WARN = 1
    FAIL = 2

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self]


EXIT_OK = 0
EXIT_FAIL = 1
EXIT_WARN = 2

EXIT_CODES = {
    RunResult.OK: EXIT_OK,
    RunResult.WARN: EXIT_WARN,
    RunResult.FAIL: EXIT_FAIL,
}


class ConflictKind(Enum):
    """Where a merge conflict was detected."""

    READ = "READ"
    WRITE = "WRITE"


class ErrorKind(Enum):
    """Per-path or per-root failure categories."""

    ENUMERATION = "enumeration"  # directory unreadable; fatal
    STAT = "stat"  # file vanished between listing and stat
    HASH = "hash"  # file unreadable while deciding a read group
    CLASH = "clash"  # file in one root, directory in another
    COPY = "copy"  # destination write failed
    INTERNAL = "internal"  # unexpected failure in a worker


class WriteAction(Enum):
    """Decision for one (output item, write root) pair."""

    COPY = "copy"
    SKIP = "skip"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Root:
    """A read or write directory, with its position in the configured order."""

    path: Path
    kind: RootKind
    index: int

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class FileVariant:
    """One copy of a relative path found under one read root."""

    root: Root
    relpath: str
    size: int
    digest: str | None = None

    @property
    def path(self) -> Path:
        return self.root.path / self.relpath


@dataclass(frozen=True)
class ReadGroup:
    """All variants of one relative path, in read root order."""

    relpath: str
    variants: tuple[FileVariant, ...]


@dataclass(frozen=True)
class OutputItem:
    """A file to deliver to every write root."""

    relpath: str
    source: FileVariant
    is_conflict_variant: bool = False


@dataclass(frozen=True)
class ConflictRecord:
    """A read or write merge conflict, kept for reporting."""

    kind: ConflictKind
    relpath: str
    participants: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ErrorRecord:
    """A failure tied to a path (or a whole root)."""

    kind: ErrorKind
    relpath: str
    message: str
    severity: RunResult


@dataclass(frozen=True)
class WriteDecision:
    """What happens to one output item at one write root."""

    action: WriteAction
    item: OutputItem
    write_root: Root
    dest_relpath: str
    copy_needed: bool

    @property
    def dest_path(self) -> Path:
        return self.write_root.path / self.dest_relpath
