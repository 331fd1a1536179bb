"""Filesystem helpers: root validation and relative path utilities."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from dit_core.errors import RootError
from dit_core.models import Root, RootKind

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    """Hidden entries (dot-files and dot-directories) are never enumerated."""
    return name.startswith(".")


def relpath_key(relpath: str) -> tuple[str, ...]:
    """Sort key matching the depth-first, name-sorted enumeration order."""
    return tuple(relpath.split("/"))


def strip_trailing_slash(path: str) -> str:
    """Drop a trailing slash, keeping '/' itself so it can be rejected later."""
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


def _is_within(child: Path, parent: Path) -> bool:
    return child == parent or parent in child.parents


def ensure_valid_roots(
    read_paths: Sequence[Path],
    write_paths: Sequence[Path],
    *,
    create_missing: bool = True,
) -> tuple[list[Root], list[Root]]:
    """
    Validate read/write paths and return them as Roots.

    Read paths must exist and be directories. Write paths that exist must be
    directories; missing ones are created (non-recursively) unless
    ``create_missing`` is false. '/' is refused for both, as is any path
    given twice or a read/write pair where one contains the other.

    Raises:
        RootError: describing the first problem found.
    """
    if not read_paths:
        raise RootError("must have at least one read path")
    if not write_paths:
        raise RootError("must have at least one write path")

    for read_path in read_paths:
        if str(read_path) == "/":
            raise RootError("can not use '/' as read path")
        if not read_path.exists():
            raise RootError(f"read path does not exist: '{read_path}'")
        if not read_path.is_dir():
            raise RootError(f"read path is not a directory: '{read_path}'")

    for write_path in write_paths:
        if str(write_path) == "/":
            raise RootError("can not use '/' as write path")
        if write_path.exists() and not write_path.is_dir():
            raise RootError(f"write path exists, but is not a directory: '{write_path}'")

    # resolve() does not need the path to exist; nothing is created before these checks
    resolved = [(p.resolve(), kind) for p, kind in _tagged(read_paths, write_paths)]
    for i, (a, kind_a) in enumerate(resolved):
        for b, kind_b in resolved[i + 1 :]:
            if a == b:
                raise RootError(f"path given more than once: '{a}'")
            if kind_a != kind_b and (_is_within(a, b) or _is_within(b, a)):
                raise RootError(f"read and write paths overlap: '{a}' and '{b}'")

    if create_missing:
        for write_path in write_paths:
            if write_path.exists():
                continue
            try:
                write_path.mkdir()
            except OSError as e:
                raise RootError(f"could not create directory: '{write_path}': {e}") from e
            logger.info(f"Created write path: {write_path}")

    reads = [Root(path=p.resolve(), kind=RootKind.READ, index=i) for i, p in enumerate(read_paths)]
    writes = [Root(path=p.resolve(), kind=RootKind.WRITE, index=i) for i, p in enumerate(write_paths)]
    return reads, writes


def _tagged(read_paths: Sequence[Path], write_paths: Sequence[Path]):
    for p in read_paths:
        yield p, RootKind.READ
    for p in write_paths:
        yield p, RootKind.WRITE
