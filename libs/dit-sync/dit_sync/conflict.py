"""Conflict file naming.

Conflicting variants are written next to the original under names like::

    photo.jpg -> photo.__READ_MERGE_CONFLICT__01.jpg
                 photo.__READ_MERGE_CONFLICT__02.jpg
    photo.jpg -> photo.__WRITE_MERGE_CONFLICT__01.jpg

The ordinal is zero-padded to a width fixed for the whole run, so sorting
the names alphabetically gives the variant order. The extension is kept so
other tools still recognize the file type.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from dit_core.models import ConflictKind

MIN_WIDTH = 2


def conflict_width(num_read_roots: int) -> int:
    """Ordinal width large enough for one variant per read root."""
    return max(MIN_WIDTH, len(str(num_read_roots)))


def conflict_token(kind: ConflictKind, ordinal: int, width: int = MIN_WIDTH) -> str:
    if ordinal < 1:
        raise ValueError(f"conflict ordinal must be >= 1, got {ordinal}")
    return f"__{kind.value}_MERGE_CONFLICT__{ordinal:0{width}d}"


def conflict_path(relpath: str, kind: ConflictKind, ordinal: int, width: int = MIN_WIDTH) -> str:
    """Insert the conflict token between the file stem and its extension."""
    p = PurePosixPath(relpath)
    name = f"{p.stem}.{conflict_token(kind, ordinal, width)}{p.suffix}"
    return str(p.with_name(name))


def read_conflict_paths(relpath: str, count: int, width: int = MIN_WIDTH) -> list[str]:
    """Names for ``count`` divergent read variants, in variant order."""
    if count < 2:
        raise ValueError(f"a read merge conflict needs at least 2 variants, got {count}")
    return [conflict_path(relpath, ConflictKind.READ, i, width) for i in range(1, count + 1)]


def write_conflict_path(relpath: str, ordinal: int = 1, width: int = MIN_WIDTH) -> str:
    return conflict_path(relpath, ConflictKind.WRITE, ordinal, width)
