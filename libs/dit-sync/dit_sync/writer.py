"""Write-side reconciliation: what to do with an output item at one write root."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from dit_core.errors import CopyError
from dit_core.models import OutputItem, Root, WriteAction, WriteDecision

from dit_sync.conflict import MIN_WIDTH, write_conflict_path

logger = logging.getLogger(__name__)

# an occupant whose size can't be compared (unreadable metadata, directory)
UNKNOWN_SIZE = -1


def occupant_size(path: Path) -> int | None:
    """Size of the regular file at ``path``; None if nothing is there."""
    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError:
        # exists but metadata is unreadable: assume the worst
        return UNKNOWN_SIZE
    if not stat.S_ISREG(st.st_mode):
        return UNKNOWN_SIZE
    return st.st_size


def max_write_conflicts(width: int) -> int:
    """Highest write conflict ordinal that still fits in ``width`` digits."""
    return 10**width - 1


def decide_write(item: OutputItem, write_root: Root, width: int = MIN_WIDTH) -> WriteDecision:
    """
    Compare ``item`` with whatever already sits at its destination.

    - nothing there: copy
    - same size: already synced, skip (content is not re-hashed)
    - different size: write merge conflict; the item goes to the first
      WRITE_MERGE_CONFLICT slot that is free or already holds a file of the
      item's size, and the occupant is left untouched

    Raises:
        CopyError: if every conflict slot is taken by a file of another size.
    """
    size = item.source.size
    existing = occupant_size(write_root.path / item.relpath)

    if existing is None:
        return WriteDecision(WriteAction.COPY, item, write_root, item.relpath, copy_needed=True)
    if existing == size:
        logger.debug(f"Already synced: {write_root.path / item.relpath}")
        return WriteDecision(WriteAction.SKIP, item, write_root, item.relpath, copy_needed=False)

    # capped so every slot name has the same padding
    for ordinal in range(1, max_write_conflicts(width) + 1):
        candidate = write_conflict_path(item.relpath, ordinal, width)
        slot = occupant_size(write_root.path / candidate)
        if slot is None:
            return WriteDecision(WriteAction.CONFLICT, item, write_root, candidate, copy_needed=True)
        if slot == size:
            return WriteDecision(WriteAction.CONFLICT, item, write_root, candidate, copy_needed=False)
    raise CopyError(f"no free conflict name for '{write_root.path / item.relpath}'")
