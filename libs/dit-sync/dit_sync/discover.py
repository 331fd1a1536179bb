"""Recursive listing of the files under a read root."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

from dit_core.errors import EnumerationError
from dit_core.fsutil import is_hidden
from dit_core.models import Root

logger = logging.getLogger(__name__)


class RootListing:
    """
    Restartable, lazy listing of the relative paths of every non-hidden file
    under a root.

    Each ``iter()`` walks the tree again. Entries are visited sorted by name,
    depth first, so paths come out ordered by ``relpath_key``. Hidden files
    and directories are skipped without descending. Symlinked files are
    listed; symlinked directories are not followed.
    """

    def __init__(self, root: Root):
        self.root = root

    def __iter__(self) -> Iterator[str]:
        return self._walk("")

    def _walk(self, sub_path: str) -> Iterator[str]:
        directory = self.root.path / sub_path if sub_path else self.root.path
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise EnumerationError(
                f"could not read directory: '{directory}': {e.strerror or e}", relpath=sub_path
            ) from e

        for entry in entries:
            if is_hidden(entry.name):
                continue
            relpath = f"{sub_path}/{entry.name}" if sub_path else entry.name
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(relpath)
            elif entry.is_file():
                yield relpath
            else:
                logger.debug(f"Skipping non-regular entry: {entry.path}")
