"""Read-side reconciliation: group files by relative path across read roots
and decide whether the copies agree."""

from __future__ import annotations

import heapq
import itertools
import logging
import os
from collections import Counter
from collections.abc import Iterator, Sequence
from dataclasses import replace

from dit_core.digest import hash_file
from dit_core.errors import HashError
from dit_core.fsutil import relpath_key
from dit_core.models import (
    ConflictKind,
    ConflictRecord,
    ErrorKind,
    ErrorRecord,
    FileVariant,
    OutputItem,
    ReadGroup,
    Root,
    RunResult,
)

from dit_sync.conflict import conflict_width, read_conflict_paths
from dit_sync.discover import RootListing
from dit_sync.result import ResultAggregator

logger = logging.getLogger(__name__)


class ReadReconciler:
    """Merges the listings of all read roots and resolves each path."""

    def __init__(
        self,
        read_roots: Sequence[Root],
        result: ResultAggregator,
        *,
        width: int | None = None,
    ):
        self.read_roots = list(read_roots)
        self.result = result
        self.width = width if width is not None else conflict_width(len(self.read_roots))

    # ---- grouping ----------------------------------------------------------
    def groups(self) -> Iterator[ReadGroup]:
        """
        Yield one ReadGroup per relative path, in enumeration order.

        The per-root listings are merged as sorted streams, so a group is
        complete as soon as every listing has moved past its path. A path that
        is a file in one root but a directory in another is reported as a
        clash and not yielded.

        Raises:
            EnumerationError: if a directory under any read root is unreadable.
        """
        streams = [self._keyed(RootListing(root)) for root in self.read_roots]
        merged = heapq.merge(*streams, key=lambda entry: entry[0])

        pending: tuple[tuple[str, ...], str, list[Root]] | None = None
        for key, entries in itertools.groupby(merged, key=lambda entry: entry[0]):
            entries = list(entries)
            relpath = entries[0][1]
            roots = sorted((entry[2] for entry in entries), key=lambda r: r.index)

            if pending is not None:
                pending_key = pending[0]
                if key[: len(pending_key)] == pending_key:
                    # pending path is a file here and a directory elsewhere
                    self._record_clash(pending[1], pending[2])
                else:
                    group = self._collect(pending[1], pending[2])
                    if group is not None:
                        yield group
            pending = (key, relpath, roots)

        if pending is not None:
            group = self._collect(pending[1], pending[2])
            if group is not None:
                yield group

    @staticmethod
    def _keyed(listing: RootListing):
        for relpath in listing:
            yield relpath_key(relpath), relpath, listing.root

    def _collect(self, relpath: str, roots: list[Root]) -> ReadGroup | None:
        """Stat each copy; copies that vanished since listing are dropped with a warning."""
        variants = []
        for root in roots:
            try:
                size = os.stat(root.path / relpath).st_size
            except OSError as e:
                self.result.record_error(
                    ErrorRecord(
                        kind=ErrorKind.STAT,
                        relpath=relpath,
                        message=f"could not stat '{root.path / relpath}': {e.strerror or e}",
                        severity=RunResult.WARN,
                    )
                )
                continue
            variants.append(FileVariant(root=root, relpath=relpath, size=size))
        if not variants:
            return None
        return ReadGroup(relpath=relpath, variants=tuple(variants))

    def _record_clash(self, relpath: str, roots: list[Root]) -> None:
        self.result.record_error(
            ErrorRecord(
                kind=ErrorKind.CLASH,
                relpath=relpath,
                message=(
                    f"path must be a file or directory, not both: '{relpath}' "
                    f"(file in {', '.join(str(r) for r in roots)})"
                ),
                severity=RunResult.FAIL,
            )
        )

    # ---- resolution --------------------------------------------------------
    def resolve(self, group: ReadGroup) -> list[OutputItem]:
        """
        Decide what to write for one group.

        Returns a single item when all copies agree (the first read root's
        copy), one item per distinct content when they diverge, or nothing
        when a copy could not be hashed.
        """
        variants = group.variants
        if len(variants) == 1:
            return [OutputItem(relpath=group.relpath, source=variants[0])]

        # only copies sharing a size with another copy need hashing
        size_counts = Counter(v.size for v in variants)
        compared: list[FileVariant] = []
        for v in variants:
            if size_counts[v.size] > 1:
                try:
                    v = replace(v, digest=hash_file(v.path))
                except HashError as e:
                    self.result.record_error(
                        ErrorRecord(
                            kind=ErrorKind.HASH,
                            relpath=group.relpath,
                            message=str(e),
                            severity=RunResult.FAIL,
                        )
                    )
                    return []
            compared.append(v)

        distinct: dict[tuple[int, str | None], FileVariant] = {}
        for v in compared:
            distinct.setdefault((v.size, v.digest), v)

        if len(distinct) == 1:
            return [OutputItem(relpath=group.relpath, source=compared[0])]

        sources = list(distinct.values())
        names = read_conflict_paths(group.relpath, len(sources), self.width)
        self.result.record_conflict(
            ConflictRecord(
                kind=ConflictKind.READ,
                relpath=group.relpath,
                participants=tuple(str(v.path) for v in sources),
            )
        )
        return [
            OutputItem(relpath=name, source=v, is_conflict_variant=True)
            for name, v in zip(names, sources)
        ]
