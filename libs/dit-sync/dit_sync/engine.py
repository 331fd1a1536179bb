"""Replication engine: copy N read roots onto M write roots."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from pathlib import Path

from dit_core.config import DEFAULT_WORKERS, DitConfig
from dit_core.errors import CopyError, EnumerationError
from dit_core.fsutil import ensure_valid_roots
from dit_core.models import (
    ConflictKind,
    ConflictRecord,
    ErrorKind,
    ErrorRecord,
    OutputItem,
    ReadGroup,
    Root,
    RunResult,
    WriteAction,
)

from dit_sync.conflict import conflict_width
from dit_sync.copier import copy_file
from dit_sync.reconcile import ReadReconciler
from dit_sync.result import ResultAggregator
from dit_sync.writer import decide_write, occupant_size

logger = logging.getLogger(__name__)

# in-flight groups allowed per worker before enumeration waits
PENDING_PER_WORKER = 4


class PathLocks:
    """
    One lock per destination directory.

    An entry lives only while some worker holds or waits on it, so the map
    stays as small as the number of directories being written concurrently.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # path -> [lock, number of holders and waiters]
        self._locks: dict[Path, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, path: Path) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(path)
            if entry is None:
                entry = self._locks[path] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[path]


class ReplicationEngine:
    """
    Enumerates the read roots, resolves each relative path and delivers the
    result to every write root.

    Groups are produced on the calling thread and processed by a bounded
    thread pool. All outcomes go to ``self.result``.
    """

    def __init__(
        self,
        read_roots: Sequence[Root],
        write_roots: Sequence[Root],
        *,
        workers: int = DEFAULT_WORKERS,
        trust_destinations: bool = False,
        preserve_times: bool = True,
        dry_run: bool = False,
        result: ResultAggregator | None = None,
    ):
        self.read_roots = list(read_roots)
        self.write_roots = list(write_roots)
        self.workers = max(1, workers)
        self.trust_destinations = trust_destinations
        self.preserve_times = preserve_times
        self.dry_run = dry_run
        self.result = result if result is not None else ResultAggregator()
        self.width = conflict_width(len(self.read_roots))
        self.reconciler = ReadReconciler(self.read_roots, self.result, width=self.width)
        self._dir_locks = PathLocks()

    @classmethod
    def from_config(
        cls,
        config: DitConfig,
        *,
        dry_run: bool = False,
        result: ResultAggregator | None = None,
    ) -> "ReplicationEngine":
        """Validate the configured roots (creating missing write roots) and build an engine."""
        reads, writes = ensure_valid_roots(config.read, config.write)
        return cls(
            reads,
            writes,
            workers=config.workers,
            trust_destinations=config.trust_destinations,
            preserve_times=config.preserve_times,
            dry_run=dry_run,
            result=result,
        )

    def run(self) -> ResultAggregator:
        """Run to completion and return the aggregated result."""
        logger.info(
            f"Reading {len(self.read_roots)} root(s), writing {len(self.write_roots)} root(s)"
            + (" (dry run)" if self.dry_run else "")
        )
        max_pending = self.workers * PENDING_PER_WORKER
        pending: set[Future] = set()

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dit") as pool:
            try:
                for group in self.reconciler.groups():
                    if len(pending) >= max_pending:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        self._collect(done)
                    pending.add(pool.submit(self._process_group, group))
            except EnumerationError as e:
                # stop scheduling; whatever is in flight still finishes
                self.result.record_error(
                    ErrorRecord(
                        kind=ErrorKind.ENUMERATION,
                        relpath=e.relpath,
                        message=str(e),
                        severity=RunResult.FAIL,
                    )
                )
            done, _ = wait(pending)
            self._collect(done)

        logger.info(f"Run finished: {self.result.status.name}")
        return self.result

    def _collect(self, done: set[Future]) -> None:
        for future in done:
            exc = future.exception()
            if exc is not None:
                logger.error(f"Unexpected error in worker: {exc!r}")
                self.result.record_error(
                    ErrorRecord(
                        kind=ErrorKind.INTERNAL,
                        relpath="",
                        message=str(exc),
                        severity=RunResult.FAIL,
                    )
                )

    # ---- per group ---------------------------------------------------------
    def _process_group(self, group: ReadGroup) -> None:
        logger.info(group.relpath)
        if self.trust_destinations and self._already_synced(group):
            logger.debug(f"All copies match by size, skipping: {group.relpath}")
            return
        for item in self.reconciler.resolve(group):
            for write_root in self.write_roots:
                self._deliver(item, write_root)

    def _already_synced(self, group: ReadGroup) -> bool:
        """Every read copy and every destination copy has the same size."""
        sizes = {v.size for v in group.variants}
        if len(sizes) != 1:
            return False
        size = sizes.pop()
        return all(
            occupant_size(write_root.path / group.relpath) == size
            for write_root in self.write_roots
        )

    def _deliver(self, item: OutputItem, write_root: Root) -> None:
        # conflict names share the directory of the base name
        directory = (write_root.path / item.relpath).parent
        with self._dir_locks.hold(directory):
            try:
                decision = decide_write(item, write_root, self.width)
                if decision.action is WriteAction.CONFLICT:
                    self.result.record_conflict(
                        ConflictRecord(
                            kind=ConflictKind.WRITE,
                            relpath=item.relpath,
                            participants=(str(item.source.path), str(decision.dest_path)),
                        )
                    )
                if decision.copy_needed and not self.dry_run:
                    copy_file(item.source.path, decision.dest_path, preserve_times=self.preserve_times)
            except CopyError as e:
                self.result.record_error(
                    ErrorRecord(
                        kind=ErrorKind.COPY,
                        relpath=item.relpath,
                        message=str(e),
                        severity=RunResult.FAIL,
                    )
                )
                return
            self.result.record_decision(decision)
