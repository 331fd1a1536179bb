"""Dit Sync - multi-root reconciliation engine and conflict handling."""

from dit_sync.conflict import (
    conflict_path,
    conflict_width,
    read_conflict_paths,
    write_conflict_path,
)
from dit_sync.copier import copy_file
from dit_sync.discover import RootListing
from dit_sync.engine import ReplicationEngine
from dit_sync.reconcile import ReadReconciler
from dit_sync.result import ResultAggregator, RunSummary
from dit_sync.writer import decide_write

__all__ = [
    "ReplicationEngine",
    "ReadReconciler",
    "RootListing",
    "ResultAggregator",
    "RunSummary",
    "decide_write",
    "copy_file",
    "conflict_path",
    "conflict_width",
    "read_conflict_paths",
    "write_conflict_path",
]

__version__ = "0.1.0"
