"""Run-wide accumulation of conflicts, errors and write decisions."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass

from dit_core.models import (
    ConflictKind,
    ConflictRecord,
    ErrorRecord,
    RunResult,
    WriteAction,
    WriteDecision,
)

Event = ConflictRecord | ErrorRecord
Listener = Callable[[Event], None]


@dataclass(frozen=True)
class RunSummary:
    """Counts for the end-of-run report."""

    status: RunResult
    copied: int
    skipped: int
    conflicts_written: int
    read_conflicts: int
    write_conflicts: int
    errors: int


class ResultAggregator:
    """
    Thread-safe accumulator for one run.

    The status only ever goes up (OK -> WARN -> FAIL). Records are append-only.
    Listeners are called with each ConflictRecord/ErrorRecord as it is
    recorded, one at a time.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._status = RunResult.OK
        self._conflicts: list[ConflictRecord] = []
        self._errors: list[ErrorRecord] = []
        self._decisions: list[WriteDecision] = []
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def escalate(self, level: RunResult) -> RunResult:
        with self._lock:
            self._status = max(self._status, level)
            return self._status

    def record_conflict(self, record: ConflictRecord) -> None:
        with self._lock:
            self._conflicts.append(record)
            self._status = max(self._status, RunResult.WARN)
            self._notify(record)

    def record_error(self, record: ErrorRecord) -> None:
        with self._lock:
            self._errors.append(record)
            self._status = max(self._status, record.severity)
            self._notify(record)

    def record_decision(self, decision: WriteDecision) -> None:
        with self._lock:
            self._decisions.append(decision)

    def _notify(self, event: Event) -> None:
        for listener in self._listeners:
            listener(event)

    # ---- views -------------------------------------------------------------
    @property
    def status(self) -> RunResult:
        with self._lock:
            return self._status

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    @property
    def conflicts(self) -> tuple[ConflictRecord, ...]:
        with self._lock:
            return tuple(self._conflicts)

    @property
    def errors(self) -> tuple[ErrorRecord, ...]:
        with self._lock:
            return tuple(self._errors)

    @property
    def decisions(self) -> tuple[WriteDecision, ...]:
        with self._lock:
            return tuple(self._decisions)

    def summary(self) -> RunSummary:
        with self._lock:
            decisions = list(self._decisions)
            conflicts = list(self._conflicts)
            return RunSummary(
                status=self._status,
                copied=sum(1 for d in decisions if d.action is WriteAction.COPY),
                skipped=sum(1 for d in decisions if d.action is WriteAction.SKIP),
                conflicts_written=sum(
                    1 for d in decisions if d.action is WriteAction.CONFLICT and d.copy_needed
                ),
                read_conflicts=sum(1 for c in conflicts if c.kind is ConflictKind.READ),
                write_conflicts=sum(1 for c in conflicts if c.kind is ConflictKind.WRITE),
                errors=len(self._errors),
            )
