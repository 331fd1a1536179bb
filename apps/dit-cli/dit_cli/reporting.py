"""Reporting for dit runs: stderr warnings, JSONL event log and rich summaries."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

from dit_core.models import ConflictRecord, ErrorRecord, RunResult, WriteAction, WriteDecision
from dit_sync.result import ResultAggregator
from rich.console import Console
from rich.markup import escape
from rich.table import Table

logger = logging.getLogger("dit")


def event_payload(event: ConflictRecord | ErrorRecord) -> dict[str, Any]:
    """Flatten a conflict/error record into a JSON-friendly dict."""
    if isinstance(event, ConflictRecord):
        return {
            "event": f"{event.kind.value.lower()}_merge_conflict",
            "path": event.relpath,
            "participants": list(event.participants),
        }
    return {
        "event": "error",
        "kind": event.kind.value,
        "path": event.relpath,
        "message": event.message,
        "severity": event.severity.name,
    }


def log_event(event: ConflictRecord | ErrorRecord) -> None:
    """Listener: report each conflict or error on stderr through logging."""
    if isinstance(event, ConflictRecord):
        detail = " | ".join(event.participants)
        logger.warning(f"{event.kind.value.lower()} merge conflict: {event.relpath} ({detail})")
    elif event.severity is RunResult.FAIL:
        logger.error(event.message)
    else:
        logger.warning(event.message)


class EventLog:
    """Listener: append each conflict or error to a JSONL file."""

    def __init__(self, path: Path):
        self.path = path

    def __call__(self, event: ConflictRecord | ErrorRecord) -> None:
        payload = {"ts": datetime.now().strftime("%Y-%m-%d %H:%M:%S"), **event_payload(event)}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(payload, ensure_ascii=False) + os.linesep)
        except OSError as e:
            logger.debug(f"Failed to write event log: {e}")


_ACTION_STYLE = {
    WriteAction.COPY: "green",
    WriteAction.SKIP: "dim",
    WriteAction.CONFLICT: "yellow",
}


def render_plan(console: Console, decisions: tuple[WriteDecision, ...]) -> None:
    """Table of every write decision, sorted by destination."""
    console.rule("[dim]Execution Plan")
    if not decisions:
        console.print("[dim]Nothing to do.[/dim]")
        return
    t = Table(show_header=True, header_style="bold")
    t.add_column("Decision")
    t.add_column("Source")
    t.add_column("Destination")
    t.add_column("Details")
    for d in sorted(decisions, key=lambda d: (str(d.write_root.path), d.dest_relpath)):
        details = ""
        if d.action is WriteAction.CONFLICT:
            details = "new conflict copy" if d.copy_needed else "conflict copy already present"
        elif d.item.is_conflict_variant:
            details = "read conflict variant"
        style = _ACTION_STYLE[d.action]
        t.add_row(
            f"[{style}]{d.action.value}[/{style}]",
            escape(str(d.item.source.path)),
            escape(str(d.dest_path)),
            details,
        )
    console.print(t)


def render_summary(console: Console, result: ResultAggregator, *, dry_run: bool = False) -> None:
    """Status line, totals and a table of conflicts/errors."""
    summary = result.summary()
    prefix = "Dry run" if dry_run else "Copy"
    if summary.status is RunResult.OK:
        console.print(f"[green][OK] {prefix} completed successfully[/green]")
    elif summary.status is RunResult.WARN:
        console.print(f"[yellow][WARN] {prefix} completed with conflicts[/yellow]")
    else:
        console.print(f"[red][ERROR] {prefix} failed[/red]")

    console.rule("[bold]Summary[/bold]")
    verb = "to copy" if dry_run else "copied"
    console.print(
        f"Totals: {verb}: [bold]{summary.copied}[/bold]   "
        f"already synced: [bold]{summary.skipped}[/bold]   "
        f"conflict copies: [bold]{summary.conflicts_written}[/bold]\n"
        f"        read conflicts: [bold]{summary.read_conflicts}[/bold]   "
        f"write conflicts: [bold]{summary.write_conflicts}[/bold]   "
        f"errors: [bold]{summary.errors}[/bold]"
    )

    conflicts = result.conflicts
    errors = result.errors
    if not conflicts and not errors:
        return
    table = Table(show_header=True, header_style="bold")
    table.add_column("Event")
    table.add_column("Path")
    table.add_column("Details")
    for c in conflicts:
        table.add_row(
            f"[yellow]{c.kind.value.lower()} conflict[/yellow]",
            escape(c.relpath),
            escape("\n".join(c.participants)),
        )
    for e in errors:
        style = "red" if e.severity is RunResult.FAIL else "yellow"
        table.add_row(f"[{style}]{e.kind.value} error[/{style}]", escape(e.relpath or "-"), escape(e.message))
    console.print(table)
