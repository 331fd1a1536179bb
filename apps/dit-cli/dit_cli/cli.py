"""Dit CLI commands."""

import logging
import sys
from pathlib import Path

import click
import dotenv
import typer
from dit_core import CONFIG_ENV, ConfigError, DitConfig, RootError, load_config
from dit_core.fsutil import ensure_valid_roots, strip_trailing_slash
from dit_core.models import EXIT_FAIL, EXIT_OK
from dit_sync import ReplicationEngine, ResultAggregator
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dit_cli.reporting import EventLog, log_event, render_plan, render_summary

# .env may set DIT_CONFIG before options are parsed
dotenv.load_dotenv()

app = typer.Typer(help="Dit - copy redundant read roots onto write roots, keeping conflicts")
console = Console()
err_console = Console(stderr=True)

USAGE = "Usage: dit copy read <src...> write <dest...>"

# Configure logging (default to WARNING, can be lowered to INFO in debug mode)
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M",
)
logger = logging.getLogger(__name__)


def parse_read_write(args: list[str]) -> tuple[list[Path], list[Path]]:
    """
    Split ``read <paths...> write <paths...>`` into read and write paths.

    The keywords may repeat and appear in any order; each switches where the
    following paths go. Trailing slashes are dropped.
    """
    read_paths: list[Path] = []
    write_paths: list[Path] = []
    target: list[Path] | None = None
    for arg in args:
        if arg == "read":
            target = read_paths
            continue
        if arg == "write":
            target = write_paths
            continue
        if target is None:
            raise typer.BadParameter(f"path '{arg}' must follow 'read' or 'write'")
        target.append(Path(strip_trailing_slash(arg)))
    return read_paths, write_paths


def _set_debug(debug: bool) -> None:
    level = logging.INFO if debug else logging.WARNING
    logging.getLogger().setLevel(level)
    for name in ("dit_core", "dit_sync"):
        logging.getLogger(name).setLevel(level)


def _build_config(
    args: list[str] | None,
    config_file: Path | None,
    workers: int | None,
    trust_destinations: bool | None,
    preserve_times: bool | None,
) -> DitConfig:
    """File config overlaid with command-line values; exits 1 on bad usage."""
    try:
        read_paths, write_paths = parse_read_write(args or [])
        config = load_config(config_file).merged(
            read=read_paths,
            write=write_paths,
            workers=workers,
            trust_destinations=trust_destinations,
            preserve_times=preserve_times,
        )
    except (typer.BadParameter, ConfigError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        err_console.print(USAGE)
        raise typer.Exit(EXIT_FAIL) from e

    if not config.read or not config.write:
        err_console.print("[red]Error:[/red] need at least one read path and one write path")
        err_console.print(USAGE)
        raise typer.Exit(EXIT_FAIL)
    return config


def _run(config: DitConfig, *, dry_run: bool, events: Path | None) -> ResultAggregator:
    result = ResultAggregator()
    result.subscribe(log_event)
    if events is not None:
        result.subscribe(EventLog(events))
    try:
        engine = ReplicationEngine.from_config(config, dry_run=dry_run, result=result)
    except RootError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(EXIT_FAIL) from e
    return engine.run()


_PATHS_HELP = "read <src...> write <dest...>"


@app.command()
def copy(
    args: list[str] | None = typer.Argument(None, help=_PATHS_HELP, show_default=False),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", envvar=CONFIG_ENV, help="YAML file with roots and options"
    ),
    workers: int | None = typer.Option(None, "--workers", "-j", min=1, help="Worker threads"),
    trust_destinations: bool | None = typer.Option(
        None,
        "--trust-destinations/--verify-reads",
        help="Skip hashing when every read and write copy already has the same size",
    ),
    preserve_times: bool | None = typer.Option(
        None, "--preserve-times/--no-preserve-times", help="Copy atime/mtime to written files"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be done without doing it"
    ),
    events: Path | None = typer.Option(
        None, "--events", help="Append conflict/error events to this JSONL file"
    ),
    debug: bool = typer.Option(False, "--debug", help="Log every path and copy"),
):
    """
    Copy every read root onto every write root.

    Exit codes: 0 all good, 1 fatal error, 2 merge conflicts recorded.
    """
    _set_debug(debug)
    config = _build_config(args, config_file, workers, trust_destinations, preserve_times)
    result = _run(config, dry_run=dry_run, events=events)

    if dry_run:
        render_plan(console, result.decisions)
    render_summary(console, result, dry_run=dry_run)
    raise typer.Exit(result.exit_code)


@app.command()
def plan(
    args: list[str] | None = typer.Argument(None, help=_PATHS_HELP, show_default=False),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", envvar=CONFIG_ENV, help="YAML file with roots and options"
    ),
    workers: int | None = typer.Option(None, "--workers", "-j", min=1, help="Worker threads"),
    trust_destinations: bool | None = typer.Option(
        None,
        "--trust-destinations/--verify-reads",
        help="Skip hashing when every read and write copy already has the same size",
    ),
    debug: bool = typer.Option(False, "--debug", help="Log every path"),
):
    """Show the copy plan without writing anything (same as copy --dry-run)."""
    _set_debug(debug)
    config = _build_config(args, config_file, workers, trust_destinations, None)
    result = _run(config, dry_run=True, events=None)
    render_plan(console, result.decisions)
    render_summary(console, result, dry_run=True)
    raise typer.Exit(result.exit_code)


@app.command()
def check(
    args: list[str] | None = typer.Argument(None, help=_PATHS_HELP, show_default=False),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", envvar=CONFIG_ENV, help="YAML file with roots and options"
    ),
):
    """Validate roots and configuration without reading or writing files."""
    config = _build_config(args, config_file, None, None, None)
    try:
        reads, writes = ensure_valid_roots(config.read, config.write, create_missing=False)
    except RootError as e:
        console.print("[red]Issues found:[/red]")
        console.print(f"  [X] {e}")
        raise typer.Exit(EXIT_FAIL) from e

    table = Table(show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("#")
    table.add_column("Path")
    table.add_column("Status")
    for root in reads:
        table.add_row("read", str(root.index), str(root.path), "ok")
    for root in writes:
        status = "ok" if root.path.exists() else "[yellow]will be created[/yellow]"
        table.add_row("write", str(root.index), str(root.path), status)
    console.print(table)
    console.print(
        f"workers: {config.workers}   trust-destinations: {config.trust_destinations}   "
        f"preserve-times: {config.preserve_times}"
    )
    console.print("[green][OK] Configuration looks good![/green]")
    raise typer.Exit(EXIT_OK)


def main(args: list[str] | None = None) -> None:
    """
    Console entry point.

    Click reports usage errors (unknown options, out-of-range values) with
    exit code 2, which dit reserves for merge conflicts; they exit 1 here.
    """
    try:
        code = app(args=args, prog_name="dit", standalone_mode=False)
    except click.ClickException as e:
        err_console.print(f"[red]Error:[/red] {escape(e.format_message())}")
        err_console.print(USAGE)
        sys.exit(EXIT_FAIL)
    except click.exceptions.Abort:
        err_console.print("[red]Aborted.[/red]")
        sys.exit(EXIT_FAIL)
    sys.exit(code or EXIT_OK)


if __name__ == "__main__":
    main()
