"""Command-line interface for logtabs."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.style import Style
from rich.text import Text

from . import __version__
from .filter_engine import FilterStats
from .log_source import read_log_file
from .models import LogLine
from .store import LogStore
from .tab_io import (
    TabParseError,
    dumps_tab,
    generate_sample_tab_file,
    load_tab_file,
)

app = typer.Typer(
    name="logtabs",
    help="View log files through tabbed include/exclude/highlight filters.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

# Default file names
DEFAULT_TAB_FILE = "filters.json"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"logtabs {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug logging.",
        ),
    ] = False,
) -> None:
    """logtabs - View log files through tabbed filters."""
    configure_logging(verbose)


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the sample tab file."),
    ] = Path(DEFAULT_TAB_FILE),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing file.",
        ),
    ] = False,
) -> None:
    """Create a sample tab file."""
    if force and path.exists():
        path.unlink()

    if generate_sample_tab_file(path):
        console.print(f"[green]Created:[/green] {path}")
    else:
        console.print(f"[yellow]Skipped (already exists):[/yellow] {path}")
        console.print("[dim]Use --force to overwrite the existing file.[/dim]")


@app.command()
def check(
    files: Annotated[
        list[Path],
        typer.Argument(help="Tab files to validate."),
    ],
) -> None:
    """Validate tab files and report their filters."""
    failed = False

    for path in files:
        try:
            name, filters = load_tab_file(path)
        except (OSError, TabParseError) as e:
            err_console.print(f"[red]Error parsing {escape(str(path))}:[/red] {escape(str(e))}")
            failed = True
            continue

        enabled = sum(1 for flt in filters if flt.enabled)
        console.print(
            f"[green]OK[/green] {escape(str(path))}: tab {escape(repr(name))}, "
            f"{len(filters)} filters ({enabled} enabled)"
        )

    if failed:
        raise typer.Exit(1)


@app.command()
def view(
    log_file: Annotated[
        Path,
        typer.Argument(
            help="Log file to view.",
            exists=True,
            readable=True,
            dir_okay=False,
        ),
    ],
    global_file: Annotated[
        Optional[Path],
        typer.Option(
            "--global",
            "-g",
            help="Tab file whose filters populate the global tab.",
        ),
    ] = None,
    tab_files: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--tab",
            "-t",
            help="Tab file to add as a tab (repeatable).",
        ),
    ] = None,
    active: Annotated[
        Optional[str],
        typer.Option(
            "--active",
            "-a",
            help="Name of the tab to activate (default: the last tab loaded).",
        ),
    ] = None,
    line_numbers: Annotated[
        bool,
        typer.Option(
            "--line-numbers/--no-line-numbers",
            help="Prefix each line with its line number.",
        ),
    ] = True,
    show_hidden: Annotated[
        bool,
        typer.Option(
            "--show-hidden",
            help="Print hidden lines dimmed instead of dropping them.",
        ),
    ] = False,
    color: Annotated[
        bool,
        typer.Option(
            "--color/--no-color",
            help="Enable/disable colored output.",
        ),
    ] = True,
    stats: Annotated[
        bool,
        typer.Option(
            "--stats",
            "-s",
            help="Show filtering statistics at the end.",
        ),
    ] = False,
) -> None:
    """Apply the global tab plus one active tab to a log file and print it.

    Examples:
        logtabs view app.log --global common.json
        logtabs view app.log -t errors.json -t network.json --active Network
    """
    store = LogStore()

    if global_file is not None:
        _load_into_tab(store, store.global_tab.id, global_file)

    for path in tab_files or []:
        tab = store.import_tab(_read_tab_text(path))
        if tab is None:
            err_console.print(f"[red]Error parsing {path}[/red]")
            raise typer.Exit(1)

    if active is not None:
        matching = [tab for tab in store.tabs if tab.name == active]
        if not matching:
            err_console.print(f"[red]Error:[/red] no tab named {active!r}")
            raise typer.Exit(1)
        store.set_active_tab(matching[0].id)

    try:
        store.load_content(read_log_file(log_file), log_file)
    except OSError as e:
        err_console.print(f"[red]Error reading log file:[/red] {e}")
        raise typer.Exit(1)

    filter_stats = FilterStats() if stats else None
    width = len(str(len(store.processed_lines)))

    for line in store.processed_lines:
        if filter_stats:
            filter_stats.record(line)
        if line.visible or show_hidden:
            _print_line(line, color=color, line_numbers=line_numbers, width=width)

    if filter_stats:
        err_console.print()
        err_console.print(f"[bold]Filter Statistics ({store.active_tab.name}):[/bold]")
        err_console.print(filter_stats.summary())


@app.command()
def export(
    global_file: Annotated[
        Optional[Path],
        typer.Option(
            "--global",
            "-g",
            help="Tab file whose filters populate the global tab.",
        ),
    ] = None,
    tab_file: Annotated[
        Optional[Path],
        typer.Option(
            "--tab",
            "-t",
            help="Tab file to load as the active tab.",
        ),
    ] = None,
) -> None:
    """Re-serialize a tab file in canonical form (colors normalised, ids dropped)."""
    store = LogStore()

    if global_file is not None:
        _load_into_tab(store, store.global_tab.id, global_file)
    if tab_file is not None:
        if store.import_tab(_read_tab_text(tab_file)) is None:
            err_console.print(f"[red]Error parsing {tab_file}[/red]")
            raise typer.Exit(1)

    console.print(dumps_tab(store.active_tab), markup=False, highlight=False, soft_wrap=True)


def _read_tab_text(path: Path) -> str:
    """Read a tab file, exiting with an error if it can't be read."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Error reading {path}:[/red] {e}")
        raise typer.Exit(1)


def _load_into_tab(store: LogStore, tab_id: str, path: Path) -> None:
    """Replace a tab's filters from a file, exiting on failure."""
    if not store.load_tab_from_json(tab_id, _read_tab_text(path)):
        err_console.print(f"[red]Error parsing {path}[/red]")
        raise typer.Exit(1)


def line_style(line: LogLine) -> Style:
    """Build a rich style from a line's resolved colors."""
    if not line.visible:
        return Style(dim=True, strike=True)
    return Style(
        color=line.text_color.hex if line.text_color else None,
        bgcolor=line.background_color.hex if line.background_color else None,
    )


def _print_line(
    line: LogLine, color: bool = True, line_numbers: bool = True, width: int = 1
) -> None:
    """Print an evaluated line with optional coloring."""
    text = Text()
    if line_numbers:
        text.append(f"{line.index + 1:>{width}} ", style="dim" if color else "")

    if color:
        text.append(line.text, style=line_style(line))
    else:
        text.append(line.text)

    console.print(text, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
