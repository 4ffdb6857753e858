"""Command-line interface for recordfs."""

from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.markup import escape
from rich.table import Table

from recordfs import files
from recordfs.common.errors import RecordFSError
from recordfs.common.records import StructRecord, layout_from_format
from recordfs.config import RecordFSSettings, configure_logging, load_settings, parse_size
from recordfs.console import console, debug, get_or_read_argument, set_debug

app = typer.Typer(
    name="recordfs",
    help="recordfs - inspect and maintain fixed-size record files",
    no_args_is_help=True,
    add_completion=False,
)

_settings: Optional[RecordFSSettings] = None

# Errors reported as a message + exit code 1 instead of a traceback
_USER_ERRORS = (OSError, RecordFSError, ValueError, IndexError)


def _get_settings() -> RecordFSSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def format_size(size: int) -> str:
    """Format size in human-readable format."""
    value = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} PB"


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[bold green]✓[/bold green] {escape(message)}")


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[bold red]✗[/bold red] {escape(message)}")


def _resolve_path(path: Optional[Path], prompt: str) -> Path:
    """Use *path* if given, otherwise ask for it on the console."""
    value = get_or_read_argument(0, *([str(path)] if path is not None else []), read_message=prompt)
    if not value:
        print_error(f"{prompt} is required.")
        raise typer.Exit(1)
    return Path(value)


def _resolve_layout(fmt: Optional[str]) -> StructRecord:
    fmt = fmt or _get_settings().default_format
    try:
        return layout_from_format(fmt)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _run(action: Callable[[], Any]) -> Any:
    """Run *action*, turning expected failures into a clean exit."""
    try:
        return action()
    except _USER_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(1)


FORMAT_OPTION = typer.Option(
    None,
    "--format",
    "-f",
    help="Record layout: int32, uint32, int64, uint64, float64 or a struct format such as '<iid'",
)


@app.callback()
def main(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a recordfs YAML config file"),
) -> None:
    """Load settings and configure logging for every command."""
    global _settings
    _settings = load_settings(config)
    configure_logging(_settings.log_level)
    set_debug(_settings.debug)
    debug("Settings: {}", _settings.model_dump())


@app.command()
def size(path: Optional[Path] = typer.Argument(None, help="File to measure")) -> None:
    """Print a file's size in bytes (0 if it does not exist)."""
    target = _resolve_path(path, "File path")
    console.print(str(files.get_size(target)))


@app.command()
def resize(
    path: Optional[Path] = typer.Argument(None, help="File to resize (created if missing)"),
    new_size: str = typer.Option(..., "--size", "-s", help="New size, e.g. 4096, 10KB, 1MB"),
) -> None:
    """Truncate or zero-extend a file to an exact size."""
    target = _resolve_path(path, "File path")
    byte_size = _run(lambda: parse_size(new_size))
    _run(lambda: files.set_size(target, byte_size))
    print_success(f"{target} is now {format_size(byte_size)} ({byte_size} bytes)")


@app.command()
def info(
    path: Optional[Path] = typer.Argument(None, help="Record file"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Show size, record count and alignment of a record file."""
    target = _resolve_path(path, "File path")
    layout = _resolve_layout(fmt)
    summary = files.describe(target, layout)

    table = Table(title=escape(str(target)), show_header=True)
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_row("Exists", "yes" if summary.exists else "no")
    table.add_row("Size", f"{summary.size} bytes")
    table.add_row("Record format", layout.format)
    table.add_row("Record size", f"{summary.record_size} bytes")
    table.add_row("Records", str(summary.record_count))
    if summary.aligned:
        table.add_row("Aligned", "[green]yes[/green]")
    else:
        table.add_row("Aligned", f"[red]no ({summary.remainder} trailing bytes)[/red]")
    console.print(table)


@app.command()
def first(
    path: Optional[Path] = typer.Argument(None, help="Record file"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Print the first record (zero value for a missing or empty file)."""
    target = _resolve_path(path, "File path")
    layout = _resolve_layout(fmt)
    console.print(repr(_run(lambda: files.read_first_or_default(target, layout))), markup=False)


@app.command()
def last(
    path: Optional[Path] = typer.Argument(None, help="Record file"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Print the last record (zero value for a missing or empty file)."""
    target = _resolve_path(path, "File path")
    layout = _resolve_layout(fmt)
    console.print(repr(_run(lambda: files.read_last_or_default(target, layout))), markup=False)


@app.command()
def dump(
    path: Optional[Path] = typer.Argument(None, help="Record file"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Print every record, one per line."""
    target = _resolve_path(path, "File path")
    layout = _resolve_layout(fmt)
    for record in _run(lambda: files.read_all(target, layout)):
        console.print(repr(record), markup=False)


@app.command()
def clean(
    directory: Optional[Path] = typer.Argument(None, help="Directory to clean"),
    pattern: Optional[str] = typer.Option(None, "--pattern", "-p", help="File name pattern (default: all files)"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Also delete matches in subdirectories"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete files matching a pattern from a directory."""
    target = _resolve_path(directory, "Directory")
    pattern = pattern or _get_settings().default_search_pattern
    scope = "recursively " if recursive else ""
    if not yes and not typer.confirm(f"Delete files matching '{pattern}' {scope}in {target}?"):
        raise typer.Exit(1)
    deleted = _run(lambda: files.delete_all(target, pattern, recurse_subdirectories=recursive))
    print_success(f"Deleted {deleted} file(s) from {target}")


if __name__ == "__main__":
    app()
