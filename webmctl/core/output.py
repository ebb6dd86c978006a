"""Console output for webmctl.

Results go to stdout as JSON or aligned key-value lines; status messages go to
stderr. Transfers show a Rich progress bar measured in bytes.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        return cls(value.lower())


# =============================================================================
# Formatting
# =============================================================================


def format_bytes(num_bytes: float) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 MiB``."""
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(value) < 1024 or unit == "GiB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GiB"


def _render_value(value: Any) -> str:
    if value is None:
        return "[dim]-[/dim]"
    if isinstance(value, bool):
        return "[green]Yes[/green]" if value else "[red]No[/red]"
    if isinstance(value, Mapping):
        return ", ".join(f"{k}={v}" for k, v in value.items()) or "[dim]-[/dim]"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or "[dim]-[/dim]"
    return str(value)


# =============================================================================
# Records
# =============================================================================


def print_key_value(data: Mapping[str, Any], *, title: str | None = None) -> None:
    """Print one record as aligned ``Label  value`` lines.

    Keys are shown title-cased with underscores replaced by spaces.
    """
    if title:
        console.print(f"[bold]{title}[/bold]")

    labels = {key: key.replace("_", " ").title() for key in data}
    width = max((len(label) for label in labels.values()), default=0)
    for key, value in data.items():
        console.print(f"  {labels[key]:<{width}}  {_render_value(value)}")


def print_json(data: Any) -> None:
    """Print data as indented JSON on plain stdout."""
    print(json.dumps(data, indent=2, default=str))


def print_output(
    data: Mapping[str, Any],
    *,
    format: OutputFormat = OutputFormat.TABLE,
    title: str | None = None,
) -> None:
    """Print a record in the requested format."""
    if format is OutputFormat.JSON:
        print_json(dict(data))
    else:
        print_key_value(data, title=title)


def print_profiles(rows: Mapping[str, Mapping[str, Any]], *, default: str) -> None:
    """Print configured profiles, one two-column table each.

    Long values such as URLs fold onto the next line rather than being cut.

    Args:
        rows: Profile name to serialized profile fields.
        default: Name of the default profile.
    """
    for name, row in rows.items():
        title = f"{name} (default)" if name == default else name
        table = Table(title=title, title_justify="left", show_header=False, box=None)
        table.add_column("Field", style="bold", no_wrap=True)
        table.add_column("Value", overflow="fold")

        table.add_row("URL", str(row.get("url", "")))
        table.add_row("Verify SSL", _render_value(bool(row.get("verify_ssl", True))))
        table.add_row("Timeout", f"{row.get('timeout')}s")
        table.add_row("Chunk Size", format_bytes(row.get("chunk_size", 0)))
        table.add_row("Headers", _render_value(sorted(row.get("headers") or {})))
        table.add_row("Form", _render_value(row.get("form_variables") or {}))

        console.print()
        console.print(table)


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


# =============================================================================
# Progress
# =============================================================================


def create_transfer_progress(*, transient: bool = False) -> Progress:
    """Create a progress bar for byte transfers.

    A task created with ``total=None`` (a followed, still-growing file) shows a
    pulsing bar instead of a percentage.

    Args:
        transient: Remove the bar from the terminal when it stops.

    Returns:
        Progress instance; use it as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(binary_units=True),
        TransferSpeedColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=transient,
    )
