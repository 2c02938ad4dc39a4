"""Shared console and formatting helpers for ReverseKit.

All user-facing output goes through the single Rich ``console`` defined
here so the CLI, the interactive builder and the pipeline print alike.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from reversekit.models import Entity

console = Console()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """``3.7`` -> ``"3.7s"``, ``65.2`` -> ``"1m 5s"``."""
    if seconds < 0:
        return "0.0s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a step."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_entity(entity: Entity) -> None:
    """Print the fields and relationships of *entity* as tables."""
    table = Table(
        title=f"{entity.name} ({entity.table})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Field", no_wrap=True)
    table.add_column("Type")
    table.add_column("Modifiers", style="dim")
    for field in entity.fields.values():
        modifiers = [
            label for label, on in (
                ("nullable", field.nullable),
                ("unique", field.unique),
            ) if on
        ]
        if field.references:
            modifiers.append(f"-> {field.references}")
        table.add_row(field.name, field.type, ", ".join(modifiers))
    console.print(table)

    if entity.relationships:
        for rel in entity.relationships:
            console.print(f"  [magenta]{rel.type.value}[/magenta] {rel.related} [dim]({rel.method})[/dim]")
    flags = [name for name, on in (("timestamps", entity.timestamps), ("softDeletes", entity.soft_deletes)) if on]
    if flags:
        console.print(f"  [dim]{', '.join(flags)}[/dim]")
    console.print()


def print_files(tags: Iterable[str]) -> None:
    """Print one line per generated-file tag, dimming skipped files."""
    for tag in tags:
        if tag.startswith("skipped:"):
            console.print(f"  [yellow]skipped[/yellow] [dim]{tag[len('skipped:'):]}[/dim]")
        else:
            console.print(f"  [green]wrote[/green]   {tag}")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
