"""CLI helper listing the Pygments styles usable as themes."""

from __future__ import annotations

from typing import Annotated

from rich import box
from rich.table import Table
import typer

from codesmith.adapters.pygments import list_themes, load_pygments_theme
from codesmith.core.exceptions import ConfigurationError

from ..state import emit_warning, get_cli_state


def themes(
    dark: Annotated[
        bool | None,
        typer.Option("--dark/--light", help="Only list dark or light themes."),
    ] = None,
) -> None:
    """Print a table of the available themes with their base colors."""
    console = get_cli_state().console
    table = Table(
        title="Available Themes",
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    table.add_column("Name", style="magenta")
    table.add_column("Type", style="green")
    table.add_column("Background")
    table.add_column("Foreground")

    for name in list_themes():
        try:
            theme = load_pygments_theme(name)
        except ConfigurationError as exc:
            emit_warning(f"Skipping theme '{name}'.", exception=exc)
            continue
        if dark is not None and theme.is_dark != dark:
            continue
        table.add_row(
            name,
            theme.type,
            f"[on {theme.bg}]   [/] {theme.bg}",
            f"[{theme.fg}]■[/] {theme.fg}",
        )

    console.print(table)


__all__ = ["themes"]
