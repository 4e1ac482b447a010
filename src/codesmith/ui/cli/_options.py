"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from codesmith.version import get_version


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputPathArgument = Annotated[
    Path,
    typer.Argument(
        metavar="INPUT",
        help="Source file to render. Markdown files (.md) have every fenced block rendered.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

LanguageOption = Annotated[
    str | None,
    typer.Option(
        "--language",
        "-l",
        help="Language of the code; inferred from the file extension when omitted.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

MetaOption = Annotated[
    str,
    typer.Option(
        "--meta",
        "-m",
        help='Meta string applied to the block, e.g. \'title="app.py" mark={2-4}\'.',
        rich_help_panel=INPUTS_PANEL,
    ),
]

ThemeOption = Annotated[
    str | None,
    typer.Option(
        "--theme",
        "-t",
        help="Pygments style used for highlighting (overrides the configuration).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file holding the engine configuration.",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=RENDERING_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the result to this file instead of stdout.",
        dir_okay=False,
        writable=True,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

FragmentOption = Annotated[
    bool,
    typer.Option(
        "--fragment",
        help="Print the markup followed by a <style> element instead of a full page.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug/--no-debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


def _print_version(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


VersionOption = Annotated[
    bool,
    typer.Option(
        "--version",
        help="Print the codesmith version and exit.",
        callback=_print_version,
        is_eager=True,
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
