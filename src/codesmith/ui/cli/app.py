"""Typer application wiring for the codesmith CLI."""

from __future__ import annotations

import typer

from ._options import DebugOption, VerboseOption, VersionOption
from .commands import contrast, render, themes
from .state import debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Render annotated code blocks to HTML.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    version: VersionOption = False,
) -> None:
    """Render annotated code blocks to HTML."""
    set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)


app.command()(render)
app.command()(themes)
app.command()(contrast)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - unexpected failures
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
