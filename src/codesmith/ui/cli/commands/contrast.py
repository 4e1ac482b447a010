"""CLI helper exposing the contrast solver."""

from __future__ import annotations

from typing import Annotated

import typer

from codesmith.core.colors import (
    ensure_color_contrast_on_background,
    get_color_contrast_on_background,
    parse_color,
    to_hex,
)
from codesmith.core.exceptions import InvalidColorError

from ..state import emit_error, get_cli_state


def contrast(
    foreground: Annotated[str, typer.Argument(metavar="FG", help="Foreground color.")],
    background: Annotated[str, typer.Argument(metavar="BG", help="Background color.")],
    min_contrast: Annotated[
        float,
        typer.Option(
            "--min-contrast",
            min=1.0,
            max=21.0,
            help="Contrast ratio the adjusted foreground must reach.",
        ),
    ] = 5.5,
) -> None:
    """Report the WCAG contrast of FG on BG and the closest color reaching the target."""
    try:
        parse_color(foreground)
        parse_color(background)
    except InvalidColorError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    ratio = get_color_contrast_on_background(foreground, background)
    adjusted = ensure_color_contrast_on_background(foreground, background, min_contrast)
    adjusted_ratio = get_color_contrast_on_background(adjusted, background)

    console = get_cli_state().console
    console.print(f"contrast: {ratio:.2f}")
    if adjusted == to_hex(foreground):
        console.print(f"{adjusted} already reaches {min_contrast:g}")
        return
    console.print(f"adjusted: {adjusted} ({adjusted_ratio:.2f})")


__all__ = ["contrast"]
