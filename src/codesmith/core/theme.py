"""Theme colors consumed by the engine and its plugins."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from .colors import get_luminance, to_hex


ThemeType = Literal["dark", "light"]


@dataclass(frozen=True, slots=True)
class Theme:
    """Immutable set of colors shared by every block rendered with it."""

    name: str
    bg: str
    fg: str
    type: ThemeType = "dark"
    colors: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bg", to_hex(self.bg))
        object.__setattr__(self, "fg", to_hex(self.fg))
        object.__setattr__(self, "colors", MappingProxyType(dict(self.colors)))

    @classmethod
    def from_colors(
        cls,
        name: str,
        bg: str,
        fg: str,
        colors: Mapping[str, str] | None = None,
    ) -> Theme:
        """Build a theme, deriving its type from the background luminance."""
        theme_type: ThemeType = "dark" if get_luminance(bg) < 0.5 else "light"
        return cls(name=name, bg=bg, fg=fg, type=theme_type, colors=dict(colors or {}))

    @property
    def is_dark(self) -> bool:
        return self.type == "dark"

    def color(self, key: str, default: str | None = None) -> str | None:
        """Return a named color (e.g. ``editor.selectionBackground``)."""
        return self.colors.get(key, default)

    def pick(self, *, dark: str, light: str) -> str:
        """Return the value matching the theme type."""
        return dark if self.is_dark else light


DEFAULT_DARK_THEME = Theme(name="default-dark", bg="#1e1e2e", fg="#d4d4d4", type="dark")
DEFAULT_LIGHT_THEME = Theme(name="default-light", bg="#ffffff", fg="#24292e", type="light")


__all__ = ["DEFAULT_DARK_THEME", "DEFAULT_LIGHT_THEME", "Theme", "ThemeType"]
