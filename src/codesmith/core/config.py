"""Configuration models used by the annotation engine.

EngineConfig

`theme` (`str`)
: Name of the Pygments style used to color tokens and derive theme colors.

`min_syntax_highlighting_color_contrast` (`float`)
: Minimum WCAG contrast ratio enforced for token colors drawn on top of
  markers. Set to `0` to disable the adjustment.

`tab_width` (`int`)
: Replace tab characters with this many spaces before processing. `0` keeps
  tabs untouched.

`plugins` (`list[str]`)
: Built-in plugins to enable, in registration order. Within a phase, hooks run
  in this order.

`text_markers` (`TextMarkersConfig`)
: Colors of the `mark`, `ins` and `del` markers.

`frames` (`FramesConfig`)
: Editor and terminal frame behaviour.

`line_numbers` (`LineNumbersConfig`)
: Default line number gutter settings, overridable per block.

`collapsible` (`CollapsibleConfig`)
: Labels of collapsed sections.

TextMarkersConfig

`mark_hue`, `ins_hue`, `del_hue` (`float`)
: LCh hues of the three marker types.

`default_chroma` (`float`)
: LCh chroma of marker backgrounds.

`default_luminance` (`tuple[float, float]`)
: LCh lightness of marker backgrounds for dark and light themes.

`background_opacity` (`float`)
: Opacity applied to marker backgrounds.

`border_luminance`, `border_opacity` (`float`)
: Lightness and opacity of marker accents.

`indicator_luminance` (`tuple[float, float]`)
: Lightness of the diff indicators for dark and light themes.

`indicator_opacity` (`float`)
: Opacity of the diff indicators.

FramesConfig

`extract_file_name_from_code` (`bool`)
: Use a file name comment found in the first lines as the frame title and
  remove it from the code.

`show_terminal_label` (`bool`)
: Give terminal frames without a title an accessible "Terminal window" label.

`terminal_label` (`str`)
: Text of that label.

LineNumbersConfig

`enabled` (`bool`)
: Render the line number gutter unless a block disables it.

`start` (`int`)
: Number of the first line.

CollapsibleConfig

`summary` (`str`)
: Summary text of collapsed sections; `{count}` expands to the number of lines.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
import yaml

from .exceptions import ConfigurationError


BUILTIN_PLUGINS: tuple[str, ...] = (
    "frames",
    "text-markers",
    "syntax-highlighting",
    "line-numbers",
    "collapsible-sections",
)


class TextMarkersConfig(BaseModel):
    """Colors of line and inline markers."""

    model_config = ConfigDict(extra="forbid")

    mark_hue: float = Field(default=284, ge=0, le=360)
    ins_hue: float = Field(default=136, ge=0, le=360)
    del_hue: float = Field(default=33, ge=0, le=360)
    default_chroma: float = Field(default=40, ge=0)
    default_luminance: tuple[float, float] = (32, 75)
    background_opacity: float = Field(default=0.5, ge=0, le=1)
    border_luminance: float = Field(default=48, ge=0, le=100)
    border_opacity: float = Field(default=0.816, ge=0, le=1)
    indicator_luminance: tuple[float, float] = (67, 40)
    indicator_opacity: float = Field(default=0.816, ge=0, le=1)

    def hue_for(self, marker: str) -> float:
        """Return the hue configured for a marker type name."""
        return {"mark": self.mark_hue, "ins": self.ins_hue, "del": self.del_hue}[marker]


class FramesConfig(BaseModel):
    """Frame behaviour."""

    model_config = ConfigDict(extra="forbid")

    extract_file_name_from_code: bool = True
    show_terminal_label: bool = True
    terminal_label: str = "Terminal window"


class LineNumbersConfig(BaseModel):
    """Line number gutter defaults."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    start: int = Field(default=1, ge=0)


class CollapsibleConfig(BaseModel):
    """Collapsible section labels."""

    model_config = ConfigDict(extra="forbid")

    summary: str = "{count} collapsed lines"


class EngineConfig(BaseModel):
    """Top-level engine configuration."""

    model_config = ConfigDict(extra="forbid")

    theme: str = "monokai"
    min_syntax_highlighting_color_contrast: float = Field(default=5.5, ge=0, le=21)
    tab_width: int = Field(default=0, ge=0)
    plugins: list[str] = Field(default_factory=lambda: list(BUILTIN_PLUGINS))
    text_markers: TextMarkersConfig = Field(default_factory=TextMarkersConfig)
    frames: FramesConfig = Field(default_factory=FramesConfig)
    line_numbers: LineNumbersConfig = Field(default_factory=LineNumbersConfig)
    collapsible: CollapsibleConfig = Field(default_factory=CollapsibleConfig)

    @model_validator(mode="after")
    def check_plugins(self) -> EngineConfig:
        """Reject unknown or repeated plugin names."""
        unknown = [name for name in self.plugins if name not in BUILTIN_PLUGINS]
        if unknown:
            raise ValueError(f"Unknown plugins: {', '.join(unknown)}")
        if len(set(self.plugins)) != len(self.plugins):
            raise ValueError("Plugins can only be enabled once.")
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> EngineConfig:
        """Validate a plain mapping (e.g. loaded from YAML) into a config."""
        payload = {
            str(key).replace("-", "_"): value for key, value in dict(data or {}).items()
        }
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid engine configuration: {exc}") from exc


def load_config(path: Path | str) -> EngineConfig:
    """Load an :class:`EngineConfig` from a YAML file.

    The file may hold the options at its root or below a ``codesmith`` key.
    """
    config_path = Path(path)
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration '{config_path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in '{config_path}': {exc}") from exc

    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Configuration '{config_path}' must contain a mapping.")
    section = payload.get("codesmith", payload)
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"The 'codesmith' section of '{config_path}' must be a mapping.")
    return EngineConfig.from_mapping(section)


__all__ = [
    "BUILTIN_PLUGINS",
    "CollapsibleConfig",
    "EngineConfig",
    "FramesConfig",
    "LineNumbersConfig",
    "TextMarkersConfig",
    "load_config",
]
