"""Built-in plugins of the annotation engine."""

from __future__ import annotations

from codesmith.core.config import EngineConfig
from codesmith.core.hooks import Plugin

from .collapsible import CollapsibleSectionsPlugin
from .frames import FramesPlugin
from .line_numbers import LineNumbersPlugin
from .syntax import SyntaxHighlightingPlugin
from .text_markers import TextMarkersPlugin


def default_plugins(config: EngineConfig | None = None) -> list[Plugin]:
    """Instantiate the plugins enabled in ``config``, in configuration order."""
    config = config or EngineConfig()
    factories = {
        FramesPlugin.name: lambda: FramesPlugin(config.frames),
        TextMarkersPlugin.name: lambda: TextMarkersPlugin(config.text_markers),
        SyntaxHighlightingPlugin.name: SyntaxHighlightingPlugin,
        LineNumbersPlugin.name: lambda: LineNumbersPlugin(config.line_numbers),
        CollapsibleSectionsPlugin.name: lambda: CollapsibleSectionsPlugin(config.collapsible),
    }
    return [factories[name]() for name in config.plugins]


__all__ = [
    "CollapsibleSectionsPlugin",
    "FramesPlugin",
    "LineNumbersPlugin",
    "SyntaxHighlightingPlugin",
    "TextMarkersPlugin",
    "default_plugins",
]
