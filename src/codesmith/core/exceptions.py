"""Custom exception hierarchy for the code annotation pipeline."""

from __future__ import annotations


class CodeRenderingError(RuntimeError):
    """Base exception for code block rendering failures."""


class EditRangeError(CodeRenderingError, ValueError):
    """Raised when a text edit targets columns outside of the line."""


class PhaseViolationError(CodeRenderingError):
    """Raised when a hook uses a capability its phase does not grant."""


class PipelineReentryError(CodeRenderingError):
    """Raised when the hook pipeline is started while it is already running."""


class InvalidColorError(CodeRenderingError, ValueError):
    """Raised when a color value cannot be parsed."""


class ConfigurationError(CodeRenderingError):
    """Raised when engine configuration cannot be loaded or validated."""


class PluginExecutionError(CodeRenderingError):
    """Raised when a plugin hook fails; the original error is chained as cause."""

    def __init__(self, plugin_name: str, phase: str, message: str | None = None) -> None:
        self.plugin_name = plugin_name
        self.phase = phase
        text = message or f'Plugin "{plugin_name}" caused an error in its "{phase}" hook.'
        super().__init__(text)


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CodeRenderingError",
    "ConfigurationError",
    "EditRangeError",
    "InvalidColorError",
    "PhaseViolationError",
    "PipelineReentryError",
    "PluginExecutionError",
    "exception_hint",
    "exception_messages",
]
