"""Diagnostic abstractions shared across the annotation pipeline."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class RecordingEmitter:
    """Emitter that keeps every diagnostic in memory, mostly for tests and batch runs."""

    def __init__(self, *, debug_enabled: bool = False) -> None:
        self.debug_enabled = debug_enabled
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def events_named(self, name: str) -> list[dict[str, Any]]:
        """Return the payloads recorded for ``name`` in emission order."""
        return [payload for event, payload in self.events if event == name]


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "unsupported_language":
        language = data.get("language") or "<none>"
        return f"No syntax highlighting available for language '{language}'"

    if name == "meta_option_error":
        option = data.get("option") or "<unknown>"
        reason = data.get("reason") or "invalid value"
        return f"Ignoring meta option '{option}': {reason}"

    if name == "contrast_adjusted":
        original = data.get("original") or "<unknown>"
        adjusted = data.get("adjusted") or "<unknown>"
        line = data.get("line")
        suffix = f" on line {line}" if line is not None else ""
        return f"Adjusted token color {original} -> {adjusted}{suffix}"

    if name == "block_rendered":
        language = data.get("language") or "plaintext"
        lines = data.get("lines", 0)
        return f"Rendered {language} block ({lines} lines)"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]
