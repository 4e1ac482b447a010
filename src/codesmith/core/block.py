"""Code block container shared by every phase of the hook pipeline."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Any, overload

from .exceptions import PhaseViolationError
from .line import CodeLine
from .meta import MetaOptions
from .styles import StyleCollection


_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(slots=True)
class ProcessingState:
    """Edit permissions granted to hooks while the pipeline runs."""

    can_edit_code: bool = True
    can_edit_language: bool = True
    can_edit_metadata: bool = True
    can_edit_annotations: bool = True


class LineSequence(Sequence[CodeLine]):
    """Live, restartable view over the lines of a block.

    The view holds no copy: iterating it twice walks the block's current lines
    each time, so it reflects insertions and deletions made in between.
    """

    __slots__ = ("_block",)

    def __init__(self, block: CodeBlock) -> None:
        self._block = block

    @overload
    def __getitem__(self, index: int) -> CodeLine: ...

    @overload
    def __getitem__(self, index: slice) -> list[CodeLine]: ...

    def __getitem__(self, index: int | slice) -> CodeLine | list[CodeLine]:
        return self._block._lines[index]

    def __len__(self) -> int:
        return len(self._block._lines)

    def __iter__(self) -> Iterator[CodeLine]:
        return iter(self._block._lines)


class CodeBlock:
    """Ordered lines, language, meta string and per-plugin data of one snippet."""

    def __init__(self, code: str = "", language: str = "", meta: str = "") -> None:
        self._lines: list[CodeLine] = []
        self._language = language
        self._meta = meta
        self._options = MetaOptions(meta)
        self.state: ProcessingState | None = None
        self.styles = StyleCollection()
        self.plugin_data: dict[str, dict[str, Any]] = {}
        self.original_language = language
        self.insert_lines(0, _LINE_BREAK.split(code) if code else [""])

    def __repr__(self) -> str:
        return f"CodeBlock(language={self._language!r}, lines={len(self._lines)})"

    @property
    def language(self) -> str:
        return self._language

    @language.setter
    def language(self, value: str) -> None:
        if self.state is not None and not self.state.can_edit_language:
            msg = 'Cannot edit code block property "language" in the current state.'
            raise PhaseViolationError(msg)
        self._language = value

    @property
    def meta(self) -> str:
        return self._meta

    @meta.setter
    def meta(self, value: str) -> None:
        if self.state is not None and not self.state.can_edit_metadata:
            msg = 'Cannot edit code block property "meta" in the current state.'
            raise PhaseViolationError(msg)
        self._meta = value
        self._options = MetaOptions(value)

    @property
    def options(self) -> MetaOptions:
        return self._options

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self._lines)

    def _current_state(self) -> ProcessingState | None:
        return self.state

    def get_line(self, index: int) -> CodeLine | None:
        """Return the line at ``index`` or None when it does not exist."""
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def get_lines(self, start: int | None = None, end: int | None = None) -> Sequence[CodeLine]:
        """Return a live view of the lines, or a list slice when bounds are given."""
        if start is None and end is None:
            return LineSequence(self)
        return self._lines[start:end]

    def insert_lines(self, index: int, texts: Iterable[str]) -> list[CodeLine]:
        """Insert new lines before ``index`` and return them."""
        self._check_code_editable("insert")
        if index < 0 or index > len(self._lines):
            msg = f"Cannot insert lines at index {index}, block has {len(self._lines)} lines."
            raise IndexError(msg)
        created = [CodeLine(text) for text in texts]
        for line in created:
            line.attach(self._current_state)
        self._lines[index:index] = created
        return created

    def insert_line(self, index: int, text: str) -> CodeLine:
        return self.insert_lines(index, [text])[0]

    def delete_lines(self, indices: Iterable[int]) -> None:
        """Delete the lines at the given indices."""
        self._check_code_editable("delete")
        unique = sorted(set(indices), reverse=True)
        for index in unique:
            if not 0 <= index < len(self._lines):
                msg = f"Cannot delete line {index}, block has {len(self._lines)} lines."
                raise IndexError(msg)
        for index in unique:
            self._lines[index].attach(None)
            del self._lines[index]

    def delete_line(self, index: int) -> None:
        self.delete_lines([index])

    def data_for(self, plugin_name: str) -> dict[str, Any]:
        """Return the mutable data bag of a plugin for this block."""
        return self.plugin_data.setdefault(plugin_name, {})

    def _check_code_editable(self, action: str) -> None:
        if self.state is not None and not self.state.can_edit_code:
            msg = f"Cannot {action} code block lines in the current state."
            raise PhaseViolationError(msg)


__all__ = ["CodeBlock", "LineSequence", "ProcessingState"]
