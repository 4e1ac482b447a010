"""Single line of code together with its annotations."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from .annotation import Annotation, AnnotationKind, InlineRange
from .exceptions import EditRangeError, PhaseViolationError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .block import ProcessingState


AnnotationFilter = Callable[[Annotation], bool]


class CodeLine:
    """Line text plus an ordered list of annotations.

    Text edits replace the stored string by value. Annotation ranges are never
    shifted by an edit: column annotations are only added once every code edit
    has happened, and the renderer clamps ranges against the final text.
    """

    __slots__ = ("_annotations", "_state_provider", "_text")

    def __init__(self, text: str = "") -> None:
        if "\n" in text:
            msg = "Code lines cannot contain line breaks."
            raise ValueError(msg)
        self._text = text
        self._annotations: list[Annotation] = []
        self._state_provider: Callable[[], ProcessingState | None] | None = None

    def __repr__(self) -> str:
        return f"CodeLine({self._text!r}, annotations={len(self._annotations)})"

    @property
    def text(self) -> str:
        return self._text

    def attach(self, state_provider: Callable[[], ProcessingState | None] | None) -> None:
        """Bind the line to the processing state of its owning block."""
        self._state_provider = state_provider

    def _state(self) -> ProcessingState | None:
        if self._state_provider is None:
            return None
        return self._state_provider()

    def edit_text(self, column_start: int, column_end: int, new_text: str) -> str:
        """Replace ``text[column_start:column_end]`` with ``new_text``.

        Raises :class:`EditRangeError` for inverted or out-of-bounds ranges and
        :class:`PhaseViolationError` when the current phase forbids code edits.
        """
        state = self._state()
        if state is not None and not state.can_edit_code:
            msg = "Cannot edit code line text in the current state."
            raise PhaseViolationError(msg)
        length = len(self._text)
        if column_start < 0 or column_end < 0:
            msg = f"Negative edit range [{column_start}, {column_end})"
            raise EditRangeError(msg)
        if column_start > column_end:
            msg = f"Edit range start {column_start} is after its end {column_end}"
            raise EditRangeError(msg)
        if column_start > length or column_end > length:
            msg = f"Edit range [{column_start}, {column_end}) exceeds line length {length}"
            raise EditRangeError(msg)
        if "\n" in new_text:
            msg = "Replacement text cannot contain line breaks."
            raise EditRangeError(msg)
        self._text = self._text[:column_start] + new_text + self._text[column_end:]
        return self._text

    def _check_annotations_editable(self) -> None:
        state = self._state()
        if state is not None and not state.can_edit_annotations:
            msg = "Cannot edit code line annotations in the current state."
            raise PhaseViolationError(msg)

    def add_annotation(self, annotation: Annotation) -> Annotation:
        """Append an annotation, keeping insertion order."""
        self._check_annotations_editable()
        if not isinstance(annotation, Annotation):
            msg = f"Expected an Annotation, got {type(annotation).__name__}"
            raise TypeError(msg)
        self._annotations.append(annotation)
        return annotation

    def remove_annotation(self, annotation: Annotation) -> None:
        """Remove a previously added annotation (matched by identity)."""
        self._check_annotations_editable()
        for index, current in enumerate(self._annotations):
            if current is annotation:
                del self._annotations[index]
                return
        msg = "Annotation does not belong to this line."
        raise ValueError(msg)

    def get_annotations(
        self,
        *,
        kind: AnnotationKind | Iterable[AnnotationKind] | None = None,
        inline_range: InlineRange | None = None,
        predicate: AnnotationFilter | None = None,
    ) -> list[Annotation]:
        """Return annotations in insertion order, optionally filtered."""
        kinds: set[AnnotationKind] | None
        if kind is None:
            kinds = None
        elif isinstance(kind, AnnotationKind):
            kinds = {kind}
        else:
            kinds = set(kind)

        selected: list[Annotation] = []
        for annotation in self._annotations:
            if kinds is not None and annotation.kind not in kinds:
                continue
            if inline_range is not None and not annotation.covers(
                inline_range.column_start, inline_range.column_end
            ):
                continue
            if predicate is not None and not predicate(annotation):
                continue
            selected.append(annotation)
        return selected

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return tuple(self._annotations)


__all__ = ["CodeLine"]
