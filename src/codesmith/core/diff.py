"""Interpret ``+``/``-`` line prefixes of ``diff`` blocks as line markers.

Authors often label a snippet ``diff`` only to highlight changed lines of code
written in another language. The prefixes are stripped, the common indentation
that follows them is removed so relative indentation survives, and each
prefixed line receives a full-line ``ins`` or ``del`` marker.

Blocks whose first lines look like genuine diff output (``--- a/file``,
``@@ -1 +1 @@``, ``1,2c1,2``) are left untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import re

from .block import CodeBlock
from .markers import DiffTarget, MarkerType
from .ranges import apply_resolved_markers, resolve_targets


logger = logging.getLogger(__name__)

REAL_DIFF_HEADER = re.compile(r"^([*+-]{3}\s|@@\s|[0-9,]+[acd][0-9,]+\s*$)")
DIFF_LINE = re.compile(r"^(([+-](?![+-]))?\s*)(.*)$")
HEADER_SCAN_LINES = 4
_STRIPPED_FLAG = "diff_markers_stripped"


@dataclass(frozen=True, slots=True)
class DiffEdit:
    """Columns to strip from one line and the marker it carries, if any."""

    line_index: int
    columns: int
    marker_type: MarkerType | None


def looks_like_real_diff(texts: Sequence[str]) -> bool:
    """Return True when one of the first lines carries a real diff header."""
    return any(REAL_DIFF_HEADER.match(text) for text in texts[:HEADER_SCAN_LINES])


def plan_diff_edits(texts: Sequence[str]) -> list[DiffEdit]:
    """Compute the prefix removal for every line without touching the text."""
    if looks_like_real_diff(texts):
        return []

    parsed: list[tuple[int, MarkerType | None, bool]] = []
    min_indentation: int | None = None
    for text in texts:
        match = DIFF_LINE.match(text)
        if match is None:  # pragma: no cover - the pattern matches any single line
            parsed.append((0, None, False))
            continue
        prefix, marker, content = match.group(1), match.group(2), match.group(3)
        marker_type = {"+": MarkerType.INS, "-": MarkerType.DEL}.get(marker or "")
        has_content = bool(content.strip())
        if has_content and (min_indentation is None or len(prefix) < min_indentation):
            min_indentation = len(prefix)
        parsed.append((len(prefix), marker_type, has_content))

    edits: list[DiffEdit] = []
    for index, (prefix_width, marker_type, _) in enumerate(parsed):
        if min_indentation:
            columns = min(min_indentation, prefix_width)
        else:
            columns = 1 if marker_type is not None else 0
        if columns or marker_type is not None:
            edits.append(DiffEdit(index, columns, marker_type))
    return edits


def strip_diff_markers(block: CodeBlock) -> list[DiffTarget]:
    """Strip diff prefixes from ``block`` and add the matching line markers.

    Runs at most once per block; later calls return an empty list.
    """
    data = block.data_for("diff")
    if data.get(_STRIPPED_FLAG):
        return []
    data[_STRIPPED_FLAG] = True

    lines = block.get_lines()
    edits = plan_diff_edits([line.text for line in lines])
    targets: list[DiffTarget] = []
    for edit in edits:
        if edit.columns:
            lines[edit.line_index].edit_text(0, edit.columns, "")
        if edit.marker_type is not None:
            targets.append(DiffTarget(edit.marker_type, edit.line_index))

    apply_resolved_markers(lines, resolve_targets(lines, targets))
    if targets:
        logger.debug("Converted %d diff prefixes into line markers", len(targets))
    return targets


__all__ = [
    "DIFF_LINE",
    "REAL_DIFF_HEADER",
    "DiffEdit",
    "looks_like_real_diff",
    "plan_diff_edits",
    "strip_diff_markers",
]
