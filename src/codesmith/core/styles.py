"""Style accumulation for rendered blocks."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class StyleCollection:
    """Ordered set of CSS snippets deduplicated by exact content.

    Each rendered block owns one collection; a render session merges the block
    collections so identical rules contributed by many blocks appear once.
    """

    def __init__(self, styles: Iterable[str] = ()) -> None:
        self._styles: dict[str, None] = {}
        self.update(styles)

    def add(self, css: str) -> bool:
        """Add a snippet, returning False when an identical one already exists."""
        text = css.strip()
        if not text or text in self._styles:
            return False
        self._styles[text] = None
        return True

    def update(self, styles: Iterable[str]) -> None:
        for css in styles:
            self.add(css)

    def merge(self, other: StyleCollection) -> StyleCollection:
        """Add every snippet of ``other`` and return ``self``."""
        self.update(other)
        return self

    def __contains__(self, css: object) -> bool:
        return isinstance(css, str) and css.strip() in self._styles

    def __iter__(self) -> Iterator[str]:
        return iter(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    def to_css(self) -> str:
        return "\n".join(self._styles)


__all__ = ["StyleCollection"]
