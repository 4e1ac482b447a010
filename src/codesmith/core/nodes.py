"""Minimal element tree produced by the renderer.

The tree is serializer-agnostic: :mod:`codesmith.adapters.html` turns it into
markup. Text children are plain strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class RenderNode:
    """Element with a tag, classes, attributes and ordered children."""

    __slots__ = ("attributes", "children", "classes", "tag")

    def __init__(
        self,
        tag: str,
        *,
        classes: Iterable[str] = (),
        attributes: Mapping[str, str] | None = None,
        children: Iterable[RenderNode | str] = (),
    ) -> None:
        self.tag = tag
        self.classes: list[str] = []
        self.attributes: dict[str, str] = dict(attributes or {})
        self.children: list[RenderNode | str] = []
        self.add_class(*classes)
        self.extend(children)

    def __repr__(self) -> str:
        classes = f".{'.'.join(self.classes)}" if self.classes else ""
        return f"<RenderNode {self.tag}{classes} children={len(self.children)}>"

    def add_class(self, *names: str) -> RenderNode:
        """Append class names, skipping exact duplicates."""
        for name in names:
            for part in name.split():
                if part not in self.classes:
                    self.classes.append(part)
        return self

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_style(self, declarations: str) -> RenderNode:
        """Append CSS declarations to the inline ``style`` attribute."""
        text = declarations.strip().rstrip(";")
        if not text:
            return self
        existing = self.attributes.get("style", "").strip().rstrip(";")
        self.attributes["style"] = f"{existing}; {text}" if existing else text
        return self

    def append(self, child: RenderNode | str) -> RenderNode:
        if isinstance(child, str) and not child:
            return self
        self.children.append(child)
        return self

    def prepend(self, child: RenderNode | str) -> RenderNode:
        self.children.insert(0, child)
        return self

    def extend(self, children: Iterable[RenderNode | str]) -> RenderNode:
        for child in children:
            self.append(child)
        return self

    def text_content(self) -> str:
        """Return the concatenated text of every descendant."""
        parts: list[str] = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text_content())
        return "".join(parts)

    def iter_nodes(self) -> Iterator[RenderNode]:
        """Yield this node and every descendant element depth-first."""
        yield self
        for child in self.children:
            if isinstance(child, RenderNode):
                yield from child.iter_nodes()

    def find_all(self, tag: str | None = None, class_: str | None = None) -> list[RenderNode]:
        return [
            node
            for node in self.iter_nodes()
            if (tag is None or node.tag == tag) and (class_ is None or node.has_class(class_))
        ]

    def find(self, tag: str | None = None, class_: str | None = None) -> RenderNode | None:
        matches = self.find_all(tag, class_)
        return matches[0] if matches else None


def wrap(node: RenderNode, tag: str, *, classes: Iterable[str] = ()) -> RenderNode:
    """Return a new element containing ``node``."""
    return RenderNode(tag, classes=classes, children=[node])


__all__ = ["RenderNode", "wrap"]
