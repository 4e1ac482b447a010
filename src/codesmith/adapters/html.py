"""Serialize render trees to HTML through BeautifulSoup."""

from __future__ import annotations

from collections.abc import Iterable

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Stylesheet

from codesmith.core.engine import RenderedBlock, RenderedDocument
from codesmith.core.nodes import RenderNode
from codesmith.core.styles import StyleCollection


def to_soup(node: RenderNode, soup: BeautifulSoup | None = None) -> Tag:
    """Convert a render tree into a BeautifulSoup element."""
    soup = soup or BeautifulSoup("", "html.parser")
    element = soup.new_tag(node.tag)
    if node.classes:
        element["class"] = list(node.classes)
    for key, value in node.attributes.items():
        element[key] = value
    for child in node.children:
        if isinstance(child, RenderNode):
            element.append(to_soup(child, soup))
        else:
            element.append(NavigableString(child))
    return element


def render_html(node: RenderNode) -> str:
    """Return the HTML markup of a render tree."""
    return str(to_soup(node))


def render_styles(styles: StyleCollection | Iterable[str]) -> str:
    """Return a ``<style>`` element holding ``styles``."""
    collection = styles if isinstance(styles, StyleCollection) else StyleCollection(styles)
    soup = BeautifulSoup("", "html.parser")
    element = soup.new_tag("style")
    element.append(Stylesheet(collection.to_css()))
    return str(element)


PAGE_TEMPLATE = (
    "<!DOCTYPE html><html><head><meta charset='utf-8'/><title></title></head>"
    "<body></body></html>"
)


def wrap_page(
    body: Iterable[RenderNode] | str,
    styles: StyleCollection | Iterable[str],
    *,
    title: str = "Code blocks",
) -> str:
    """Return a standalone HTML page holding ``body`` and a single ``<style>`` element.

    ``body`` is either a sequence of render trees or ready-made markup.
    """
    collection = styles if isinstance(styles, StyleCollection) else StyleCollection(styles)
    soup = BeautifulSoup(PAGE_TEMPLATE, "html.parser")
    soup.title.string = title
    style = soup.new_tag("style")
    style.append(Stylesheet(collection.to_css()))
    soup.head.append(style)
    if isinstance(body, str):
        soup.body.append(BeautifulSoup(body, "html.parser"))
    else:
        for node in body:
            soup.body.append(to_soup(node, soup))
    return str(soup)


def render_page(
    document: RenderedDocument | RenderedBlock, *, title: str = "Code blocks"
) -> str:
    """Return a standalone HTML page with the rendered blocks and their styles."""
    blocks = [document] if isinstance(document, RenderedBlock) else document.blocks
    return wrap_page([block.tree for block in blocks], document.styles, title=title)


__all__ = ["render_html", "render_page", "render_styles", "to_soup", "wrap_page"]
