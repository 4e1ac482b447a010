from __future__ import annotations

from bs4 import BeautifulSoup

from codesmith.adapters.html import render_html, render_page, render_styles, wrap_page
from codesmith.core.engine import CodeRenderer, CodeSnippet
from codesmith.core.nodes import RenderNode
from codesmith.core.styles import StyleCollection


def test_render_html_escapes_text() -> None:
    node = RenderNode(
        "div",
        classes=("ec-line", "mark"),
        attributes={"data-label": "A"},
        children=["if a < b && c:", RenderNode("mark", children=["<tag>"])],
    )

    html = render_html(node)

    assert html == (
        '<div class="ec-line mark" data-label="A">if a &lt; b &amp;&amp; c:'
        "<mark>&lt;tag&gt;</mark></div>"
    )


def test_render_styles_wraps_css() -> None:
    html = render_styles([".a { color: red; }", ".a { color: red; }", ".b .c {}"])

    assert html == "<style>.a { color: red; }\n.b .c {}</style>"


def test_wrap_page_holds_one_style_element() -> None:
    styles = StyleCollection([".a {}"])

    page = wrap_page([RenderNode("pre", children=["x"])], styles, title="Demo")

    soup = BeautifulSoup(page, "html.parser")
    assert soup.title.string == "Demo"
    assert len(soup.find_all("style")) == 1
    assert soup.body.pre.get_text() == "x"


def test_wrap_page_accepts_markup() -> None:
    page = wrap_page("<p>hello</p>", [])

    soup = BeautifulSoup(page, "html.parser")
    assert soup.body.p.get_text() == "hello"


def test_render_page_from_document() -> None:
    document = CodeRenderer().render_many([CodeSnippet("a", "python"), CodeSnippet("b")])

    soup = BeautifulSoup(render_page(document), "html.parser")

    blocks = soup.find_all("pre", class_="codesmith")
    assert [block.get_text() for block in blocks] == ["a", "b"]
    assert blocks[0]["data-language"] == "python"
    assert soup.title.string == "Code blocks"

    single = BeautifulSoup(render_page(document.blocks[0]), "html.parser")
    assert len(single.find_all("pre")) == 1
