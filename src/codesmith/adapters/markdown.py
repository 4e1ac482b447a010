"""Python-Markdown extension rendering fenced code blocks with the engine.

The styles of every rendered block are collected on the extension instance so
the caller can emit them once per page::

    extension = CodeBlocksExtension()
    html = markdown.markdown(text, extensions=[extension])
    css = extension.styles.to_css()
"""

from __future__ import annotations

import re
from typing import Any

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from codesmith.adapters.html import render_html
from codesmith.api import create_renderer
from codesmith.core.engine import CodeRenderer
from codesmith.core.styles import StyleCollection


FENCE_START = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?P<language>[\w#.+-]*)[ \t]*(?P<meta>.*?)[ \t]*$"
)


class _CodeBlockPreprocessor(Preprocessor):
    """Replace fenced blocks by placeholders of their rendered HTML."""

    def __init__(self, md: Markdown, extension: CodeBlocksExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: list[str]) -> list[str]:  # type: ignore[override]
        result: list[str] = []
        index = 0
        length = len(lines)

        while index < length:
            match = FENCE_START.match(lines[index])
            if match is None or ("`" in match.group("meta") and match.group("fence")[0] == "`"):
                result.append(lines[index])
                index += 1
                continue

            fence = match.group("fence")
            closing = re.compile(rf"^[ ]{{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
            end = index + 1
            while end < length and not closing.match(lines[end]):
                end += 1
            if end >= length:
                result.append(lines[index])
                index += 1
                continue

            code = "\n".join(lines[index + 1 : end])
            html = self._render(code, match.group("language"), match.group("meta"))
            placeholder = self.md.htmlStash.store(html)
            result.extend(["", placeholder, ""])
            index = end + 1

        return result

    def _render(self, code: str, language: str, meta: str) -> str:
        rendered = self.extension.renderer.render(code, language, meta)
        self.extension.styles.merge(rendered.styles)
        return render_html(rendered.tree)


class CodeBlocksExtension(Extension):
    """Render fenced code blocks through a :class:`CodeRenderer`."""

    def __init__(self, renderer: CodeRenderer | None = None, **kwargs: Any) -> None:
        self.config = {
            "config_file": ["", "YAML file holding the engine configuration"],
        }
        super().__init__(**kwargs)
        self._renderer = renderer
        self.styles = StyleCollection()

    @property
    def renderer(self) -> CodeRenderer:
        if self._renderer is None:
            self._renderer = create_renderer(self.getConfig("config_file") or None)
        return self._renderer

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        md.registerExtension(self)
        processor = _CodeBlockPreprocessor(md, self)
        md.preprocessors.register(processor, "codesmith_code_blocks", 30)

    def reset(self) -> None:
        self.styles = StyleCollection()


def makeExtension(  # noqa: N802
    **kwargs: Any,
) -> CodeBlocksExtension:  # pragma: no cover - Markdown hook
    return CodeBlocksExtension(**kwargs)


__all__ = ["CodeBlocksExtension", "makeExtension"]
