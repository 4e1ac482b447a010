"""Facade over the annotation engine.

Architecture
: `create_renderer` builds a `CodeRenderer` with the built-in plugins, the
  Pygments tokenizer and a theme derived from the configured Pygments style.
: `render_code` and `render_code_html` render one block; `render_snippets`
  renders several blocks sharing one style sheet.

Usage Example
:
    >>> from codesmith.api import render_code_html
    >>> html, css = render_code_html("print('hi')", "python", 'mark={1}')
    >>> 'class="ec-line highlight mark"' in html
    True
"""

from __future__ import annotations

from .rendering import create_renderer, render_code, render_code_html, render_snippets


__all__ = ["create_renderer", "render_code", "render_code_html", "render_snippets"]
