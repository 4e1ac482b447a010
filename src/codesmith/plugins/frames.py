"""Editor and terminal frames around rendered blocks.

A block gets its title from a ``title="..."`` (or ``@title``) meta option or,
when enabled, from a file name comment in its first lines::

    // src/app.ts
    # Settings: config/settings.toml

The comment line is removed from the code together with a blank line
following it. ``frame=code|terminal|none|auto`` selects the frame; ``auto``
picks a terminal frame for shell languages.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
import re

from codesmith.core.colors import ensure_color_contrast_on_background, mix, multiply_alpha
from codesmith.core.config import FramesConfig
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.nodes import RenderNode


LANGUAGE_GROUPS: dict[str, tuple[str, ...]] = {
    "code": (
        "astro", "cjs", "htm", "html", "js", "jsx", "mjs", "svelte",
        "ts", "tsx", "typescript", "vb", "vue", "vue-html",
    ),
    "terminal": (
        "ansi", "bash", "bat", "batch", "cmd", "console", "powershell", "ps",
        "ps1", "psd1", "psm1", "sh", "shell", "shellscript", "shellsession", "zsh",
    ),
    "data": ("csv", "env", "ini", "json", "toml", "xml", "yaml", "yml"),
    "styles": ("css", "less", "sass", "scss", "styl", "stylus", "xsl"),
    "textContent": ("markdown", "md", "mdx"),
}

FILE_NAME_SCAN_LINES = 4
TITLE_MIN_CONTRAST = 4.5

_EXTENSIONS = "|".join(
    sorted({re.escape(name) for group in LANGUAGE_GROUPS.values() for name in group})
)
FILE_NAME_COMMENT = re.compile(
    r"^\s*(?://|#(?!!)|<!--)\s*"
    r"(?:(.*?)(?:\uff1a|:(?!//)))?\s*"
    rf"([\w./~\[\]\\-]*(?:\.(?:{_EXTENSIONS}))?)"
    r"\s*(?:-->)?\s*$"
)
_PATH_START = re.compile(r"^[/\\.~]")
_EXTENSION = re.compile(r"\.([^.]+)$")


class FrameType(str, Enum):
    """Frame drawn around a block."""

    CODE = "code"
    """Editor window with an optional file name tab."""

    TERMINAL = "terminal"
    """Terminal window."""

    NONE = "none"
    """No frame, the block is rendered as-is."""

    AUTO = "auto"
    """Terminal for shell languages, editor for everything else."""

    @classmethod
    def from_string(cls, value: str) -> FrameType | None:
        """Convert user input, accepting ``editor``, ``shell`` and an empty value."""
        aliases = {"": "none", "editor": "code", "shell": "terminal"}
        name = aliases.get(value.strip().lower(), value.strip().lower())
        try:
            return cls(name)
        except ValueError:
            return None


def language_group(language: str) -> tuple[str, ...] | None:
    for group in LANGUAGE_GROUPS.values():
        if language in group:
            return group
    return None


def is_terminal_language(language: str) -> bool:
    return language in LANGUAGE_GROUPS["terminal"]


def file_name_from_comment(line: str, language: str) -> str | None:
    """Return the file name announced by a comment line, if any.

    Terminal languages accept any path-like name. Other known languages only
    accept names whose extension belongs to their own language group.
    """
    match = FILE_NAME_COMMENT.match(line)
    name = match.group(2) if match else None
    if not name:
        return None

    group = language_group(language)
    extension = _EXTENSION.search(name)
    if group is LANGUAGE_GROUPS["terminal"] and _PATH_START.match(name):
        return name
    if extension is None:
        return None
    if group is not None and extension.group(1) not in group:
        return None
    return name


def frame_styles(session: BlockSession) -> list[str]:
    """Return the CSS of frames, derived from the theme colors."""
    theme = session.theme
    header_bg = mix(theme.bg, theme.fg, 0.08)
    border = mix(theme.bg, theme.fg, 0.2)
    title = ensure_color_contrast_on_background(theme.fg, header_bg, TITLE_MIN_CONTRAST)
    shadow = theme.color("widget.shadow") or multiply_alpha(border, 0.75)
    return [
        ".code-snippet { margin: 1rem 0; border: 1px solid "
        f"{border}; border-radius: 0.3rem; overflow: hidden; "
        f"box-shadow: 0 0.1rem 0.4rem {shadow}; }}",
        f".code-snippet .header {{ display: flex; background: {header_bg}; color: {title}; "
        "font-size: 0.85rem; min-height: 1.75rem; }",
        f".code-snippet .header .title {{ padding: 0.25rem 1rem; border-bottom: 2px solid "
        f"{border}; background: {theme.bg}; }}",
        ".code-snippet.is-terminal .header { justify-content: center; }",
        ".code-snippet .header .sr-only { position: absolute; width: 1px; height: 1px; "
        "overflow: hidden; clip: rect(0, 0, 0, 0); white-space: nowrap; }",
        ".code-snippet pre.codesmith { margin: 0; }",
    ]


class FramesPlugin(Plugin):
    """Wrap blocks in editor or terminal frames with optional titles."""

    name = "frames"

    def __init__(self, config: FramesConfig | None = None) -> None:
        self.config = config or FramesConfig()

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        return frame_styles(session)

    @hook(HookPhase.PREPROCESS_METADATA)
    def parse_metadata(self, context: HookContext) -> None:
        options = context.options
        consumed = []

        titles = options.select(("title", "@title"), "string")
        if titles:
            context.data["title"] = str(titles[-1].value)
            consumed.extend(titles)

        frame_type = FrameType.AUTO
        frame_options = [
            option for option in options.select("frame") if option.kind == "string"
        ]
        if frame_options:
            raw = str(frame_options[-1].value)
            parsed = FrameType.from_string(raw)
            if parsed is None:
                context.event(
                    "meta_option_error",
                    option=frame_options[-1].raw.strip(),
                    reason=f"unknown frame type `{raw}`",
                )
            else:
                frame_type = parsed
            consumed.extend(frame_options)
        context.data["frame_type"] = frame_type

        if consumed:
            context.block.meta = options.without(consumed)

    @hook(HookPhase.PREPROCESS_CODE)
    def extract_file_name(self, context: HookContext) -> None:
        if not self.config.extract_file_name_from_code or context.data.get("title"):
            return
        if context.data.get("frame_type") is FrameType.NONE:
            return

        block = context.block
        for index, line in enumerate(block.get_lines(0, FILE_NAME_SCAN_LINES)):
            title = file_name_from_comment(line.text, block.language)
            if title is None:
                continue
            context.data["title"] = title
            block.delete_line(index)
            following = block.get_line(index)
            if following is not None and not following.text.strip():
                block.delete_line(index)
            return

    @hook(HookPhase.POSTPROCESS_RENDERED_BLOCK)
    def wrap_block(self, context: HookContext) -> None:
        frame_type = context.data.get("frame_type", FrameType.AUTO)
        block_ast = context.render_data.block_ast
        if frame_type is FrameType.NONE or block_ast is None:
            return

        if frame_type is FrameType.AUTO:
            is_terminal = is_terminal_language(context.block.language)
        else:
            is_terminal = frame_type is FrameType.TERMINAL

        title = context.data.get("title")
        figure = RenderNode("figure", classes=("code-snippet",))
        if is_terminal:
            figure.add_class("is-terminal")
        if title:
            figure.add_class("has-title")

        header = RenderNode("figcaption", classes=("header",))
        if title:
            header.append(RenderNode("span", classes=("title",), children=[title]))
        elif is_terminal and self.config.show_terminal_label:
            header.append(
                RenderNode("span", classes=("sr-only",), children=[self.config.terminal_label])
            )
        figure.append(header)
        figure.append(block_ast)
        context.render_data.block_ast = figure


__all__ = [
    "FILE_NAME_COMMENT",
    "LANGUAGE_GROUPS",
    "FrameType",
    "FramesPlugin",
    "file_name_from_comment",
    "frame_styles",
    "is_terminal_language",
    "language_group",
]
