"""Block rendering engine tying the pipeline, the renderer and the plugins together."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

from .block import CodeBlock
from .config import EngineConfig
from .context import BlockSession, RenderData
from .diagnostics import DiagnosticEmitter, NullEmitter
from .hooks import HookPhase, HookPipeline, HookRegistry, Plugin
from .nodes import RenderNode
from .render import render_block_tree, render_line
from .styles import StyleCollection
from .theme import DEFAULT_DARK_THEME, Theme
from .tokens import PlainTextTokenizer, Tokenizer


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CodeSnippet:
    """Input of a render: code text, language id and meta string."""

    code: str
    language: str = ""
    meta: str = ""


@dataclass(slots=True)
class RenderedBlock:
    """Render tree and styles of a single block."""

    tree: RenderNode
    styles: StyleCollection
    block: CodeBlock


@dataclass(slots=True)
class RenderedDocument:
    """Rendered blocks of one document with their merged styles."""

    blocks: list[RenderedBlock] = field(default_factory=list)
    styles: StyleCollection = field(default_factory=StyleCollection)


class CodeRenderer:
    """Render code blocks through the registered plugins."""

    def __init__(
        self,
        plugins: Iterable[Plugin] = (),
        *,
        config: EngineConfig | None = None,
        theme: Theme | None = None,
        tokenizer: Tokenizer | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.theme = theme or DEFAULT_DARK_THEME
        self.tokenizer: Tokenizer = tokenizer or PlainTextTokenizer()
        self.emitter: DiagnosticEmitter = emitter or NullEmitter()
        self.registry = HookRegistry()
        for plugin in plugins:
            self.registry.register_plugin(plugin)
        self.pipeline = HookPipeline(self.registry)

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self.registry.plugins

    def base_styles(self, session: BlockSession) -> StyleCollection:
        """Collect the styles every plugin contributes once per document."""
        styles = StyleCollection()
        for plugin in self.registry.plugins:
            styles.update(plugin.base_styles(session))
        return styles

    def render(self, code: str, language: str = "", meta: str = "") -> RenderedBlock:
        """Run ``code`` through every phase and return its render tree.

        A failing hook aborts the block with
        :class:`~codesmith.core.exceptions.PluginExecutionError`; no partial tree
        is returned.
        """
        with self.pipeline.session():
            block = CodeBlock(self._prepare_code(code), language, meta)
            session = BlockSession(
                block,
                theme=self.theme,
                config=self.config,
                emitter=self.emitter,
                tokenizer=self.tokenizer,
            )
            self.pipeline.run_before_rendering(session)

            line_nodes: list[RenderNode] = []
            for index, line in enumerate(block.get_lines()):
                line_data = RenderData(line_ast=render_line(line))
                self.pipeline.run_phase(
                    HookPhase.POSTPROCESS_RENDERED_LINE,
                    session,
                    line_index=index,
                    render_data=line_data,
                )
                if line_data.line_ast is not None:
                    line_nodes.append(line_data.line_ast)

            block_data = RenderData(block_ast=render_block_tree(line_nodes, block.language))
            self.pipeline.run_phase(
                HookPhase.POSTPROCESS_RENDERED_BLOCK, session, render_data=block_data
            )
            session.finish()

            styles = self.base_styles(session).merge(block.styles)
            tree = block_data.block_ast or render_block_tree(line_nodes, block.language)

        self.emitter.event(
            "block_rendered", {"language": block.language, "lines": len(block.get_lines())}
        )
        logger.debug("Rendered %s block with %d lines", block.language or "plain", len(line_nodes))
        return RenderedBlock(tree=tree, styles=styles, block=block)

    def render_many(self, snippets: Iterable[CodeSnippet]) -> RenderedDocument:
        """Render independent blocks and merge their styles."""
        document = RenderedDocument()
        for snippet in snippets:
            rendered = self.render(snippet.code, snippet.language, snippet.meta)
            document.blocks.append(rendered)
            document.styles.merge(rendered.styles)
        return document

    def _prepare_code(self, code: str) -> str:
        text = code.rstrip("\r\n")
        if self.config.tab_width:
            text = text.expandtabs(self.config.tab_width)
        return text


__all__ = ["CodeRenderer", "CodeSnippet", "RenderedBlock", "RenderedDocument"]
