"""Per-block state handed to plugin hooks."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .block import CodeBlock, ProcessingState
from .config import EngineConfig
from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import PhaseViolationError
from .hooks import PHASE_CAPABILITIES, HookPhase, PhaseCapabilities
from .line import CodeLine
from .meta import MetaOptions
from .nodes import RenderNode
from .theme import DEFAULT_DARK_THEME, Theme
from .tokens import PlainTextTokenizer, Tokenizer


@dataclass(slots=True)
class RenderData:
    """Render trees that rendering hooks may edit or replace."""

    line_ast: RenderNode | None = None
    block_ast: RenderNode | None = None


class BlockSession:
    """State shared by every hook while one block goes through the pipeline."""

    def __init__(
        self,
        block: CodeBlock,
        *,
        theme: Theme | None = None,
        config: EngineConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
        tokenizer: Tokenizer | None = None,
    ) -> None:
        self.block = block
        self.theme = theme or DEFAULT_DARK_THEME
        self.config = config or EngineConfig()
        self.emitter: DiagnosticEmitter = emitter or NullEmitter()
        self.tokenizer: Tokenizer = tokenizer or PlainTextTokenizer()
        self.phase: HookPhase | None = None

    def enter_phase(self, phase: HookPhase) -> None:
        """Switch to ``phase`` and apply its edit permissions to the block."""
        self.phase = phase
        self.block.state = PHASE_CAPABILITIES[phase].to_state()

    def finish(self) -> None:
        """Freeze the block once the pipeline is done."""
        self.phase = None
        self.block.state = ProcessingState(
            can_edit_code=False,
            can_edit_language=False,
            can_edit_metadata=False,
            can_edit_annotations=False,
        )

    def context_for(
        self,
        plugin_name: str,
        *,
        line_index: int | None = None,
        render_data: RenderData | None = None,
    ) -> HookContext:
        return HookContext(self, plugin_name, line_index=line_index, render_data=render_data)


class HookContext:
    """What a single hook invocation can see and do."""

    __slots__ = ("line_index", "plugin_name", "render_data", "session")

    def __init__(
        self,
        session: BlockSession,
        plugin_name: str,
        *,
        line_index: int | None = None,
        render_data: RenderData | None = None,
    ) -> None:
        self.session = session
        self.plugin_name = plugin_name
        self.line_index = line_index
        self.render_data = render_data or RenderData()

    @property
    def block(self) -> CodeBlock:
        return self.session.block

    @property
    def phase(self) -> HookPhase | None:
        return self.session.phase

    @property
    def capabilities(self) -> PhaseCapabilities:
        if self.session.phase is None:
            return PhaseCapabilities()
        return PHASE_CAPABILITIES[self.session.phase]

    @property
    def theme(self) -> Theme:
        return self.session.theme

    @property
    def config(self) -> EngineConfig:
        return self.session.config

    @property
    def emitter(self) -> DiagnosticEmitter:
        return self.session.emitter

    @property
    def tokenizer(self) -> Tokenizer:
        return self.session.tokenizer

    @property
    def options(self) -> MetaOptions:
        return self.session.block.options

    @property
    def data(self) -> dict[str, Any]:
        """Per-block data bag of the plugin owning this hook."""
        return self.session.block.data_for(self.plugin_name)

    @property
    def lines(self) -> Sequence[CodeLine]:
        return self.session.block.get_lines()

    @property
    def line(self) -> CodeLine | None:
        if self.line_index is None:
            return None
        return self.session.block.get_line(self.line_index)

    def add_styles(self, css: str) -> bool:
        """Add CSS to the block's style collection."""
        if not self.capabilities.add_styles:
            phase = self.phase.label if self.phase else "idle"
            msg = f'Styles cannot be added during the "{phase}" phase.'
            raise PhaseViolationError(msg)
        return self.session.block.styles.add(css)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.session.emitter.warning(message, exc)

    def event(self, name: str, **payload: Any) -> None:
        self.session.emitter.event(name, payload)


__all__ = ["BlockSession", "HookContext", "RenderData"]
