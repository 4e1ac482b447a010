"""Hook declaration and execution engine for the annotation pipeline.

Plugins declare their handlers with the ``@hook`` decorator, which records the
targeted :class:`HookPhase` plus ordering metadata. The :class:`HookRegistry`
turns those declarations into a registration table keyed by phase, and the
:class:`HookPipeline` runs one phase at a time against a block session.

Architecture

`Declaration layer`
: ``@hook`` stores a lightweight :class:`HookDefinition` on every handler.

`Registry layer`
: :class:`HookRegistry` binds definitions to plugin instances and keeps them
  sorted per phase: plugin registration order first, then ``priority`` and the
  ``before``/``after`` constraints naming other plugins.

`Execution layer`
: :class:`HookPipeline` enters each phase (updating the edit permissions of the
  block), calls the handlers in order, refuses nested runs and aborts the block
  on the first failing handler.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto
import logging
from typing import TYPE_CHECKING, Any, cast

from .block import ProcessingState
from .exceptions import PipelineReentryError, PluginExecutionError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .context import BlockSession, HookContext


logger = logging.getLogger(__name__)


class HookPhase(Enum):
    """Ordered phases a code block goes through.

    Each phase isolates one category of mutations so earlier edits settle before
    later phases read them: metadata first, then code text, then syntax
    analysis, annotations and finally the rendered tree.
    """

    PREPROCESS_METADATA = auto()
    """Read and rewrite the meta string, possibly switching the language."""

    PREPROCESS_CODE = auto()
    """Edit the code text: strip diff prefixes, remove file name comments."""

    PERFORM_SYNTAX_ANALYSIS = auto()
    """Tokenize the final code text into syntax annotations."""

    POSTPROCESS_ANALYZED_CODE = auto()
    """Inspect or adjust the syntax annotations."""

    ANNOTATE_CODE = auto()
    """Resolve marker targets and other annotations against the final text."""

    POSTPROCESS_ANNOTATIONS = auto()
    """Adjust annotations once every plugin has added its own."""

    POSTPROCESS_RENDERED_LINE = auto()
    """Edit or replace the render tree of each line."""

    POSTPROCESS_RENDERED_BLOCK = auto()
    """Edit or replace the render tree of the whole block."""

    @property
    def label(self) -> str:
        return self.name.lower()


BEFORE_RENDERING_PHASES: tuple[HookPhase, ...] = (
    HookPhase.PREPROCESS_METADATA,
    HookPhase.PREPROCESS_CODE,
    HookPhase.PERFORM_SYNTAX_ANALYSIS,
    HookPhase.POSTPROCESS_ANALYZED_CODE,
    HookPhase.ANNOTATE_CODE,
    HookPhase.POSTPROCESS_ANNOTATIONS,
)


@dataclass(frozen=True, slots=True)
class PhaseCapabilities:
    """Edits a hook may perform during a phase."""

    edit_code: bool = False
    edit_language: bool = False
    edit_metadata: bool = False
    edit_annotations: bool = False
    add_styles: bool = False

    def to_state(self) -> ProcessingState:
        return ProcessingState(
            can_edit_code=self.edit_code,
            can_edit_language=self.edit_language,
            can_edit_metadata=self.edit_metadata,
            can_edit_annotations=self.edit_annotations,
        )


PHASE_CAPABILITIES: dict[HookPhase, PhaseCapabilities] = {
    HookPhase.PREPROCESS_METADATA: PhaseCapabilities(
        edit_language=True, edit_metadata=True, edit_annotations=True
    ),
    HookPhase.PREPROCESS_CODE: PhaseCapabilities(
        edit_code=True, edit_metadata=True, edit_annotations=True
    ),
    HookPhase.PERFORM_SYNTAX_ANALYSIS: PhaseCapabilities(
        edit_metadata=True, edit_annotations=True
    ),
    HookPhase.POSTPROCESS_ANALYZED_CODE: PhaseCapabilities(
        edit_metadata=True, edit_annotations=True
    ),
    HookPhase.ANNOTATE_CODE: PhaseCapabilities(
        edit_metadata=True, edit_annotations=True, add_styles=True
    ),
    HookPhase.POSTPROCESS_ANNOTATIONS: PhaseCapabilities(
        edit_metadata=True, edit_annotations=True, add_styles=True
    ),
    HookPhase.POSTPROCESS_RENDERED_LINE: PhaseCapabilities(add_styles=True),
    HookPhase.POSTPROCESS_RENDERED_BLOCK: PhaseCapabilities(add_styles=True),
}


HookCallable = Callable[["HookContext"], None]


@dataclass(slots=True)
class HookRegistration:
    """Concrete hook bound to a plugin instance."""

    phase: HookPhase
    plugin_name: str
    name: str
    handler: HookCallable
    order: int
    priority: int = 0
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HookDefinition:
    """Descriptor installed on handler callables by the decorator."""

    phase: HookPhase
    priority: int = 0
    name: str | None = None
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()

    def bind(self, handler: HookCallable, plugin_name: str, order: int) -> HookRegistration:
        """Create a registration for ``handler`` owned by ``plugin_name``."""
        name = self.name or getattr(handler, "__name__", handler.__class__.__name__)
        return HookRegistration(
            phase=self.phase,
            plugin_name=plugin_name,
            name=name,
            handler=handler,
            order=order,
            priority=self.priority,
            before=self.before,
            after=self.after,
        )


def hook(
    phase: HookPhase,
    *,
    priority: int = 0,
    name: str | None = None,
    before: Iterable[str] = (),
    after: Iterable[str] = (),
) -> Callable[[HookCallable], HookCallable]:
    """Decorator used to declare plugin hooks."""
    definition = HookDefinition(
        phase=phase,
        priority=priority,
        name=name,
        before=tuple(before),
        after=tuple(after),
    )

    def decorator(handler: HookCallable) -> HookCallable:
        cast(Any, handler).__hook_definition__ = definition
        return handler

    return decorator


class Plugin:
    """Base class for plugins; subclasses decorate methods with ``@hook``."""

    name: str = "plugin"

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        """Return CSS shared by every block rendered with this plugin."""
        return ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HookRegistry:
    """Registration table of hooks keyed by phase."""

    def __init__(self) -> None:
        self._hooks: dict[HookPhase, list[HookRegistration]] = {}
        self._plugins: list[Plugin] = []

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return tuple(self._plugins)

    def register_plugin(self, plugin: Plugin) -> None:
        """Collect every ``@hook`` decorated method of ``plugin``."""
        if any(existing.name == plugin.name for existing in self._plugins):
            msg = f'A plugin named "{plugin.name}" is already registered.'
            raise ValueError(msg)
        order = len(self._plugins)
        self._plugins.append(plugin)
        for attribute in dir(plugin):
            handler = getattr(plugin, attribute)
            definition = getattr(handler, "__hook_definition__", None)
            if definition is None and hasattr(handler, "__func__"):
                definition = getattr(handler.__func__, "__hook_definition__", None)
            if isinstance(definition, HookDefinition):
                self.register(definition.bind(handler, plugin.name, order))

    def register(self, registration: HookRegistration) -> None:
        """Register a bound hook for later execution."""
        bucket = self._hooks.setdefault(registration.phase, [])
        bucket.append(registration)
        bucket[:] = self._sort_hooks(bucket)

    def hooks_for(self, phase: HookPhase) -> tuple[HookRegistration, ...]:
        return tuple(self._hooks.get(phase, ()))

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the registered hooks."""
        entries: list[dict[str, object]] = []
        for phase in HookPhase:
            for position, registration in enumerate(self.hooks_for(phase)):
                entries.append(
                    {
                        "phase": phase.name,
                        "plugin": registration.plugin_name,
                        "name": registration.name,
                        "priority": registration.priority,
                        "before": list(registration.before),
                        "after": list(registration.after),
                        "order": position,
                    }
                )
        return entries

    def _sort_hooks(self, hooks: list[HookRegistration]) -> list[HookRegistration]:
        """Return hooks ordered deterministically using before/after constraints."""
        if len(hooks) <= 1:
            return list(hooks)

        def _key(index: int) -> tuple[int, int, str, int]:
            current = hooks[index]
            return (current.order, current.priority, current.name, index)

        adjacency: dict[int, set[int]] = {index: set() for index in range(len(hooks))}
        indegree: dict[int, int] = dict.fromkeys(range(len(hooks)), 0)

        def _add_edge(source: int, target: int) -> None:
            if source == target or target in adjacency[source]:
                return
            adjacency[source].add(target)
            indegree[target] += 1

        for current_index, registration in enumerate(hooks):
            for other_index, other in enumerate(hooks):
                if other.plugin_name in registration.before:
                    _add_edge(current_index, other_index)
                if other.plugin_name in registration.after:
                    _add_edge(other_index, current_index)

        queue: deque[int] = deque(
            sorted((index for index, count in indegree.items() if count == 0), key=_key)
        )
        ordered: list[int] = []

        while queue:
            current = queue.popleft()
            ordered.append(current)
            for neighbour in sorted(adjacency[current], key=_key):
                indegree[neighbour] -= 1
                if indegree[neighbour] == 0:
                    queue.append(neighbour)
            queue = deque(sorted(queue, key=_key))

        if len(ordered) != len(hooks):
            cycle_names = sorted(
                f"{hook.plugin_name}.{hook.name}"
                for index, hook in enumerate(hooks)
                if index not in ordered
            )
            raise RuntimeError("Cyclic hook dependencies detected: " + ", ".join(cycle_names))

        return [hooks[index] for index in ordered]


class HookPipeline:
    """Execution engine running registered hooks phase by phase."""

    def __init__(self, registry: HookRegistry | None = None) -> None:
        self.registry = registry or HookRegistry()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @contextmanager
    def session(self) -> Iterator[HookPipeline]:
        """Guard a block run; nested runs raise :class:`PipelineReentryError`."""
        if self._running:
            msg = "The hook pipeline is already running; nested renders are not supported."
            raise PipelineReentryError(msg)
        self._running = True
        try:
            yield self
        finally:
            self._running = False

    def run_phase(self, phase: HookPhase, session: BlockSession, **extra: Any) -> None:
        """Run every hook registered for ``phase`` in order.

        The first failing hook aborts the phase; its error is re-raised as
        :class:`PluginExecutionError` naming the plugin and the phase.
        """
        session.enter_phase(phase)
        for registration in self.registry.hooks_for(phase):
            context = session.context_for(registration.plugin_name, **extra)
            try:
                registration.handler(context)
            except Exception as exc:
                error = PluginExecutionError(registration.plugin_name, phase.label)
                session.emitter.error(str(error), exc)
                raise error from exc

    def run_before_rendering(self, session: BlockSession) -> None:
        for phase in BEFORE_RENDERING_PHASES:
            self.run_phase(phase, session)


__all__ = [
    "BEFORE_RENDERING_PHASES",
    "PHASE_CAPABILITIES",
    "HookDefinition",
    "HookPhase",
    "HookPipeline",
    "HookRegistration",
    "HookRegistry",
    "PhaseCapabilities",
    "Plugin",
    "hook",
]
