"""Line and inline markers (``mark``, ``ins``, ``del``) and diff handling.

Line ranges are resolved while the meta string is parsed, so they address the
lines as written by the author even when later phases delete lines (for
instance a file name comment). Search terms and regular expressions are
resolved once every code edit is done, against the final line text.

After all annotations exist, token colors drawn on top of markers are raised to
the configured minimum contrast with ``contrast-fix`` annotations.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from codesmith.core.annotation import Annotation, AnnotationKind, InlineRange
from codesmith.core.colors import (
    LCH,
    ensure_color_contrast_on_background,
    lch_to_rgba,
    on_background,
    set_alpha,
    to_hex,
)
from codesmith.core.config import TextMarkersConfig
from codesmith.core.context import BlockSession, HookContext
from codesmith.core.diff import strip_diff_markers
from codesmith.core.hooks import HookPhase, Plugin, hook
from codesmith.core.markers import (
    MARKER_KINDS,
    LineRangeTarget,
    MarkerType,
    PatternTarget,
    marker_type_for,
    parse_marker_targets,
)
from codesmith.core.ranges import apply_resolved_markers, resolve_targets
from codesmith.core.theme import Theme


DIFF_LANGUAGE = "diff"
INDICATOR_MIN_CONTRAST = 3.0


@dataclass(frozen=True, slots=True)
class MarkerColors:
    """Resolved colors of one marker type for a theme."""

    background: str
    border: str
    indicator: str


def marker_palette(theme: Theme, config: TextMarkersConfig) -> dict[MarkerType, MarkerColors]:
    """Derive marker colors from the LCh settings and the theme background."""
    variant = 0 if theme.is_dark else 1
    palette: dict[MarkerType, MarkerColors] = {}
    for marker_type in MarkerType:
        hue = config.hue_for(marker_type.value)
        base = LCH(config.default_luminance[variant], config.default_chroma, hue)
        background = set_alpha(to_hex(lch_to_rgba(base)), config.background_opacity)
        border = set_alpha(
            to_hex(lch_to_rgba(LCH(config.border_luminance, config.default_chroma, hue))),
            config.border_opacity,
        )
        line_background = on_background(background, theme.bg)
        indicator = on_background(
            set_alpha(
                to_hex(
                    lch_to_rgba(
                        LCH(config.indicator_luminance[variant], config.default_chroma, hue)
                    )
                ),
                config.indicator_opacity,
            ),
            line_background,
        )
        indicator = ensure_color_contrast_on_background(
            indicator, line_background, INDICATOR_MIN_CONTRAST
        )
        palette[marker_type] = MarkerColors(background, border, indicator)
    return palette


def marker_styles(palette: dict[MarkerType, MarkerColors]) -> list[str]:
    """Return the CSS rules rendering markers."""
    styles = [
        ".codesmith .ec-line.highlight { position: relative; "
        "border-inline-start: 0.15rem solid transparent; }",
        ".codesmith mark, .codesmith ins, .codesmith del { color: inherit; "
        "text-decoration: none; border-radius: 0.2rem; padding-inline: 0.15rem; }",
        ".codesmith .open-start { border-start-start-radius: 0; "
        "border-end-start-radius: 0; padding-inline-start: 0; }",
        ".codesmith .open-end { border-start-end-radius: 0; "
        "border-end-end-radius: 0; padding-inline-end: 0; }",
    ]
    indicators = {MarkerType.INS: "+", MarkerType.DEL: "-"}
    for marker_type, colors in palette.items():
        name = marker_type.value
        styles.append(
            f".codesmith .ec-line.{name} {{ background: {colors.background}; "
            f"border-inline-start-color: {colors.border}; }}"
        )
        styles.append(
            f".codesmith {name} {{ background: {colors.background}; "
            f"box-shadow: inset 0 0 0 1.5px {colors.border}; }}"
        )
        if marker_type in indicators:
            styles.append(
                f'.codesmith .ec-line.{name}::before {{ content: "{indicators[marker_type]}"; '
                f"position: absolute; left: 0.5rem; color: {colors.indicator}; }}"
            )
    return styles


class TextMarkersPlugin(Plugin):
    """Highlight lines and text selected in the meta string or by diff prefixes."""

    name = "text-markers"

    def __init__(self, config: TextMarkersConfig | None = None) -> None:
        self.config = config or TextMarkersConfig()

    def base_styles(self, session: BlockSession) -> Iterable[str]:
        return marker_styles(marker_palette(session.theme, self.config))

    @hook(HookPhase.PREPROCESS_METADATA)
    def parse_metadata(self, context: HookContext) -> None:
        block = context.block
        options = block.options
        consumed = []

        language_override = options.select("lang", "string")
        if language_override and block.language == DIFF_LANGUAGE:
            block.language = str(language_override[-1].value)
            context.data["original_language"] = DIFF_LANGUAGE
            consumed.extend(language_override)

        result = parse_marker_targets(options)
        for error in result.errors:
            context.event("meta_option_error", option=block.meta, reason=error)

        lines = block.get_lines()
        line_targets = [target for target in result.targets if isinstance(target, LineRangeTarget)]
        apply_resolved_markers(lines, resolve_targets(lines, line_targets))
        context.data["patterns"] = [
            target for target in result.targets if isinstance(target, PatternTarget)
        ]

        consumed.extend(result.consumed)
        if consumed:
            block.meta = options.without(consumed)

    @hook(HookPhase.PREPROCESS_CODE)
    def strip_diff(self, context: HookContext) -> None:
        block = context.block
        language = context.data.get("original_language") or block.language
        if language != DIFF_LANGUAGE:
            return
        strip_diff_markers(block)

    @hook(HookPhase.ANNOTATE_CODE)
    def annotate(self, context: HookContext) -> None:
        patterns = context.data.get("patterns") or []
        if not patterns:
            return
        lines = context.lines
        apply_resolved_markers(lines, resolve_targets(lines, patterns))

    @hook(HookPhase.POSTPROCESS_ANNOTATIONS)
    def ensure_contrast(self, context: HookContext) -> None:
        min_contrast = context.config.min_syntax_highlighting_color_contrast
        if min_contrast <= 0:
            return
        theme = context.theme
        palette = marker_palette(theme, self.config)

        for index, line in enumerate(context.lines):
            markers = line.get_annotations(kind=MARKER_KINDS)
            if not markers:
                continue
            tokens = line.get_annotations(kind=AnnotationKind.SYNTAX)
            if not tokens:
                continue

            full_line = _strongest(marker for marker in markers if marker.is_full_line)
            line_bg = theme.bg
            regions: list[tuple[int, int | None, str]] = []
            if full_line is not None:
                marker_type = marker_type_for(full_line)
                line_bg = on_background(palette[marker_type].background, theme.bg)
                regions.append((0, None, line_bg))
            for marker in sorted(
                (marker for marker in markers if marker.inline_range is not None),
                key=lambda item: marker_type_for(item).priority,
            ):
                marker_type = marker_type_for(marker)
                background = on_background(palette[marker_type].background, line_bg)
                regions.append(
                    (marker.inline_range.column_start, marker.inline_range.column_end, background)
                )

            for token in tokens:
                color = token.data.get("color")
                if not color or token.inline_range is None:
                    continue
                for start, end, background in regions:
                    overlap_start = max(start, token.inline_range.column_start)
                    overlap_end = min(
                        token.inline_range.column_end if end is None else end,
                        token.inline_range.column_end,
                    )
                    if overlap_start >= overlap_end:
                        continue
                    adjusted = ensure_color_contrast_on_background(color, background, min_contrast)
                    if adjusted == to_hex(color):
                        continue
                    line.add_annotation(
                        Annotation(
                            kind=AnnotationKind.CONTRAST,
                            inline_range=InlineRange(overlap_start, overlap_end),
                            style=f"color: {adjusted}",
                            data={"color": adjusted, "original": color},
                        )
                    )
                    context.event(
                        "contrast_adjusted", original=color, adjusted=adjusted, line=index + 1
                    )


def _strongest(markers: Iterable[Annotation]) -> Annotation | None:
    strongest: Annotation | None = None
    for marker in markers:
        marker_type = marker_type_for(marker)
        if marker_type is None:
            continue
        if strongest is None or marker_type.priority >= marker_type_for(strongest).priority:
            strongest = marker
    return strongest


__all__ = ["MarkerColors", "TextMarkersPlugin", "marker_palette", "marker_styles"]
