from __future__ import annotations

import random

import pytest

from codesmith.core.colors import (
    RGBA,
    change_alpha_to_reach_color_contrast,
    change_luminance_to_reach_color_contrast,
    darken,
    ensure_color_contrast_on_background,
    get_color_contrast,
    get_color_contrast_on_background,
    get_luminance,
    lch_to_rgba,
    lighten,
    mix,
    multiply_alpha,
    on_background,
    parse_color,
    rgba_to_lch,
    set_alpha,
    set_luminance,
    to_hex,
    try_parse_color,
)
from codesmith.core.exceptions import InvalidColorError


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("#abc", RGBA(170, 187, 204, 1.0)),
        ("#AABBCC", RGBA(170, 187, 204, 1.0)),
        ("#ff000080", RGBA(255, 0, 0, 128 / 255)),
        ("rgb(255, 0, 0)", RGBA(255, 0, 0, 1.0)),
        ("rgba(0 0 0 / 0.5)", RGBA(0, 0, 0, 0.5)),
        ("rgb(100%, 0%, 0%)", RGBA(255, 0, 0, 1.0)),
        ("white", RGBA(255, 255, 255, 1.0)),
    ],
)
def test_parse_color_formats(value: str, expected: RGBA) -> None:
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", ["nope", "#12", "rgb(1, 2)", "rgb(a, b, c)", ""])
def test_parse_color_rejects_invalid_values(value: str) -> None:
    with pytest.raises(InvalidColorError):
        parse_color(value)
    assert try_parse_color(value) is None


def test_try_parse_color_ignores_other_types() -> None:
    assert try_parse_color(None) is None
    assert try_parse_color(42) is None


def test_to_hex_normalises_colors() -> None:
    assert to_hex("#ABC") == "#aabbcc"
    assert to_hex("rgba(255, 0, 0, 0.5)") == "#ff000080"
    assert to_hex(RGBA(300, -5, 12.4)) == "#ff000c"


def test_luminance_and_contrast() -> None:
    assert get_luminance("#000000") == 0
    assert get_luminance("#ffffff") == pytest.approx(1.0)
    assert get_color_contrast("#000", "#fff") == pytest.approx(21.0)
    assert get_color_contrast("#fff", "#000") == pytest.approx(21.0)
    assert get_color_contrast("#777", "#777") == pytest.approx(1.0)


def test_translucent_colors_are_composited() -> None:
    assert on_background("rgba(255, 255, 255, 0.5)", "#000000") == "#808080"
    assert on_background("#ff0000", "#000000") == "#ff0000"
    assert get_color_contrast_on_background("#ffffff00", "#000000") == pytest.approx(1.0)


def test_alpha_and_mixing_helpers() -> None:
    assert set_alpha("#102030", 0.5) == "#10203080"
    assert set_alpha("#102030", 1) == "#102030"
    assert mix("#000000", "#ffffff", 0.5) == "#808080"
    assert mix("#123456", "#ffffff", 0) == "#123456"
    assert mix("#123456", "#ffffff", 1) == "#ffffff"
    assert multiply_alpha("#102030", 0.75) == "#102030bf"
    assert multiply_alpha("#10203080", 0.5) == "#10203040"
    assert multiply_alpha("#102030", 1) == "#102030"
    assert get_luminance(lighten("#336699", 0.3)) > get_luminance("#336699")
    assert get_luminance(darken("#336699", 0.3)) < get_luminance("#336699")


def test_lch_round_trip() -> None:
    for color in ("#3366cc", "#d4d4d4", "#1e1e2e", "#ff8800"):
        assert to_hex(lch_to_rgba(rgba_to_lch(color))) == color


def test_set_luminance_reaches_target() -> None:
    adjusted = set_luminance("#3366cc", 0.5)
    assert get_luminance(adjusted) == pytest.approx(0.5, abs=0.02)


def test_change_luminance_keeps_direction() -> None:
    lighter = change_luminance_to_reach_color_contrast("#777777", "#1e1e2e", 7)
    darker = change_luminance_to_reach_color_contrast("#999999", "#ffffff", 7)

    assert get_luminance(lighter) > get_luminance("#777777")
    assert get_color_contrast(lighter, "#1e1e2e") >= 7
    assert get_luminance(darker) < get_luminance("#999999")
    assert get_color_contrast(darker, "#ffffff") >= 7


def test_change_alpha_to_reach_contrast() -> None:
    adjusted = change_alpha_to_reach_color_contrast("#ffffff", "#000000", 4.5)

    assert parse_color(adjusted).a < 1
    assert get_color_contrast_on_background(adjusted, "#000000") == pytest.approx(4.5, abs=0.2)


def test_ensure_contrast_keeps_sufficient_colors() -> None:
    assert ensure_color_contrast_on_background("#FFFFFF", "#000000", 5.5) == "#ffffff"


@pytest.mark.parametrize(
    ("color", "background"),
    [
        ("#777777", "#ffffff"),
        ("#555555", "#1e1e2e"),
        ("#e6db74", "#f5f0d0"),
        ("#66d9ef", "#3d5a40"),
        ("#999999", "#ffffff"),
    ],
)
def test_ensure_contrast_reaches_minimum(color: str, background: str) -> None:
    adjusted = ensure_color_contrast_on_background(color, background, 5.5)
    assert get_color_contrast(adjusted, background) >= 5.5


def test_ensure_contrast_returns_best_effort_when_unreachable() -> None:
    # No color reaches 5.5 on mid gray; black comes closest.
    adjusted = ensure_color_contrast_on_background("#808080", "#808080", 5.5)

    assert adjusted == "#000000"
    assert get_color_contrast(adjusted, "#808080") < 5.5


def test_ensure_contrast_preserves_hue() -> None:
    adjusted = ensure_color_contrast_on_background("#3366cc", "#1e1e2e", 7)

    assert rgba_to_lch(adjusted).hue == pytest.approx(rgba_to_lch("#3366cc").hue, abs=15)
    assert get_luminance(adjusted) > get_luminance("#3366cc")
    assert get_color_contrast(adjusted, "#1e1e2e") >= 7


def test_ensure_contrast_tolerates_invalid_input() -> None:
    assert ensure_color_contrast_on_background("not-a-color", "#000000") == "not-a-color"
    assert ensure_color_contrast_on_background("#ABC", "bogus") == "#aabbcc"
    assert ensure_color_contrast_on_background("#ABC", None) == "#aabbcc"


def test_ensure_contrast_on_random_grays() -> None:
    rng = random.Random(1234)
    for _ in range(30):
        color = "#" + f"{rng.randrange(256):02x}" * 3
        background = rng.choice(["#1e1e2e", "#272822", "#ffffff", "#f8f8f8"])
        adjusted = ensure_color_contrast_on_background(color, background, 4.5)
        assert get_color_contrast(adjusted, background) >= 4.5
