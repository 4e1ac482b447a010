"""Color parsing, conversion and contrast helpers.

Colors are handled as :class:`RGBA` values with 0-255 channels and a 0-1
alpha. Luminance and contrast follow WCAG 2.x; perceptual adjustments move the
lightness of a color in the CIE LCh(ab) space so hue and chroma are preserved
while the luminance changes.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass, replace
import math
import re

from .exceptions import InvalidColorError
from .search import binary_search


@dataclass(frozen=True, slots=True)
class RGBA:
    """sRGB color with 0-255 channels and a 0-1 alpha."""

    r: float
    g: float
    b: float
    a: float = 1.0


@dataclass(frozen=True, slots=True)
class LCH:
    """CIE LCh(ab) color: lightness 0-100, chroma, hue in degrees."""

    lightness: float
    chroma: float
    hue: float
    alpha: float = 1.0


ColorInput = str | RGBA

_D65 = (0.95047, 1.0, 1.08883)
_NAMED_COLORS = {
    "black": "#000000",
    "white": "#ffffff",
    "red": "#ff0000",
    "green": "#008000",
    "lime": "#00ff00",
    "blue": "#0000ff",
    "yellow": "#ffff00",
    "cyan": "#00ffff",
    "magenta": "#ff00ff",
    "gray": "#808080",
    "grey": "#808080",
    "silver": "#c0c0c0",
    "orange": "#ffa500",
    "purple": "#800080",
    "transparent": "#00000000",
}
_HEX = re.compile(r"^#(?P<digits>[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNCTION = re.compile(r"^(?P<name>rgba?|lch)\(\s*(?P<args>[^)]*)\)$", re.IGNORECASE)
_CONTRAST_MARGIN = 0.05
_MARGIN_STEPS = 4


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _parse_component(token: str, scale: float) -> float:
    token = token.strip()
    if token.endswith("%"):
        return float(token[:-1]) / 100 * scale
    return float(token)


def parse_color(value: ColorInput) -> RGBA:
    """Parse hex, ``rgb()``/``rgba()``, ``lch()`` and basic named colors."""
    if isinstance(value, RGBA):
        return value
    if not isinstance(value, str):
        msg = f"Unsupported color value: {value!r}"
        raise InvalidColorError(msg)

    text = value.strip().lower()
    text = _NAMED_COLORS.get(text, text)

    match = _HEX.match(text)
    if match:
        digits = match.group("digits")
        if len(digits) in (3, 4):
            digits = "".join(char * 2 for char in digits)
        channels = [int(digits[index : index + 2], 16) for index in range(0, len(digits), 2)]
        alpha = channels[3] / 255 if len(channels) == 4 else 1.0
        return RGBA(channels[0], channels[1], channels[2], alpha)

    match = _FUNCTION.match(text)
    if match:
        args = match.group("args").replace("/", " ").replace(",", " ").split()
        try:
            if match.group("name").startswith("rgb") and len(args) in (3, 4):
                r, g, b = (_clamp(_parse_component(arg, 255), 0, 255) for arg in args[:3])
                alpha = _clamp(_parse_component(args[3], 1)) if len(args) == 4 else 1.0
                return RGBA(r, g, b, alpha)
            if match.group("name") == "lch" and len(args) in (3, 4):
                lightness = _parse_component(args[0].rstrip("%"), 1)
                chroma = _parse_component(args[1], 150)
                hue = float(args[2].removesuffix("deg"))
                alpha = _clamp(_parse_component(args[3], 1)) if len(args) == 4 else 1.0
                return lch_to_rgba(LCH(lightness, chroma, hue, alpha))
        except ValueError as exc:
            msg = f"Invalid color value: {value!r}"
            raise InvalidColorError(msg) from exc

    msg = f"Invalid color value: {value!r}"
    raise InvalidColorError(msg)


def try_parse_color(value: object) -> RGBA | None:
    """Return the parsed color or None when ``value`` is not a usable color."""
    if not isinstance(value, (str, RGBA)):
        return None
    try:
        return parse_color(value)
    except InvalidColorError:
        return None


def to_hex(color: ColorInput) -> str:
    """Return ``#rrggbb`` (or ``#rrggbbaa`` for translucent colors)."""
    rgba = parse_color(color)
    channels = [round(_clamp(channel, 0, 255)) for channel in (rgba.r, rgba.g, rgba.b)]
    text = "#" + "".join(f"{channel:02x}" for channel in channels)
    alpha = round(_clamp(rgba.a) * 255)
    if alpha < 255:
        text += f"{alpha:02x}"
    return text


def _srgb_to_linear(channel: float) -> float:
    value = channel / 255
    if value <= 0.04045:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def _linear_to_srgb(value: float) -> float:
    value = _clamp(value)
    if value <= 0.0031308:
        encoded = value * 12.92
    else:
        encoded = 1.055 * value ** (1 / 2.4) - 0.055
    return _clamp(encoded) * 255


def get_luminance(color: ColorInput) -> float:
    """Return the WCAG relative luminance of a color (alpha is ignored)."""
    rgba = parse_color(color)
    components = []
    for channel in (rgba.r, rgba.g, rgba.b):
        value = channel / 255
        components.append(value / 12.92 if value <= 0.03928 else ((value + 0.055) / 1.055) ** 2.4)
    red, green, blue = components
    return 0.2126 * red + 0.7152 * green + 0.0722 * blue


def get_color_contrast(color: ColorInput, other: ColorInput) -> float:
    """Return the WCAG contrast ratio ``(L1 + 0.05) / (L2 + 0.05)``."""
    first = get_luminance(color)
    second = get_luminance(other)
    lighter, darker = max(first, second), min(first, second)
    return (lighter + 0.05) / (darker + 0.05)


def on_background(color: ColorInput, background: ColorInput) -> str:
    """Composite a (possibly translucent) color over an opaque background."""
    fg = parse_color(color)
    bg = parse_color(background)
    alpha = _clamp(fg.a)
    blended = RGBA(
        fg.r * alpha + bg.r * (1 - alpha),
        fg.g * alpha + bg.g * (1 - alpha),
        fg.b * alpha + bg.b * (1 - alpha),
    )
    return to_hex(blended)


def get_color_contrast_on_background(color: ColorInput, background: ColorInput) -> float:
    """Return the contrast of ``color`` once composited over ``background``."""
    return get_color_contrast(on_background(color, background), background)


def set_alpha(color: ColorInput, alpha: float) -> str:
    return to_hex(replace(parse_color(color), a=_clamp(round(alpha, 3))))


def multiply_alpha(color: ColorInput, factor: float) -> str:
    rgba = parse_color(color)
    return to_hex(replace(rgba, a=_clamp(round(rgba.a * factor, 3))))


def lighten(color: ColorInput, amount: float) -> str:
    """Scale the HSL lightness of a color by ``1 + amount``."""
    rgba = parse_color(color)
    hue, lightness, saturation = colorsys.rgb_to_hls(rgba.r / 255, rgba.g / 255, rgba.b / 255)
    lightness = _clamp(round(lightness + lightness * amount, 3))
    red, green, blue = colorsys.hls_to_rgb(hue, lightness, saturation)
    return to_hex(RGBA(red * 255, green * 255, blue * 255, rgba.a))


def darken(color: ColorInput, amount: float) -> str:
    return lighten(color, -amount)


def mix(color: ColorInput, mixin: ColorInput, amount: float) -> str:
    """Blend ``mixin`` into ``color``; ``amount`` 0 keeps ``color``, 1 yields ``mixin``."""
    first = parse_color(color)
    second = parse_color(mixin)
    weight = _clamp(amount)
    return to_hex(
        RGBA(
            first.r + (second.r - first.r) * weight,
            first.g + (second.g - first.g) * weight,
            first.b + (second.b - first.b) * weight,
            first.a + (second.a - first.a) * weight,
        )
    )


def rgba_to_lab(color: ColorInput) -> tuple[float, float, float]:
    rgba = parse_color(color)
    red, green, blue = (_srgb_to_linear(channel) for channel in (rgba.r, rgba.g, rgba.b))
    x = 0.4124564 * red + 0.3575761 * green + 0.1804375 * blue
    y = 0.2126729 * red + 0.7151522 * green + 0.0721750 * blue
    z = 0.0193339 * red + 0.1191920 * green + 0.9503041 * blue

    def _f(value: float) -> float:
        delta = 6 / 29
        if value > delta**3:
            return value ** (1 / 3)
        return value / (3 * delta**2) + 4 / 29

    fx, fy, fz = _f(x / _D65[0]), _f(y / _D65[1]), _f(z / _D65[2])
    return 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)


def lab_to_rgba(lightness: float, a: float, b: float, alpha: float = 1.0) -> RGBA:
    def _f_inv(value: float) -> float:
        delta = 6 / 29
        if value > delta:
            return value**3
        return 3 * delta**2 * (value - 4 / 29)

    fy = (lightness + 16) / 116
    fx = fy + a / 500
    fz = fy - b / 200
    x, y, z = _f_inv(fx) * _D65[0], _f_inv(fy) * _D65[1], _f_inv(fz) * _D65[2]
    red = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    green = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    blue = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z
    return RGBA(_linear_to_srgb(red), _linear_to_srgb(green), _linear_to_srgb(blue), alpha)


def rgba_to_lch(color: ColorInput) -> LCH:
    rgba = parse_color(color)
    lightness, a, b = rgba_to_lab(rgba)
    chroma = math.hypot(a, b)
    hue = math.degrees(math.atan2(b, a)) % 360
    return LCH(lightness, chroma, hue, rgba.a)


def lch_to_rgba(color: LCH) -> RGBA:
    radians = math.radians(color.hue)
    return lab_to_rgba(
        color.lightness,
        color.chroma * math.cos(radians),
        color.chroma * math.sin(radians),
        color.alpha,
    )


def set_luminance(
    color: ColorInput, luminance: float, *, prefer_higher: bool | None = None
) -> str:
    """Change the LCh lightness of ``color`` until it reaches ``luminance``."""
    target = _clamp(luminance)
    lch = rgba_to_lch(color)

    def _luminance_at(lightness: float) -> float:
        return get_luminance(lch_to_rgba(replace(lch, lightness=lightness)))

    lightness = binary_search(
        _luminance_at,
        target,
        prefer_higher=prefer_higher,
        tolerance=0.002,
        low=0,
        high=100,
        max_iterations=40,
    )
    return to_hex(lch_to_rgba(replace(lch, lightness=lightness)))


def _target_luminance(background_luminance: float, min_contrast: float, lighter: bool) -> float:
    if lighter:
        return min_contrast * (background_luminance + 0.05) - 0.05
    return (background_luminance + 0.05) / min_contrast - 0.05


def _reach_contrast(
    color: ColorInput, background: ColorInput, min_contrast: float, lighter: bool
) -> tuple[float, str]:
    """Move the luminance of ``color`` in one direction, returning the best attempt.

    Rounding to 8-bit channels can cost a little contrast, so the margin above
    ``min_contrast`` doubles until the rounded color passes or the luminance
    range is exhausted.
    """
    background_luminance = get_luminance(background)
    margin = _CONTRAST_MARGIN
    best_contrast, best = 0.0, to_hex(color)
    for _ in range(_MARGIN_STEPS):
        target = _clamp(_target_luminance(background_luminance, min_contrast + margin, lighter))
        candidate = set_luminance(color, target, prefer_higher=lighter)
        contrast = get_color_contrast(candidate, background)
        if contrast > best_contrast:
            best_contrast, best = contrast, candidate
        if contrast >= min_contrast or target in (0.0, 1.0):
            break
        margin *= 2
    return best_contrast, best


def change_luminance_to_reach_color_contrast(
    color: ColorInput, background: ColorInput, min_contrast: float
) -> str:
    """Move the luminance of ``color`` away from ``background`` until it contrasts enough.

    The direction keeps the current relation: colors lighter than the
    background get lighter, darker ones get darker. The result may fall short
    when the luminance range is exhausted.
    """
    if get_color_contrast(color, background) >= min_contrast:
        return to_hex(color)
    lighter = get_luminance(color) >= get_luminance(background)
    return _reach_contrast(color, background, min_contrast, lighter)[1]


def change_alpha_to_reach_color_contrast(
    color: ColorInput, background: ColorInput, min_contrast: float
) -> str:
    """Adjust the alpha of ``color`` so its contrast on ``background`` reaches the target."""

    def _contrast_at(alpha: float) -> float:
        return get_color_contrast_on_background(set_alpha(color, alpha), background)

    alpha = binary_search(_contrast_at, min_contrast, prefer_higher=True, tolerance=0.05)
    return set_alpha(color, alpha)


def ensure_color_contrast_on_background(
    color: str, background: str | None, min_contrast: float = 5.5
) -> str:
    """Return ``color`` adjusted until it reaches ``min_contrast`` on ``background``.

    Unparseable colors are returned unchanged; an unparseable background
    returns the color as hex. The luminance first moves away from the
    background in the current direction, then in the opposite one when the
    first direction cannot reach the target.
    """
    fg = try_parse_color(color)
    if fg is None:
        return color
    bg = try_parse_color(background)
    if bg is None:
        return to_hex(fg)

    opaque_fg = parse_color(on_background(fg, bg))
    if get_color_contrast(opaque_fg, bg) >= min_contrast:
        return to_hex(fg)

    lighter_first = get_luminance(opaque_fg) >= get_luminance(bg)
    attempts = []
    for lighter in (lighter_first, not lighter_first):
        contrast, candidate = _reach_contrast(opaque_fg, bg, min_contrast, lighter)
        if contrast >= min_contrast:
            return candidate
        attempts.append((contrast, candidate))
    return max(attempts, key=lambda attempt: attempt[0])[1]


__all__ = [
    "LCH",
    "RGBA",
    "ColorInput",
    "change_alpha_to_reach_color_contrast",
    "change_luminance_to_reach_color_contrast",
    "darken",
    "ensure_color_contrast_on_background",
    "get_color_contrast",
    "get_color_contrast_on_background",
    "get_luminance",
    "lab_to_rgba",
    "lch_to_rgba",
    "lighten",
    "mix",
    "multiply_alpha",
    "on_background",
    "parse_color",
    "rgba_to_lab",
    "rgba_to_lch",
    "set_alpha",
    "set_luminance",
    "to_hex",
    "try_parse_color",
]
