"""Bounded numeric searches used by the color helpers."""

from __future__ import annotations

from collections.abc import Callable


def binary_search(
    get_value: Callable[[float], float],
    target_value: float,
    *,
    prefer_higher: bool | None = None,
    tolerance: float = 0.1,
    low: float = 0.0,
    high: float = 1.0,
    min_change_factor: float = 0.001,
    max_iterations: int = 25,
) -> float:
    """Find ``x`` in ``[low, high]`` where ``get_value(x)`` reaches ``target_value``.

    ``get_value`` must grow with its input. The search stops as soon as the
    value is within ``tolerance`` of the target and on the preferred side of it
    (``prefer_higher=None`` accepts both sides), or once the midpoint moves by
    less than ``min_change_factor * |high - low|`` while on the preferred side.
    After ``max_iterations`` the last midpoint is returned.
    """
    epsilon = min_change_factor * abs(high - low)
    last_mid: float | None = None

    for _ in range(max_iterations):
        mid = (low + high) / 2
        current = get_value(mid)

        within_tolerance = abs(current - target_value) <= tolerance
        if prefer_higher is None:
            preferred = True
        elif prefer_higher:
            preferred = current > target_value
        else:
            preferred = current < target_value
        settled = last_mid is not None and abs(last_mid - mid) < epsilon

        if preferred and (within_tolerance or settled):
            return mid
        if current < target_value:
            low = mid
        else:
            high = mid
        last_mid = mid

    return (low + high) / 2


def bisect(
    check: Callable[[float], bool],
    *,
    low: float = 0.0,
    high: float = 1.0,
    min_change_factor: float = 0.001,
    max_iterations: int = 25,
) -> float | None:
    """Return the value closest to ``high`` accepted by ``check``, or None."""
    epsilon = min_change_factor * abs(high - low)
    highest_valid: float | None = None
    last_mid: float | None = None

    for _ in range(max_iterations):
        mid = (low + high) / 2
        if check(mid):
            highest_valid = mid
            low = mid
        else:
            high = mid
        if last_mid is not None and abs(last_mid - mid) < epsilon:
            return highest_valid
        last_mid = mid

    return highest_valid


__all__ = ["binary_search", "bisect"]
