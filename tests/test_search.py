from __future__ import annotations

import pytest

from codesmith.core.search import binary_search, bisect


def test_binary_search_reaches_target_within_tolerance() -> None:
    result = binary_search(lambda value: value, 0.3, tolerance=0.01)
    assert abs(result - 0.3) <= 0.01


@pytest.mark.parametrize("prefer_higher", [True, False])
def test_binary_search_respects_preferred_side(prefer_higher: bool) -> None:
    result = binary_search(lambda value: value * value, 0.5, prefer_higher=prefer_higher)

    if prefer_higher:
        assert result * result > 0.5
    else:
        assert result * result < 0.5
    assert abs(result * result - 0.5) <= 0.1


def test_binary_search_stays_within_bounds() -> None:
    result = binary_search(lambda value: value / 10, 1.5, low=10, high=20, tolerance=0.001)
    assert 10 <= result <= 20
    assert abs(result - 15) < 0.1


def test_binary_search_terminates_on_unreachable_targets() -> None:
    calls: list[float] = []

    def _value(position: float) -> float:
        calls.append(position)
        return 0.0

    result = binary_search(_value, 1.0, prefer_higher=True, max_iterations=25)

    assert len(calls) == 25
    assert 0.0 <= result <= 1.0


def test_binary_search_stops_once_the_midpoint_settles() -> None:
    calls: list[float] = []

    def _value(position: float) -> float:
        calls.append(position)
        return 0.0

    binary_search(_value, 1.0, max_iterations=100)

    assert len(calls) < 100


def test_bisect_returns_highest_accepted_value() -> None:
    result = bisect(lambda value: value <= 0.7)

    assert result is not None
    assert 0.69 < result <= 0.7


def test_bisect_returns_none_when_nothing_is_accepted() -> None:
    assert bisect(lambda value: False) is None


def test_bisect_honours_custom_bounds() -> None:
    result = bisect(lambda value: value < 42, low=0, high=100)

    assert result is not None
    assert 41 < result < 42
