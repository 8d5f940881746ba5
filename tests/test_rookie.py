"""Tests for the rookie potential reveal."""

import pytest

from universe_engine.core.rookie import resolve_rookie_reveal


def test_high_reveal_uses_maximum() -> None:
    result = resolve_rookie_reveal(3, 3, 8)
    assert result.case == "high"
    assert result.auto_value == 8
    assert not result.needs_manual_choice


def test_low_reveal_uses_minimum() -> None:
    result = resolve_rookie_reveal(-3, 3, 8)
    assert result.case == "low"
    assert result.auto_value == 3


@pytest.mark.parametrize("delta", [-1, 0, 1])
def test_neutral_delta_is_a_draw(delta: int) -> None:
    result = resolve_rookie_reveal(delta, 3, 8)
    assert result.case == "draw"
    assert result.auto_value is None
    assert result.needs_manual_choice


def test_boundaries_are_not_draws() -> None:
    assert resolve_rookie_reveal(2, 3, 8).case == "high"
    assert resolve_rookie_reveal(-2, 3, 8).case == "low"


def test_equal_bounds_collapse() -> None:
    assert resolve_rookie_reveal(4, 6, 6).auto_value == 6
    assert resolve_rookie_reveal(-4, 6, 6).auto_value == 6


def test_auto_value_is_always_a_bound() -> None:
    for delta in range(-10, 11):
        result = resolve_rookie_reveal(delta, 4, 9)
        assert result.auto_value in (None, 4, 9)


def test_explanations_mention_values() -> None:
    assert "+3" in resolve_rookie_reveal(3, 3, 8).explanation
    assert "(8)" in resolve_rookie_reveal(3, 3, 8).explanation
    assert "(-4)" in resolve_rookie_reveal(-4, 3, 8).explanation
    assert "+1" in resolve_rookie_reveal(1, 3, 8).explanation
