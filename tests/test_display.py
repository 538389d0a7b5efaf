"""Tests for the eased money counter."""
from __future__ import annotations

import pytest
from resort_sim.display import MoneyDisplay, ease_out_cubic


class TestEaseOutCubic:
    def test_endpoints(self) -> None:
        assert ease_out_cubic(0.0) == 0.0
        assert ease_out_cubic(1.0) == 1.0

    def test_ease_out_cubic_front_loaded(self) -> None:
        assert ease_out_cubic(0.5) == pytest.approx(0.875)


class TestMoneyDisplay:
    def test_starts_settled(self) -> None:
        display = MoneyDisplay(1000)
        assert display.value == 1000
        assert not display.bumped

    def test_eases_towards_target(self) -> None:
        display = MoneyDisplay(1000)
        display.retarget(1200)
        assert display.bumped
        assert display.advance(0.2) == 1175
        assert display.advance(0.2) == 1200
        assert not display.bumped

    def test_overshooting_dt_lands_on_target(self) -> None:
        display = MoneyDisplay(1000)
        display.retarget(800)
        assert display.advance(5.0) == 800

    def test_retarget_restarts_from_shown_value(self) -> None:
        display = MoneyDisplay(1000)
        display.retarget(2000)
        display.advance(0.2)
        assert display.value == 1875
        display.retarget(1500)
        display.advance(0.2)
        assert display.value == 1547
        display.advance(0.2)
        assert display.value == 1500

    def test_same_target_is_noop(self) -> None:
        display = MoneyDisplay(1000)
        display.retarget(1000)
        assert not display.bumped

    def test_snap(self) -> None:
        display = MoneyDisplay(1000)
        display.retarget(0)
        display.snap(300)
        assert display.value == 300
        assert display.target == 300
        assert not display.bumped

    def test_validation(self) -> None:
        with pytest.raises(ValueError, match="duration"):
            MoneyDisplay(0, duration=0)
