"""Tests for the CooldownTimer update gate."""

from __future__ import annotations

from termview.terminal.timer import CooldownTimer


class TestCooldownTimer:
    def test_first_check_always_fires(self) -> None:
        timer = CooldownTimer()
        assert timer.should_fire(now=0.0, cooldown=1000.0) is True
        assert timer.last_fired == 0.0

    def test_blocks_within_cooldown(self) -> None:
        timer = CooldownTimer()
        assert timer.should_fire(now=10.0, cooldown=4.0)
        assert not timer.should_fire(now=11.0, cooldown=4.0)
        assert not timer.should_fire(now=14.0, cooldown=4.0)
        # A refused check leaves the timestamp alone
        assert timer.last_fired == 10.0

    def test_fires_after_cooldown(self) -> None:
        timer = CooldownTimer()
        timer.should_fire(now=10.0, cooldown=4.0)
        assert timer.should_fire(now=14.5, cooldown=4.0)
        assert timer.last_fired == 14.5

    def test_at_most_one_fire_per_window(self) -> None:
        timer = CooldownTimer()
        fired = [timer.should_fire(now=t / 10, cooldown=1.0) for t in range(0, 10)]
        assert fired.count(True) == 1

    def test_zero_cooldown_fires_on_every_tick(self) -> None:
        timer = CooldownTimer()
        assert all(timer.should_fire(now=float(t), cooldown=0.0) for t in range(5))

    def test_uses_monotonic_clock_by_default(self) -> None:
        timer = CooldownTimer()
        assert timer.should_fire(cooldown=60.0)
        assert not timer.should_fire(cooldown=60.0)
