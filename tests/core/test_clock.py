"""Tests for the simulated clock."""

from __future__ import annotations

import pytest

from yieldvault.core.clock import SECONDS_PER_DAY, SimulatedClock


class TestSimulatedClock:
    def test_advance_days_and_seconds(self) -> None:
        clock = SimulatedClock(start=1_000)
        assert clock.advance(days=1, seconds=5) == 1_000 + SECONDS_PER_DAY + 5
        assert clock.now() == 1_000 + SECONDS_PER_DAY + 5

    def test_cannot_go_backwards(self) -> None:
        clock = SimulatedClock()
        with pytest.raises(ValueError, match="backwards"):
            clock.advance(seconds=-1)

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            SimulatedClock(start=-1)
