"""Deterministic simulation clock."""

from __future__ import annotations

SECONDS_PER_DAY = 86_400
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY


class SimulatedClock:
    """수동으로 진행시키는 시계 (UNIX seconds).

    이자 누적 등 시간에 의존하는 어댑터가 공유합니다.
    """

    def __init__(self, start: int = 1_700_000_000) -> None:
        if start < 0:
            msg = f"start must be non-negative, got {start}"
            raise ValueError(msg)
        self._now = start

    def now(self) -> int:
        """현재 시각 (초)."""
        return self._now

    def advance(self, *, seconds: int = 0, days: int = 0) -> int:
        """시계를 앞으로 이동하고 새 시각을 반환."""
        delta = seconds + days * SECONDS_PER_DAY
        if delta < 0:
            msg = f"clock cannot move backwards (delta={delta})"
            raise ValueError(msg)
        self._now += delta
        return self._now
