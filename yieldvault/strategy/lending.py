"""Lending Strategy — 대출 venue 어댑터.

공급 잔고를 liquidity index로 스케일링하여 저장하는 방식(scaled balance)으로
이자를 연속 누적합니다. 잔고 조회 시점에 이자가 이미 반영되므로
``harvest()`` 는 venue의 이자 지급(토큰 mint)만 동기화합니다.

Math:
    index(t) = index(t0) * (1 + apy * (t - t0) / YEAR)     (선형 누적, RAY 정밀도)
    balance  = floor(scaled * index / RAY)
    deposit  : scaled += floor(amount * RAY / index)
    withdraw : scaled -= ceil(amount * RAY / index)

Rules Applied:
    - #11 Pydantic Modeling: frozen config
    - #10 Python Standards: named constants
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from yieldvault.core.arithmetic import BPS_DENOMINATOR, Rounding, mul_div
from yieldvault.core.clock import SECONDS_PER_YEAR
from yieldvault.strategy.base import BaseStrategyAdapter

if TYPE_CHECKING:
    from yieldvault.core.clock import SimulatedClock
    from yieldvault.ledger.asset import AssetLedger

RAY = 10**27


class LendingConfig(BaseModel):
    """대출 venue 파라미터.

    Attributes:
        supply_apy_bps: 공급 연이율 (bps, 선형)
    """

    model_config = ConfigDict(frozen=True)

    supply_apy_bps: int = Field(default=500, ge=0, le=100_000, description="공급 연이율 (bps)")


@dataclass(frozen=True)
class LendingCheckpoint:
    """LendingStrategy 포지션 사본."""

    scaled_balance: int
    liquidity_index: int
    last_update: int


class LendingStrategy(BaseStrategyAdapter):
    """대출 venue 어댑터.

    Args:
        asset: 기초 자산 장부
        clock: 이자 누적 기준 시계
        config: venue 파라미터
        name: 어댑터 이름
    """

    def __init__(
        self,
        asset: AssetLedger,
        clock: SimulatedClock,
        config: LendingConfig | None = None,
        name: str = "lending",
    ) -> None:
        super().__init__(name, asset)
        self._clock = clock
        self._config = config or LendingConfig()
        self._scaled_balance = 0
        self._liquidity_index = RAY
        self._last_update = clock.now()

    @property
    def config(self) -> LendingConfig:
        """venue 파라미터."""
        return self._config

    @property
    def liquidity_index(self) -> int:
        """현재 시각 기준 liquidity index (RAY)."""
        return self._index_at(self._clock.now())

    def _index_at(self, timestamp: int) -> int:
        elapsed = max(timestamp - self._last_update, 0)
        if elapsed == 0 or self._config.supply_apy_bps == 0:
            return self._liquidity_index
        growth = mul_div(
            RAY * self._config.supply_apy_bps, elapsed, BPS_DENOMINATOR * SECONDS_PER_YEAR
        )
        return mul_div(self._liquidity_index, RAY + growth, RAY)

    def _accrue(self) -> int:
        """index 갱신 후 venue가 지급할 이자를 토큰으로 수령."""
        now = self._clock.now()
        self._liquidity_index = self._index_at(now)
        self._last_update = now

        owed = self._position_value()
        held = self._asset.balance_of(self.address)
        if owed <= held:
            return 0
        interest = owed - held
        self._asset.mint(self.address, interest)
        return interest

    # ── Hooks ─────────────────────────────────────────────────────

    def _before_mutation(self) -> None:
        self._accrue()

    def _on_deposit(self, amount: int) -> None:
        self._scaled_balance += mul_div(amount, RAY, self._liquidity_index)

    def _on_withdraw(self, amount: int) -> int:
        available = self._position_value()
        amount = min(amount, available)
        if amount == 0:
            return 0
        burned = min(
            mul_div(amount, RAY, self._liquidity_index, Rounding.CEIL),
            self._scaled_balance,
        )
        self._scaled_balance -= burned
        return amount

    def _on_harvest(self) -> int:
        interest = self._accrue()
        if interest:
            logger.debug("Lending {} harvested {} interest", self.name, interest)
        return interest

    def _position_value(self) -> int:
        return mul_div(self._scaled_balance, self._index_at(self._clock.now()), RAY)

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> LendingCheckpoint:
        """포지션 상태 사본."""
        return LendingCheckpoint(
            scaled_balance=self._scaled_balance,
            liquidity_index=self._liquidity_index,
            last_update=self._last_update,
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, LendingCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._scaled_balance = state.scaled_balance
        self._liquidity_index = state.liquidity_index
        self._last_update = state.last_update
