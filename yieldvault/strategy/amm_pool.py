"""AMM Pool Strategy — 유동성 풀(LP) venue 어댑터.

볼트는 풀 지분(LP)을 보유하고, 풀 준비금(reserve)은 자산 장부상
어댑터 계정 잔고로 표현됩니다. 다른 LP(외부 유동성)와 준비금을 공유합니다.

Venue behavior:
    - 스왑 수수료 수익은 시간 경과에 따라 pending으로 쌓이고
      ``harvest()`` 시점에만 준비금에 편입 (compound)
    - 출금 시 exit fee 차감 → 요청보다 적게 반환될 수 있음
    - 1회 출금 한도 (준비금 대비 bps) → 부분 비유동성
    - ``apply_loss()`` 로 비영구 손실 등 준비금 감소를 시뮬레이션

Rules Applied:
    - #11 Pydantic Modeling: frozen config
    - #10 Python Standards: named constants
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from yieldvault.core.arithmetic import BPS_DENOMINATOR, Rounding, bps_of, mul_div
from yieldvault.core.clock import SECONDS_PER_YEAR
from yieldvault.core.exceptions import StrategyFailureError
from yieldvault.strategy.base import BaseStrategyAdapter

if TYPE_CHECKING:
    from yieldvault.core.clock import SimulatedClock
    from yieldvault.ledger.asset import AssetLedger

_EXTERNAL_LP = "external-lp"


class AmmPoolConfig(BaseModel):
    """AMM 풀 파라미터.

    Attributes:
        fee_apy_bps: 준비금 대비 스왑 수수료 연수익 (bps)
        exit_fee_bps: 출금 시 풀에 남는 수수료 (bps)
        max_withdraw_bps: 1회 출금 가능한 준비금 비율 (bps, 10000 = 제한 없음)
        seed_liquidity: 외부 LP가 미리 공급한 유동성
    """

    model_config = ConfigDict(frozen=True)

    fee_apy_bps: int = Field(default=300, ge=0, le=100_000)
    exit_fee_bps: int = Field(default=0, ge=0, le=1_000)
    max_withdraw_bps: int = Field(default=BPS_DENOMINATOR, gt=0, le=BPS_DENOMINATOR)
    seed_liquidity: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class AmmPoolCheckpoint:
    """AmmPoolStrategy 포지션 사본."""

    lp_balances: tuple[tuple[str, int], ...]
    lp_supply: int
    pending_fees: int
    last_fee_update: int


class AmmPoolStrategy(BaseStrategyAdapter):
    """AMM 풀 LP 어댑터.

    Args:
        asset: 기초 자산 장부
        clock: 수수료 누적 기준 시계
        config: 풀 파라미터
        name: 어댑터 이름
    """

    def __init__(
        self,
        asset: AssetLedger,
        clock: SimulatedClock,
        config: AmmPoolConfig | None = None,
        name: str = "amm-pool",
    ) -> None:
        super().__init__(name, asset)
        self._clock = clock
        self._config = config or AmmPoolConfig()
        self._lp_balances: dict[str, int] = {}
        self._lp_supply = 0
        self._pending_fees = 0
        self._last_fee_update = clock.now()

        if self._config.seed_liquidity:
            asset.mint(self.address, self._config.seed_liquidity)
            self._lp_balances[_EXTERNAL_LP] = self._config.seed_liquidity
            self._lp_supply = self._config.seed_liquidity

    @property
    def config(self) -> AmmPoolConfig:
        """풀 파라미터."""
        return self._config

    @property
    def reserves(self) -> int:
        """풀 준비금 (자산 장부상 어댑터 잔고)."""
        return self._asset.balance_of(self.address)

    @property
    def lp_supply(self) -> int:
        """총 LP 발행량."""
        return self._lp_supply

    @property
    def pending_fees(self) -> int:
        """harvest 대기 중인 수수료 (현재 시각 기준)."""
        return self._pending_fees + self._fees_since(self._clock.now())

    def lp_balance_of(self, holder: str) -> int:
        """holder의 LP 잔고."""
        return self._lp_balances.get(holder, 0)

    # ── Venue simulation ──────────────────────────────────────────

    def record_swap_fees(self, amount: int) -> None:
        """외부 스왑에서 발생한 수수료를 pending에 적립."""
        self._pending_fees += amount

    def apply_loss(self, amount: int) -> int:
        """준비금 감소 (비영구 손실, 해킹 등). 실제 감소액 반환."""
        loss = min(amount, self.reserves)
        if loss:
            self._asset.burn(self.address, loss)
            logger.warning("Pool {} lost {} of reserves", self.name, loss)
        return loss

    def _fees_since(self, timestamp: int) -> int:
        elapsed = max(timestamp - self._last_fee_update, 0)
        if elapsed == 0 or self._config.fee_apy_bps == 0:
            return 0
        return mul_div(
            self.reserves * self._config.fee_apy_bps, elapsed, BPS_DENOMINATOR * SECONDS_PER_YEAR
        )

    def _checkpoint_fees(self) -> None:
        now = self._clock.now()
        self._pending_fees += self._fees_since(now)
        self._last_fee_update = now

    # ── Hooks ─────────────────────────────────────────────────────

    def _before_mutation(self) -> None:
        self._checkpoint_fees()

    def _on_deposit(self, amount: int) -> None:
        vault = self.vault
        assert vault is not None
        reserves_before = self.reserves - amount
        if self._lp_supply == 0:
            minted = amount
        elif reserves_before == 0:
            msg = f"{self.name} pool has no reserves backing its LP supply"
            raise StrategyFailureError(msg, context={"strategy": self.name})
        else:
            minted = mul_div(amount, self._lp_supply, reserves_before)
        self._lp_balances[vault] = self.lp_balance_of(vault) + minted
        self._lp_supply += minted

    def _on_withdraw(self, amount: int) -> int:
        vault = self.vault
        assert vault is not None
        reserves = self.reserves
        cap = bps_of(reserves, self._config.max_withdraw_bps)
        gross = min(amount, self._position_value(), cap)
        if gross == 0:
            return 0

        burned = min(
            mul_div(gross, self._lp_supply, reserves, Rounding.CEIL),
            self.lp_balance_of(vault),
        )
        self._lp_balances[vault] -= burned
        self._lp_supply -= burned

        net = gross - bps_of(gross, self._config.exit_fee_bps)
        if net < amount:
            logger.debug(
                "Pool {} returned {} of {} requested (cap={}, exit_fee_bps={})",
                self.name,
                net,
                amount,
                cap,
                self._config.exit_fee_bps,
            )
        return net

    def _on_harvest(self) -> int:
        self._checkpoint_fees()
        fees = self._pending_fees
        if fees:
            self._asset.mint(self.address, fees)
            self._pending_fees = 0
            logger.debug("Pool {} compounded {} fees", self.name, fees)
        return fees

    def _position_value(self) -> int:
        vault = self.vault
        if vault is None or self._lp_supply == 0:
            return 0
        return mul_div(self.lp_balance_of(vault), self.reserves, self._lp_supply)

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> AmmPoolCheckpoint:
        """포지션 상태 사본."""
        return AmmPoolCheckpoint(
            lp_balances=tuple(self._lp_balances.items()),
            lp_supply=self._lp_supply,
            pending_fees=self._pending_fees,
            last_fee_update=self._last_fee_update,
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, AmmPoolCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._lp_balances = dict(state.lp_balances)
        self._lp_supply = state.lp_supply
        self._pending_fees = state.pending_fees
        self._last_fee_update = state.last_fee_update
