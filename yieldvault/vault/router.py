"""Capital Router — idle 자금 배치와 전략 인출.

Deployment:
    idle을 현재 비율로 분할 (floor), 나머지는 idle에 남김.
    0이 아닌 금액만 각 어댑터의 deposit으로 전달하고 실패 시 재시도하지 않음.

Withdrawal (비례 → 순차 보충):
    1. 전략 잔고 합이 0이면 InsufficientBalanceError
    2. 1차: 잔고 비례로 amount를 분할 인출 (각 잔고로 상한)
    3. 2차: 아직 부족하면 A를 먼저, 그다음 B를 현재 잔고까지 인출
       (고정 순서 A → B. 부하 분산이 아닌 단순·결정적 tie-break)
    4. 부분 충족은 에러가 아님. 충족 여부는 호출자가 검사

Rules Applied:
    - #23 Exception Handling: 어댑터 예외 → StrategyFailureError (재시도 없음)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from loguru import logger

from yieldvault.core.arithmetic import bps_of, check_amount, mul_div
from yieldvault.core.exceptions import (
    InsufficientBalanceError,
    StrategyFailureError,
    VaultError,
)
from yieldvault.vault.models import DeploymentResult, StrategySlot, WithdrawalReport

if TYPE_CHECKING:
    from collections.abc import Callable

    from yieldvault.ledger.asset import AssetLedger
    from yieldvault.strategy.base import StrategyAdapter

T = TypeVar("T")


class CapitalRouter:
    """idle ↔ 전략 자금 이동.

    Args:
        asset: 기초 자산 장부
        vault_address: 볼트 계정 주소
        strategy_a: 전략 A 어댑터
        strategy_b: 전략 B 어댑터
    """

    def __init__(
        self,
        asset: AssetLedger,
        vault_address: str,
        strategy_a: StrategyAdapter,
        strategy_b: StrategyAdapter,
    ) -> None:
        self._asset = asset
        self._vault = vault_address
        self._strategies: dict[StrategySlot, StrategyAdapter] = {
            StrategySlot.A: strategy_a,
            StrategySlot.B: strategy_b,
        }

    # ── Views ─────────────────────────────────────────────────────

    def strategy(self, slot: StrategySlot) -> StrategyAdapter:
        """슬롯의 어댑터."""
        return self._strategies[slot]

    def idle(self) -> int:
        """볼트가 직접 보유한 자산."""
        return self._asset.balance_of(self._vault)

    def balance(self, slot: StrategySlot) -> int:
        """슬롯 어댑터의 볼트 귀속 잔고."""
        adapter = self._strategies[slot]
        return self._invoke(slot, "balance_of", adapter.balance_of, self._vault)

    def balances(self) -> tuple[int, int]:
        """(A 잔고, B 잔고)."""
        return self.balance(StrategySlot.A), self.balance(StrategySlot.B)

    # ── Deployment ────────────────────────────────────────────────

    def deploy(self, ratio_a: int, ratio_b: int) -> DeploymentResult:
        """현재 idle 전체를 비율대로 배치."""
        idle = self.idle()
        to_a = bps_of(idle, ratio_a)
        to_b = bps_of(idle, ratio_b)
        self.deposit_to(StrategySlot.A, to_a)
        self.deposit_to(StrategySlot.B, to_b)
        result = DeploymentResult(to_a=to_a, to_b=to_b, idle_after=self.idle())
        logger.debug("Deployed idle {}: A={} B={} idle_after={}", idle, to_a, to_b, result.idle_after)
        return result

    def deposit_to(self, slot: StrategySlot, amount: int) -> None:
        """amount를 슬롯 어댑터에 배치 (0이면 무시)."""
        check_amount(amount)
        if amount == 0:
            return
        adapter = self._strategies[slot]
        spender = self._spender(slot)
        self._asset.approve(self._vault, spender, amount)
        self._invoke(slot, "deposit", adapter.deposit, amount)
        self._asset.approve(self._vault, spender, 0)

    # ── Withdrawal ────────────────────────────────────────────────

    def withdraw_from(self, slot: StrategySlot, amount: int) -> int:
        """슬롯 어댑터에서 amount 인출 요청. idle 증가분을 반환."""
        check_amount(amount)
        if amount == 0:
            return 0
        adapter = self._strategies[slot]
        before = self.idle()
        self._invoke(slot, "withdraw", adapter.withdraw, amount)
        received = self.idle() - before
        if received < 0:
            msg = f"strategy {slot} withdrawal reduced vault idle balance"
            raise StrategyFailureError(msg, context={"strategy": adapter.name, "delta": received})
        return received

    def pull(self, amount: int) -> WithdrawalReport:
        """전략들에서 amount를 idle로 모음 (best-effort).

        Args:
            amount: idle에 추가로 확보해야 하는 금액

        Returns:
            WithdrawalReport (부분 충족 가능, 호출자가 검사)

        Raises:
            InsufficientBalanceError: 두 전략 잔고가 모두 0인 경우
        """
        check_amount(amount)
        idle_before = self.idle()
        bal_a, bal_b = self.balances()
        total = bal_a + bal_b
        if total == 0:
            msg = "no strategy liquidity to withdraw from"
            raise InsufficientBalanceError(msg, context={"requested": amount, "idle": idle_before})

        # 1. Proportional pass
        prop_a = min(bal_a, mul_div(amount, bal_a, total))
        prop_b = min(bal_b, mul_div(amount, bal_b, total))
        self.withdraw_from(StrategySlot.A, prop_a)
        self.withdraw_from(StrategySlot.B, prop_b)

        # 2. Shortfall pass: A first, then B
        short_a = 0
        short_b = 0
        remaining = amount - (self.idle() - idle_before)
        if remaining > 0:
            short_a = min(remaining, self.balance(StrategySlot.A))
            remaining -= self.withdraw_from(StrategySlot.A, short_a)
        if remaining > 0:
            short_b = min(remaining, self.balance(StrategySlot.B))
            self.withdraw_from(StrategySlot.B, short_b)

        report = WithdrawalReport(
            requested=amount,
            idle_before=idle_before,
            proportional_a=prop_a,
            proportional_b=prop_b,
            shortfall_a=short_a,
            shortfall_b=short_b,
            idle_after=self.idle(),
        )
        logger.debug(
            "Pulled {}/{} from strategies (prop A={} B={}, shortfall A={} B={})",
            report.gathered,
            amount,
            prop_a,
            prop_b,
            short_a,
            short_b,
        )
        return report

    def unwind_all(self) -> int:
        """두 전략의 전체 잔고를 idle로 회수. 회수액 반환."""
        gathered = 0
        for slot in StrategySlot:
            gathered += self.withdraw_from(slot, self.balance(slot))
        return gathered

    def harvest(self, slot: StrategySlot) -> int:
        """슬롯 어댑터의 harvest 호출. 보고된 반영액 반환."""
        adapter = self._strategies[slot]
        return self._invoke(slot, "harvest", adapter.harvest)

    # ── Helpers ───────────────────────────────────────────────────

    def _spender(self, slot: StrategySlot) -> str:
        return self._strategies[slot].address

    def _invoke(self, slot: StrategySlot, op: str, fn: Callable[..., T], *args: object) -> T:
        """어댑터 호출. 볼트 예외는 그대로, 그 외는 StrategyFailureError로 변환."""
        try:
            return fn(*args)
        except VaultError:
            raise
        except Exception as exc:
            adapter = self._strategies[slot]
            msg = f"strategy {slot} ({adapter.name}) {op} failed: {exc}"
            raise StrategyFailureError(
                msg, context={"strategy": adapter.name, "slot": str(slot), "op": op}
            ) from exc
