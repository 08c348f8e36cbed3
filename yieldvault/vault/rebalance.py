"""Rebalance Engine — 배분 이탈 측정과 전량 재배치.

이탈(drift)은 목표 잔고 대비 bps로 측정합니다.

    deviation = |current - target| * 10000 / max(target, 1)

어느 한쪽이라도 임계값을 넘으면 두 전략을 전량 회수한 뒤(full unwind)
현재 비율의 목표까지 A → B 순서로 다시 배치합니다. 증분(delta) 방식보다
호출 비용은 크지만 단순하고 결정적입니다.

별도 상태를 저장하지 않으며, 볼트의 작업 직렬화(잠금) 아래에서만 호출됩니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from yieldvault.core.arithmetic import BPS_DENOMINATOR, bps_of, mul_div
from yieldvault.vault.models import RebalanceResult, StrategySlot

if TYPE_CHECKING:
    from yieldvault.vault.allocation import AllocationController
    from yieldvault.vault.router import CapitalRouter


def deviation_bps(current: int, target: int) -> int:
    """목표 대비 이탈 (bps, floor)."""
    return mul_div(abs(current - target), BPS_DENOMINATOR, max(target, 1))


def needs_rebalance(
    balance_a: int,
    balance_b: int,
    target_a: int,
    target_b: int,
    threshold_bps: int,
) -> bool:
    """어느 한쪽 이탈이 임계값을 초과하면 True. 목표가 모두 0이면 False."""
    if target_a == 0 and target_b == 0:
        return False
    return (
        deviation_bps(balance_a, target_a) > threshold_bps
        or deviation_bps(balance_b, target_b) > threshold_bps
    )


class RebalanceEngine:
    """AllocationController의 목표에 맞춰 전략 잔고를 재배치.

    Args:
        router: 자금 이동 라우터
        allocation: 비율/임계값 보유 컨트롤러
    """

    def __init__(self, router: CapitalRouter, allocation: AllocationController) -> None:
        self._router = router
        self._allocation = allocation

    def targets(self, total_assets: int) -> tuple[int, int]:
        """총 자산 기준 (A 목표, B 목표)."""
        return (
            bps_of(total_assets, self._allocation.ratio_a),
            bps_of(total_assets, self._allocation.ratio_b),
        )

    def check(self) -> bool:
        """현재 잔고가 임계값을 넘어 이탈했는지 여부."""
        idle = self._router.idle()
        balance_a, balance_b = self._router.balances()
        target_a, target_b = self.targets(idle + balance_a + balance_b)
        return needs_rebalance(
            balance_a, balance_b, target_a, target_b, self._allocation.rebalance_threshold_bps
        )

    def rebalance(self) -> RebalanceResult:
        """이탈 시 전량 회수 후 A → B 순으로 목표까지 재배치."""
        idle = self._router.idle()
        before_a, before_b = self._router.balances()
        total = idle + before_a + before_b
        target_a, target_b = self.targets(total)

        if not needs_rebalance(
            before_a, before_b, target_a, target_b, self._allocation.rebalance_threshold_bps
        ):
            logger.debug("Rebalance skipped: within threshold (A={} B={})", before_a, before_b)
            return RebalanceResult(
                triggered=False,
                total_assets=total,
                target_a=target_a,
                target_b=target_b,
                before_a=before_a,
                before_b=before_b,
                after_a=before_a,
                after_b=before_b,
                idle_after=idle,
            )

        # 1. Full unwind
        self._router.unwind_all()

        # 2. Redeploy A then B, each capped by remaining idle
        self._router.deposit_to(StrategySlot.A, min(target_a, self._router.idle()))
        self._router.deposit_to(StrategySlot.B, min(target_b, self._router.idle()))

        after_a, after_b = self._router.balances()
        result = RebalanceResult(
            triggered=True,
            total_assets=total,
            target_a=target_a,
            target_b=target_b,
            before_a=before_a,
            before_b=before_b,
            after_a=after_a,
            after_b=after_b,
            idle_after=self._router.idle(),
        )
        logger.info(
            "Rebalanced: A {} -> {} (target {}), B {} -> {} (target {})",
            before_a,
            after_a,
            target_a,
            before_b,
            after_b,
            target_b,
        )
        return result
