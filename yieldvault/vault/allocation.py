"""Allocation Controller — 목표 비율, 임계값, 선언된 수수료 필드.

관리용 setter는 모두 RoleGate 권한 검사를 거칩니다.

    set_allocation          STRATEGIST   ratio_a + ratio_b == 10000
    set_rebalance_threshold STRATEGIST   bps <= max_rebalance_threshold_bps
    set_fees                ADMIN        mgmt <= 10%, perf <= 50% (설정 가능)
    set_treasury            ADMIN        zero address 불가

수수료 필드는 검증·저장만 하며 어떤 입출금/리밸런싱 경로에서도
계산되거나 treasury로 이전되지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from loguru import logger

from yieldvault.access.roles import Role
from yieldvault.core.arithmetic import BPS_DENOMINATOR
from yieldvault.core.exceptions import (
    InvalidFeeError,
    InvalidRatioError,
    InvalidThresholdError,
    VaultError,
)
from yieldvault.ledger.address import require_address
from yieldvault.vault.models import FeeSchedule

if TYPE_CHECKING:
    from yieldvault.access.roles import RoleGate
    from yieldvault.config.settings import VaultSettings


@dataclass(frozen=True)
class AllocationCheckpoint:
    """AllocationController 상태 사본."""

    ratio_a: int
    ratio_b: int
    threshold_bps: int
    fees: FeeSchedule


def _require_bps(value: object, name: str, error: type[VaultError]) -> int:
    """bps 값이 정수(bool 제외)인지 확인."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be integer basis points, got {type(value).__name__}"
        raise error(msg, context={name: value})
    return value


class AllocationController:
    """배분 비율과 관리 파라미터 보관소.

    Args:
        roles: 권한 테이블
        settings: 기본값 및 한도
        treasury: 수수료 수령 주소 (선언만 됨)
    """

    def __init__(self, roles: RoleGate, settings: VaultSettings, treasury: str) -> None:
        self._roles = roles
        self._settings = settings
        self._ratio_a = settings.default_ratio_a_bps
        self._ratio_b = settings.default_ratio_b_bps
        self._threshold_bps = settings.default_rebalance_threshold_bps
        self._fees = FeeSchedule(
            management_fee_bps=settings.default_management_fee_bps,
            performance_fee_bps=settings.default_performance_fee_bps,
            treasury=require_address(treasury, "treasury"),
            last_harvest_timestamp=0,
            total_profits=0,
        )

    # ── Views ─────────────────────────────────────────────────────

    @property
    def ratio_a(self) -> int:
        """전략 A 목표 비율 (bps)."""
        return self._ratio_a

    @property
    def ratio_b(self) -> int:
        """전략 B 목표 비율 (bps)."""
        return self._ratio_b

    @property
    def rebalance_threshold_bps(self) -> int:
        """리밸런싱 임계값 (bps)."""
        return self._threshold_bps

    @property
    def fees(self) -> FeeSchedule:
        """선언된 수수료 필드."""
        return self._fees

    # ── Gated setters ─────────────────────────────────────────────

    def set_allocation(self, ratio_a: int, ratio_b: int, *, caller: str) -> None:
        """목표 비율 변경.

        Raises:
            UnauthorizedError: STRATEGIST 권한 없음
            InvalidRatioError: 정수가 아니거나, 합이 10000이 아니거나, 범위 밖
        """
        self._roles.require(Role.STRATEGIST, caller)
        _require_bps(ratio_a, "ratio_a", InvalidRatioError)
        _require_bps(ratio_b, "ratio_b", InvalidRatioError)
        if (
            ratio_a < 0
            or ratio_b < 0
            or ratio_a + ratio_b != BPS_DENOMINATOR
        ):
            msg = f"ratios must be non-negative and sum to {BPS_DENOMINATOR}"
            raise InvalidRatioError(msg, context={"ratio_a": ratio_a, "ratio_b": ratio_b})
        self._ratio_a = ratio_a
        self._ratio_b = ratio_b
        logger.info("Allocation set: A={} B={} (by {})", ratio_a, ratio_b, caller)

    def set_rebalance_threshold(self, threshold_bps: int, *, caller: str) -> None:
        """리밸런싱 임계값 변경.

        Raises:
            InvalidThresholdError: 한도 초과 또는 음수
        """
        self._roles.require(Role.STRATEGIST, caller)
        _require_bps(threshold_bps, "threshold_bps", InvalidThresholdError)
        cap = self._settings.max_rebalance_threshold_bps
        if threshold_bps < 0 or threshold_bps > cap:
            msg = f"rebalance threshold must be within [0, {cap}] bps"
            raise InvalidThresholdError(msg, context={"threshold_bps": threshold_bps})
        self._threshold_bps = threshold_bps
        logger.info("Rebalance threshold set: {} bps (by {})", threshold_bps, caller)

    def set_fees(self, management_fee_bps: int, performance_fee_bps: int, *, caller: str) -> None:
        """선언된 수수료 값 변경 (ADMIN).

        Raises:
            InvalidFeeError: 한도 초과 또는 음수
        """
        self._roles.require(Role.ADMIN, caller)
        _require_bps(management_fee_bps, "management_fee_bps", InvalidFeeError)
        _require_bps(performance_fee_bps, "performance_fee_bps", InvalidFeeError)
        mgmt_cap = self._settings.max_management_fee_bps
        perf_cap = self._settings.max_performance_fee_bps
        if not 0 <= management_fee_bps <= mgmt_cap:
            msg = f"management fee must be within [0, {mgmt_cap}] bps"
            raise InvalidFeeError(msg, context={"management_fee_bps": management_fee_bps})
        if not 0 <= performance_fee_bps <= perf_cap:
            msg = f"performance fee must be within [0, {perf_cap}] bps"
            raise InvalidFeeError(msg, context={"performance_fee_bps": performance_fee_bps})
        self._fees = replace(
            self._fees,
            management_fee_bps=management_fee_bps,
            performance_fee_bps=performance_fee_bps,
        )
        logger.info(
            "Fees set: mgmt={} perf={} bps (by {})", management_fee_bps, performance_fee_bps, caller
        )

    def set_treasury(self, treasury: str, *, caller: str) -> None:
        """treasury 주소 변경 (ADMIN)."""
        self._roles.require(Role.ADMIN, caller)
        self._fees = replace(self._fees, treasury=require_address(treasury, "treasury"))
        logger.info("Treasury set: {} (by {})", treasury, caller)

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> AllocationCheckpoint:
        """현재 설정 사본."""
        return AllocationCheckpoint(
            ratio_a=self._ratio_a,
            ratio_b=self._ratio_b,
            threshold_bps=self._threshold_bps,
            fees=self._fees,
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, AllocationCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._ratio_a = state.ratio_a
        self._ratio_b = state.ratio_b
        self._threshold_bps = state.threshold_bps
        self._fees = state.fees
