"""Vault Domain Models.

볼트 엔진의 열거형과 런타임 결과 컨테이너를 정의합니다.

Rules Applied:
    - #10 Python Standards: Modern typing (StrEnum), dataclass
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class StrategySlot(StrEnum):
    """볼트의 두 전략 슬롯."""

    A = "A"
    B = "B"


class VaultOperation(StrEnum):
    """상태를 변경하는 볼트 작업 (로그/잠금 식별용)."""

    DEPOSIT = "deposit"
    MINT = "mint"
    WITHDRAW = "withdraw"
    REDEEM = "redeem"
    REBALANCE = "rebalance"
    HARVEST = "harvest"
    SET_ALLOCATION = "set_allocation"
    SET_THRESHOLD = "set_rebalance_threshold"
    SET_FEES = "set_fees"
    SET_TREASURY = "set_treasury"
    SET_ROLE = "set_role"
    TRANSFER = "transfer"
    APPROVE = "approve"


@dataclass(frozen=True)
class VaultSnapshot:
    """한 시점의 일관된 볼트 잔고 스냅샷.

    Attributes:
        idle: 볼트가 직접 보유한 자산
        balance_a: 전략 A의 볼트 귀속 잔고
        balance_b: 전략 B의 볼트 귀속 잔고
        total_shares: 총 발행 share
    """

    idle: int
    balance_a: int
    balance_b: int
    total_shares: int

    @property
    def deployed(self) -> int:
        """전략에 배치된 총액."""
        return self.balance_a + self.balance_b

    @property
    def total_assets(self) -> int:
        """idle + 전략 잔고 (정의상 총 자산)."""
        return self.idle + self.deployed


@dataclass(frozen=True)
class DeploymentResult:
    """idle 자금 배치 결과."""

    to_a: int
    to_b: int
    idle_after: int

    @property
    def deployed(self) -> int:
        """배치된 총액."""
        return self.to_a + self.to_b


@dataclass(frozen=True)
class WithdrawalReport:
    """전략 인출(비례 → 순차 보충) 결과.

    Attributes:
        requested: 기존 idle에 더해 추가로 모아야 하는 금액
        idle_before: 인출 전 idle
        proportional_a / proportional_b: 1차 비례 인출 요청액
        shortfall_a / shortfall_b: 2차 보충 인출 요청액
        idle_after: 인출 후 idle
    """

    requested: int
    idle_before: int
    proportional_a: int
    proportional_b: int
    shortfall_a: int
    shortfall_b: int
    idle_after: int

    @property
    def gathered(self) -> int:
        """실제로 idle에 추가된 금액."""
        return self.idle_after - self.idle_before

    @property
    def fulfilled(self) -> bool:
        """요청액만큼 idle에 추가로 모였는지 여부."""
        return self.gathered >= self.requested


@dataclass(frozen=True)
class RebalanceResult:
    """리밸런싱 결과.

    Attributes:
        triggered: 임계값 초과로 실제 재배치가 수행되었는지
        total_assets: 목표 계산에 사용한 총 자산
        target_a / target_b: 목표 잔고
        before_a / before_b: 수행 전 잔고
        after_a / after_b: 수행 후 잔고
        idle_after: 수행 후 idle
    """

    triggered: bool
    total_assets: int
    target_a: int
    target_b: int
    before_a: int
    before_b: int
    after_a: int
    after_b: int
    idle_after: int


@dataclass(frozen=True)
class FeeSchedule:
    """선언된 수수료 필드 (어떤 자금 이동 경로에도 연결되지 않음)."""

    management_fee_bps: int
    performance_fee_bps: int
    treasury: str
    last_harvest_timestamp: int
    total_profits: int


@dataclass(frozen=True)
class HarvestResult:
    """harvest 결과.

    Attributes:
        reported_a / reported_b: 각 어댑터가 반영했다고 보고한 금액
        total_assets_before / total_assets_after: harvest 전후 총 자산
    """

    reported_a: int
    reported_b: int
    total_assets_before: int
    total_assets_after: int

    @property
    def realized(self) -> int:
        """총 자산 변화량 (음수 가능)."""
        return self.total_assets_after - self.total_assets_before
