"""Vault engine.

Exports:
    - Vault: 입출금/배분/리밸런싱 오케스트레이션
    - CapitalRouter: idle ↔ 전략 자금 이동
    - RebalanceEngine: 배분 이탈 측정과 재배치
    - AllocationController: 비율/임계값/수수료 필드
    - 결과 컨테이너 (VaultSnapshot, WithdrawalReport, RebalanceResult, ...)
"""

from yieldvault.vault.allocation import AllocationController
from yieldvault.vault.models import (
    DeploymentResult,
    FeeSchedule,
    HarvestResult,
    RebalanceResult,
    StrategySlot,
    VaultOperation,
    VaultSnapshot,
    WithdrawalReport,
)
from yieldvault.vault.rebalance import RebalanceEngine, needs_rebalance
from yieldvault.vault.router import CapitalRouter
from yieldvault.vault.vault import Vault

__all__ = [
    "AllocationController",
    "CapitalRouter",
    "DeploymentResult",
    "FeeSchedule",
    "HarvestResult",
    "RebalanceEngine",
    "RebalanceResult",
    "StrategySlot",
    "Vault",
    "VaultOperation",
    "VaultSnapshot",
    "WithdrawalReport",
    "needs_rebalance",
]
