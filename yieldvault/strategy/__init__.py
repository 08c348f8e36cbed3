"""Strategy adapters.

Exports:
    - StrategyAdapter: 볼트가 의존하는 어댑터 Protocol
    - BaseStrategyAdapter: 인메모리 venue 어댑터 기반 클래스
    - LendingStrategy / LendingConfig: 대출 venue
    - AmmPoolStrategy / AmmPoolConfig: AMM 유동성 풀
"""

from yieldvault.strategy.amm_pool import AmmPoolConfig, AmmPoolStrategy
from yieldvault.strategy.base import BaseStrategyAdapter, StrategyAdapter
from yieldvault.strategy.lending import LendingConfig, LendingStrategy

__all__ = [
    "AmmPoolConfig",
    "AmmPoolStrategy",
    "BaseStrategyAdapter",
    "LendingConfig",
    "LendingStrategy",
    "StrategyAdapter",
]
