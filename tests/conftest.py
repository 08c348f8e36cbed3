"""Shared fixtures for tests.

이 모듈은 테스트에서 공통으로 사용되는 픽스처를 제공합니다.

Rules Applied:
    - #17 Testing Standards: Pytest fixtures
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from yieldvault.config.settings import VaultSettings, clear_settings_cache
from yieldvault.core.arithmetic import MAX_UINT256
from yieldvault.core.clock import SimulatedClock
from yieldvault.ledger.asset import AssetLedger
from yieldvault.strategy.amm_pool import AmmPoolConfig, AmmPoolStrategy
from yieldvault.strategy.lending import LendingConfig, LendingStrategy
from yieldvault.vault.vault import Vault

# ---------------------------------------------------------------------------
# 디렉토리 경로 → pytest 마커 자동 매핑
# ---------------------------------------------------------------------------
_DIR_MARKER_MAP: dict[str, str] = {
    "/strategy/": "strategy",
    "/vault/": "integration",
    "/cli/": "integration",
    "/core/": "unit",
    "/ledger/": "unit",
    "/access/": "unit",
    "/config/": "unit",
    "/logging/": "unit",
}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """디렉토리 경로 기반 자동 마커 부여."""
    for item in items:
        fspath = str(item.fspath)
        for dir_pattern, marker_name in _DIR_MARKER_MAP.items():
            if dir_pattern in fspath:
                item.add_marker(getattr(pytest.mark, marker_name))
                break


@pytest.fixture(autouse=True)
def _fresh_settings() -> None:
    """테스트 간 설정 캐시 격리."""
    clear_settings_cache()


@pytest.fixture
def settings() -> VaultSettings:
    """기본 볼트 설정 (50/50, 임계값 500 bps, 버퍼 2)."""
    return VaultSettings()


@pytest.fixture
def clock() -> SimulatedClock:
    return SimulatedClock()


@pytest.fixture
def usdc() -> AssetLedger:
    return AssetLedger("USDC", decimals=6)


@pytest.fixture
def lending(usdc: AssetLedger, clock: SimulatedClock) -> LendingStrategy:
    """연 5% 대출 venue."""
    return LendingStrategy(usdc, clock, LendingConfig(supply_apy_bps=500))


@pytest.fixture
def amm(usdc: AssetLedger, clock: SimulatedClock) -> AmmPoolStrategy:
    """수수료 누적이 없는 AMM 풀 (잔고가 시간에 따라 변하지 않음)."""
    return AmmPoolStrategy(usdc, clock, AmmPoolConfig(fee_apy_bps=0))


@pytest.fixture
def vault(
    usdc: AssetLedger,
    lending: LendingStrategy,
    amm: AmmPoolStrategy,
    settings: VaultSettings,
) -> Vault:
    """lending(A) + AMM(B) 볼트. admin / strategist / treasury 계정 사용."""
    return Vault(
        usdc,
        lending,
        amm,
        treasury="treasury",
        admin="admin",
        strategist="strategist",
        settings=settings,
    )


@pytest.fixture
def fund(usdc: AssetLedger, vault: Vault) -> Callable[[str, int], None]:
    """계정에 USDC를 발행하고 볼트에 무제한 승인."""

    def _fund(account: str, amount: int) -> None:
        usdc.mint(account, amount)
        usdc.approve(account, vault.address, MAX_UINT256)

    return _fund
