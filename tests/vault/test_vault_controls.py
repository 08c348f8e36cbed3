"""Tests for vault administration, harvest, atomicity and re-entrancy."""

from __future__ import annotations

import threading
from collections.abc import Callable

import pytest

from yieldvault.access.roles import Role
from yieldvault.config.settings import VaultSettings
from yieldvault.core.arithmetic import MAX_UINT256
from yieldvault.core.clock import SimulatedClock
from yieldvault.core.exceptions import (
    InvalidFeeError,
    InvalidRatioError,
    InvalidThresholdError,
    ReentrancyError,
    StrategyFailureError,
    UnauthorizedError,
    ZeroAddressError,
)
from yieldvault.ledger.address import ZERO_ADDRESS
from yieldvault.ledger.asset import AssetLedger
from yieldvault.strategy.amm_pool import AmmPoolConfig, AmmPoolStrategy
from yieldvault.strategy.lending import LendingStrategy
from yieldvault.vault.vault import Vault

Fund = Callable[[str, int], None]


class _ReentrantLending(LendingStrategy):
    """deposit 도중 콜백으로 볼트를 다시 호출하는 악성 venue."""

    def __init__(self, asset: AssetLedger, clock: SimulatedClock) -> None:
        super().__init__(asset, clock, name="reentrant")
        self.reenter: Callable[[], object] | None = None

    def _on_deposit(self, amount: int) -> None:
        super()._on_deposit(amount)
        if self.reenter is not None:
            self.reenter()


# ── TestAdministration ─────────────────────────────────────────────


class TestAdministration:
    """권한별 설정 변경."""

    def test_defaults_from_settings(self, vault: Vault) -> None:
        assert (vault.ratio_a, vault.ratio_b) == (5_000, 5_000)
        assert vault.rebalance_threshold_bps == 500
        assert vault.fees.management_fee_bps == 200
        assert vault.fees.performance_fee_bps == 2_000
        assert vault.fees.treasury == "treasury"

    def test_strategist_sets_allocation(self, vault: Vault) -> None:
        vault.set_allocation(7_000, 3_000, caller="strategist")
        assert (vault.ratio_a, vault.ratio_b) == (7_000, 3_000)

    def test_admin_is_also_strategist(self, vault: Vault) -> None:
        vault.set_allocation(10_000, 0, caller="admin")
        assert vault.ratio_a == 10_000

    def test_outsider_cannot_set_allocation(self, vault: Vault) -> None:
        with pytest.raises(UnauthorizedError):
            vault.set_allocation(7_000, 3_000, caller="mallory")

    @pytest.mark.parametrize(("ratio_a", "ratio_b"), [(6_000, 3_000), (10_001, -1), (0, 0)])
    def test_invalid_ratio(self, vault: Vault, ratio_a: int, ratio_b: int) -> None:
        with pytest.raises(InvalidRatioError):
            vault.set_allocation(ratio_a, ratio_b, caller="strategist")
        assert vault.ratio_a + vault.ratio_b == 10_000

    @pytest.mark.parametrize(("ratio_a", "ratio_b"), [(5_000.5, 4_999.5), (True, 9_999), ("5000", 5_000)])
    def test_non_integer_ratio_rejected(
        self, vault: Vault, fund: Fund, ratio_a: object, ratio_b: object
    ) -> None:
        with pytest.raises(InvalidRatioError):
            vault.set_allocation(ratio_a, ratio_b, caller="strategist")  # type: ignore[arg-type]
        assert (vault.ratio_a, vault.ratio_b) == (5_000, 5_000)
        fund("alice", 1_000)
        assert vault.deposit(1_000, "alice", caller="alice") == 1_000

    def test_non_integer_fee_and_threshold_rejected(self, vault: Vault) -> None:
        with pytest.raises(InvalidFeeError):
            vault.set_fees(100.0, 1_000, caller="admin")  # type: ignore[arg-type]
        with pytest.raises(InvalidFeeError):
            vault.set_fees(100, False, caller="admin")  # type: ignore[arg-type]
        with pytest.raises(InvalidThresholdError):
            vault.set_rebalance_threshold(250.5, caller="strategist")  # type: ignore[arg-type]
        assert vault.fees.management_fee_bps == 200
        assert vault.rebalance_threshold_bps == 500

    def test_fees_are_admin_only(self, vault: Vault) -> None:
        with pytest.raises(UnauthorizedError):
            vault.set_fees(100, 1_000, caller="strategist")
        vault.set_fees(100, 1_000, caller="admin")
        assert vault.fees.management_fee_bps == 100

    @pytest.mark.parametrize(("mgmt", "perf"), [(1_001, 0), (0, 5_001), (-1, 0)])
    def test_fee_caps(self, vault: Vault, mgmt: int, perf: int) -> None:
        with pytest.raises(InvalidFeeError):
            vault.set_fees(mgmt, perf, caller="admin")

    def test_fee_caps_inclusive(self, vault: Vault) -> None:
        vault.set_fees(1_000, 5_000, caller="admin")
        assert (vault.fees.management_fee_bps, vault.fees.performance_fee_bps) == (1_000, 5_000)

    def test_threshold(self, vault: Vault) -> None:
        vault.set_rebalance_threshold(5_000, caller="strategist")
        assert vault.rebalance_threshold_bps == 5_000
        with pytest.raises(InvalidThresholdError):
            vault.set_rebalance_threshold(5_001, caller="strategist")
        with pytest.raises(InvalidFeeError):
            vault.set_rebalance_threshold(5_001, caller="strategist")

    def test_treasury(self, vault: Vault) -> None:
        vault.set_treasury("new-treasury", caller="admin")
        assert vault.fees.treasury == "new-treasury"
        with pytest.raises(ZeroAddressError):
            vault.set_treasury(ZERO_ADDRESS, caller="admin")
        with pytest.raises(UnauthorizedError):
            vault.set_treasury("other", caller="strategist")

    def test_grant_role_through_vault(self, vault: Vault) -> None:
        vault.grant_role(Role.STRATEGIST, "bob", caller="admin")
        vault.set_allocation(6_000, 4_000, caller="bob")
        vault.revoke_role(Role.STRATEGIST, "bob", caller="admin")
        with pytest.raises(UnauthorizedError):
            vault.set_allocation(5_000, 5_000, caller="bob")

    def test_fees_are_never_charged(
        self, vault: Vault, fund: Fund, usdc: AssetLedger, clock: SimulatedClock
    ) -> None:
        fund("alice", 100_000)
        vault.deposit(100_000, "alice", caller="alice")
        clock.advance(days=30)
        vault.harvest(caller="strategist")
        vault.redeem(vault.balance_of("alice"), "alice", "alice", caller="alice")
        assert usdc.balance_of("treasury") == 0
        assert vault.fees.total_profits == 0
        assert vault.fees.last_harvest_timestamp == 0


# ── TestHarvest ────────────────────────────────────────────────────


class TestHarvest:
    """어댑터 harvest 위임."""

    def test_harvest_compounds_pool_fees(self, settings: VaultSettings) -> None:
        usdc = AssetLedger("USDC")
        clock = SimulatedClock()
        lending = LendingStrategy(usdc, clock)
        amm = AmmPoolStrategy(usdc, clock, AmmPoolConfig(fee_apy_bps=365))
        vault = Vault(usdc, lending, amm, treasury="treasury", admin="admin", settings=settings)
        usdc.mint("alice", 100_000)
        usdc.approve("alice", vault.address, MAX_UINT256)
        vault.deposit(100_000, "alice", caller="alice")
        clock.advance(days=10)

        result = vault.harvest(caller="admin")
        assert result.reported_a == 68
        assert result.reported_b == 50
        assert result.realized == 50
        assert vault.total_assets() == 100_118

    def test_harvest_requires_strategist(self, vault: Vault) -> None:
        with pytest.raises(UnauthorizedError):
            vault.harvest(caller="alice")


# ── TestAtomicity ──────────────────────────────────────────────────


class TestAtomicity:
    """실패한 작업은 모든 상태를 되돌림."""

    def test_failed_deployment_rolls_back_deposit(
        self,
        vault: Vault,
        fund: Fund,
        usdc: AssetLedger,
        lending: LendingStrategy,
        amm: AmmPoolStrategy,
    ) -> None:
        fund("alice", 100_000)
        amm.halt("pool paused")
        with pytest.raises(StrategyFailureError) as exc_info:
            vault.deposit(100_000, "alice", caller="alice")

        assert any("rolled back" in note for note in exc_info.value.__notes__)
        assert usdc.balance_of("alice") == 100_000
        assert usdc.balance_of(lending.address) == 0
        assert vault.total_supply() == 0
        assert vault.total_assets() == 0

    def test_failed_withdrawal_leaves_positions_intact(
        self, vault: Vault, fund: Fund, usdc: AssetLedger, amm: AmmPoolStrategy
    ) -> None:
        fund("alice", 100_000)
        vault.deposit(100_000, "alice", caller="alice")
        amm.halt()
        with pytest.raises(StrategyFailureError):
            vault.withdraw(30_000, "alice", "alice", caller="alice")

        assert vault.get_strategy_balances() == (50_000, 50_000)
        assert vault.balance_of("alice") == 100_000
        assert usdc.balance_of("alice") == 0

        amm.resume()
        assert vault.withdraw(30_000, "alice", "alice", caller="alice") == 30_000

    def test_failed_rebalance_keeps_old_positions(self, vault: Vault, fund: Fund, amm: AmmPoolStrategy) -> None:
        fund("alice", 100_000)
        vault.deposit(100_000, "alice", caller="alice")
        vault.set_allocation(7_000, 3_000, caller="strategist")
        amm.halt()
        with pytest.raises(StrategyFailureError):
            vault.rebalance(caller="strategist")
        assert vault.get_strategy_balances() == (50_000, 50_000)


# ── TestReentrancy ─────────────────────────────────────────────────


class TestReentrancy:
    """어댑터 콜백을 통한 재진입 거부."""

    def test_reentrant_adapter_is_rejected(
        self, usdc: AssetLedger, clock: SimulatedClock, settings: VaultSettings
    ) -> None:
        evil = _ReentrantLending(usdc, clock)
        amm = AmmPoolStrategy(usdc, clock, AmmPoolConfig(fee_apy_bps=0))
        vault = Vault(usdc, evil, amm, treasury="treasury", admin="admin", settings=settings)
        usdc.mint("alice", 100_000)
        usdc.approve("alice", vault.address, MAX_UINT256)
        evil.reenter = lambda: vault.redeem(1, "alice", "alice", caller="alice")

        with pytest.raises(ReentrancyError):
            vault.deposit(50_000, "alice", caller="alice")
        assert vault.total_supply() == 0
        assert usdc.balance_of("alice") == 100_000

        evil.reenter = None
        assert vault.deposit(50_000, "alice", caller="alice") == 50_000

    def test_reentry_from_worker_thread_fails_fast(
        self, usdc: AssetLedger, clock: SimulatedClock, settings: VaultSettings
    ) -> None:
        evil = _ReentrantLending(usdc, clock)
        amm = AmmPoolStrategy(usdc, clock, AmmPoolConfig(fee_apy_bps=0))
        vault = Vault(usdc, evil, amm, treasury="treasury", admin="admin", settings=settings)
        usdc.mint("alice", 100_000)
        usdc.approve("alice", vault.address, MAX_UINT256)
        errors: list[BaseException] = []

        def call_from_worker() -> None:
            def target() -> None:
                try:
                    vault.redeem(1, "alice", "alice", caller="alice")
                except ReentrancyError as exc:
                    errors.append(exc)

            worker = threading.Thread(target=target)
            worker.start()
            worker.join(timeout=2)
            assert not worker.is_alive()
            raise errors[0]

        evil.reenter = call_from_worker
        with pytest.raises(ReentrancyError, match="busy"):
            vault.deposit(50_000, "alice", caller="alice")
        assert vault.total_supply() == 0
        assert usdc.balance_of("alice") == 100_000

    def test_reads_are_allowed_during_operation(
        self, usdc: AssetLedger, clock: SimulatedClock, settings: VaultSettings
    ) -> None:
        evil = _ReentrantLending(usdc, clock)
        amm = AmmPoolStrategy(usdc, clock, AmmPoolConfig(fee_apy_bps=0))
        vault = Vault(usdc, evil, amm, treasury="treasury", admin="admin", settings=settings)
        usdc.mint("alice", 1_000)
        usdc.approve("alice", vault.address, MAX_UINT256)
        seen: list[int] = []
        evil.reenter = lambda: seen.append(vault.total_assets())

        vault.deposit(1_000, "alice", caller="alice")
        assert seen == [1_000]

    def test_same_adapter_for_both_slots_rejected(
        self, usdc: AssetLedger, lending: LendingStrategy
    ) -> None:
        with pytest.raises(ValueError, match="distinct"):
            Vault(usdc, lending, lending, treasury="treasury", admin="admin")
