"""Tests for share accounting conversions."""

from __future__ import annotations

import pytest

from yieldvault.core.exceptions import VaultInsolventError, ZeroSharesResultError
from yieldvault.vault.accounting import (
    assets_for_mint,
    assets_for_shares,
    convert_to_shares,
    shares_for_deposit,
    shares_for_withdraw,
)


class TestSharesForDeposit:
    """입금 시 share 환산 (floor)."""

    def test_bootstrap_one_to_one(self) -> None:
        assert shares_for_deposit(1_000, 0, 0) == 1_000

    def test_bootstrap_ignores_donated_assets(self) -> None:
        assert shares_for_deposit(1_000, 5_000, 0) == 1_000

    def test_proportional_floor(self) -> None:
        # 1_000 * 100_000 / 100_068 = 999.32
        assert shares_for_deposit(1_000, 100_068, 100_000) == 999

    def test_zero_result_rejected(self) -> None:
        with pytest.raises(ZeroSharesResultError):
            shares_for_deposit(5_000, 10_001, 1)

    def test_zero_deposit_yields_zero(self) -> None:
        assert shares_for_deposit(0, 100, 100) == 0

    def test_insolvent_vault(self) -> None:
        with pytest.raises(VaultInsolventError):
            shares_for_deposit(1_000, 0, 500)


class TestAssetsForShares:
    """share → 자산 환산 (floor)."""

    def test_floor(self) -> None:
        assert assets_for_shares(1_000, 100_068, 100_000) == 1_000
        assert assets_for_shares(3, 10, 4) == 7

    def test_zero_supply_is_programming_error(self) -> None:
        with pytest.raises(ZeroDivisionError):
            assets_for_shares(1, 100, 0)


class TestRoundingDirection:
    """withdraw/mint는 볼트에 유리하게 올림."""

    def test_withdraw_rounds_shares_up(self) -> None:
        assert shares_for_withdraw(1_000, 100_068, 100_000) == 1_000
        assert shares_for_withdraw(7, 10, 4) == 3

    def test_mint_rounds_assets_up(self) -> None:
        assert assets_for_mint(1_000, 100_068, 100_000) == 1_001
        assert assets_for_mint(3, 10, 4) == 8

    def test_round_trip_never_profits(self) -> None:
        total_assets, total_shares = 1_234_567, 1_000_003
        for assets in (1, 17, 999, 54_321):
            shares = convert_to_shares(assets, total_assets, total_shares)
            assert assets_for_shares(shares, total_assets, total_shares) <= assets

    def test_convert_to_shares_on_empty_assets(self) -> None:
        assert convert_to_shares(100, 0, 10) == 0
