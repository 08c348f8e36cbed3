"""Tests for the allocation controller."""

from __future__ import annotations

import pytest

from yieldvault.access.roles import RoleGate
from yieldvault.config.settings import VaultSettings
from yieldvault.core.exceptions import InvalidThresholdError
from yieldvault.vault.allocation import AllocationController


def _make_controller(**overrides: int) -> AllocationController:
    settings = VaultSettings(**overrides)
    return AllocationController(RoleGate("admin", "strategist"), settings, "treasury")


class TestAllocationController:
    def test_caps_come_from_settings(self) -> None:
        controller = _make_controller(max_rebalance_threshold_bps=1_000)
        controller.set_rebalance_threshold(1_000, caller="strategist")
        with pytest.raises(InvalidThresholdError):
            controller.set_rebalance_threshold(1_001, caller="strategist")

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(InvalidThresholdError):
            _make_controller().set_rebalance_threshold(-1, caller="strategist")

    def test_checkpoint_restore(self) -> None:
        controller = _make_controller()
        saved = controller.checkpoint()
        controller.set_allocation(9_000, 1_000, caller="strategist")
        controller.set_fees(0, 0, caller="admin")
        controller.restore(saved)
        assert (controller.ratio_a, controller.ratio_b) == (5_000, 5_000)
        assert controller.fees.performance_fee_bps == 2_000
