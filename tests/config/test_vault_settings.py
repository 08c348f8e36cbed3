"""Tests for environment-driven vault settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from yieldvault.config.settings import VaultSettings, clear_settings_cache, get_settings


class TestVaultSettings:
    """기본값, 환경 변수, 교차 검증."""

    def test_defaults(self) -> None:
        settings = VaultSettings()
        assert settings.default_ratio_a_bps + settings.default_ratio_b_bps == 10_000
        assert settings.default_rebalance_threshold_bps == 500
        assert settings.max_management_fee_bps == 1_000
        assert settings.max_performance_fee_bps == 5_000
        assert settings.max_rebalance_threshold_bps == 5_000
        assert settings.redeem_rounding_buffer == 2

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VAULT_NAME", "usdc-vault")
        monkeypatch.setenv("VAULT_REDEEM_ROUNDING_BUFFER", "5")
        clear_settings_cache()
        settings = get_settings()
        assert settings.name == "usdc-vault"
        assert settings.redeem_rounding_buffer == 5

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_ratios_must_sum_to_10000(self) -> None:
        with pytest.raises(ValidationError, match="sum to 10000"):
            VaultSettings(default_ratio_a_bps=6_000, default_ratio_b_bps=5_000)

    def test_default_threshold_within_cap(self) -> None:
        with pytest.raises(ValidationError):
            VaultSettings(default_rebalance_threshold_bps=2_000, max_rebalance_threshold_bps=1_000)

    def test_default_fees_within_caps(self) -> None:
        with pytest.raises(ValidationError):
            VaultSettings(default_management_fee_bps=1_500)
