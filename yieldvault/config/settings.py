"""Pydantic Settings for configuration management.

This module provides centralized vault configuration using
pydantic-settings. All settings are loaded from environment variables
and/or .env files with type validation.

Features:
    - Default allocation ratio and rebalance threshold for new vaults
    - Administrative caps (fees, threshold)
    - Redemption rounding buffer (tunable constant)

Rules Applied:
    - #11 Pydantic Modeling: BaseSettings, model_validator
"""

from functools import lru_cache
from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from yieldvault.core.arithmetic import BPS_DENOMINATOR


class VaultSettings(BaseSettings):
    """볼트 기본값 및 관리 한도 설정.

    환경 변수 또는 .env 파일에서 설정을 로드합니다.

    Environment Variables:
        - VAULT_NAME: 볼트 이름 (로그 컨텍스트)
        - VAULT_DEFAULT_RATIO_A_BPS / VAULT_DEFAULT_RATIO_B_BPS: 초기 배분 비율
        - VAULT_DEFAULT_REBALANCE_THRESHOLD_BPS: 초기 리밸런싱 임계값
        - VAULT_REDEEM_ROUNDING_BUFFER: 환매 시 추가 인출 버퍼 (base unit)

    Example:
        >>> settings = get_settings()
        >>> settings.default_ratio_a_bps
        5000
    """

    model_config = SettingsConfigDict(
        env_prefix="VAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    name: str = Field(default="yield-vault", description="볼트 이름")

    # ==========================================================================
    # Allocation Defaults
    # ==========================================================================
    default_ratio_a_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)
    default_ratio_b_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)
    default_rebalance_threshold_bps: int = Field(
        default=500,
        ge=0,
        description="배분 이탈 허용치 (500 = 목표 대비 5%)",
    )

    # ==========================================================================
    # Administrative Caps
    # ==========================================================================
    max_management_fee_bps: int = Field(default=1_000, ge=0, le=BPS_DENOMINATOR)
    max_performance_fee_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)
    max_rebalance_threshold_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)

    # ==========================================================================
    # Declared Fees (not charged by any money-moving path)
    # ==========================================================================
    default_management_fee_bps: int = Field(default=200, ge=0)
    default_performance_fee_bps: int = Field(default=2_000, ge=0)

    # ==========================================================================
    # Redemption
    # ==========================================================================
    redeem_rounding_buffer: int = Field(
        default=2,
        ge=0,
        description="환매 시 전략 측 floor 반올림 손실을 흡수하는 추가 인출량 (base unit)",
    )

    log_dir: Path = Field(default=Path("logs"), description="로그 파일 저장 경로")

    @model_validator(mode="after")
    def validate_defaults(self) -> Self:
        """기본값이 한도 안에 있는지 검증.

        Raises:
            ValueError: 비율 합이 10000이 아니거나 기본값이 한도를 초과할 경우
        """
        if self.default_ratio_a_bps + self.default_ratio_b_bps != BPS_DENOMINATOR:
            msg = (
                f"default ratios must sum to {BPS_DENOMINATOR} "
                f"(got {self.default_ratio_a_bps} + {self.default_ratio_b_bps})"
            )
            raise ValueError(msg)
        if self.default_rebalance_threshold_bps > self.max_rebalance_threshold_bps:
            msg = "default_rebalance_threshold_bps exceeds max_rebalance_threshold_bps"
            raise ValueError(msg)
        if self.default_management_fee_bps > self.max_management_fee_bps:
            msg = "default_management_fee_bps exceeds max_management_fee_bps"
            raise ValueError(msg)
        if self.default_performance_fee_bps > self.max_performance_fee_bps:
            msg = "default_performance_fee_bps exceeds max_performance_fee_bps"
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> VaultSettings:
    """설정 싱글톤 인스턴스 반환.

    Returns:
        VaultSettings 인스턴스
    """
    return VaultSettings()


def clear_settings_cache() -> None:
    """설정 캐시 초기화 (테스트용)."""
    get_settings.cache_clear()
