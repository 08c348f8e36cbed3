"""YAML 시나리오 파일 로더.

YAML 파일에서 ScenarioConfig를 로드합니다. 시나리오는 볼트 파라미터,
두 venue 설정, 초기 계정 잔고, 순서대로 실행할 step 목록으로 구성됩니다.

Example YAML:
    vault:
      ratio_a_bps: 5000
      ratio_b_bps: 5000
    strategies:
      lending: {supply_apy_bps: 500}
      amm: {fee_apy_bps: 300}
    accounts:
      alice: 100000
    steps:
      - {action: deposit, account: alice, amount: 100000}
      - {action: advance, days: 10}
      - {action: redeem, account: alice}

Rules Applied:
    - #11 Pydantic Modeling: frozen=True, model_validator
    - #10 Python Standards: Modern typing, Path
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from yieldvault.core.arithmetic import BPS_DENOMINATOR
from yieldvault.strategy.amm_pool import AmmPoolConfig
from yieldvault.strategy.lending import LendingConfig


class StepAction(StrEnum):
    """시나리오 step 종류."""

    DEPOSIT = "deposit"
    MINT = "mint"
    WITHDRAW = "withdraw"
    REDEEM = "redeem"
    ADVANCE = "advance"
    SET_ALLOCATION = "set_allocation"
    SET_THRESHOLD = "set_rebalance_threshold"
    REBALANCE = "rebalance"
    HARVEST = "harvest"


_NEEDS_ACCOUNT = frozenset(
    {StepAction.DEPOSIT, StepAction.MINT, StepAction.WITHDRAW, StepAction.REDEEM}
)
_NEEDS_AMOUNT = frozenset({StepAction.DEPOSIT, StepAction.MINT, StepAction.WITHDRAW})


class VaultParams(BaseModel):
    """볼트 생성 파라미터."""

    model_config = ConfigDict(frozen=True)

    name: str = "scenario-vault"
    asset_symbol: str = "USDC"
    ratio_a_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)
    ratio_b_bps: int = Field(default=5_000, ge=0, le=BPS_DENOMINATOR)
    rebalance_threshold_bps: int = Field(default=500, ge=0, le=BPS_DENOMINATOR)
    admin: str = "admin"
    strategist: str = "strategist"
    treasury: str = "treasury"

    @model_validator(mode="after")
    def validate_ratios(self) -> Self:
        if self.ratio_a_bps + self.ratio_b_bps != BPS_DENOMINATOR:
            msg = f"ratio_a_bps + ratio_b_bps must equal {BPS_DENOMINATOR}"
            raise ValueError(msg)
        return self


class StrategyParams(BaseModel):
    """두 venue 설정 묶음 (A = lending, B = AMM pool)."""

    model_config = ConfigDict(frozen=True)

    lending: LendingConfig = Field(default_factory=LendingConfig)
    amm: AmmPoolConfig = Field(default_factory=AmmPoolConfig)


class ScenarioStep(BaseModel):
    """시나리오 한 단계.

    Attributes:
        action: 실행할 작업
        account: 대상 계정 (입출금 step)
        amount: deposit/withdraw 자산량, mint share 수
        shares: redeem share 수 (None이면 전량)
        days: advance 일수
        ratio_a / ratio_b: set_allocation 비율
        threshold_bps: set_rebalance_threshold 값
    """

    model_config = ConfigDict(frozen=True)

    action: StepAction
    account: str | None = None
    amount: int | None = Field(default=None, gt=0)
    shares: int | None = Field(default=None, gt=0)
    days: int = Field(default=0, ge=0)
    ratio_a: int | None = None
    ratio_b: int | None = None
    threshold_bps: int | None = None

    @model_validator(mode="after")
    def validate_fields(self) -> Self:
        """action별 필수 필드 검증."""
        if self.action in _NEEDS_ACCOUNT and not self.account:
            msg = f"step '{self.action}' requires 'account'"
            raise ValueError(msg)
        if self.action in _NEEDS_AMOUNT and self.amount is None:
            msg = f"step '{self.action}' requires 'amount'"
            raise ValueError(msg)
        missing_ratio = self.ratio_a is None or self.ratio_b is None
        if self.action == StepAction.SET_ALLOCATION and missing_ratio:
            msg = "step 'set_allocation' requires 'ratio_a' and 'ratio_b'"
            raise ValueError(msg)
        if self.action == StepAction.SET_THRESHOLD and self.threshold_bps is None:
            msg = "step 'set_rebalance_threshold' requires 'threshold_bps'"
            raise ValueError(msg)
        return self


class ScenarioConfig(BaseModel):
    """YAML 최상위 모델."""

    model_config = ConfigDict(frozen=True)

    vault: VaultParams = Field(default_factory=VaultParams)
    strategies: StrategyParams = Field(default_factory=StrategyParams)
    accounts: dict[str, int] = Field(default_factory=dict)
    steps: list[ScenarioStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_accounts(self) -> Self:
        for account, balance in self.accounts.items():
            if balance < 0:
                msg = f"initial balance of '{account}' must be non-negative"
                raise ValueError(msg)
        return self


def load_scenario(path: str | Path) -> ScenarioConfig:
    """YAML → ScenarioConfig (Pydantic 검증 포함).

    Args:
        path: YAML 시나리오 파일 경로

    Returns:
        검증된 ScenarioConfig 인스턴스

    Raises:
        FileNotFoundError: 파일이 존재하지 않을 경우
        yaml.YAMLError: YAML 파싱 실패
        pydantic.ValidationError: 검증 실패
    """
    file_path = Path(path)
    if not file_path.exists():
        msg = f"Scenario file not found: {file_path}"
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    return ScenarioConfig.model_validate(raw or {})
