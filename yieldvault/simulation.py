"""Scenario Simulation — 인메모리 볼트 환경 구성과 step 실행.

볼트 1개, 대출 venue(A), AMM 풀(B), 공유 시계, 기초 자산 장부를 묶어
YAML 시나리오 또는 코드로 구성한 step 목록을 순서대로 실행합니다.

Flow:
    ScenarioConfig → build_environment() → ScenarioRunner.fund() → run()

Rules Applied:
    - #10 Python Standards: dataclass containers
    - #15 Logging Standards: step 단위 로그
    - #23 Exception Handling: VaultError는 그대로 전파 (CLI에서 처리)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from yieldvault.config.scenario_loader import (
    ScenarioConfig,
    ScenarioStep,
    StepAction,
    StrategyParams,
    VaultParams,
)
from yieldvault.config.settings import VaultSettings, get_settings
from yieldvault.core.arithmetic import MAX_UINT256
from yieldvault.core.clock import SimulatedClock
from yieldvault.ledger.asset import AssetLedger
from yieldvault.strategy.amm_pool import AmmPoolStrategy
from yieldvault.strategy.lending import LendingStrategy
from yieldvault.vault.vault import Vault

if TYPE_CHECKING:
    from yieldvault.vault.models import VaultSnapshot


@dataclass
class SimulationEnv:
    """시뮬레이션 구성 요소 묶음."""

    clock: SimulatedClock
    asset: AssetLedger
    lending: LendingStrategy
    amm: AmmPoolStrategy
    vault: Vault
    params: VaultParams


@dataclass(frozen=True)
class StepOutcome:
    """step 실행 결과.

    Attributes:
        index: 0부터 시작하는 step 번호
        action: 실행한 작업
        account: 대상 계정 (없으면 None)
        value: 작업 반환값 (share/asset 수량, 없으면 None)
        snapshot: 실행 직후 볼트 스냅샷
    """

    index: int
    action: StepAction
    account: str | None
    value: int | None
    snapshot: VaultSnapshot


@dataclass
class SimulationReport:
    """시나리오 전체 실행 결과."""

    env: SimulationEnv
    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def final(self) -> VaultSnapshot:
        return self.env.vault.snapshot()

    def wallet(self, account: str) -> int:
        """계정의 기초 자산 잔고."""
        return self.env.asset.balance_of(account)


def build_environment(
    params: VaultParams | None = None,
    strategies: StrategyParams | None = None,
    *,
    settings: VaultSettings | None = None,
    clock: SimulatedClock | None = None,
) -> SimulationEnv:
    """볼트와 두 venue를 생성하고 연결.

    Args:
        params: 볼트 파라미터 (비율, 임계값, 역할 계정)
        strategies: venue 파라미터
        settings: 기본 설정 (params 값으로 덮어씀)
        clock: 공유 시계 (None이면 새로 생성)

    Returns:
        SimulationEnv

    Raises:
        pydantic.ValidationError: params가 설정 한도를 벗어난 경우
    """
    params = params or VaultParams()
    strategies = strategies or StrategyParams()
    base = settings or get_settings()
    vault_settings = VaultSettings.model_validate(
        {
            **base.model_dump(),
            "name": params.name,
            "default_ratio_a_bps": params.ratio_a_bps,
            "default_ratio_b_bps": params.ratio_b_bps,
            "default_rebalance_threshold_bps": params.rebalance_threshold_bps,
        }
    )

    clock = clock or SimulatedClock()
    asset = AssetLedger(params.asset_symbol)
    lending = LendingStrategy(asset, clock, strategies.lending)
    amm = AmmPoolStrategy(asset, clock, strategies.amm)
    vault = Vault(
        asset,
        lending,
        amm,
        treasury=params.treasury,
        admin=params.admin,
        strategist=params.strategist,
        settings=vault_settings,
    )
    logger.debug(
        "Built vault {} (A={} B={} threshold={} bps)",
        vault.name,
        vault.ratio_a,
        vault.ratio_b,
        vault.rebalance_threshold_bps,
    )
    return SimulationEnv(clock=clock, asset=asset, lending=lending, amm=amm, vault=vault, params=params)


class ScenarioRunner:
    """SimulationEnv 위에서 step을 순서대로 실행.

    Args:
        env: build_environment()로 만든 환경
    """

    def __init__(self, env: SimulationEnv) -> None:
        self._env = env

    @property
    def env(self) -> SimulationEnv:
        return self._env

    def fund(self, accounts: dict[str, int]) -> None:
        """계정에 기초 자산을 발행하고 볼트에 무제한 승인."""
        for account, amount in accounts.items():
            if amount:
                self._env.asset.mint(account, amount)
            self._env.asset.approve(account, self._env.vault.address, MAX_UINT256)

    def run(self, steps: list[ScenarioStep]) -> list[StepOutcome]:
        """모든 step 실행. 첫 실패에서 예외 전파."""
        return [self.run_step(index, step) for index, step in enumerate(steps)]

    def run_step(self, index: int, step: ScenarioStep) -> StepOutcome:
        vault = self._env.vault
        strategist = self._env.params.strategist
        value: int | None = None

        match step.action:
            case StepAction.DEPOSIT:
                value = vault.deposit(step.amount, step.account, caller=step.account)
            case StepAction.MINT:
                value = vault.mint(step.amount, step.account, caller=step.account)
            case StepAction.WITHDRAW:
                value = vault.withdraw(step.amount, step.account, step.account, caller=step.account)
            case StepAction.REDEEM:
                shares = step.shares
                if shares is None:
                    shares = vault.balance_of(step.account)
                value = vault.redeem(shares, step.account, step.account, caller=step.account)
            case StepAction.ADVANCE:
                self._env.clock.advance(days=step.days)
            case StepAction.SET_ALLOCATION:
                vault.set_allocation(step.ratio_a, step.ratio_b, caller=strategist)
            case StepAction.SET_THRESHOLD:
                vault.set_rebalance_threshold(step.threshold_bps, caller=strategist)
            case StepAction.REBALANCE:
                vault.rebalance(caller=strategist)
            case StepAction.HARVEST:
                value = vault.harvest(caller=strategist).realized

        outcome = StepOutcome(
            index=index,
            action=step.action,
            account=step.account,
            value=value,
            snapshot=vault.snapshot(),
        )
        logger.debug(
            "Step {} {}: value={} total_assets={}",
            index,
            step.action,
            value,
            outcome.snapshot.total_assets,
        )
        return outcome


def run_scenario(config: ScenarioConfig, *, settings: VaultSettings | None = None) -> SimulationReport:
    """ScenarioConfig 전체 실행.

    Raises:
        VaultError: step 실행 실패 (해당 step은 롤백됨)
    """
    env = build_environment(config.vault, config.strategies, settings=settings)
    runner = ScenarioRunner(env)
    runner.fund(config.accounts)
    report = SimulationReport(env=env, outcomes=runner.run(config.steps))
    logger.info(
        "Scenario finished: {} steps, total assets {}", len(report.outcomes), report.final.total_assets
    )
    return report


def default_scenario(
    amount: int,
    days: int,
    *,
    account: str = "alice",
    ratio_a: int | None = None,
    ratio_b: int | None = None,
    harvest: bool = True,
    strategies: StrategyParams | None = None,
) -> ScenarioConfig:
    """deposit → advance → (re-allocate + rebalance) → harvest → redeem 시나리오."""
    steps: list[ScenarioStep] = [
        ScenarioStep(action=StepAction.DEPOSIT, account=account, amount=amount),
        ScenarioStep(action=StepAction.ADVANCE, days=days),
    ]
    if ratio_a is not None and ratio_b is not None:
        steps.append(ScenarioStep(action=StepAction.SET_ALLOCATION, ratio_a=ratio_a, ratio_b=ratio_b))
        steps.append(ScenarioStep(action=StepAction.REBALANCE))
    if harvest:
        steps.append(ScenarioStep(action=StepAction.HARVEST))
    steps.append(ScenarioStep(action=StepAction.REDEEM, account=account))
    return ScenarioConfig(
        strategies=strategies or StrategyParams(),
        accounts={account: amount},
        steps=steps,
    )
