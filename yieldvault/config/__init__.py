"""Configuration module.

Exports:
    - VaultSettings / get_settings: 환경 변수 기반 볼트 설정
    - ScenarioConfig / load_scenario: YAML 시나리오
"""

from yieldvault.config.scenario_loader import (
    ScenarioConfig,
    ScenarioStep,
    StepAction,
    StrategyParams,
    VaultParams,
    load_scenario,
)
from yieldvault.config.settings import VaultSettings, clear_settings_cache, get_settings

__all__ = [
    "ScenarioConfig",
    "ScenarioStep",
    "StepAction",
    "StrategyParams",
    "VaultParams",
    "VaultSettings",
    "clear_settings_cache",
    "get_settings",
    "load_scenario",
]
