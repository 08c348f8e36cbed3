"""Core module - Single Source of Truth for shared components."""

from yieldvault.core.clock import SECONDS_PER_DAY, SECONDS_PER_YEAR, SimulatedClock
from yieldvault.core.exceptions import (
    AmountOverflowError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InsufficientSharesError,
    InvalidAmountError,
    InvalidAssetAmountError,
    InvalidFeeError,
    InvalidRatioError,
    InvalidThresholdError,
    InvalidWithdrawAmountError,
    ReentrancyError,
    StrategyFailureError,
    UnauthorizedError,
    VaultError,
    VaultInsolventError,
    ZeroAddressError,
    ZeroSharesResultError,
)
from yieldvault.core.guard import ReentrancyGuard
from yieldvault.core.journal import Checkpointable, StateJournal

__all__ = [
    # Exceptions
    "AmountOverflowError",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "InsufficientSharesError",
    "InvalidAmountError",
    "InvalidAssetAmountError",
    "InvalidFeeError",
    "InvalidRatioError",
    "InvalidThresholdError",
    "InvalidWithdrawAmountError",
    "ReentrancyError",
    "StrategyFailureError",
    "UnauthorizedError",
    "VaultError",
    "VaultInsolventError",
    "ZeroAddressError",
    "ZeroSharesResultError",
    # Execution discipline
    "Checkpointable",
    "ReentrancyGuard",
    "StateJournal",
    # Time
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "SimulatedClock",
]
