"""Context binding utilities for structured logging.

This module provides context propagation using contextvars so that the
vault name, the running operation and its caller are attached to every
log record emitted while an operation is in flight.

Rules Applied:
    - #15 Logging Standards: Context binding with logger.bind()
    - #10 Python Standards: contextvars for thread/async safety
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

# =============================================================================
# Context Variables
# =============================================================================

current_vault: ContextVar[str | None] = ContextVar("vault", default=None)
current_operation: ContextVar[str | None] = ContextVar("operation", default=None)
current_operation_id: ContextVar[str | None] = ContextVar("operation_id", default=None)
current_caller: ContextVar[str | None] = ContextVar("caller", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "vault": current_vault,
    "operation": current_operation,
    "operation_id": current_operation_id,
    "caller": current_caller,
}


# =============================================================================
# Logger Factory Functions
# =============================================================================


def get_vault_logger(
    *,
    vault: str | None = None,
    operation: str | None = None,
    operation_id: str | None = None,
    caller: str | None = None,
    **extra: str,
) -> Logger:
    """Get a logger with vault context bound.

    Values that are not given explicitly fall back to the ones set by an
    enclosing ``LoggingContext``.

    Args:
        vault: Vault name (e.g., "usdc-vault")
        operation: Operation name (e.g., "deposit", "rebalance")
        operation_id: Unique id correlating all records of one call
        caller: Identity that invoked the operation
        **extra: Additional context key-value pairs

    Returns:
        Logger instance with context bound

    Example:
        >>> log = get_vault_logger(vault="usdc-vault", operation="deposit")
        >>> log.info("Deposit accepted")
    """
    ctx: dict[str, str] = {}
    given = {
        "vault": vault,
        "operation": operation,
        "operation_id": operation_id,
        "caller": caller,
    }
    for key, value in given.items():
        resolved = value if value is not None else _CONTEXT_VARS[key].get()
        if resolved is not None:
            ctx[key] = resolved

    ctx.update(extra)
    return logger.bind(**ctx)


# =============================================================================
# Utility Functions
# =============================================================================


def generate_operation_id(prefix: str = "op") -> str:
    """Generate a unique operation ID.

    Args:
        prefix: Prefix for the id (default: "op")

    Returns:
        Unique identifier (e.g., "op_a1b2c3d4")
    """
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def get_current_context() -> dict[str, str | None]:
    """Get all current context values.

    Returns:
        Dictionary of current context values
    """
    return {key: var.get() for key, var in _CONTEXT_VARS.items()}


def clear_context() -> None:
    """Clear all context variables."""
    for var in _CONTEXT_VARS.values():
        var.set(None)


# =============================================================================
# Context Manager for Scoped Logging
# =============================================================================


class LoggingContext:
    """Context manager for scoped logging context.

    Automatically sets and resets context variables within a scope.

    Example:
        >>> with LoggingContext(vault="usdc-vault", operation="redeem"):
        ...     get_vault_logger().info("Redeeming")  # Includes context
    """

    def __init__(
        self,
        vault: str | None = None,
        operation: str | None = None,
        operation_id: str | None = None,
        caller: str | None = None,
    ) -> None:
        self._values = {
            "vault": vault,
            "operation": operation,
            "operation_id": operation_id,
            "caller": caller,
        }
        self._tokens: dict[str, Token[str | None]] = {}

    def __enter__(self) -> LoggingContext:
        """Enter context and set variables."""
        for key, value in self._values.items():
            if value:
                self._tokens[key] = _CONTEXT_VARS[key].set(value)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit context and reset variables."""
        for key, token in self._tokens.items():
            _CONTEXT_VARS[key].reset(token)
        self._tokens.clear()
