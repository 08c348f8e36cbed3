"""Logging service module for the vault.

This module provides the logging infrastructure with:
- Pydantic settings for sink configuration
- Context binding utilities (vault, operation, caller)

Rules Applied:
    - #15 Logging Standards: Loguru, dual sinks
"""

from yieldvault.logging.config import LoggingConfig, get_logging_config
from yieldvault.logging.context import (
    LoggingContext,
    clear_context,
    generate_operation_id,
    get_current_context,
    get_vault_logger,
)

__all__ = [
    "LoggingConfig",
    "LoggingContext",
    "clear_context",
    "generate_operation_id",
    "get_current_context",
    "get_logging_config",
    "get_vault_logger",
]
