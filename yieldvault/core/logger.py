"""Loguru setup for the vault simulator.

볼트 작업은 LoggingContext로 vault/operation/operation_id/caller를 바인딩하므로,
콘솔 sink는 레코드마다 포맷을 골라 컨텍스트가 있는 라인에만
``[vault/operation]`` 태그를 붙입니다. 파일 sink는 JSON 직렬화로 extra 전체를
남겨 operation_id 단위 추적이 가능합니다.

Features:
    - Dual sinks: Console (human-readable) + rotating File (JSON)
    - Per-record console format (context tag only inside vault operations)

Rules Applied:
    - #15 Logging Standards: Loguru, dual sinks, context binding
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from yieldvault.logging.config import LoggingConfig, get_logging_config
from yieldvault.logging.context import get_vault_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from loguru import Logger

# =============================================================================
# Console Format Templates
# =============================================================================

CONSOLE_FORMAT_DEFAULT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>\n{exception}"
)

CONSOLE_FORMAT_WITH_CONTEXT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<dim>[{extra[vault]}/{extra[operation]}]</dim> "
    "<level>{message}</level>\n{exception}"
)


def _console_format(show_context: bool) -> Callable[[dict[str, Any]], str]:
    """레코드별 콘솔 포맷 선택자."""

    def _select(record: dict[str, Any]) -> str:
        extra = record["extra"]
        if show_context and "vault" in extra and "operation" in extra:
            return CONSOLE_FORMAT_WITH_CONTEXT
        return CONSOLE_FORMAT_DEFAULT

    return _select


# =============================================================================
# Setup Functions
# =============================================================================


FILE_FORMAT_TEXT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message} | {extra}"


def setup_logger_from_config(config: LoggingConfig | None = None) -> None:
    """LoggingConfig로 sink 재구성 (None이면 LOG_* 환경 변수에서 로드)."""
    _configure_sinks(config or get_logging_config())


def setup_logger(
    log_dir: Path | str = Path("logs"),
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    *,
    enable_file: bool = True,
) -> None:
    """Initialize the logger with explicit levels.

    나머지 항목(회전, JSON, 컨텍스트 표시)은 LoggingConfig 기본값을 따릅니다.

    Args:
        log_dir: Directory for log files (default: "logs")
        console_level: Console output level (default: "INFO")
        file_level: File output level (default: "DEBUG")
        enable_file: Add the rotating file sink

    Example:
        >>> from yieldvault.core.logger import setup_logger, logger
        >>> setup_logger(console_level="DEBUG", enable_file=False)
        >>> logger.info("Vault simulator started")
    """
    config = LoggingConfig(
        log_dir=Path(log_dir),
        console_level=console_level,  # type: ignore[arg-type]
        file_level=file_level,  # type: ignore[arg-type]
        enable_file=enable_file,
    )
    _configure_sinks(config)


def _configure_sinks(config: LoggingConfig) -> None:
    logger.remove()

    logger.add(
        sys.stderr,
        format=_console_format(config.show_context),
        level=config.console_level,
        colorize=True,
        backtrace=config.backtrace,
        diagnose=config.diagnose,
    )

    if config.enable_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        _add_file_sink(logger, log_path, config)

    logger.debug(
        "Logger configured (console={}, file={}, json={})",
        config.console_level,
        config.file_level if config.enable_file else "off",
        config.json_logs,
    )


def _add_file_sink(target: Logger, log_path: Path, config: LoggingConfig) -> None:
    """회전 파일 sink 추가. JSON 모드는 extra(operation_id 등)를 그대로 직렬화."""
    suffix = "json" if config.json_logs else "log"
    target.add(
        log_path / f"{config.file_prefix}_{{time:YYYY-MM-DD}}.{suffix}",
        format="{message}" if config.json_logs else FILE_FORMAT_TEXT,
        level=config.file_level,
        serialize=config.json_logs,
        rotation=config.rotation,
        retention=config.retention,
        compression=config.compression,
        backtrace=config.backtrace,
        diagnose=False,
    )


__all__ = [
    "get_vault_logger",
    "logger",
    "setup_logger",
    "setup_logger_from_config",
]
