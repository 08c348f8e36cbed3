"""Tests for logging context binding and logger setup."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from yieldvault.core.exceptions import InvalidAssetAmountError
from yieldvault.core.logger import (
    CONSOLE_FORMAT_DEFAULT,
    CONSOLE_FORMAT_WITH_CONTEXT,
    _console_format,
    setup_logger,
    setup_logger_from_config,
)
from yieldvault.logging.config import LoggingConfig
from yieldvault.logging.context import (
    LoggingContext,
    clear_context,
    generate_operation_id,
    get_current_context,
    get_vault_logger,
)
from yieldvault.vault.vault import Vault


@pytest.fixture()
def records() -> Iterator[list[dict[str, Any]]]:
    """loguru record를 수집하는 임시 sink."""
    captured: list[dict[str, Any]] = []
    sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


class TestContext:
    def setup_method(self) -> None:
        clear_context()

    def test_operation_id_format(self) -> None:
        op_id = generate_operation_id("deposit")
        assert op_id.startswith("deposit_")
        assert len(op_id) == len("deposit_") + 8
        assert generate_operation_id() != generate_operation_id()

    def test_context_sets_and_resets(self) -> None:
        with LoggingContext(vault="v", operation="redeem", caller="alice"):
            ctx = get_current_context()
            assert ctx["vault"] == "v"
            assert ctx["operation"] == "redeem"
            assert ctx["caller"] == "alice"
            assert ctx["operation_id"] is None
        assert get_current_context() == {
            "vault": None,
            "operation": None,
            "operation_id": None,
            "caller": None,
        }

    def test_nested_context_restores_outer(self) -> None:
        with LoggingContext(vault="outer"):
            with LoggingContext(vault="inner"):
                assert get_current_context()["vault"] == "inner"
            assert get_current_context()["vault"] == "outer"

    def test_logger_binds_context(self, records: list[dict[str, Any]]) -> None:
        with LoggingContext(vault="v", operation="deposit"):
            get_vault_logger(caller="bob", tx="1").info("hello")
        extra = records[-1]["extra"]
        assert extra == {"vault": "v", "operation": "deposit", "caller": "bob", "tx": "1"}


class TestVaultOperationLogging:
    """볼트 작업 로그에 컨텍스트가 붙는지 검증."""

    def test_deposit_record_has_context(
        self,
        vault: Vault,
        fund: Callable[[str, int], None],
        records: list[dict[str, Any]],
    ) -> None:
        fund("alice", 1_000)
        vault.deposit(1_000, "alice", caller="alice")

        info = [r for r in records if r["message"].startswith("Deposit:")]
        assert len(info) == 1
        extra = info[0]["extra"]
        assert extra["vault"] == vault.name
        assert extra["operation"] == "deposit"
        assert extra["caller"] == "alice"
        assert extra["operation_id"].startswith("deposit_")

    def test_rejection_logged_as_warning(
        self, vault: Vault, records: list[dict[str, Any]]
    ) -> None:
        with pytest.raises(InvalidAssetAmountError):
            vault.deposit(0, "alice", caller="alice")
        warnings = [r for r in records if r["level"].name == "WARNING"]
        assert warnings
        assert "rejected" in warnings[-1]["message"]


class TestSetup:
    def test_logging_config_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_CONSOLE_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_JSON_LOGS", "false")
        config = LoggingConfig()
        assert config.console_level == "ERROR"
        assert config.json_logs is False

    def test_setup_logger_writes_file(self, tmp_path: Path) -> None:
        setup_logger(log_dir=tmp_path, console_level="ERROR", file_level="DEBUG")
        logger.info("file sink check")
        logger.complete()
        files = list(tmp_path.glob("vault_*.json"))
        assert files
        assert "file sink check" in files[0].read_text(encoding="utf-8")
        logger.remove()

    def test_setup_logger_without_file(self, tmp_path: Path) -> None:
        setup_logger(log_dir=tmp_path / "nofile", console_level="ERROR", enable_file=False)
        assert not (tmp_path / "nofile").exists()

    def test_setup_from_env_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LOG_DIR", str(tmp_path / "env_logs"))
        monkeypatch.setenv("LOG_ENABLE_FILE", "false")
        setup_logger_from_config()
        assert not (tmp_path / "env_logs").exists()
        logger.remove()

    def test_console_format_tags_vault_operations(self) -> None:
        select = _console_format(show_context=True)
        assert select({"extra": {"vault": "v", "operation": "deposit"}}) == CONSOLE_FORMAT_WITH_CONTEXT
        assert select({"extra": {}}) == CONSOLE_FORMAT_DEFAULT
        plain = _console_format(show_context=False)
        assert plain({"extra": {"vault": "v", "operation": "deposit"}}) == CONSOLE_FORMAT_DEFAULT
