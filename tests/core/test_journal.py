"""Tests for the state journal (checkpoint / rollback)."""

from __future__ import annotations

import pytest

from yieldvault.core.journal import Checkpointable, StateJournal
from yieldvault.ledger.shares import ShareLedger


class _Counter:
    def __init__(self) -> None:
        self.value = 0

    def checkpoint(self) -> int:
        return self.value

    def restore(self, state: object) -> None:
        assert isinstance(state, int)
        self.value = state


class TestStateJournal:
    """트랜잭션 롤백 동작."""

    def test_register_skips_non_checkpointable(self) -> None:
        journal = StateJournal()
        assert journal.register("plain", object()) is False
        assert journal.register("counter", _Counter()) is True
        assert journal.participants == ("counter",)

    def test_duplicate_name_rejected(self) -> None:
        journal = StateJournal()
        journal.register("counter", _Counter())
        with pytest.raises(ValueError, match="already registered"):
            journal.register("counter", _Counter())

    def test_commit_keeps_changes(self) -> None:
        journal = StateJournal()
        counter = _Counter()
        journal.register("counter", counter)
        with journal.transaction():
            counter.value = 7
        assert counter.value == 7

    def test_rollback_restores_all_participants(self) -> None:
        journal = StateJournal()
        counter = _Counter()
        shares = ShareLedger()
        shares.mint("alice", 100)
        journal.register("counter", counter)
        journal.register("shares", shares)

        with pytest.raises(RuntimeError) as exc_info, journal.transaction():
            counter.value = 5
            shares.mint("bob", 50)
            raise RuntimeError("fail midway")

        assert counter.value == 0
        assert shares.balance_of("bob") == 0
        assert shares.total_supply == 100
        assert any("rolled back" in note for note in exc_info.value.__notes__)

    def test_protocol_is_structural(self) -> None:
        assert isinstance(_Counter(), Checkpointable)
        assert isinstance(ShareLedger(), Checkpointable)
