"""State Journal — 작업 단위 checkpoint / rollback.

볼트 작업은 여러 단계(입금 → mint → 전략 배치)로 구성됩니다.
중간 단계가 실패하면 이미 적용된 변경을 모두 되돌려야 하므로,
참여자(ledger, 어댑터, 설정)의 상태를 작업 시작 시점에 저장하고
예외 발생 시 복원합니다.

Participants:
    ``Checkpointable`` 프로토콜을 만족하는 객체 (structural subtyping).

Rules Applied:
    - #10 Python Standards: Protocol, contextmanager
    - #23 Exception Handling: rollback 후 원본 예외 그대로 전파
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from loguru import logger

from yieldvault.core.exceptions import add_context_note

if TYPE_CHECKING:
    from collections.abc import Iterator


@runtime_checkable
class Checkpointable(Protocol):
    """상태 저장/복원 인터페이스."""

    def checkpoint(self) -> object:
        """현재 상태의 불변 사본을 반환."""
        ...

    def restore(self, state: object) -> None:
        """``checkpoint()`` 가 반환한 사본으로 상태를 되돌림."""
        ...


class StateJournal:
    """참여자 집합에 대한 원자적 트랜잭션.

    Example:
        >>> journal = StateJournal()
        >>> journal.register("shares", share_ledger)
        >>> with journal.transaction():
        ...     share_ledger.mint("alice", 100)
        ...     raise RuntimeError  # mint가 되돌려짐
    """

    def __init__(self) -> None:
        self._participants: dict[str, Checkpointable] = {}

    def register(self, name: str, participant: object) -> bool:
        """참여자 등록.

        Checkpointable이 아닌 객체(외부 어댑터 등)는 등록하지 않습니다.

        Returns:
            등록 여부
        """
        if not isinstance(participant, Checkpointable):
            logger.debug("Journal: {} is not checkpointable, skipped", name)
            return False
        if name in self._participants:
            msg = f"Participant already registered: {name}"
            raise ValueError(msg)
        self._participants[name] = participant
        return True

    @property
    def participants(self) -> tuple[str, ...]:
        """등록된 참여자 이름."""
        return tuple(self._participants)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """블록 실행 중 예외가 나면 모든 참여자를 복원."""
        saved = {name: p.checkpoint() for name, p in self._participants.items()}
        try:
            yield
        except Exception as exc:
            for name, participant in self._participants.items():
                participant.restore(saved[name])
            add_context_note(exc, f"state rolled back: {', '.join(saved)}")
            raise
