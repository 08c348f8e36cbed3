"""Reentrancy Guard — 볼트 변경 작업의 상호 배제.

모든 상태 변경 진입점은 ``ReentrancyGuard.hold()`` 스코프 안에서 실행됩니다.

Semantics:
    - 잠금 보유 중의 모든 진입 → 즉시 ReentrancyError (대기열 없음)
      어댑터가 같은 스레드에서 볼트를 다시 호출하든, 작업자 스레드에 넘기고
      기다리든 교착 없이 실패합니다. 동시 호출자는 재시도 여부를 직접 결정합니다.
    - 성공/실패와 무관하게 스코프 종료 시 반드시 해제

Rules Applied:
    - #10 Python Standards: contextmanager, threading primitives
    - #23 Exception Handling: Fail fast on re-entry
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from yieldvault.core.exceptions import ReentrancyError

if TYPE_CHECKING:
    from collections.abc import Iterator


class ReentrancyGuard:
    """배타적 non-reentrant 잠금.

    Args:
        name: 에러 메시지에 사용할 보호 대상 이름
    """

    def __init__(self, name: str = "vault") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._operation: str | None = None

    @property
    def locked(self) -> bool:
        """현재 작업이 실행 중인지 여부."""
        return self._lock.locked()

    @property
    def active_operation(self) -> str | None:
        """실행 중인 작업 이름 (없으면 None)."""
        return self._operation

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        """작업 전체 구간 동안 잠금을 보유.

        Args:
            operation: 진입하는 작업 이름

        Raises:
            ReentrancyError: 다른 작업이 이미 잠금을 보유한 경우 (스레드 무관)
        """
        if not self._lock.acquire(blocking=False):
            same_thread = self._owner == threading.get_ident()
            msg = (
                f"Re-entrant call into {self._name} rejected"
                if same_thread
                else f"{self._name} is busy with another operation"
            )
            raise ReentrancyError(
                msg,
                context={
                    "operation": operation,
                    "active": self._operation,
                    "same_thread": same_thread,
                },
            )

        try:
            self._owner = threading.get_ident()
            self._operation = operation
            yield
        finally:
            self._owner = None
            self._operation = None
            self._lock.release()
