"""StrategyAdapter Protocol 및 인메모리 어댑터 기반 클래스.

볼트는 구체 타입이 아닌 ``StrategyAdapter`` 인터페이스만 참조합니다.
structural subtyping으로 외부 어댑터도 같은 메서드만 제공하면 연결됩니다.

Contract:
    - deposit(amount): 볼트로부터 amount를 가져와 venue에 배치
    - withdraw(amount) -> int: 최대 amount를 볼트에 반환 (더 적을 수 있음)
    - harvest() -> int: 외부에서 누적된 수익을 잔고에 반영 (best-effort)
    - balance_of(holder) -> int: holder 귀속 환매 가능 가치 (볼트 외에는 0)

Rules Applied:
    - #10 Python Standards: Protocol, ABC pattern
    - #23 Exception Handling: venue 실패 → StrategyFailureError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from loguru import logger

from yieldvault.core.arithmetic import check_amount
from yieldvault.core.exceptions import StrategyFailureError, UnauthorizedError
from yieldvault.ledger.address import require_address

if TYPE_CHECKING:
    from yieldvault.ledger.asset import AssetLedger


@runtime_checkable
class StrategyAdapter(Protocol):
    """볼트가 호출하는 전략 어댑터 인터페이스."""

    @property
    def name(self) -> str:
        """어댑터 식별자 (로그/에러용)."""
        ...

    @property
    def address(self) -> str:
        """자산 장부상 어댑터 계정 (볼트 승인 대상)."""
        ...

    def deposit(self, amount: int) -> None:
        """볼트로부터 amount를 가져와 배치."""
        ...

    def withdraw(self, amount: int) -> int:
        """최대 amount를 볼트에 반환하고 실제 반환액을 돌려줌."""
        ...

    def harvest(self) -> int:
        """누적 수익 반영. 반영된 금액을 반환."""
        ...

    def balance_of(self, holder: str) -> int:
        """holder 귀속 가치 (누적 수익 포함)."""
        ...


class BaseStrategyAdapter(ABC):
    """인메모리 venue 어댑터의 공통 기반.

    Args:
        name: 어댑터 이름 (예: "lending")
        asset: 기초 자산 장부
        address: 어댑터 자신의 계정 주소

    Design:
        - 하나의 볼트에만 바인딩 (``bind_vault``)
        - venue 중단(halt) 시 모든 변경 호출이 StrategyFailureError
        - 토큰 잔고는 AssetLedger가, 포지션 상태는 서브클래스가 checkpoint
    """

    def __init__(self, name: str, asset: AssetLedger, address: str | None = None) -> None:
        self._name = name
        self._asset = asset
        self._address = address or f"strategy:{name}"
        self._vault: str | None = None
        self._halted_reason: str | None = None

    # ── Identity ──────────────────────────────────────────────────

    @property
    def name(self) -> str:
        """어댑터 이름."""
        return self._name

    @property
    def address(self) -> str:
        """어댑터 계정 주소."""
        return self._address

    @property
    def vault(self) -> str | None:
        """바인딩된 볼트 주소."""
        return self._vault

    def bind_vault(self, vault: str) -> None:
        """볼트 등록. 한 번만 가능."""
        require_address(vault, "vault")
        if self._vault is not None and self._vault != vault:
            msg = f"{self._name} is already bound to another vault"
            raise UnauthorizedError(msg, context={"bound": self._vault, "requested": vault})
        self._vault = vault

    # ── Venue status ──────────────────────────────────────────────

    def halt(self, reason: str = "venue paused") -> None:
        """venue 장애 시뮬레이션."""
        self._halted_reason = reason
        logger.warning("Strategy {} halted: {}", self._name, reason)

    def resume(self) -> None:
        """venue 정상화."""
        self._halted_reason = None

    @property
    def halted(self) -> bool:
        """venue 중단 여부."""
        return self._halted_reason is not None

    # ── StrategyAdapter ───────────────────────────────────────────

    def deposit(self, amount: int) -> None:
        """볼트의 승인 한도로 amount를 가져와 포지션에 추가."""
        vault = self._require_live()
        check_amount(amount)
        if amount == 0:
            return
        self._before_mutation()
        self._asset.transfer_from(self._address, vault, self._address, amount)
        self._on_deposit(amount)

    def withdraw(self, amount: int) -> int:
        """포지션에서 최대 amount를 볼트로 반환."""
        vault = self._require_live()
        check_amount(amount)
        if amount == 0:
            return 0
        self._before_mutation()
        returned = self._on_withdraw(amount)
        if returned:
            self._asset.transfer(self._address, vault, returned)
        return returned

    def harvest(self) -> int:
        """누적 수익을 포지션에 반영."""
        self._require_live()
        return self._on_harvest()

    def balance_of(self, holder: str) -> int:
        """볼트에 귀속된 가치. 다른 holder는 0."""
        if self._vault is None or holder != self._vault:
            return 0
        return self._position_value()

    # ── Hooks ─────────────────────────────────────────────────────

    def _before_mutation(self) -> None:  # noqa: B027
        """deposit/withdraw 직전 상태 동기화 (예: 이자 누적)."""

    @abstractmethod
    def _on_deposit(self, amount: int) -> None:
        """토큰 수령 후 포지션 갱신."""

    @abstractmethod
    def _on_withdraw(self, amount: int) -> int:
        """포지션 축소 후 볼트로 보낼 금액 반환."""

    @abstractmethod
    def _on_harvest(self) -> int:
        """수익 반영 후 반영 금액 반환."""

    @abstractmethod
    def _position_value(self) -> int:
        """볼트 포지션의 현재 가치."""

    # ── Helpers ───────────────────────────────────────────────────

    def _require_live(self) -> str:
        if self._halted_reason is not None:
            msg = f"{self._name} venue unavailable: {self._halted_reason}"
            raise StrategyFailureError(msg, context={"strategy": self._name})
        if self._vault is None:
            msg = f"{self._name} is not bound to a vault"
            raise StrategyFailureError(msg, context={"strategy": self._name})
        return self._vault
