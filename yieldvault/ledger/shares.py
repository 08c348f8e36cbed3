"""Share Ledger — 볼트 지분(share) 장부.

보유자별 share 잔고와 총 발행량을 관리합니다. 볼트는 상속 대신
이 컴포넌트를 조합(composition)하여 mint/burn만 호출합니다.

Invariant:
    sum(balance_of(holder) for holder in holders()) == total_supply
"""

from __future__ import annotations

from dataclasses import dataclass

from yieldvault.core.arithmetic import check_amount, checked_add, checked_sub
from yieldvault.core.exceptions import InsufficientAllowanceError, InsufficientSharesError
from yieldvault.ledger.address import require_address


@dataclass(frozen=True)
class ShareCheckpoint:
    """ShareLedger 상태 사본."""

    balances: tuple[tuple[str, int], ...]
    allowances: tuple[tuple[tuple[str, str], int], ...]
    total_supply: int


class ShareLedger:
    """볼트 share 장부."""

    def __init__(self, symbol: str = "yvUSDC") -> None:
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        """총 발행 share."""
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        """보유자 share 잔고."""
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """owner가 spender에게 승인한 share 한도."""
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> dict[str, int]:
        """잔고가 0보다 큰 보유자 목록 (사본)."""
        return {h: b for h, b in self._balances.items() if b > 0}

    def mint(self, to: str, shares: int) -> None:
        """share 발행."""
        require_address(to, "receiver")
        check_amount(shares, "shares")
        self._total_supply = checked_add(self._total_supply, shares)
        self._balances[to] = self.balance_of(to) + shares

    def burn(self, holder: str, shares: int) -> None:
        """share 소각.

        Raises:
            InsufficientSharesError: 보유 share 부족
        """
        self._debit(holder, shares)
        self._total_supply = checked_sub(self._total_supply, shares)

    def transfer(self, sender: str, to: str, shares: int) -> None:
        """share 이체."""
        require_address(to, "receiver")
        self._debit(sender, shares)
        self._balances[to] = self.balance_of(to) + shares

    def approve(self, owner: str, spender: str, shares: int) -> None:
        """spender 한도 설정."""
        require_address(owner, "owner")
        require_address(spender, "spender")
        self._allowances[(owner, spender)] = check_amount(shares, "shares")

    def spend_allowance(self, owner: str, spender: str, shares: int) -> None:
        """owner 대신 spender가 shares를 사용. owner == spender면 한도 불필요."""
        if owner == spender:
            return
        current = self.allowance(owner, spender)
        if current < shares:
            msg = "share allowance too low"
            raise InsufficientAllowanceError(
                msg,
                context={"owner": owner, "spender": spender, "allowance": current, "shares": shares},
            )
        self._allowances[(owner, spender)] = current - shares

    def _debit(self, holder: str, shares: int) -> None:
        check_amount(shares, "shares")
        balance = self.balance_of(holder)
        if balance < shares:
            msg = "share balance too low"
            raise InsufficientSharesError(
                msg, context={"holder": holder, "balance": balance, "shares": shares}
            )
        self._balances[holder] = balance - shares

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> ShareCheckpoint:
        """현재 장부 상태 사본."""
        return ShareCheckpoint(
            balances=tuple(self._balances.items()),
            allowances=tuple(self._allowances.items()),
            total_supply=self._total_supply,
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, ShareCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._balances = dict(state.balances)
        self._allowances = dict(state.allowances)
        self._total_supply = state.total_supply
