"""Asset Ledger — 볼트가 다루는 기초 자산 토큰.

표준 fungible token 장부(잔고, 승인, 이체)를 인메모리로 제공합니다.
볼트의 idle balance는 이 장부에서 직접 읽으며 별도로 저장하지 않습니다.

Rules Applied:
    - #10 Python Standards: Modern typing, named constants
    - #23 Exception Handling: 잔고/승인 부족 시 즉시 실패
"""

from __future__ import annotations

from dataclasses import dataclass

from yieldvault.core.arithmetic import check_amount, checked_add, checked_sub
from yieldvault.core.exceptions import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
)
from yieldvault.ledger.address import require_address


@dataclass(frozen=True)
class AssetCheckpoint:
    """AssetLedger 상태 사본."""

    balances: tuple[tuple[str, int], ...]
    allowances: tuple[tuple[tuple[str, str], int], ...]
    total_supply: int


class AssetLedger:
    """기초 자산 토큰 장부.

    Args:
        symbol: 토큰 심볼 (예: "USDC")
        decimals: 소수점 자리수 (표시용)

    Example:
        >>> usdc = AssetLedger("USDC", decimals=6)
        >>> usdc.mint("alice", 1_000_000)
        >>> usdc.approve("alice", "vault", 500_000)
        >>> usdc.transfer_from("vault", "alice", "vault", 500_000)
    """

    def __init__(self, symbol: str = "USDC", decimals: int = 6) -> None:
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    # ── Views ─────────────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        """총 발행량."""
        return self._total_supply

    def balance_of(self, account: str) -> int:
        """계정 잔고."""
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """owner가 spender에게 승인한 잔여 한도."""
        return self._allowances.get((owner, spender), 0)

    # ── Mutations ─────────────────────────────────────────────────

    def mint(self, to: str, amount: int) -> None:
        """신규 발행 (faucet, 외부 venue 이자 지급 등)."""
        require_address(to, "recipient")
        check_amount(amount)
        self._total_supply = checked_add(self._total_supply, amount)
        self._balances[to] = self.balance_of(to) + amount

    def burn(self, account: str, amount: int) -> None:
        """소각 (venue 손실 시뮬레이션 등)."""
        self._debit(account, amount)
        self._total_supply -= amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """spender 한도를 amount로 설정 (누적 아님)."""
        require_address(owner, "owner")
        require_address(spender, "spender")
        self._allowances[(owner, spender)] = check_amount(amount)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        """sender → to 이체."""
        require_address(to, "recipient")
        self._debit(sender, amount)
        self._balances[to] = self.balance_of(to) + amount

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        """spender가 owner의 자산을 승인 한도 내에서 이체.

        Raises:
            InsufficientAllowanceError: 승인 한도 부족
            InsufficientBalanceError: owner 잔고 부족
        """
        current = self.allowance(owner, spender)
        if current < amount:
            msg = f"{self.symbol} allowance too low"
            raise InsufficientAllowanceError(
                msg,
                context={"owner": owner, "spender": spender, "allowance": current, "amount": amount},
            )
        self.transfer(owner, to, amount)
        self._allowances[(owner, spender)] = current - amount

    def _debit(self, account: str, amount: int) -> None:
        check_amount(amount)
        balance = self.balance_of(account)
        if balance < amount:
            msg = f"{self.symbol} balance too low"
            raise InsufficientBalanceError(
                msg, context={"account": account, "balance": balance, "amount": amount}
            )
        self._balances[account] = checked_sub(balance, amount)

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> AssetCheckpoint:
        """현재 장부 상태 사본."""
        return AssetCheckpoint(
            balances=tuple(self._balances.items()),
            allowances=tuple(self._allowances.items()),
            total_supply=self._total_supply,
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, AssetCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._balances = dict(state.balances)
        self._allowances = dict(state.allowances)
        self._total_supply = state.total_supply
