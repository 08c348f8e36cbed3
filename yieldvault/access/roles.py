"""Role Gate — 호출자 권한 테이블.

전역 상태 대신 볼트 생성 시 명시적으로 전달되는 권한 테이블입니다.

Roles:
    - ADMIN: 수수료/treasury 변경, 권한 부여·회수 (STRATEGIST 권한 포함)
    - STRATEGIST: 배분 비율, 리밸런싱, 임계값, harvest

Rules Applied:
    - #10 Python Standards: StrEnum
    - #23 Exception Handling: 권한 없음 → UnauthorizedError
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from yieldvault.core.exceptions import UnauthorizedError
from yieldvault.ledger.address import require_address


class Role(StrEnum):
    """볼트 관리 권한.

    Attributes:
        ADMIN: 최상위 관리자
        STRATEGIST: 자본 배분 운영자
    """

    ADMIN = "admin"
    STRATEGIST = "strategist"


# 상위 권한이 포함하는 하위 권한
_IMPLIED: dict[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset({Role.ADMIN, Role.STRATEGIST}),
    Role.STRATEGIST: frozenset({Role.STRATEGIST}),
}


@dataclass(frozen=True)
class RoleCheckpoint:
    """RoleGate 상태 사본."""

    members: tuple[tuple[Role, frozenset[str]], ...]


class RoleGate:
    """역할별 계정 집합.

    Args:
        admin: 초기 ADMIN 계정
        strategist: 초기 STRATEGIST 계정 (None이면 admin이 겸임)
    """

    def __init__(self, admin: str, strategist: str | None = None) -> None:
        self._members: dict[Role, set[str]] = {role: set() for role in Role}
        self._members[Role.ADMIN].add(require_address(admin, "admin"))
        if strategist is not None:
            self._members[Role.STRATEGIST].add(require_address(strategist, "strategist"))

    def has_role(self, role: Role, account: str) -> bool:
        """account가 role(또는 이를 포함하는 상위 권한)을 갖는지 여부."""
        return any(
            account in self._members[held] and role in implied
            for held, implied in _IMPLIED.items()
        )

    def require(self, role: Role, caller: str) -> None:
        """권한 확인.

        Raises:
            UnauthorizedError: caller에게 role이 없는 경우
        """
        if not self.has_role(role, caller):
            msg = f"caller lacks {role} role"
            raise UnauthorizedError(msg, context={"caller": caller, "role": str(role)})

    def members(self, role: Role) -> frozenset[str]:
        """role을 직접 부여받은 계정."""
        return frozenset(self._members[role])

    def grant(self, role: Role, account: str, *, caller: str) -> None:
        """권한 부여 (ADMIN 전용)."""
        self.require(Role.ADMIN, caller)
        self._members[role].add(require_address(account, "account"))
        logger.info("Role granted: {} -> {} (by {})", role, account, caller)

    def revoke(self, role: Role, account: str, *, caller: str) -> None:
        """권한 회수 (ADMIN 전용). 마지막 ADMIN은 회수할 수 없음."""
        self.require(Role.ADMIN, caller)
        if role == Role.ADMIN and self._members[Role.ADMIN] == {account}:
            msg = "cannot revoke the last admin"
            raise UnauthorizedError(msg, context={"account": account})
        self._members[role].discard(account)
        logger.info("Role revoked: {} -> {} (by {})", role, account, caller)

    # ── Checkpointable ────────────────────────────────────────────

    def checkpoint(self) -> RoleCheckpoint:
        """현재 권한 테이블 사본."""
        return RoleCheckpoint(
            members=tuple((role, frozenset(accounts)) for role, accounts in self._members.items())
        )

    def restore(self, state: object) -> None:
        """checkpoint 시점으로 복원."""
        if not isinstance(state, RoleCheckpoint):
            msg = f"Unexpected checkpoint type: {type(state).__name__}"
            raise TypeError(msg)
        self._members = {role: set(accounts) for role, accounts in state.members}
