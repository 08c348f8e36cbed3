"""Account identity helpers."""

from __future__ import annotations

from yieldvault.core.exceptions import ZeroAddressError

ZERO_ADDRESS = "0x" + "0" * 40


def is_unset(address: str | None) -> bool:
    """빈 값 또는 zero address 여부."""
    return not address or address == ZERO_ADDRESS


def require_address(address: str | None, role: str = "address") -> str:
    """주소가 설정되어 있는지 확인하고 그대로 반환.

    Raises:
        ZeroAddressError: 주소가 비어 있거나 zero address인 경우
    """
    if address is None or is_unset(address):
        msg = f"{role} is unset"
        raise ZeroAddressError(msg, context={role: address})
    return address
