"""Checked integer arithmetic for base-unit amounts.

모든 금액은 자산의 최소 단위(base unit) 정수입니다. 온체인 uint256과 동일한
범위를 강제하여 음수나 범위 초과 값이 조용히 통과하지 않도록 합니다.

Rules Applied:
    - #10 Python Standards: StrEnum, named constants
    - #23 Exception Handling: Fail fast on overflow/underflow
"""

from __future__ import annotations

from enum import StrEnum

from yieldvault.core.exceptions import AmountOverflowError

MAX_UINT256 = 2**256 - 1
BPS_DENOMINATOR = 10_000


class Rounding(StrEnum):
    """나눗셈 반올림 방향."""

    FLOOR = "floor"
    CEIL = "ceil"


def check_amount(value: int, name: str = "amount") -> int:
    """정수 금액이 [0, MAX_UINT256] 범위인지 검증.

    Raises:
        TypeError: int가 아닌 값 (bool 포함)
        AmountOverflowError: 범위를 벗어난 값
    """
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an int, got {type(value).__name__}"
        raise TypeError(msg)
    if value < 0 or value > MAX_UINT256:
        msg = f"{name} out of uint256 range"
        raise AmountOverflowError(msg, context={name: value})
    return value


def checked_add(a: int, b: int) -> int:
    """Overflow를 검사하는 덧셈."""
    return check_amount(check_amount(a) + check_amount(b), "sum")


def checked_sub(a: int, b: int) -> int:
    """Underflow를 검사하는 뺄셈."""
    check_amount(a)
    check_amount(b)
    if b > a:
        msg = "subtraction underflow"
        raise AmountOverflowError(msg, context={"a": a, "b": b})
    return a - b


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.FLOOR) -> int:
    """``a * b / denominator`` 를 지정한 방향으로 반올림.

    중간 곱은 임의 정밀도로 계산하고 결과만 uint256 범위를 검사합니다.

    Raises:
        ZeroDivisionError: denominator가 0
    """
    check_amount(a, "a")
    check_amount(b, "b")
    check_amount(denominator, "denominator")
    if denominator == 0:
        msg = "mul_div denominator is zero"
        raise ZeroDivisionError(msg)

    quotient, remainder = divmod(a * b, denominator)
    if rounding == Rounding.CEIL and remainder:
        quotient += 1
    return check_amount(quotient, "result")


def bps_of(amount: int, bps: int) -> int:
    """``floor(amount * bps / 10000)``."""
    return mul_div(amount, bps, BPS_DENOMINATOR)
