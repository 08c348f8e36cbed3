"""Tests for checked integer arithmetic."""

from __future__ import annotations

import pytest

from yieldvault.core.arithmetic import (
    MAX_UINT256,
    Rounding,
    bps_of,
    check_amount,
    checked_add,
    checked_sub,
    mul_div,
)
from yieldvault.core.exceptions import AmountOverflowError


class TestCheckAmount:
    """범위/타입 검증."""

    def test_accepts_bounds(self) -> None:
        assert check_amount(0) == 0
        assert check_amount(MAX_UINT256) == MAX_UINT256

    def test_rejects_negative(self) -> None:
        with pytest.raises(AmountOverflowError):
            check_amount(-1)

    def test_rejects_above_uint256(self) -> None:
        with pytest.raises(AmountOverflowError):
            check_amount(MAX_UINT256 + 1)

    @pytest.mark.parametrize("value", [1.5, "10", True, None])
    def test_rejects_non_int(self, value: object) -> None:
        with pytest.raises(TypeError):
            check_amount(value)  # type: ignore[arg-type]

    def test_error_context_names_field(self) -> None:
        with pytest.raises(AmountOverflowError) as exc_info:
            check_amount(-5, "shares")
        assert exc_info.value.context == {"shares": -5}


class TestCheckedOps:
    """덧셈/뺄셈 overflow·underflow."""

    def test_add(self) -> None:
        assert checked_add(2, 3) == 5

    def test_add_overflow(self) -> None:
        with pytest.raises(AmountOverflowError):
            checked_add(MAX_UINT256, 1)

    def test_sub(self) -> None:
        assert checked_sub(10, 3) == 7

    def test_sub_underflow(self) -> None:
        with pytest.raises(AmountOverflowError):
            checked_sub(3, 10)


class TestMulDiv:
    """반올림 방향과 0 분모."""

    def test_floor_default(self) -> None:
        assert mul_div(10, 1, 3) == 3

    def test_ceil_rounds_up_remainder(self) -> None:
        assert mul_div(10, 1, 3, Rounding.CEIL) == 4

    def test_ceil_exact_division_unchanged(self) -> None:
        assert mul_div(9, 1, 3, Rounding.CEIL) == 3

    def test_large_intermediate_product(self) -> None:
        assert mul_div(MAX_UINT256, MAX_UINT256, MAX_UINT256) == MAX_UINT256

    def test_result_overflow(self) -> None:
        with pytest.raises(AmountOverflowError):
            mul_div(MAX_UINT256, 2, 1)

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mul_div(1, 1, 0)

    def test_bps_of(self) -> None:
        assert bps_of(100_000, 7_000) == 70_000
        assert bps_of(3, 5_000) == 1
