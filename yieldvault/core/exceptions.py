"""Custom exception hierarchy for the vault.

This module defines a domain-driven exception hierarchy. Every failure the
vault can surface is a subclass of ``VaultError`` so callers can tell the
taxonomy apart while still catching one base class.

Exception Categories:
    - Input errors: zero amounts, unset addresses, invalid ratios/fees
    - Liquidity errors: not enough assets, shares or allowance
    - Execution errors: strategy adapter failure, re-entry, overflow

All of them are unrecoverable for the current call: the operation aborts
as a unit and the vault state is rolled back before the error propagates.

Rules Applied:
    - #23 Exception Handling: Domain-driven hierarchy, add_note()
"""


class VaultError(Exception):
    """모든 볼트 관련 예외의 기본 클래스.

    이 예외를 직접 발생시키지 말고, 하위 클래스를 사용하세요.

    Attributes:
        message: 에러 메시지
        context: 추가 컨텍스트 정보 (디버깅용)
    """

    def __init__(
        self, message: str, *, context: dict[str, object] | None = None
    ) -> None:
        """VaultError 초기화.

        Args:
            message: 에러 메시지
            context: 추가 컨텍스트 정보 (선택)
        """
        super().__init__(message)
        self.message = message
        self.context: dict[str, object] = context or {}

    def __str__(self) -> str:
        """에러 메시지와 컨텍스트를 포함한 문자열 반환."""
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


# =============================================================================
# Input Errors
# =============================================================================


class ZeroAddressError(VaultError):
    """수신자/소유자 주소가 설정되지 않음.

    Example:
        >>> raise ZeroAddressError("receiver is unset", context={"receiver": None})
    """


class InvalidAmountError(VaultError):
    """0 또는 음수 금액으로 호출된 작업."""


class InvalidAssetAmountError(InvalidAmountError):
    """deposit/mint 금액이 0."""


class InvalidWithdrawAmountError(InvalidAmountError):
    """withdraw/redeem 금액이 0."""


class ZeroSharesResultError(VaultError):
    """입금해도 발행될 share가 0인 경우 (가치 없는 입금 방지)."""


class InvalidRatioError(VaultError):
    """배분 비율의 합이 10000 bps가 아님."""


class InvalidFeeError(VaultError):
    """수수료가 설정된 상한을 초과."""


class InvalidThresholdError(InvalidFeeError):
    """리밸런싱 임계값이 상한을 초과."""


# =============================================================================
# Liquidity Errors
# =============================================================================


class InsufficientBalanceError(VaultError):
    """요청을 충족할 유동성이 어디에도 없음.

    Example:
        >>> raise InsufficientBalanceError(
        ...     "Not enough liquidity to withdraw",
        ...     context={"requested": 1_000, "available": 900},
        ... )
    """


class InsufficientSharesError(InsufficientBalanceError):
    """소유자의 share 잔고 부족."""


class InsufficientAllowanceError(InsufficientBalanceError):
    """승인(allowance) 한도 부족."""


class VaultInsolventError(VaultError):
    """share가 남아 있는데 총 자산이 0인 상태 (환산 불가)."""


# =============================================================================
# Execution Errors
# =============================================================================


class StrategyFailureError(VaultError):
    """전략 어댑터 호출 자체가 실패.

    재시도하지 않고 즉시 호출자에게 전달됩니다.
    """


class UnauthorizedError(VaultError):
    """호출자에게 필요한 권한(role)이 없음."""


class ReentrancyError(VaultError):
    """실행 중인 변경 작업 도중 볼트에 재진입 시도."""


class AmountOverflowError(VaultError):
    """정수 연산 결과가 uint256 범위를 벗어남."""


# =============================================================================
# Utility Functions
# =============================================================================


def add_context_note(exc: Exception, note: str) -> None:
    """예외에 컨텍스트 노트 추가 (Python 3.11+ add_note).

    원본 Traceback을 보존하면서 디버깅 정보를 추가합니다.

    Args:
        exc: 예외 객체
        note: 추가할 노트 문자열

    Example:
        >>> try:
        ...     adapter.withdraw(amount)
        ... except Exception as e:
        ...     add_context_note(e, f"Failed while withdrawing {amount}")
        ...     raise
    """
    exc.add_note(note)
