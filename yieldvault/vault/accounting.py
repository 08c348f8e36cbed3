"""Share Accounting — 자산 ↔ share 환산.

현재 총 자산 / 총 share 비율로 환산하며, 반올림은 항상 볼트(잔류 보유자)에
유리한 방향으로 처리하여 dust/inflation 공격을 막습니다.

    deposit / redeem : floor   (받는 쪽이 적게 받음)
    mint / withdraw  : ceil    (내는 쪽이 더 냄)

총 share가 0이면 1:1로 부트스트랩합니다.
"""

from __future__ import annotations

from yieldvault.core.arithmetic import Rounding, check_amount, mul_div
from yieldvault.core.exceptions import VaultInsolventError, ZeroSharesResultError


def _require_solvent(total_assets: int, total_shares: int) -> None:
    if total_shares > 0 and total_assets == 0:
        msg = "vault has outstanding shares but no assets"
        raise VaultInsolventError(msg, context={"total_shares": total_shares})


def shares_for_deposit(assets: int, total_assets: int, total_shares: int) -> int:
    """입금 자산에 대해 발행할 share (floor).

    Raises:
        ZeroSharesResultError: 0이 아닌 입금에 대해 결과가 0인 경우
        VaultInsolventError: share는 있는데 자산이 0인 경우
    """
    check_amount(assets, "assets")
    if total_shares == 0:
        shares = assets
    else:
        _require_solvent(total_assets, total_shares)
        shares = mul_div(assets, total_shares, total_assets)

    if assets > 0 and shares == 0:
        msg = "deposit would mint zero shares"
        raise ZeroSharesResultError(
            msg,
            context={"assets": assets, "total_assets": total_assets, "total_shares": total_shares},
        )
    return shares


def convert_to_shares(assets: int, total_assets: int, total_shares: int) -> int:
    """순수 환산 (floor, 0 결과 허용). 조회용."""
    if total_shares == 0:
        return check_amount(assets, "assets")
    if total_assets == 0:
        return 0
    return mul_div(assets, total_shares, total_assets)


def assets_for_shares(shares: int, total_assets: int, total_shares: int) -> int:
    """share에 해당하는 자산 (floor).

    Raises:
        ZeroDivisionError: total_shares가 0 (호출하면 안 되는 상태)
    """
    if total_shares == 0:
        msg = "assets_for_shares called with zero total shares"
        raise ZeroDivisionError(msg)
    return mul_div(shares, total_assets, total_shares)


def shares_for_withdraw(assets: int, total_assets: int, total_shares: int) -> int:
    """assets 출금에 소각할 share (ceil)."""
    if total_shares == 0:
        return check_amount(assets, "assets")
    _require_solvent(total_assets, total_shares)
    return mul_div(assets, total_shares, total_assets, Rounding.CEIL)


def assets_for_mint(shares: int, total_assets: int, total_shares: int) -> int:
    """shares 발행에 필요한 자산 (ceil)."""
    if total_shares == 0:
        return check_amount(shares, "shares")
    return mul_div(shares, total_assets, total_shares, Rounding.CEIL)
