"""Vault — pooled-capital yield vault orchestration.

Accepts deposits of a single underlying asset, issues proportional shares,
splits idle capital between two strategy adapters by a target ratio and
serves withdrawals by pulling liquidity back from those adapters.

Operation pipeline (every mutating entry point):
    1. ReentrancyGuard.hold()      - serialize, fail fast on re-entry
    2. StateJournal.transaction()  - checkpoint participants, rollback on error
    3. LoggingContext              - bind vault/operation/caller to log records
    4. Validate → convert → move funds → mint/burn → deploy

Rules Applied:
    - #10 Python Standards: composition, contextmanager
    - #15 Logging Standards: context binding per operation
    - #23 Exception Handling: all-or-nothing operations, no retries
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from yieldvault.access.roles import Role, RoleGate
from yieldvault.config.settings import get_settings
from yieldvault.core.arithmetic import MAX_UINT256
from yieldvault.core.exceptions import (
    InsufficientBalanceError,
    InsufficientSharesError,
    InvalidAssetAmountError,
    InvalidWithdrawAmountError,
    VaultError,
    VaultInsolventError,
)
from yieldvault.core.guard import ReentrancyGuard
from yieldvault.core.journal import StateJournal
from yieldvault.ledger.address import require_address
from yieldvault.ledger.shares import ShareLedger
from yieldvault.logging.context import LoggingContext, generate_operation_id, get_vault_logger
from yieldvault.vault import accounting
from yieldvault.vault.allocation import AllocationController
from yieldvault.vault.models import HarvestResult, StrategySlot, VaultOperation, VaultSnapshot
from yieldvault.vault.rebalance import RebalanceEngine
from yieldvault.vault.router import CapitalRouter

if TYPE_CHECKING:
    from collections.abc import Iterator

    from loguru import Logger

    from yieldvault.config.settings import VaultSettings
    from yieldvault.ledger.asset import AssetLedger
    from yieldvault.strategy.base import StrategyAdapter
    from yieldvault.vault.models import FeeSchedule, RebalanceResult


class Vault:
    """두 전략에 자본을 배분하는 share 기반 볼트.

    Args:
        asset: 기초 자산 장부
        strategy_a: 전략 A 어댑터
        strategy_b: 전략 B 어댑터
        treasury: 수수료 수령 주소 (선언만 됨)
        admin: 초기 ADMIN 계정
        strategist: 초기 STRATEGIST 계정 (None이면 admin 겸임)
        settings: 기본값/한도 (None이면 get_settings())
        address: 자산 장부상 볼트 계정
        share_symbol: share 심볼 (기본: "yv" + 자산 심볼)

    Example:
        >>> vault = Vault(usdc, lending, amm, treasury="treasury", admin="admin")
        >>> shares = vault.deposit(100_000, "alice", caller="alice")
        >>> vault.redeem(shares, "alice", "alice", caller="alice")
    """

    def __init__(
        self,
        asset: AssetLedger,
        strategy_a: StrategyAdapter,
        strategy_b: StrategyAdapter,
        *,
        treasury: str,
        admin: str,
        strategist: str | None = None,
        settings: VaultSettings | None = None,
        address: str | None = None,
        share_symbol: str | None = None,
    ) -> None:
        if strategy_a is strategy_b:
            msg = "strategy A and strategy B must be distinct adapters"
            raise ValueError(msg)

        self._settings = settings or get_settings()
        self._name = self._settings.name
        self._address = require_address(address or f"vault:{self._name}", "vault")
        self._asset = asset
        self._shares = ShareLedger(share_symbol or f"yv{asset.symbol}")
        self._roles = RoleGate(admin, strategist)
        self._allocation = AllocationController(self._roles, self._settings, treasury)
        self._router = CapitalRouter(asset, self._address, strategy_a, strategy_b)
        self._rebalancer = RebalanceEngine(self._router, self._allocation)
        self._guard = ReentrancyGuard(self._name)

        for adapter in (strategy_a, strategy_b):
            bind = getattr(adapter, "bind_vault", None)
            if callable(bind):
                bind(self._address)

        self._journal = StateJournal()
        self._journal.register("asset", asset)
        self._journal.register("shares", self._shares)
        self._journal.register("roles", self._roles)
        self._journal.register("allocation", self._allocation)
        self._journal.register("strategy_a", strategy_a)
        self._journal.register("strategy_b", strategy_b)

    # ── Identity ──────────────────────────────────────────────────

    @property
    def name(self) -> str:
        """볼트 이름 (로그 컨텍스트)."""
        return self._name

    @property
    def address(self) -> str:
        """자산 장부상 볼트 계정."""
        return self._address

    @property
    def asset(self) -> AssetLedger:
        """기초 자산 장부."""
        return self._asset

    @property
    def roles(self) -> RoleGate:
        """권한 테이블 (조회용, 변경은 grant_role/revoke_role)."""
        return self._roles

    def strategy(self, slot: StrategySlot) -> StrategyAdapter:
        return self._router.strategy(slot)

    # ── Configuration views ───────────────────────────────────────

    @property
    def ratio_a(self) -> int:
        return self._allocation.ratio_a

    @property
    def ratio_b(self) -> int:
        return self._allocation.ratio_b

    @property
    def rebalance_threshold_bps(self) -> int:
        return self._allocation.rebalance_threshold_bps

    @property
    def fees(self) -> FeeSchedule:
        """선언된 수수료 필드 (자금 이동 없음)."""
        return self._allocation.fees

    # ── Share views ───────────────────────────────────────────────

    def total_supply(self) -> int:
        return self._shares.total_supply

    def balance_of(self, holder: str) -> int:
        return self._shares.balance_of(holder)

    def allowance(self, owner: str, spender: str) -> int:
        return self._shares.allowance(owner, spender)

    # ── Accounting views ──────────────────────────────────────────

    def snapshot(self) -> VaultSnapshot:
        """idle, 전략 잔고, 총 share를 한 번에 읽은 스냅샷."""
        balance_a, balance_b = self._router.balances()
        return VaultSnapshot(
            idle=self._router.idle(),
            balance_a=balance_a,
            balance_b=balance_b,
            total_shares=self._shares.total_supply,
        )

    def total_assets(self) -> int:
        """idle + 두 전략의 볼트 귀속 잔고."""
        return self.snapshot().total_assets

    def get_strategy_balances(self) -> tuple[int, int]:
        """(A 잔고, B 잔고)."""
        return self._router.balances()

    def convert_to_shares(self, assets: int) -> int:
        snap = self.snapshot()
        return accounting.convert_to_shares(assets, snap.total_assets, snap.total_shares)

    def convert_to_assets(self, shares: int) -> int:
        snap = self.snapshot()
        if snap.total_shares == 0:
            return shares
        return accounting.assets_for_shares(shares, snap.total_assets, snap.total_shares)

    def preview_deposit(self, assets: int) -> int:
        """deposit 시 발행될 share (floor)."""
        return self.convert_to_shares(assets)

    def preview_mint(self, shares: int) -> int:
        """mint 시 필요한 자산 (ceil)."""
        snap = self.snapshot()
        return accounting.assets_for_mint(shares, snap.total_assets, snap.total_shares)

    def preview_withdraw(self, assets: int) -> int:
        """withdraw 시 소각될 share (ceil)."""
        snap = self.snapshot()
        return accounting.shares_for_withdraw(assets, snap.total_assets, snap.total_shares)

    def preview_redeem(self, shares: int) -> int:
        """redeem 시 받을 자산 (floor, 유동성 부족 전 기준)."""
        return self.convert_to_assets(shares)

    def max_deposit(self, receiver: str) -> int:  # noqa: ARG002
        snap = self.snapshot()
        if snap.total_shares > 0 and snap.total_assets == 0:
            return 0
        return MAX_UINT256 - snap.total_assets

    def max_withdraw(self, owner: str) -> int:
        return self.convert_to_assets(self._shares.balance_of(owner))

    def max_redeem(self, owner: str) -> int:
        return self._shares.balance_of(owner)

    def needs_rebalance(self) -> bool:
        """현재 잔고가 목표 대비 임계값을 넘어 이탈했는지 여부."""
        return self._rebalancer.check()

    # ── Deposits ──────────────────────────────────────────────────

    def deposit(self, assets: int, receiver: str, *, caller: str) -> int:
        """caller의 자산을 받아 receiver에게 share 발행 후 idle 배치.

        Args:
            assets: 입금액 (caller가 볼트에 승인해 둔 한도 내)
            receiver: share 수령인
            caller: 자산을 내는 계정

        Returns:
            발행된 share

        Raises:
            InvalidAssetAmountError: assets가 0 이하
            ZeroAddressError: receiver 미설정
            ZeroSharesResultError: 환산 결과 share가 0
            InsufficientAllowanceError / InsufficientBalanceError: 자산 이동 실패
            StrategyFailureError: 배치 중 어댑터 실패 (전체 롤백)
        """
        with self._operation(VaultOperation.DEPOSIT, caller) as log:
            if assets <= 0:
                msg = "deposit amount must be positive"
                raise InvalidAssetAmountError(msg, context={"assets": assets})
            require_address(receiver, "receiver")

            snap = self.snapshot()
            shares = accounting.shares_for_deposit(assets, snap.total_assets, snap.total_shares)

            self._asset.transfer_from(self._address, caller, self._address, assets)
            self._shares.mint(receiver, shares)
            deployment = self._router.deploy(self.ratio_a, self.ratio_b)

            log.info(
                "Deposit: {} assets -> {} shares for {} (deployed A={} B={})",
                assets,
                shares,
                receiver,
                deployment.to_a,
                deployment.to_b,
            )
            return shares

    def mint(self, shares: int, receiver: str, *, caller: str) -> int:
        """정확히 shares를 발행하고 필요한 자산(ceil)을 caller에게서 받음.

        Returns:
            caller가 지불한 자산
        """
        with self._operation(VaultOperation.MINT, caller) as log:
            if shares <= 0:
                msg = "mint amount must be positive"
                raise InvalidAssetAmountError(msg, context={"shares": shares})
            require_address(receiver, "receiver")

            snap = self.snapshot()
            if snap.total_shares > 0 and snap.total_assets == 0:
                msg = "vault has outstanding shares but no assets"
                raise VaultInsolventError(msg, context={"total_shares": snap.total_shares})
            assets = accounting.assets_for_mint(shares, snap.total_assets, snap.total_shares)

            self._asset.transfer_from(self._address, caller, self._address, assets)
            self._shares.mint(receiver, shares)
            deployment = self._router.deploy(self.ratio_a, self.ratio_b)

            log.info(
                "Mint: {} shares for {} assets to {} (deployed {})",
                shares,
                assets,
                receiver,
                deployment.deployed,
            )
            return assets

    # ── Withdrawals ───────────────────────────────────────────────

    def withdraw(self, assets: int, receiver: str, owner: str, *, caller: str) -> int:
        """owner의 share를 소각하고 정확히 assets를 receiver에게 전송.

        Returns:
            소각된 share (ceil)

        Raises:
            InvalidWithdrawAmountError: assets가 0 이하
            InsufficientBalanceError: 총 자산 초과 또는 회수 후에도 idle 부족
            InsufficientSharesError: owner share 부족
            InsufficientAllowanceError: caller != owner 이고 share 승인 부족
        """
        with self._operation(VaultOperation.WITHDRAW, caller) as log:
            if assets <= 0:
                msg = "withdraw amount must be positive"
                raise InvalidWithdrawAmountError(msg, context={"assets": assets})
            require_address(receiver, "receiver")
            require_address(owner, "owner")

            snap = self.snapshot()
            if assets > snap.total_assets:
                msg = "withdraw exceeds vault total assets"
                raise InsufficientBalanceError(
                    msg, context={"requested": assets, "total_assets": snap.total_assets}
                )
            shares = accounting.shares_for_withdraw(assets, snap.total_assets, snap.total_shares)
            self._require_shares(owner, shares)
            self._shares.spend_allowance(owner, caller, shares)

            if snap.idle < assets:
                self._router.pull(assets - snap.idle)
            idle = self._router.idle()
            if idle < assets:
                msg = "not enough liquidity after pulling from strategies"
                raise InsufficientBalanceError(
                    msg, context={"requested": assets, "available": idle}
                )

            self._shares.burn(owner, shares)
            self._asset.transfer(self._address, receiver, assets)

            log.info("Withdraw: {} assets to {} (burned {} shares of {})", assets, receiver, shares, owner)
            return shares

    def redeem(self, shares: int, receiver: str, owner: str, *, caller: str) -> int:
        """owner의 shares를 소각하고 환산 자산을 receiver에게 전송.

        전략 회수가 부족하면 실제로 확보된 만큼만 전송합니다 (degraded).

        Returns:
            실제 전송된 자산

        Raises:
            InvalidWithdrawAmountError: shares가 0 이하
            InsufficientSharesError: owner share 부족
            InsufficientBalanceError: 전송 가능한 자산이 0
        """
        with self._operation(VaultOperation.REDEEM, caller) as log:
            if shares <= 0:
                msg = "redeem amount must be positive"
                raise InvalidWithdrawAmountError(msg, context={"shares": shares})
            require_address(receiver, "receiver")
            require_address(owner, "owner")
            self._require_shares(owner, shares)
            self._shares.spend_allowance(owner, caller, shares)

            snap = self.snapshot()
            preview = accounting.assets_for_shares(shares, snap.total_assets, snap.total_shares)
            if snap.idle < preview and snap.deployed > 0:
                buffer = self._settings.redeem_rounding_buffer
                self._router.pull(preview - snap.idle + buffer)

            realized = min(preview, self._router.idle())
            if realized == 0:
                msg = "redemption would transfer zero assets"
                raise InsufficientBalanceError(
                    msg, context={"shares": shares, "preview": preview}
                )
            if realized < preview:
                log.warning(
                    "Redeem degraded: realized {} of {} previewed assets", realized, preview
                )

            self._shares.burn(owner, shares)
            self._asset.transfer(self._address, receiver, realized)

            log.info("Redeem: {} shares of {} -> {} assets to {}", shares, owner, realized, receiver)
            return realized

    # ── Strategy management ───────────────────────────────────────

    def rebalance(self, *, caller: str) -> RebalanceResult:
        """이탈 시 전략 잔고를 목표 비율로 재배치 (STRATEGIST)."""
        with self._operation(VaultOperation.REBALANCE, caller):
            self._roles.require(Role.STRATEGIST, caller)
            return self._rebalancer.rebalance()

    def harvest(self, *, caller: str) -> HarvestResult:
        """두 어댑터의 harvest 호출 (STRATEGIST). 수수료 필드는 건드리지 않음."""
        with self._operation(VaultOperation.HARVEST, caller) as log:
            self._roles.require(Role.STRATEGIST, caller)
            before = self.total_assets()
            reported_a = self._router.harvest(StrategySlot.A)
            reported_b = self._router.harvest(StrategySlot.B)
            result = HarvestResult(
                reported_a=reported_a,
                reported_b=reported_b,
                total_assets_before=before,
                total_assets_after=self.total_assets(),
            )
            log.info(
                "Harvest: A={} B={} total assets {} -> {} ({:+d})",
                reported_a,
                reported_b,
                result.total_assets_before,
                result.total_assets_after,
                result.realized,
            )
            return result

    # ── Administration ────────────────────────────────────────────

    def set_allocation(self, ratio_a: int, ratio_b: int, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_ALLOCATION, caller):
            self._allocation.set_allocation(ratio_a, ratio_b, caller=caller)

    def set_rebalance_threshold(self, threshold_bps: int, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_THRESHOLD, caller):
            self._allocation.set_rebalance_threshold(threshold_bps, caller=caller)

    def set_fees(self, management_fee_bps: int, performance_fee_bps: int, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_FEES, caller):
            self._allocation.set_fees(management_fee_bps, performance_fee_bps, caller=caller)

    def set_treasury(self, treasury: str, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_TREASURY, caller):
            self._allocation.set_treasury(treasury, caller=caller)

    def grant_role(self, role: Role, account: str, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_ROLE, caller):
            self._roles.grant(role, account, caller=caller)

    def revoke_role(self, role: Role, account: str, *, caller: str) -> None:
        with self._operation(VaultOperation.SET_ROLE, caller):
            self._roles.revoke(role, account, caller=caller)

    # ── Share transfers ───────────────────────────────────────────

    def transfer(self, to: str, shares: int, *, caller: str) -> None:
        """caller의 share를 to에게 이전."""
        with self._operation(VaultOperation.TRANSFER, caller):
            require_address(to, "receiver")
            self._shares.transfer(caller, to, shares)

    def approve(self, spender: str, shares: int, *, caller: str) -> None:
        """spender가 caller 대신 withdraw/redeem할 share 한도 설정."""
        with self._operation(VaultOperation.APPROVE, caller):
            require_address(spender, "spender")
            self._shares.approve(caller, spender, shares)

    # ── Helpers ───────────────────────────────────────────────────

    def _require_shares(self, owner: str, shares: int) -> None:
        balance = self._shares.balance_of(owner)
        if balance < shares:
            msg = "owner does not hold enough shares"
            raise InsufficientSharesError(
                msg, context={"owner": owner, "balance": balance, "requested": shares}
            )

    @contextmanager
    def _operation(self, operation: VaultOperation, caller: str) -> Iterator[Logger]:
        """잠금 → 트랜잭션 → 로깅 컨텍스트를 한 스코프로 묶음."""
        with self._guard.hold(operation):
            op_id = generate_operation_id(str(operation))
            with LoggingContext(
                vault=self._name, operation=str(operation), operation_id=op_id, caller=caller
            ):
                log = get_vault_logger()
                try:
                    with self._journal.transaction():
                        yield log
                except VaultError as exc:
                    log.warning("{} rejected: {}", operation, exc)
                    raise
