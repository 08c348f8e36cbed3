"""Fungible ledgers used by the vault (asset token and share claims)."""

from yieldvault.ledger.address import ZERO_ADDRESS, is_unset, require_address
from yieldvault.ledger.asset import AssetLedger
from yieldvault.ledger.shares import ShareLedger

__all__ = [
    "ZERO_ADDRESS",
    "AssetLedger",
    "ShareLedger",
    "is_unset",
    "require_address",
]
