"""Yield Vault - Entry Point.

This module provides the main entry point for the vault simulator CLI.

Usage:
    python main.py simulate --amount 100000 --days 10
    python main.py scenario scenarios/rebalance.yaml
    python main.py show-config
"""

from yieldvault.cli.vault import app

if __name__ == "__main__":
    app()
