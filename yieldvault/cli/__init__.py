"""CLI interface using Typer.

Available commands:
    - simulate: Single-depositor vault simulation
    - scenario: Run a YAML scenario file
    - show-config: Print effective vault settings

Usage:
    uv run yieldvault simulate --amount 100000 --days 10
    uv run yieldvault simulate --ratio-a 7000 --ratio-b 3000
    uv run yieldvault scenario scenarios/rebalance.yaml
    uv run yieldvault show-config
"""
