"""Typer CLI for the yield vault simulator.

Commands:
    - simulate: deposit → N일 누적 → (비율 변경 + 리밸런싱) → harvest → redeem
    - scenario: YAML 시나리오 파일 실행
    - show-config: 적용 중인 VaultSettings 출력

Rules Applied:
    - #15 Logging Standards: Loguru, structured logging
    - #18 Typer CLI: Annotated syntax, Rich UI
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from yieldvault.config.scenario_loader import StrategyParams, load_scenario
from yieldvault.config.settings import get_settings
from yieldvault.core.exceptions import VaultError
from yieldvault.core.logger import setup_logger
from yieldvault.simulation import default_scenario, run_scenario
from yieldvault.strategy.amm_pool import AmmPoolConfig
from yieldvault.strategy.lending import LendingConfig

if TYPE_CHECKING:
    from yieldvault.config.scenario_loader import ScenarioConfig
    from yieldvault.simulation import SimulationReport

app = typer.Typer(no_args_is_help=True)
console = Console()


def _configure_logging(*, verbose: bool, log_file: bool) -> None:
    settings = get_settings()
    setup_logger(
        log_dir=settings.log_dir,
        console_level="DEBUG" if verbose else "WARNING",
        enable_file=log_file,
    )


def _print_steps(report: SimulationReport) -> None:
    table = Table(show_header=True, header_style="bold", title="Steps")
    table.add_column("#", justify="right", width=3)
    table.add_column("Action", style="cyan", min_width=14)
    table.add_column("Account", min_width=8)
    table.add_column("Result", justify="right")
    table.add_column("Idle", justify="right")
    table.add_column("Strategy A", justify="right")
    table.add_column("Strategy B", justify="right")
    table.add_column("Total Assets", justify="right", style="bold")

    for outcome in report.outcomes:
        snap = outcome.snapshot
        table.add_row(
            str(outcome.index),
            str(outcome.action),
            outcome.account or "-",
            f"{outcome.value:,}" if outcome.value is not None else "-",
            f"{snap.idle:,}",
            f"{snap.balance_a:,}",
            f"{snap.balance_b:,}",
            f"{snap.total_assets:,}",
        )
    console.print(table)


def _print_summary(config: ScenarioConfig, report: SimulationReport) -> None:
    vault = report.env.vault
    final = report.final

    table = Table(show_header=True, header_style="bold", title="Accounts")
    table.add_column("Account", style="bold")
    table.add_column("Funded", justify="right")
    table.add_column("Wallet", justify="right")
    table.add_column("Shares", justify="right")
    table.add_column("PnL", justify="right")

    for account, funded in config.accounts.items():
        wallet = report.wallet(account)
        shares = vault.balance_of(account)
        pnl = wallet + vault.convert_to_assets(shares) - funded
        color = "green" if pnl >= 0 else "red"
        table.add_row(
            account,
            f"{funded:,}",
            f"{wallet:,}",
            f"{shares:,}",
            f"[{color}]{pnl:+,}[/{color}]",
        )
    console.print(table)

    console.print(
        Panel(
            f"Ratio A/B: {vault.ratio_a} / {vault.ratio_b} bps\n"
            f"Total assets: {final.total_assets:,} (idle {final.idle:,})\n"
            f"Total shares: {final.total_shares:,}",
            title=f"[bold]{vault.name}[/bold]",
            border_style="blue",
        )
    )


def _run_and_report(config: ScenarioConfig) -> None:
    try:
        report = run_scenario(config)
    except VaultError as e:
        console.print(f"[red]Error:[/red] {e}")
        for note in getattr(e, "__notes__", []):
            console.print(f"  [dim]{note}[/dim]")
        raise typer.Exit(code=1) from e

    _print_steps(report)
    _print_summary(config, report)


@app.command()
def simulate(
    amount: Annotated[int, typer.Option("--amount", "-a", min=1, help="Deposit amount")] = 100_000,
    days: Annotated[int, typer.Option("--days", "-d", min=0, help="Days to accrue yield")] = 10,
    ratio_a: Annotated[
        int | None, typer.Option("--ratio-a", help="New ratio for strategy A (bps)")
    ] = None,
    ratio_b: Annotated[
        int | None, typer.Option("--ratio-b", help="New ratio for strategy B (bps)")
    ] = None,
    lending_apy: Annotated[
        int, typer.Option("--lending-apy", help="Lending supply APY (bps)")
    ] = 500,
    amm_apy: Annotated[int, typer.Option("--amm-apy", help="AMM fee APY (bps)")] = 300,
    harvest: Annotated[bool, typer.Option("--harvest/--no-harvest", help="Harvest before redeem")] = True,
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Debug logging")] = False,
    log_file: Annotated[bool, typer.Option("--log-file", help="Write rotating log files")] = False,
) -> None:
    """단일 예치자 시뮬레이션 실행."""
    _configure_logging(verbose=verbose, log_file=log_file)

    if (ratio_a is None) != (ratio_b is None):
        console.print("[red]Error:[/red] --ratio-a and --ratio-b must be given together.")
        raise typer.Exit(code=1)

    try:
        strategies = StrategyParams(
            lending=LendingConfig(supply_apy_bps=lending_apy),
            amm=AmmPoolConfig(fee_apy_bps=amm_apy),
        )
    except ValidationError as e:
        console.print(f"[red]Invalid strategy parameters:[/red]\n{e}")
        raise typer.Exit(code=1) from e

    config = default_scenario(
        amount,
        days,
        ratio_a=ratio_a,
        ratio_b=ratio_b,
        harvest=harvest,
        strategies=strategies,
    )
    _run_and_report(config)


@app.command()
def scenario(
    path: Annotated[Path, typer.Argument(help="YAML scenario file")],
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Debug logging")] = False,
    log_file: Annotated[bool, typer.Option("--log-file", help="Write rotating log files")] = False,
) -> None:
    """YAML 시나리오 실행."""
    _configure_logging(verbose=verbose, log_file=log_file)

    try:
        config = load_scenario(path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e
    except (yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Invalid scenario:[/red] {path}\n{e}")
        raise typer.Exit(code=1) from e

    console.print(f"[bold]Scenario:[/bold] {path} ({len(config.steps)} steps)")
    _run_and_report(config)


@app.command(name="show-config")
def show_config() -> None:
    """적용 중인 볼트 설정 출력 (VAULT_* 환경 변수 반영)."""
    settings = get_settings()

    table = Table(show_header=True, header_style="bold", title="Vault Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)
