"""CLI entry point for the betting ledger analytics.

Commands:
  betledger totals SNAPSHOT  Portfolio-wide metrics
  betledger accounts SNAPSHOT  Per-account P/L breakdown
  betledger account SNAPSHOT KEY  Bet-only metrics for one account
"""

from __future__ import annotations

import json

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from betledger.analytics.metrics_engine import AccountMetrics, MetricsEngine, MetricsResult
from betledger.config import LedgerConfig, load_config
from betledger.ledger.loader import load_portfolio
from betledger.ledger.models import Portfolio
from betledger.observability.logger import configure_logging
from betledger.observability.reports import write_metrics_report

load_dotenv()

console = Console()


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _pl_style(value: float) -> str:
    return "green" if value >= 0 else "red"


def _load(snapshot: str) -> Portfolio:
    try:
        return load_portfolio(snapshot)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """Sports-betting ledger analytics."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(config_path)
        engine = MetricsEngine.from_config(cfg)
    except ValueError as e:
        raise click.ClickException(f"invalid config: {e}") from e
    ctx.obj["config"] = cfg
    ctx.obj["engine"] = engine
    configure_logging(
        level=cfg.observability.log_level,
        fmt="console",  # CLI always uses console format
        log_file=cfg.observability.log_file or None,
        force=True,
    )


# ─── TOTALS ──────────────────────────────────────────────────────────

def _totals_table(result: MetricsResult) -> Table:
    table = Table(title="📊 Portfolio Totals", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Deposits", _money(result.total_deposits))
    table.add_row("Withdrawals", _money(result.total_withdrawals))
    table.add_row("Balance", _money(result.total_balance))
    table.add_row("Net P/L", f"[{_pl_style(result.net_pl)}]{_money(result.net_pl)}[/]")
    table.add_row("Wagered", _money(result.total_amount_wagered))
    table.add_row(
        "Bets (W-L / placed)",
        f"{result.total_bets_won}-{result.total_bets_lost} / {result.total_bets_placed}",
    )
    table.add_row("Win rate", f"{result.win_rate:.1f}%")
    table.add_row("ROI", f"[{_pl_style(result.roi)}]{result.roi:.2f}%[/]")
    table.add_row("Avg bet", _money(result.avg_bet_size))
    table.add_row("Avg win / loss", f"{_money(result.avg_win)} / {_money(result.avg_loss)}")
    table.add_row("Biggest win / loss", f"{_money(result.biggest_win)} / {_money(result.biggest_loss)}")
    table.add_row("Profit factor", result.profit_factor.display())
    table.add_row(
        "Streaks (best W / best L / now)",
        f"{result.longest_win_streak} / {result.longest_lose_streak} / {result.current_streak:+d}",
    )
    table.add_row("Assessment", result.risk_assessment)
    return table


@cli.command()
@click.argument("snapshot", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a table")
@click.option("--report", is_flag=True, help="Also write a JSON report to reports_dir")
@click.pass_context
def totals(ctx: click.Context, snapshot: str, as_json: bool, report: bool) -> None:
    """Show portfolio-wide metrics for SNAPSHOT."""
    cfg: LedgerConfig = ctx.obj["config"]
    engine: MetricsEngine = ctx.obj["engine"]

    result = engine.portfolio_totals(_load(snapshot))

    if as_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
    else:
        console.print(_totals_table(result))

    if report:
        path = write_metrics_report(result, cfg.observability.reports_dir, source=snapshot)
        console.print(f"[green]✓ Report written to {path}[/green]")


# ─── ACCOUNTS ────────────────────────────────────────────────────────

@cli.command()
@click.argument("snapshot", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a table")
@click.pass_context
def accounts(ctx: click.Context, snapshot: str, as_json: bool) -> None:
    """Per-account P/L breakdown for SNAPSHOT."""
    engine: MetricsEngine = ctx.obj["engine"]
    result = engine.portfolio_totals(_load(snapshot), include_accounts=True)

    if as_json:
        console.print_json(json.dumps([a.to_dict() for a in result.accounts], default=str))
        return

    table = Table(title=f"🏦 Accounts ({len(result.accounts)})")
    table.add_column("Key", style="dim")
    table.add_column("Name")
    table.add_column("Balance", justify="right")
    table.add_column("Net P/L", justify="right")
    table.add_column("Bets", justify="right")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("Txns", justify="right")

    for a in result.accounts:
        balance = _money(a.adjusted_balance)
        if a.adjusted_balance != a.balance:
            balance += f" [dim](raw {_money(a.balance)})[/dim]"
        table.add_row(
            a.key,
            a.name,
            balance,
            f"[{_pl_style(a.net_pl)}]{_money(a.net_pl)}[/]",
            str(a.total_bets),
            str(a.pending_bets),
            str(a.total_transactions),
        )

    console.print(table)


# ─── ACCOUNT ─────────────────────────────────────────────────────────

def _account_table(key: str, m: AccountMetrics) -> Table:
    table = Table(title=f"🎯 {key}", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row(
        "Bets (won / lost / pending)",
        f"{m.won_bets} / {m.lost_bets} / {m.pending_bets}",
    )
    table.add_row("Wagered", _money(m.total_wagered))
    table.add_row("Payouts", _money(m.total_winnings))
    table.add_row("Losses", _money(m.total_losses))
    table.add_row("Net P/L", f"[{_pl_style(m.net_pl)}]{_money(m.net_pl)}[/]")
    table.add_row("Win rate", f"{m.win_rate:.1f}%")
    table.add_row("ROI", f"{m.roi:.2f}%")
    table.add_row("Avg bet", _money(m.avg_bet_size))
    table.add_row("Profit factor", m.profit_factor.display())
    table.add_row("Current streak", f"{m.current_streak:+d}")
    return table


@cli.command()
@click.argument("snapshot", type=click.Path())
@click.argument("key")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a table")
@click.pass_context
def account(ctx: click.Context, snapshot: str, key: str, as_json: bool) -> None:
    """Bet-only metrics for account KEY in SNAPSHOT."""
    engine: MetricsEngine = ctx.obj["engine"]
    portfolio = _load(snapshot)
    if key not in portfolio:
        raise click.ClickException(
            f"unknown account {key!r}; available: {', '.join(portfolio) or 'none'}"
        )

    metrics = engine.account_metrics(portfolio[key])
    if as_json:
        console.print_json(json.dumps(metrics.to_dict(), default=str))
    else:
        console.print(_account_table(key, metrics))


if __name__ == "__main__":
    cli()
