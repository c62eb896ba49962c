"""CLI for trade cycle tracker."""

import json
import logging
from decimal import Decimal
from enum import StrEnum
from pathlib import Path

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.traceback import install

from trade_cycle_tracker.cli.formatters import (
    format_duration,
    format_market_cap,
    format_percentage,
    format_price,
    format_time,
    format_token_amount,
    format_value,
)
from trade_cycle_tracker.core import TradeCycleEngine
from trade_cycle_tracker.core.models import CycleReport, CycleSummary, FlattenedTrade, TradeCycle
from trade_cycle_tracker.data import TradeCycleError, get_excluded_tokens, load_balances, load_trades

# Install rich traceback handler
install(show_locals=True)

app = typer.Typer(
    name="trade-cycle-tracker",
    help="Reconstruct trade cycles and realized profit/loss from a wallet's swap history",
    add_completion=False,
)

console = Console()


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _configure_logging(debug: bool) -> None:
    """Route library logging through rich when debug output is requested."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def _status(is_complete: bool, mismatch: bool = False) -> str:
    if mismatch:
        return "[red]Mismatch[/red]"
    return "[green]Complete[/green]" if is_complete else "[yellow]Active[/yellow]"


def _pnl(amount: Decimal) -> str:
    style = "green" if amount >= 0 else "red"
    sign = "+" if amount >= 0 else ""
    return f"[{style}]{sign}{format_value(amount)}[/{style}]"


def _run_engine(
    trades_file: Path,
    balances_file: Path | None,
    dust_threshold: float | None,
    debug: bool,
) -> CycleReport:
    """
    Load input files and run the trade cycle engine.

    Raises
    ------
    typer.Exit
        If the input cannot be loaded

    """
    _configure_logging(debug)

    try:
        trades = load_trades(trades_file)
        balances = load_balances(balances_file) if balances_file else None
        threshold = Decimal(str(dust_threshold)) if dust_threshold is not None else None
        engine = TradeCycleEngine(dust_threshold=threshold)
        return engine.analyze(trades, balances=balances)
    except TradeCycleError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if debug:
            raise
        raise typer.Exit(1) from e


@app.command()
def cycles(
    trades_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with wallet trades"),
    flat: bool = typer.Option(False, "--flat", help="Show one newest-first list instead of grouping by token"),
    balances_file: Path | None = typer.Option(
        None, "--balances", "-b", exists=True, dir_okay=False, help="JSON file with current wallet balances"
    ),
    dust_threshold: float | None = typer.Option(
        None, "--dust-threshold", click_type=click.FloatRange(min=0, min_open=True), help="Raw balance below which a position counts as closed"
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-f",
        help="Output format",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Show the trade cycles found in a wallet's trade history.

    Examples:

        # Cycles grouped by token
        trade-cycle-tracker cycles trades.json

        # Newest-first list across all tokens
        trade-cycle-tracker cycles trades.json --flat

        # Output as JSON
        trade-cycle-tracker cycles trades.json --format json
    """
    report = _run_engine(trades_file, balances_file, dust_threshold, debug)

    if format == OutputFormat.JSON:
        data = [entry.model_dump(mode="json") for entry in (report.flattened if flat else report.cycles)]
        console.print(json.dumps(data, indent=2), soft_wrap=True, markup=False, highlight=False)
    elif flat:
        _output_flat_table(report.flattened, report.dust_threshold)
    else:
        _output_token_tables(report.cycles, report.dust_threshold)


@app.command()
def summary(
    trades_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with wallet trades"),
    balances_file: Path | None = typer.Option(
        None, "--balances", "-b", exists=True, dir_okay=False, help="JSON file with current wallet balances"
    ),
    dust_threshold: float | None = typer.Option(
        None, "--dust-threshold", click_type=click.FloatRange(min=0, min_open=True), help="Raw balance below which a position counts as closed"
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-f",
        help="Output format",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show win rate and profit/loss totals across all trade cycles."""
    report = _run_engine(trades_file, balances_file, dust_threshold, debug)

    if format == OutputFormat.JSON:
        data = report.summary.model_dump(mode="json")
        console.print(json.dumps(data, indent=2), soft_wrap=True, markup=False, highlight=False)
    else:
        _output_summary(report.summary)


@app.command()
def list_excluded() -> None:
    """List settlement tokens that never get trade cycles."""
    table = Table(title="Excluded Tokens", show_header=True, header_style="bold magenta")
    table.add_column("Symbol", style="cyan")

    for symbol in sorted(get_excluded_tokens()):
        table.add_row(symbol)

    console.print(table)


def _output_token_tables(trade_cycles: list[TradeCycle], dust_threshold: Decimal) -> None:
    """Output one rich table per token."""
    if not trade_cycles:
        console.print("\n[yellow]No trade cycles found[/yellow]")
        return

    for token_cycle in trade_cycles:
        table = Table(
            title=f"{token_cycle.token} ({token_cycle.token_address[:6]}...{token_cycle.token_address[-4:]})",
            show_header=True,
            header_style="bold magenta",
        )

        table.add_column("#", style="cyan", justify="right")
        table.add_column("Status")
        table.add_column("Started", style="blue")
        table.add_column("Bought", justify="right")
        table.add_column("Sold", justify="right")
        table.add_column("Balance", justify="right")
        table.add_column("Avg Buy", justify="right")
        table.add_column("Avg Sell", justify="right")
        table.add_column("Spent", justify="right")
        table.add_column("Received", justify="right")
        table.add_column("P/L", justify="right")
        table.add_column("Duration", style="dim", justify="right")

        for group in token_cycle.trade_groups:
            table.add_row(
                str(group.trade_number),
                _status(group.is_complete, group.has_amount_mismatch(dust_threshold)),
                format_time(group.start_date),
                format_token_amount(group.total_buy_amount),
                format_token_amount(group.total_sell_amount),
                format_token_amount(group.end_balance),
                format_price(group.average_buy_price),
                format_price(group.average_sell_price),
                format_value(group.total_buy_value),
                format_value(group.total_sell_value),
                _pnl(group.profit_loss),
                format_duration(group.duration) if group.is_complete else "-",
            )

        console.print("\n")
        console.print(table)

    console.print("\n")


def _output_flat_table(entries: list[FlattenedTrade], dust_threshold: Decimal) -> None:
    """Output all trade cycles as one newest-first table."""
    if not entries:
        console.print("\n[yellow]No trade cycles found[/yellow]")
        return

    table = Table(title="Trade Cycles", show_header=True, header_style="bold magenta")

    table.add_column("Trade", style="cyan", justify="right")
    table.add_column("Token", style="green")
    table.add_column("Cycle", justify="right")
    table.add_column("Status")
    table.add_column("Started", style="blue")
    table.add_column("Buys", justify="right")
    table.add_column("Sells", justify="right")
    table.add_column("Avg Buy", justify="right")
    table.add_column("Avg Sell", justify="right")
    table.add_column("Est. MC", justify="right")
    table.add_column("P/L", justify="right")
    table.add_column("Duration", style="dim", justify="right")

    for entry in entries:
        table.add_row(
            f"#{entry.global_trade_number}",
            entry.token,
            str(entry.trade_number),
            _status(entry.is_complete, entry.has_amount_mismatch(dust_threshold)),
            format_time(entry.start_date),
            str(len(entry.buys)),
            str(len(entry.sells)),
            format_price(entry.average_buy_price),
            format_price(entry.average_sell_price),
            format_market_cap(entry.estimated_market_cap),
            _pnl(entry.profit_loss),
            format_duration(entry.duration) if entry.is_complete else "-",
        )

    console.print("\n")
    console.print(table)
    console.print("\n")


def _output_summary(cycle_summary: CycleSummary) -> None:
    """Output aggregated statistics."""
    summary_table = Table(show_header=False, box=None)
    summary_table.add_column("Label", style="bold")
    summary_table.add_column("Value", style="bold green")

    summary_table.add_row("Total Trades:", str(cycle_summary.total_cycles))
    summary_table.add_row("Completed:", str(cycle_summary.completed_cycles))
    summary_table.add_row("Active:", str(cycle_summary.active_cycles))
    summary_table.add_row("Win Rate:", f"{cycle_summary.win_rate:.0f}%")
    summary_table.add_row("Total P/L:", _pnl(cycle_summary.total_profit_loss))
    summary_table.add_row("", "")
    summary_table.add_row("Total Spent:", format_value(cycle_summary.total_buy_value))
    summary_table.add_row("Total Received:", format_value(cycle_summary.total_sell_value))

    if cycle_summary.total_buy_value > 0:
        roi = cycle_summary.total_profit_loss / cycle_summary.total_buy_value * 100
        summary_table.add_row("Return:", format_percentage(roi))

    console.print("\n")
    console.print(summary_table)
    console.print("\n")


if __name__ == "__main__":
    app()
