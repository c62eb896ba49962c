"""
Example script that replays a saved wallet trade history into trade cycles.

The trade file uses the same JSON shape as the wallet trades API. No network
access is needed.

Usage:
    python examples/replay_sample_trades.py [path/to/trades.json]
"""

import sys
from pathlib import Path

from rich.console import Console

from trade_cycle_tracker.cli.formatters import format_duration, format_value
from trade_cycle_tracker.core import TradeCycleEngine
from trade_cycle_tracker.data import load_trades

SAMPLE_FILE = Path(__file__).parent / "sample_trades.json"


def main() -> None:
    """Print every trade cycle found in the sample history."""
    console = Console()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else SAMPLE_FILE

    trades = load_trades(path)
    console.print(f"Loaded {len(trades)} trades from {path.name}")
    console.print()

    report = TradeCycleEngine().analyze(trades)

    for entry in report.flattened:
        status = "complete" if entry.is_complete else "active"
        console.print(f"#{entry.global_trade_number} {entry.token} cycle {entry.trade_number} ({status})")
        console.print(f"  Buys: {len(entry.buys)}  Sells: {len(entry.sells)}")
        console.print(f"  Spent: {format_value(entry.total_buy_value)}  Received: {format_value(entry.total_sell_value)}")
        console.print(f"  P/L: {format_value(entry.profit_loss)}")
        if entry.is_complete:
            console.print(f"  Held for: {format_duration(entry.duration)}")
        console.print()

    summary = report.summary
    console.print(f"Cycles: {summary.total_cycles} ({summary.active_cycles} active)")
    console.print(f"Win rate: {summary.win_rate:.0f}%")
    console.print(f"Total P/L: {format_value(summary.total_profit_loss)}")


if __name__ == "__main__":
    main()
