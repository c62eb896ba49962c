"""Trade cycle engine orchestrating grouping, cycle building, flattening, and summaries."""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from trade_cycle_tracker.core.builder import CycleBuilder
from trade_cycle_tracker.core.flattener import flatten_trade_cycles
from trade_cycle_tracker.core.models import (
    CycleReport,
    CycleSummary,
    FlattenedTrade,
    Trade,
    TradeCycle,
    TradeGroup,
)
from trade_cycle_tracker.data.config import get_dust_threshold, validate_dust_threshold

logger = logging.getLogger(__name__)


def summarize_cycles(trade_groups: Iterable[TradeGroup]) -> CycleSummary:
    """
    Build aggregated statistics over trade groups.

    Parameters
    ----------
    trade_groups : Iterable[TradeGroup]
        Groups to summarize (flattened or per-token)

    Returns
    -------
    CycleSummary
        Counts, win rate and USD totals

    """
    total = 0
    completed = 0
    profitable = 0
    total_profit_loss = Decimal("0")
    total_buy_value = Decimal("0")
    total_sell_value = Decimal("0")

    for group in trade_groups:
        total += 1
        if group.is_complete:
            completed += 1
        if group.profit_loss > 0:
            profitable += 1
        total_profit_loss += group.profit_loss
        total_buy_value += group.total_buy_value
        total_sell_value += group.total_sell_value

    win_rate = Decimal(profitable) / Decimal(total) * 100 if total else Decimal("0")

    return CycleSummary(
        total_cycles=total,
        completed_cycles=completed,
        active_cycles=total - completed,
        profitable_cycles=profitable,
        win_rate=win_rate,
        total_profit_loss=total_profit_loss,
        total_buy_value=total_buy_value,
        total_sell_value=total_sell_value,
    )


def apply_wallet_balances(
    entries: Iterable[FlattenedTrade],
    balances: Mapping[str, Decimal],
    dust_threshold: Decimal | None = None,
) -> list[FlattenedTrade]:
    """
    Overlay authoritative wallet balances on flattened trade groups.

    The result is meant for display. A token that is absent from the wallet,
    or held below the dust threshold, is shown as complete; otherwise the
    wallet balance replaces the trade-derived end balance. The input entries
    are left untouched.

    Parameters
    ----------
    entries : Iterable[FlattenedTrade]
        Flattened groups from the engine
    balances : Mapping[str, Decimal]
        Raw wallet balance per token address
    dust_threshold : Decimal | None
        Balances below this count as sold out. Uses the configured
        dust_threshold if None.

    Returns
    -------
    list[FlattenedTrade]
        Updated copies, in input order

    Raises
    ------
    ConfigError
        If the dust threshold is not a finite positive number

    """
    threshold = get_dust_threshold() if dust_threshold is None else validate_dust_threshold(dust_threshold)
    updated = []

    for entry in entries:
        balance = balances.get(entry.token_address)

        if balance is None or balance < threshold:
            updated.append(
                entry.model_copy(
                    update={
                        "is_complete": True,
                        "end_balance": Decimal(balance or 0),
                        "end_date": entry.end_date if entry.end_date is not None else entry.start_date,
                        "duration": entry.duration if entry.duration is not None else 0,
                    }
                )
            )
        else:
            updated.append(entry.model_copy(update={"end_balance": Decimal(balance)}))

    return updated


class TradeCycleEngine:
    """
    Runs the full trade cycle analysis for one wallet's trade history.

    Workflow:
    1. Group trades by every token they touch
    2. Build trade groups per token (settlement tokens skipped)
    3. Flatten groups into one newest-first list
    4. Optionally overlay wallet balances for display
    5. Summarize

    Instances hold only configuration, so one engine can serve many
    wallets.

    Parameters
    ----------
    dust_threshold : Decimal | None
        Balances below this many raw units count as zero
    excluded_tokens : Iterable[str] | None
        Settlement token symbols to skip

    """

    def __init__(
        self,
        dust_threshold: Decimal | None = None,
        excluded_tokens: Iterable[str] | None = None,
    ) -> None:
        self.builder = CycleBuilder(dust_threshold=dust_threshold, excluded_tokens=excluded_tokens)

    @property
    def dust_threshold(self) -> Decimal:
        """Balance below which a position counts as closed."""
        return self.builder.dust_threshold

    def calculate(self, trades: Iterable[Trade] | None) -> list[TradeCycle]:
        """
        Build per-token trade cycles.

        Parameters
        ----------
        trades : Iterable[Trade] | None
            Deduplicated trade history in any order

        Returns
        -------
        list[TradeCycle]
            One entry per tracked token

        """
        if not trades:
            return []
        return self.builder.build_all(trades)

    def flatten(self, trade_cycles: Iterable[TradeCycle]) -> list[FlattenedTrade]:
        """Flatten per-token cycles into one newest-first list."""
        return flatten_trade_cycles(trade_cycles)

    def analyze(
        self,
        trades: Iterable[Trade] | None,
        balances: Mapping[str, Decimal] | None = None,
    ) -> CycleReport:
        """
        Run the full analysis.

        Parameters
        ----------
        trades : Iterable[Trade] | None
            Deduplicated trade history in any order
        balances : Mapping[str, Decimal] | None
            Authoritative wallet balances per token address, if known

        Returns
        -------
        CycleReport
            Per-token cycles, flattened list and summary

        """
        trade_cycles = self.calculate(trades)
        flattened = self.flatten(trade_cycles)

        if balances is not None:
            flattened = apply_wallet_balances(flattened, balances, self.dust_threshold)

        summary = summarize_cycles(flattened)
        logger.debug(
            "Analyzed %d tokens: %d cycles, %d active",
            len(trade_cycles),
            summary.total_cycles,
            summary.active_cycles,
        )

        return CycleReport(
            cycles=trade_cycles,
            flattened=flattened,
            summary=summary,
            dust_threshold=self.dust_threshold,
        )
