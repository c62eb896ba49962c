"""Merging of per-token trade cycles into one numbered, date-sorted list."""

from collections.abc import Iterable

from trade_cycle_tracker.core.models import FlattenedTrade, TradeCycle


def flatten_trade_cycles(trade_cycles: Iterable[TradeCycle] | None) -> list[FlattenedTrade]:
    """
    Flatten trade groups across tokens and sort them newest first.

    Global numbers are assigned in enumeration order (token order, then
    trade number) before sorting, so they follow first appearance of each
    token rather than dates. Groups with the same start date keep that order.

    Parameters
    ----------
    trade_cycles : Iterable[TradeCycle] | None
        Per-token cycles

    Returns
    -------
    list[FlattenedTrade]
        All groups, sorted by ``start_date`` descending

    """
    if not trade_cycles:
        return []

    all_trades = []
    global_trade_number = 1

    for token_cycle in trade_cycles:
        for trade_group in token_cycle.trade_groups:
            all_trades.append(FlattenedTrade(**dict(trade_group), global_trade_number=global_trade_number))
            global_trade_number += 1

    return sorted(all_trades, key=lambda t: t.start_date, reverse=True)
