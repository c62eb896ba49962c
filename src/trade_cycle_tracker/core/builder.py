"""Trade cycle reconstruction from a token's trade history."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from trade_cycle_tracker.core.classifier import classify_direction
from trade_cycle_tracker.core.filters import is_excluded_token, normalize_symbols
from trade_cycle_tracker.core.grouper import group_trades_by_token, resolve_token_symbol
from trade_cycle_tracker.core.models import Trade, TradeCycle, TradeDirection, TradeGroup
from trade_cycle_tracker.data.config import get_dust_threshold, get_excluded_tokens, validate_dust_threshold

logger = logging.getLogger(__name__)


class CycleBuilder:
    """
    Walks a token's trades in time order and splits them into trade groups.

    A new group opens on the first trade of the token, and on every buy
    made while the running balance is effectively zero. A group is complete
    while its balance stays under the dust threshold.

    Parameters
    ----------
    dust_threshold : Decimal | None
        Balances below this many raw units count as zero. Uses the
        configured dust_threshold if None.
    excluded_tokens : Iterable[str] | None
        Settlement token symbols to skip. Uses the configured
        excluded_tokens if None.

    Raises
    ------
    ConfigError
        If the dust threshold is not a finite positive number

    """

    def __init__(
        self,
        dust_threshold: Decimal | None = None,
        excluded_tokens: Iterable[str] | None = None,
    ) -> None:
        if dust_threshold is None:
            self.dust_threshold = get_dust_threshold()
        else:
            self.dust_threshold = validate_dust_threshold(dust_threshold)
        self.excluded_tokens = get_excluded_tokens() if excluded_tokens is None else normalize_symbols(excluded_tokens)

    def is_effectively_zero(self, balance: Decimal) -> bool:
        """Check whether a balance is dust."""
        return abs(balance) < self.dust_threshold

    def build(self, token_address: str, trades: Iterable[Trade]) -> list[TradeGroup]:
        """
        Build the trade groups of one token.

        Parameters
        ----------
        token_address : str
            Address of the tracked token
        trades : Iterable[Trade]
            Trades touching the token, in any order

        Returns
        -------
        list[TradeGroup]
            Groups numbered from 1, oldest first. Empty if the token is a
            settlement token or no trade buys or sells it.

        """
        trades = list(trades)
        token_symbol = resolve_token_symbol(token_address, trades)
        if token_symbol is None:
            return []

        if is_excluded_token(token_symbol, self.excluded_tokens):
            logger.debug("Skipping settlement token %s (%s)", token_symbol, token_address)
            return []

        # Stable sort: trades sharing a timestamp keep their input order
        sorted_trades = sorted(trades, key=lambda t: t.timestamp)

        trade_groups: list[TradeGroup] = []
        current_group: TradeGroup | None = None
        running_balance = Decimal("0")
        trade_number = 1

        for trade in sorted_trades:
            direction = classify_direction(trade, token_address)
            if direction is TradeDirection.NOT_INVOLVED:
                continue

            if current_group is None or (
                self.is_effectively_zero(running_balance) and direction is TradeDirection.BUY
            ):
                # The previous group was already closed by the trade that left the dust balance
                current_group = TradeGroup(
                    trade_number=trade_number,
                    token=token_symbol,
                    token_address=token_address,
                    start_balance=running_balance,
                    start_date=trade.timestamp,
                )
                trade_number += 1
                trade_groups.append(current_group)

            running_balance = self._apply_trade(current_group, trade, direction, running_balance)

        if not any(group.has_activity for group in trade_groups):
            return []

        logger.debug("Built %d trade groups for %s", len(trade_groups), token_symbol)
        return trade_groups

    def _apply_trade(
        self,
        group: TradeGroup,
        trade: Trade,
        direction: TradeDirection,
        running_balance: Decimal,
    ) -> Decimal:
        """
        Add a buy or sell to a group and return the new running balance.

        Parameters
        ----------
        group : TradeGroup
            Group receiving the trade
        trade : Trade
            Trade to apply
        direction : TradeDirection
            BUY or SELL
        running_balance : Decimal
            Token balance before the trade

        Returns
        -------
        Decimal
            Token balance after the trade

        """
        if direction is TradeDirection.BUY:
            group.buys.append(trade)
            group.total_buy_amount += trade.amount_out
            group.total_buy_value += trade.value_usd
            running_balance += trade.amount_out
        else:
            group.sells.append(trade)
            group.total_sell_amount += trade.amount_in
            group.total_sell_value += trade.value_usd
            running_balance -= trade.amount_in

        group.end_balance = running_balance
        group.profit_loss = group.total_sell_value - group.total_buy_value
        self._update_completion(group, trade.timestamp)
        return running_balance

    def _update_completion(self, group: TradeGroup, timestamp: int) -> None:
        # end_date and duration only exist while the group is complete
        if self.is_effectively_zero(group.end_balance):
            group.is_complete = True
            group.end_date = timestamp
            group.duration = timestamp - group.start_date
        else:
            group.is_complete = False
            group.end_date = None
            group.duration = None

    def build_all(self, trades: Iterable[Trade]) -> list[TradeCycle]:
        """
        Build trade cycles for every token touched by the trades.

        Parameters
        ----------
        trades : Iterable[Trade]
            Trade history in any order

        Returns
        -------
        list[TradeCycle]
            One entry per tracked token, in order of first appearance

        """
        token_map = group_trades_by_token(trades)
        logger.debug("Grouped trades into %d token buckets", len(token_map))

        trade_cycles = []
        for token_address, token_trades in token_map.items():
            trade_groups = self.build(token_address, token_trades)
            if trade_groups:
                trade_cycles.append(
                    TradeCycle(
                        token=trade_groups[0].token,
                        token_address=token_address,
                        trade_groups=trade_groups,
                    )
                )

        return trade_cycles


def calculate_trade_cycles(
    trades: Iterable[Trade] | None,
    dust_threshold: Decimal | None = None,
    excluded_tokens: Iterable[str] | None = None,
) -> list[TradeCycle]:
    """
    Reconstruct trade cycles for every token in a trade history.

    Parameters
    ----------
    trades : Iterable[Trade] | None
        Trade history in any order, already deduplicated by signature
    dust_threshold : Decimal | None
        Balances below this many raw units count as zero
    excluded_tokens : Iterable[str] | None
        Settlement token symbols to skip

    Returns
    -------
    list[TradeCycle]
        One entry per tracked token, in order of first appearance

    """
    if not trades:
        return []

    builder = CycleBuilder(dust_threshold=dust_threshold, excluded_tokens=excluded_tokens)
    return builder.build_all(trades)
