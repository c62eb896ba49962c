"""Grouping of trades by the tokens they touch."""

from collections.abc import Iterable

from trade_cycle_tracker.core.models import Trade


def group_trades_by_token(trades: Iterable[Trade]) -> dict[str, list[Trade]]:
    """
    Bucket trades under every token address they touch.

    Each trade is registered under its ``token_out`` address and, when it
    differs, under its ``token_in`` address as well. Both buckets hold the
    same Trade instance. Buckets are ordered by first appearance.

    Parameters
    ----------
    trades : Iterable[Trade]
        Trades in any order

    Returns
    -------
    dict[str, list[Trade]]
        Mapping of token address to the trades involving it

    """
    token_map: dict[str, list[Trade]] = {}

    for trade in trades:
        out_address = trade.token_out.address
        in_address = trade.token_in.address

        token_map.setdefault(out_address, []).append(trade)
        if in_address != out_address:
            token_map.setdefault(in_address, []).append(trade)

    return token_map


def resolve_token_symbol(token_address: str, trades: Iterable[Trade]) -> str | None:
    """
    Find the display symbol of a token from the first trade that mentions it.

    Parameters
    ----------
    token_address : str
        Token address
    trades : Iterable[Trade]
        Trades to search

    Returns
    -------
    str | None
        Token symbol, or None if no trade mentions the token

    """
    for trade in trades:
        if trade.token_out.address == token_address:
            return trade.token_out.symbol
        if trade.token_in.address == token_address:
            return trade.token_in.symbol
    return None
