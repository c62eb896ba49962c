"""Settlement token filter."""

from collections.abc import Iterable

from trade_cycle_tracker.data.config import get_excluded_tokens


def normalize_symbols(symbols: Iterable[str]) -> frozenset[str]:
    """Upper-case a collection of token symbols for membership tests."""
    return frozenset(symbol.upper() for symbol in symbols)


def is_excluded_token(symbol: str, excluded: Iterable[str] | None = None) -> bool:
    """
    Check whether a token is a settlement/pricing token.

    Native SOL, its wrapped and liquid-staked variants, and USD stablecoins
    only ever form the price leg of a swap and never get cycles of their own.

    Parameters
    ----------
    symbol : str
        Token symbol, matched case-insensitively
    excluded : Iterable[str] | None
        Symbols to exclude. Uses the configured excluded_tokens if None.

    Returns
    -------
    bool
        True if the token must not be tracked

    """
    excluded_symbols = get_excluded_tokens() if excluded is None else normalize_symbols(excluded)
    return symbol.upper() in excluded_symbols
