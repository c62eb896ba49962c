"""Buy/sell classification of a swap for one tracked token."""

from trade_cycle_tracker.core.models import Trade, TradeDirection


def classify_direction(trade: Trade, token_address: str) -> TradeDirection:
    """
    Classify a trade from the point of view of one token.

    Receiving the token (``token_out``) is a buy, giving it away
    (``token_in``) is a sell. A swap with the token on both sides is
    ambiguous and reported as not involved.

    Parameters
    ----------
    trade : Trade
        Trade to classify
    token_address : str
        Address of the tracked token

    Returns
    -------
    TradeDirection
        BUY, SELL or NOT_INVOLVED

    """
    is_token_out = trade.token_out.address == token_address
    is_token_in = trade.token_in.address == token_address

    if is_token_out and is_token_in:
        return TradeDirection.NOT_INVOLVED
    if is_token_out:
        return TradeDirection.BUY
    if is_token_in:
        return TradeDirection.SELL
    return TradeDirection.NOT_INVOLVED
