"""Data models for trades, trade groups, and cycle summaries."""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Memecoin supply used to estimate market cap from a cycle's average price
ASSUMED_SUPPLY = Decimal("1000000000")


class TradeDirection(StrEnum):
    """Direction of a swap from the point of view of one tracked token."""

    BUY = "buy"
    SELL = "sell"
    NOT_INVOLVED = "not_involved"


class TradeType(StrEnum):
    """Trade type label reported by the trade history source."""

    BUY = "buy"
    SELL = "sell"
    SWAP = "swap"


class TokenInfo(BaseModel):
    """
    Token information for one side of a swap.

    Attributes
    ----------
    address : str
        Token mint/contract address
    symbol : str
        Token symbol (e.g., 'SOL', 'USDC')
    decimals : int
        Number of decimal places
    name : str, optional
        Full token name
    logo_uri : str, optional
        Token logo URL
    market_cap : Decimal, optional
        Market capitalisation in USD

    """

    model_config = ConfigDict(frozen=True)

    address: str
    symbol: str
    decimals: int = Field(ge=0)
    name: str | None = None
    logo_uri: str | None = None
    market_cap: Decimal | None = None


class Trade(BaseModel):
    """
    A single swap taken from the wallet trade history.

    Trades are immutable; the same instance may be referenced from the
    buckets of both tokens it touches.

    Attributes
    ----------
    signature : str
        Transaction signature (unique id)
    timestamp : int
        Unix timestamp in seconds
    token_in : TokenInfo
        Token given away by the wallet
    token_out : TokenInfo
        Token received by the wallet
    amount_in : Decimal
        Amount of ``token_in`` given away
    amount_out : Decimal
        Amount of ``token_out`` received
    price_usd : Decimal
        Unit price in USD
    value_usd : Decimal
        Total swap value in USD
    dex : str
        Venue label (e.g., 'Jupiter', 'Raydium')
    maker : str, optional
        Wallet that executed the swap
    type : TradeType
        Trade type label from the source

    """

    model_config = ConfigDict(frozen=True)

    signature: str
    timestamp: int
    token_in: TokenInfo
    token_out: TokenInfo
    amount_in: Decimal = Field(ge=0, allow_inf_nan=False)
    amount_out: Decimal = Field(ge=0, allow_inf_nan=False)
    price_usd: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)
    value_usd: Decimal = Field(ge=0, allow_inf_nan=False)
    dex: str = ""
    maker: str | None = None
    type: TradeType = TradeType.SWAP


class TradeGroup(BaseModel):
    """
    One position cycle of a token: opened from a flat balance, closed when
    the balance returns to dust.

    Attributes
    ----------
    trade_number : int
        Cycle number for this token (starts at 1)
    token : str
        Token symbol
    token_address : str
        Token address
    buys : list[Trade]
        Buy transactions in chronological order
    sells : list[Trade]
        Sell transactions in chronological order
    total_buy_amount : Decimal
        Total tokens bought
    total_sell_amount : Decimal
        Total tokens sold
    total_buy_value : Decimal
        Total USD spent
    total_sell_value : Decimal
        Total USD received
    start_balance : Decimal
        Token balance carried into the cycle
    end_balance : Decimal
        Token balance after the last applied trade
    profit_loss : Decimal
        Realized P/L in USD (``total_sell_value - total_buy_value``)
    is_complete : bool
        True once the balance is back under the dust threshold
    start_date : int
        Timestamp of the first transaction
    end_date : int | None
        Timestamp of the closing transaction (complete cycles only)
    duration : int | None
        ``end_date - start_date`` in seconds (complete cycles only)

    """

    trade_number: int
    token: str
    token_address: str
    buys: list[Trade] = Field(default_factory=list)
    sells: list[Trade] = Field(default_factory=list)
    total_buy_amount: Decimal = Decimal("0")
    total_sell_amount: Decimal = Decimal("0")
    total_buy_value: Decimal = Decimal("0")
    total_sell_value: Decimal = Decimal("0")
    start_balance: Decimal = Decimal("0")
    end_balance: Decimal = Decimal("0")
    profit_loss: Decimal = Decimal("0")
    is_complete: bool = False
    start_date: int
    end_date: int | None = None
    duration: int | None = None

    @property
    def has_activity(self) -> bool:
        """Whether at least one buy or sell was applied."""
        return bool(self.buys or self.sells)

    @property
    def average_buy_price(self) -> Decimal:
        """USD paid per token bought, 0 if nothing was bought."""
        if self.total_buy_amount == 0:
            return Decimal("0")
        return self.total_buy_value / self.total_buy_amount

    @property
    def average_sell_price(self) -> Decimal:
        """USD received per token sold, 0 if nothing was sold."""
        if self.total_sell_amount == 0:
            return Decimal("0")
        return self.total_sell_value / self.total_sell_amount

    @property
    def estimated_market_cap(self) -> Decimal:
        """Market cap implied by the average price and ``ASSUMED_SUPPLY``."""
        price = self.average_buy_price or self.average_sell_price
        return price * ASSUMED_SUPPLY

    def has_amount_mismatch(self, dust_threshold: Decimal) -> bool:
        """
        Check whether a complete cycle sold a different amount than it bought.

        A mismatch usually means part of the position arrived or left through
        a transfer rather than a swap, so the P/L is not the whole story.

        Parameters
        ----------
        dust_threshold : Decimal
            Largest difference that still counts as a match

        Returns
        -------
        bool
            True if the cycle is complete and the bought and sold amounts
            differ by more than ``dust_threshold``

        """
        return self.is_complete and abs(self.total_buy_amount - self.total_sell_amount) > dust_threshold


class TradeCycle(BaseModel):
    """
    All trade groups of a single token.

    Attributes
    ----------
    token : str
        Token symbol
    token_address : str
        Token address
    trade_groups : list[TradeGroup]
        Cycles ordered by ``trade_number``

    """

    token: str
    token_address: str
    trade_groups: list[TradeGroup]


class FlattenedTrade(TradeGroup):
    """Trade group with a number that is unique across all tokens."""

    global_trade_number: int


class CycleSummary(BaseModel):
    """
    Aggregated statistics over a set of trade groups.

    Attributes
    ----------
    total_cycles : int
        Number of cycles
    completed_cycles : int
        Cycles whose balance returned to dust
    active_cycles : int
        Cycles that are still open
    profitable_cycles : int
        Cycles with a positive P/L
    win_rate : Decimal
        ``profitable_cycles / total_cycles`` as a percentage
    total_profit_loss : Decimal
        Sum of P/L over all cycles
    total_buy_value : Decimal
        Sum of USD spent
    total_sell_value : Decimal
        Sum of USD received

    """

    total_cycles: int = 0
    completed_cycles: int = 0
    active_cycles: int = 0
    profitable_cycles: int = 0
    win_rate: Decimal = Decimal("0")
    total_profit_loss: Decimal = Decimal("0")
    total_buy_value: Decimal = Decimal("0")
    total_sell_value: Decimal = Decimal("0")


class CycleReport(BaseModel):
    """
    Full analysis result for one trade history.

    Attributes
    ----------
    cycles : list[TradeCycle]
        Per-token view
    flattened : list[FlattenedTrade]
        Unified newest-first view
    summary : CycleSummary
        Aggregated statistics over ``flattened``
    dust_threshold : Decimal
        Threshold the cycles were built with

    """

    cycles: list[TradeCycle] = Field(default_factory=list)
    flattened: list[FlattenedTrade] = Field(default_factory=list)
    summary: CycleSummary = Field(default_factory=CycleSummary)
    dust_threshold: Decimal = Decimal("100")
