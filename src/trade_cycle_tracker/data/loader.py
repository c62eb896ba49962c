"""Trade history and wallet balance loader."""

import json
import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from trade_cycle_tracker.core.models import TokenInfo, Trade
from trade_cycle_tracker.data.config import TradeCycleError

logger = logging.getLogger(__name__)


class TradeDataError(TradeCycleError):
    """Exception raised for unreadable or invalid trade history input."""


def _parse_token(raw: Mapping[str, Any]) -> TokenInfo:
    return TokenInfo(
        address=raw["address"],
        symbol=raw.get("symbol", ""),
        decimals=raw.get("decimals", 0),
        name=raw.get("name"),
        logo_uri=raw.get("logoURI"),
        market_cap=raw.get("marketCap"),
    )


def _parse_swap_side(side: Mapping[str, Any]) -> TokenInfo:
    # Trades API nests token metadata under "token" next to the mint address
    token = side["token"]
    return TokenInfo(
        address=side["address"],
        symbol=token.get("symbol", ""),
        decimals=token.get("decimals", 0),
        name=token.get("name"),
        logo_uri=token.get("image"),
    )


def _parse_wallet_trade(raw: Mapping[str, Any]) -> Trade:
    return Trade(
        signature=raw["signature"],
        timestamp=raw["timestamp"],
        token_in=_parse_token(raw["tokenIn"]),
        token_out=_parse_token(raw["tokenOut"]),
        amount_in=raw["amountIn"],
        amount_out=raw["amountOut"],
        price_usd=raw.get("priceUSD", 0),
        value_usd=raw["valueUSD"],
        dex=raw.get("dex", ""),
        maker=raw.get("maker"),
        type=raw.get("type", "swap"),
    )


def _parse_tracker_trade(raw: Mapping[str, Any]) -> Trade:
    return Trade(
        signature=raw["tx"],
        timestamp=int(raw["time"]) // 1000,
        token_in=_parse_swap_side(raw["from"]),
        token_out=_parse_swap_side(raw["to"]),
        amount_in=raw["from"]["amount"],
        amount_out=raw["to"]["amount"],
        price_usd=raw["price"]["usd"],
        value_usd=raw["volume"]["usd"],
        dex=raw.get("program") or "Unknown",
        maker=raw.get("wallet"),
        type=raw.get("type") or "swap",
    )


def parse_trade(raw: Mapping[str, Any]) -> Trade:
    """
    Convert one trade record into a Trade model.

    Three shapes are accepted: the camelCase wallet trade records
    (``tokenIn``, ``amountOut``, ``valueUSD``, ...), raw trades API records
    (``tx``, ``time`` in milliseconds, ``from``/``to`` with nested ``token``
    metadata), and the snake_case shape produced by ``Trade.model_dump``.

    Parameters
    ----------
    raw : Mapping[str, Any]
        Raw trade record

    Returns
    -------
    Trade
        Validated trade

    Raises
    ------
    TradeDataError
        If the record is not an object, required fields are missing, or
        amounts are negative or non-finite

    """
    if not isinstance(raw, Mapping):
        msg = f"Trade record must be an object, got {type(raw).__name__}"
        raise TradeDataError(msg)

    signature = raw.get("signature") or raw.get("tx") or "<unknown>"
    try:
        if "tokenIn" in raw:
            return _parse_wallet_trade(raw)
        if "from" in raw and "to" in raw:
            return _parse_tracker_trade(raw)
        return Trade.model_validate(dict(raw))
    except KeyError as e:
        msg = f"Trade {signature} is missing field {e}"
        raise TradeDataError(msg) from e
    except (ValidationError, TypeError, ValueError) as e:
        msg = f"Invalid trade {signature}: {e}"
        raise TradeDataError(msg) from e


def load_trades(path: Path) -> list[Trade]:
    """
    Load a trade history from a JSON file.

    The file holds either a list of trade records or an object with a
    ``trades`` list. No deduplication by signature is performed.

    Parameters
    ----------
    path : Path
        JSON file path

    Returns
    -------
    list[Trade]
        Trades in file order

    Raises
    ------
    TradeDataError
        If the file cannot be parsed or a record is invalid

    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Could not read trade history {path}: {e}"
        raise TradeDataError(msg) from e

    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        msg = f"Trade history {path} must contain a list of trades"
        raise TradeDataError(msg)

    trades = [parse_trade(record) for record in data]
    logger.debug("Loaded %d trades from %s", len(trades), path)
    return trades


def load_balances(path: Path) -> dict[str, Decimal]:
    """
    Load wallet token balances from a JSON file.

    Accepts either an ``{address: balance}`` object or a list of wallet
    token records with ``address`` and ``balance`` keys.

    Parameters
    ----------
    path : Path
        JSON file path

    Returns
    -------
    dict[str, Decimal]
        Mapping of token address to raw balance

    Raises
    ------
    TradeDataError
        If the file cannot be parsed or a balance is not a finite number

    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            balances = {address: Decimal(str(balance)) for address, balance in data.items()}
        else:
            balances = {token["address"]: Decimal(str(token["balance"])) for token in data}
    except (OSError, json.JSONDecodeError, KeyError, TypeError, InvalidOperation) as e:
        msg = f"Could not read wallet balances {path}: {e}"
        raise TradeDataError(msg) from e

    for address, balance in balances.items():
        if not balance.is_finite():
            msg = f"Wallet balance for {address} must be a finite number, got {balance}"
            raise TradeDataError(msg)

    return balances
