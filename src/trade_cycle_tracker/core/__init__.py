"""Core functionality including models, classification, cycle building, and flattening."""

from trade_cycle_tracker.core.aggregator import TradeCycleEngine, apply_wallet_balances, summarize_cycles
from trade_cycle_tracker.core.builder import CycleBuilder, calculate_trade_cycles
from trade_cycle_tracker.core.classifier import classify_direction
from trade_cycle_tracker.core.filters import is_excluded_token
from trade_cycle_tracker.core.flattener import flatten_trade_cycles
from trade_cycle_tracker.core.grouper import group_trades_by_token
from trade_cycle_tracker.core.models import (
    CycleReport,
    CycleSummary,
    FlattenedTrade,
    TokenInfo,
    Trade,
    TradeCycle,
    TradeDirection,
    TradeGroup,
    TradeType,
)

__all__ = [
    "CycleBuilder",
    "CycleReport",
    "CycleSummary",
    "FlattenedTrade",
    "TokenInfo",
    "Trade",
    "TradeCycle",
    "TradeCycleEngine",
    "TradeDirection",
    "TradeGroup",
    "TradeType",
    "apply_wallet_balances",
    "calculate_trade_cycles",
    "classify_direction",
    "flatten_trade_cycles",
    "group_trades_by_token",
    "is_excluded_token",
    "summarize_cycles",
]
