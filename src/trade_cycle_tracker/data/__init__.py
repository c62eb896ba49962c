"""Engine configuration and trade history loading."""

from trade_cycle_tracker.data.config import (
    CONFIG_PATH,
    ConfigError,
    TradeCycleError,
    get_dust_threshold,
    get_excluded_tokens,
    load_engine_config,
    validate_dust_threshold,
)
from trade_cycle_tracker.data.loader import (
    TradeDataError,
    load_balances,
    load_trades,
    parse_trade,
)

__all__ = [
    "CONFIG_PATH",
    "ConfigError",
    "TradeCycleError",
    "TradeDataError",
    "get_dust_threshold",
    "get_excluded_tokens",
    "load_balances",
    "load_engine_config",
    "load_trades",
    "parse_trade",
    "validate_dust_threshold",
]
