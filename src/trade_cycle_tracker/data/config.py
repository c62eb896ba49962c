"""Engine configuration loaded from engine.yaml."""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

CONFIG_PATH = Path(__file__).parent / "engine.yaml"


class TradeCycleError(Exception):
    """Base exception for trade cycle tracker errors."""


class ConfigError(TradeCycleError):
    """Exception raised for invalid engine configuration."""


def load_engine_config(path: Path | None = None) -> dict[str, Any]:
    """
    Load engine settings from engine.yaml.

    Parameters
    ----------
    path : Path | None
        Alternative configuration file. Uses the bundled engine.yaml if None.

    Returns
    -------
    dict[str, Any]
        Engine configuration with ``dust_threshold`` and ``excluded_tokens``

    Raises
    ------
    ConfigError
        If the file is missing required keys

    """
    path = path or CONFIG_PATH
    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    for key in ("dust_threshold", "excluded_tokens"):
        if key not in config:
            msg = f"Missing '{key}' in engine config {path}"
            raise ConfigError(msg)

    return config


def get_dust_threshold(path: Path | None = None) -> Decimal:
    """
    Get the balance below which a position counts as closed.

    Parameters
    ----------
    path : Path | None
        Alternative configuration file

    Returns
    -------
    Decimal
        Dust threshold in raw token units

    Raises
    ------
    ConfigError
        If the threshold is not a positive number

    """
    return validate_dust_threshold(load_engine_config(path)["dust_threshold"])


def validate_dust_threshold(value: Any) -> Decimal:
    """
    Convert a dust threshold to Decimal and check it is usable.

    Parameters
    ----------
    value : Any
        Threshold from a config file, the command line, or a caller

    Returns
    -------
    Decimal
        Dust threshold in raw token units

    Raises
    ------
    ConfigError
        If the threshold is not a finite positive number

    """
    try:
        threshold = Decimal(str(value))
    except InvalidOperation as e:
        msg = f"Invalid dust_threshold: {value!r}"
        raise ConfigError(msg) from e

    if not threshold.is_finite() or threshold <= 0:
        msg = f"dust_threshold must be a positive number, got {value!r}"
        raise ConfigError(msg)

    return threshold


def get_excluded_tokens(path: Path | None = None) -> frozenset[str]:
    """
    Get the upper-cased symbols of settlement tokens.

    Parameters
    ----------
    path : Path | None
        Alternative configuration file

    Returns
    -------
    frozenset[str]
        Excluded token symbols, upper-cased

    """
    symbols = load_engine_config(path)["excluded_tokens"] or []
    return frozenset(str(symbol).upper() for symbol in symbols)

