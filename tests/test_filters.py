"""Tests for the settlement token filter."""

import pytest

from trade_cycle_tracker.core.filters import is_excluded_token


@pytest.mark.parametrize("symbol", ["SOL", "WSOL", "USDC", "USDT", "USDS", "PYUSD", "DAI"])
def test_settlement_tokens_are_excluded(symbol):
    """Native SOL and stablecoins are never tracked."""
    assert is_excluded_token(symbol)


@pytest.mark.parametrize("symbol", ["sol", "Usdc", "msol", "MSOL", "JitoSOL", "wrapped sol", "Wrapped SOL"])
def test_matching_is_case_insensitive(symbol):
    """Symbols match regardless of case, including mixed-case config entries."""
    assert is_excluded_token(symbol)


@pytest.mark.parametrize("symbol", ["BONK", "WIF", "TOKEN", "SOLANA"])
def test_regular_tokens_are_tracked(symbol):
    """Other tokens are not excluded."""
    assert not is_excluded_token(symbol)


def test_custom_exclusion_list():
    """An explicit list replaces the configured one."""
    assert is_excluded_token("bonk", excluded=["BONK"])
    assert not is_excluded_token("USDC", excluded=["BONK"])
    assert not is_excluded_token("USDC", excluded=[])
