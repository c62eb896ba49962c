"""Pytest configuration and shared fixtures for trade-cycle-tracker tests."""

from decimal import Decimal

import pytest

from trade_cycle_tracker.core.models import TokenInfo, Trade


@pytest.fixture
def make_trade():
    """Factory for swap trades in the shape returned by the wallet trades API."""

    def _make_trade(
        timestamp: int,
        token_in_address: str,
        token_in_symbol: str,
        token_out_address: str,
        token_out_symbol: str,
        amount_in,
        amount_out,
        value_usd,
        signature: str | None = None,
    ) -> Trade:
        amount_out = Decimal(str(amount_out))
        value_usd = Decimal(str(value_usd))
        return Trade(
            signature=signature or f"mock_sig_{timestamp}",
            timestamp=timestamp,
            token_in=TokenInfo(
                address=token_in_address,
                symbol=token_in_symbol,
                name=token_in_symbol,
                decimals=9,
            ),
            token_out=TokenInfo(
                address=token_out_address,
                symbol=token_out_symbol,
                name=token_out_symbol,
                decimals=9,
            ),
            amount_in=Decimal(str(amount_in)),
            amount_out=amount_out,
            price_usd=value_usd / amount_out if amount_out else Decimal("0"),
            value_usd=value_usd,
            dex="Jupiter",
            maker="test_wallet",
        )

    return _make_trade
