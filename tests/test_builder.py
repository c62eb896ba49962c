"""Tests for trade cycle calculation, grouping, and balance tracking."""

from decimal import Decimal

import pytest

from trade_cycle_tracker.core.builder import CycleBuilder, calculate_trade_cycles
from trade_cycle_tracker.core.filters import is_excluded_token
from trade_cycle_tracker.data.config import ConfigError

USDC_ADDR = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
TOKEN_ADDR = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SOL_ADDR = "So11111111111111111111111111111111111111112"
OTHER_ADDR = "OtherTokenMint11111111111111111111111111111"


@pytest.fixture
def buy(make_trade):
    """Buy TOKEN with USDC."""

    def _buy(timestamp, amount, value):
        return make_trade(timestamp, USDC_ADDR, "USDC", TOKEN_ADDR, "TOKEN", value, amount, value)

    return _buy


@pytest.fixture
def sell(make_trade):
    """Sell TOKEN for USDC."""

    def _sell(timestamp, amount, value):
        return make_trade(timestamp, TOKEN_ADDR, "TOKEN", USDC_ADDR, "USDC", amount, value, value)

    return _sell


def _assert_invariants(trade_groups, dust_threshold=Decimal("100")):
    for group in trade_groups:
        bought = sum((t.amount_out for t in group.buys), Decimal("0"))
        sold = sum((t.amount_in for t in group.sells), Decimal("0"))
        assert group.end_balance == group.start_balance + bought - sold
        assert group.profit_loss == group.total_sell_value - group.total_buy_value
        assert group.is_complete == (abs(group.end_balance) < dust_threshold)
        assert (group.end_date is not None) == group.is_complete
        assert (group.duration is not None) == group.is_complete

    numbers = [group.trade_number for group in trade_groups]
    assert numbers == sorted(set(numbers))


class TestCalculateTradeCycles:
    """Per-token cycle reconstruction."""

    def test_empty_input(self):
        """Empty input gives an empty result."""
        assert calculate_trade_cycles([]) == []

    def test_missing_input(self):
        """None gives an empty result."""
        assert calculate_trade_cycles(None) == []

    def test_complete_buy_sell_cycle(self, buy, sell):
        """Buy 1000 for $100 and sell 1000 for $120 closes one cycle with +$20."""
        cycles = calculate_trade_cycles([buy(1000, 1000, 100), sell(2000, 1000, 120)])

        assert len(cycles) == 1
        cycle = cycles[0]
        assert cycle.token == "TOKEN"
        assert cycle.token_address == TOKEN_ADDR
        assert len(cycle.trade_groups) == 1

        group = cycle.trade_groups[0]
        assert len(group.buys) == 1
        assert len(group.sells) == 1
        assert group.total_buy_amount == Decimal("1000")
        assert group.total_sell_amount == Decimal("1000")
        assert group.is_complete is True
        assert group.profit_loss == Decimal("20.00")
        assert group.start_date == 1000
        assert group.end_date == 2000
        assert group.duration == 1000
        _assert_invariants(cycle.trade_groups)

    def test_excludes_sol_and_usdc(self, make_trade):
        """Settlement tokens never get cycles of their own."""
        trades = [
            make_trade(1000, SOL_ADDR, "SOL", OTHER_ADDR, "OTHER", 1, 100, 100),
            make_trade(2000, USDC_ADDR, "USDC", OTHER_ADDR, "OTHER", 100, 1000, 100),
        ]

        cycles = calculate_trade_cycles(trades)

        assert [c.token for c in cycles] == ["OTHER"]
        assert all(not is_excluded_token(c.token) for c in cycles)
        assert cycles[0].trade_groups[0].end_balance == Decimal("1100")

    def test_excludes_lowercase_settlement_symbols(self, make_trade):
        """Exclusion ignores the case of the reported symbol."""
        trades = [
            make_trade(1000, USDC_ADDR, "usdc", OTHER_ADDR, "OTHER", 100, 1000, 100),
            make_trade(2000, SOL_ADDR, "mSOL", OTHER_ADDR, "OTHER", 1, 1000, 100),
        ]

        cycles = calculate_trade_cycles(trades)

        assert [c.token_address for c in cycles] == [OTHER_ADDR]

    def test_multiple_cycles_for_same_token(self, buy, sell):
        """A buy after a closed cycle opens a second cycle."""
        trades = [
            buy(1000, 1000, 100),
            sell(2000, 1000, 110),
            buy(3000, 2000, 200),
        ]

        cycles = calculate_trade_cycles(trades)

        assert len(cycles) == 1
        groups = cycles[0].trade_groups
        assert len(groups) == 2

        assert groups[0].trade_number == 1
        assert groups[0].is_complete is True
        assert groups[0].end_date == 2000
        assert groups[0].duration == 1000
        assert groups[0].profit_loss == Decimal("10")

        assert groups[1].trade_number == 2
        assert groups[1].is_complete is False
        assert groups[1].end_balance == Decimal("2000")
        assert groups[1].end_date is None
        assert groups[1].duration is None
        _assert_invariants(groups)

    def test_dust_remainder_counts_as_closed(self, buy, sell):
        """A remainder below the dust threshold closes the cycle."""
        cycles = calculate_trade_cycles([buy(1000, 10000, 100), sell(2000, 9950, 100)])

        assert len(cycles) == 1
        group = cycles[0].trade_groups[0]
        assert group.is_complete is True
        assert group.end_balance == Decimal("50")
        assert abs(group.end_balance) < 100

    def test_profit_loss_across_partial_sells(self, buy, sell):
        """P/L sums all sells against all buys."""
        cycles = calculate_trade_cycles([buy(1000, 1000, 100), sell(2000, 500, 60), sell(3000, 500, 70)])

        group = cycles[0].trade_groups[0]
        assert group.total_buy_value == Decimal("100")
        assert group.total_sell_value == Decimal("130")
        assert group.profit_loss == Decimal("30")
        assert group.is_complete is True
        assert group.end_date == 3000

    def test_running_balance(self, buy, sell):
        """Buys accumulate into one cycle until the balance is flat."""
        cycles = calculate_trade_cycles([buy(1000, 1000, 100), buy(2000, 1000, 100), sell(3000, 1500, 150)])

        assert len(cycles) == 1
        group = cycles[0].trade_groups[0]
        assert group.total_buy_amount == Decimal("2000")
        assert group.total_sell_amount == Decimal("1500")
        assert group.end_balance == Decimal("500")
        assert group.is_complete is False
        _assert_invariants(cycles[0].trade_groups)

    def test_input_order_does_not_matter(self, buy, sell):
        """Trades are sorted by timestamp before the walk."""
        trades = [buy(3000, 2000, 200), sell(2000, 1000, 110), buy(1000, 1000, 100)]

        groups = calculate_trade_cycles(trades)[0].trade_groups

        assert [g.start_date for g in groups] == [1000, 3000]
        assert groups[0].is_complete is True
        assert groups[1].is_complete is False

    def test_carried_dust_becomes_start_balance(self, buy, sell):
        """A new cycle starts from the dust left by the previous one."""
        trades = [buy(1000, 1000, 100), sell(2000, 950, 120), buy(3000, 500, 50)]

        groups = calculate_trade_cycles(trades)[0].trade_groups

        assert len(groups) == 2
        assert groups[0].end_balance == Decimal("50")
        assert groups[1].start_balance == Decimal("50")
        assert groups[1].end_balance == Decimal("550")
        _assert_invariants(groups)

    def test_single_buy_stays_open(self, buy):
        """A buy without a sell is an active cycle."""
        cycles = calculate_trade_cycles([buy(1000, 2000, 200)])

        assert len(cycles) == 1
        group = cycles[0].trade_groups[0]
        assert group.is_complete is False
        assert group.end_balance == Decimal("2000")
        assert len(group.buys) == 1
        assert len(group.sells) == 0
        assert group.end_date is None
        assert group.duration is None

    def test_only_sells(self, sell):
        """A sell of tokens acquired outside the history opens a cycle."""
        cycles = calculate_trade_cycles([sell(1000, 1000, 100)])

        group = cycles[0].trade_groups[0]
        assert group.is_complete is False
        assert group.end_balance == Decimal("-1000")
        assert len(group.buys) == 0
        assert len(group.sells) == 1

    def test_zero_value_trade(self, buy):
        """Zero amounts produce a cycle with zero totals."""
        cycles = calculate_trade_cycles([buy(1000, 0, 0)])

        assert len(cycles) == 1
        group = cycles[0].trade_groups[0]
        assert group.total_buy_value == Decimal("0")
        assert group.total_buy_amount == Decimal("0")
        assert group.is_complete is True

    def test_self_swap_is_skipped(self, make_trade):
        """A token only seen in self swaps gets no cycles."""
        trades = [make_trade(1000, TOKEN_ADDR, "TOKEN", TOKEN_ADDR, "TOKEN", 1000, 1000, 100)]

        assert calculate_trade_cycles(trades) == []

    def test_oversell_reopens_completed_cycle(self, buy, sell):
        """Selling past zero after completion leaves the cycle active."""
        trades = [buy(1000, 1000, 100), sell(2000, 1000, 120), sell(3000, 500, 60)]

        groups = calculate_trade_cycles(trades)[0].trade_groups

        assert len(groups) == 1
        assert groups[0].end_balance == Decimal("-500")
        assert groups[0].is_complete is False
        _assert_invariants(groups)

    def test_trades_shared_between_buckets(self, make_trade):
        """Token-to-token swaps sell one token and buy the other."""
        trades = [
            make_trade(1000, USDC_ADDR, "USDC", TOKEN_ADDR, "TOKEN", 100, 1000, 100),
            make_trade(2000, TOKEN_ADDR, "TOKEN", OTHER_ADDR, "OTHER", 1000, 300, 130),
        ]

        cycles = {c.token: c for c in calculate_trade_cycles(trades)}

        assert set(cycles) == {"TOKEN", "OTHER"}
        assert cycles["TOKEN"].trade_groups[0].sells[0] is cycles["OTHER"].trade_groups[0].buys[0]
        assert cycles["TOKEN"].trade_groups[0].profit_loss == Decimal("30")


class TestCycleBuilder:
    """Configuration of the cycle builder."""

    def test_defaults_from_config(self):
        """Threshold and exclusions come from engine.yaml."""
        builder = CycleBuilder()

        assert builder.dust_threshold == Decimal("100")
        assert "USDC" in builder.excluded_tokens

    def test_custom_dust_threshold(self, buy, sell):
        """A smaller threshold keeps a 50-unit remainder open."""
        trades = [buy(1000, 10000, 100), sell(2000, 9950, 100)]

        groups = calculate_trade_cycles(trades, dust_threshold=Decimal("10"))[0].trade_groups

        assert groups[0].is_complete is False
        _assert_invariants(groups, dust_threshold=Decimal("10"))

    def test_custom_excluded_tokens(self, buy, sell):
        """An explicit exclusion list replaces the configured one."""
        trades = [buy(1000, 1000, 100), sell(2000, 1000, 120)]

        cycles = calculate_trade_cycles(trades, excluded_tokens=["token"])

        assert [c.token for c in cycles] == ["USDC"]

    def test_build_unknown_token(self, buy):
        """A bucket that never mentions the token builds nothing."""
        assert CycleBuilder().build(OTHER_ADDR, [buy(1000, 1000, 100)]) == []

    def test_is_effectively_zero(self):
        """Dust is strictly below the threshold in absolute value."""
        builder = CycleBuilder(dust_threshold=Decimal("100"))

        assert builder.is_effectively_zero(Decimal("99.99"))
        assert builder.is_effectively_zero(Decimal("-99"))
        assert not builder.is_effectively_zero(Decimal("100"))

    @pytest.mark.parametrize("threshold", [Decimal("NaN"), Decimal("Infinity"), Decimal("0"), Decimal("-5"), "abc"])
    def test_invalid_dust_threshold(self, threshold):
        """Thresholds that are not finite positive numbers are rejected."""
        with pytest.raises(ConfigError):
            CycleBuilder(dust_threshold=threshold)

    def test_invalid_dust_threshold_in_calculate(self, buy, sell):
        """calculate_trade_cycles rejects a NaN threshold before walking trades."""
        with pytest.raises(ConfigError):
            calculate_trade_cycles([buy(1000, 1000, 100), sell(2000, 1000, 120)], dust_threshold=Decimal("NaN"))

    def test_amount_mismatch_with_carried_dust(self, buy, sell):
        """A cycle that sells its carried dust too can close with a bought/sold gap."""
        trades = [
            buy(1000, 1000, 100),
            sell(2000, 940, 100),
            buy(3000, 1000, 100),
            sell(4000, 1150, 120),
        ]

        groups = calculate_trade_cycles(trades)[0].trade_groups

        assert len(groups) == 2
        assert groups[0].has_amount_mismatch(Decimal("100")) is False
        assert groups[1].start_balance == Decimal("60")
        assert groups[1].end_balance == Decimal("-90")
        assert groups[1].is_complete is True
        assert groups[1].has_amount_mismatch(Decimal("100")) is True
        _assert_invariants(groups)
