"""Property-based tests for trade deduplication.

**Feature: trade-inference**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from tradeautopsy.inference.dedupe import dedupe
from tradeautopsy.models import TradeCandidate


def trade_strategy():
    """Generate trades from a small value pool so collisions are common."""
    return st.builds(
        TradeCandidate,
        asset=st.sampled_from(["EURUSD", "BTCUSD", "XAUUSD"]),
        entry_price=st.sampled_from([0.0, 1.105, 50000.0]),
        loss_amount=st.sampled_from([0.0, -100.0, 25.5]),
        position_size=st.sampled_from([0.1, 0.5, 2.0]),
        block_index=st.integers(min_value=0, max_value=3),
    )


def key(trade: TradeCandidate) -> tuple:
    return (trade.asset, trade.entry_price, trade.loss_amount)


class TestDeduplicationInvariant:
    """
    **Feature: trade-inference, Property 9: Deduplication Invariant**

    *For any* candidate list, no two surviving trades share asset, entry
    price and a non-zero P&L.
    """

    @given(trades=st.lists(trade_strategy(), max_size=40))
    @settings(max_examples=200)
    def test_no_duplicate_keys(self, trades: list[TradeCandidate]):
        result = dedupe(trades)

        keys = [key(t) for t in result if t.loss_amount != 0]
        assert len(keys) == len(set(keys))

    @given(trades=st.lists(trade_strategy(), max_size=40))
    @settings(max_examples=200)
    def test_stable_subsequence(self, trades: list[TradeCandidate]):
        """*For any* list, the result keeps first occurrences in original order."""
        result = dedupe(trades)

        it = iter(trades)
        assert all(any(t is candidate for candidate in it) for t in result)

        first_seen = {}
        for t in trades:
            if t.loss_amount != 0:
                first_seen.setdefault(key(t), t)
        for t in result:
            if t.loss_amount != 0:
                assert first_seen[key(t)] is t

    @given(trades=st.lists(trade_strategy(), max_size=40))
    @settings(max_examples=100)
    def test_zero_pnl_never_removed(self, trades: list[TradeCandidate]):
        result = dedupe(trades)

        assert sum(1 for t in result if t.loss_amount == 0) == sum(
            1 for t in trades if t.loss_amount == 0
        )


class TestDeduplicationExamples:
    """Concrete deduplication cases."""

    def test_identical_trades_collapse(self):
        a = TradeCandidate(asset="BTCUSD", entry_price=50000.0, loss_amount=-100.0, block_index=0)
        b = TradeCandidate(asset="BTCUSD", entry_price=50000.0, loss_amount=-100.0, block_index=1)

        assert dedupe([a, b]) == [a]

    def test_size_and_direction_do_not_matter(self):
        a = TradeCandidate(asset="EURUSD", entry_price=1.105, loss_amount=-25.0, position_size=0.5)
        b = TradeCandidate(
            asset="EURUSD", entry_price=1.105, loss_amount=-25.0, position_size=1.0, direction="sell"
        )

        assert dedupe([a, b]) == [a]

    def test_zero_pnl_kept(self):
        a = TradeCandidate(asset="EURUSD", entry_price=1.105, loss_amount=0.0)

        assert dedupe([a, a, a]) == [a, a, a]

    def test_different_pnl_kept(self):
        a = TradeCandidate(asset="EURUSD", entry_price=1.105, loss_amount=-25.0)
        b = TradeCandidate(asset="EURUSD", entry_price=1.105, loss_amount=-26.0)

        assert dedupe([a, b]) == [a, b]

    def test_empty(self):
        assert dedupe([]) == []
