"""Duplicate removal for trades seen in overlapping screenshots."""

from tradeautopsy.models import TradeCandidate


def dedupe(candidates: list[TradeCandidate]) -> list[TradeCandidate]:
    """Drop repeats of the same (asset, entry price, P&L), keeping the first.

    Trades with a P&L of exactly zero are always kept: zero is the default
    when no P&L was read, so it says nothing about identity.

    Args:
        candidates: Trades in batch order.

    Returns:
        Trades in the same order with repeats removed.
    """
    seen: set[tuple[str, float, float]] = set()
    unique = []

    for trade in candidates:
        if trade.loss_amount != 0:
            key = (trade.asset, trade.entry_price, trade.loss_amount)
            if key in seen:
                continue
            seen.add(key)
        unique.append(trade)

    return unique
