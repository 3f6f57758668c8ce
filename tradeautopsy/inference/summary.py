"""Account-level statistics over reconstructed trades."""

from typing import Optional

from tradeautopsy.config import InferenceSettings
from tradeautopsy.models import AccountSummary, TradeCandidate


def count_escalations(trades: list[TradeCandidate]) -> int:
    """Count trades sized up immediately after a losing trade.

    Trades are compared with their predecessor in list order, which is
    assumed to be chronological.
    """
    escalations = 0
    for previous, current in zip(trades, trades[1:]):
        if previous.loss_amount < 0 and current.position_size > previous.position_size:
            escalations += 1
    return escalations


def overtrading_score(
    trade_count: int,
    escalations: int,
    settings: Optional[InferenceSettings] = None,
) -> float:
    """Score trade density plus revenge sizing on a 0-100 scale."""
    settings = settings or InferenceSettings()

    score = min(100.0, trade_count * 100 / settings.overtrading_trade_ceiling)
    if escalations >= settings.revenge_penalty_min_escalations:
        score += settings.revenge_penalty

    return min(100.0, score)


def summarize(
    trades: list[TradeCandidate],
    settings: Optional[InferenceSettings] = None,
    ordering_verified: bool = False,
) -> AccountSummary:
    """Reduce a trade list to an AccountSummary.

    Args:
        trades: Deduplicated trades, in chronological order if known.
        settings: Overtrading score constants.
        ordering_verified: Whether ``trades`` was ordered by timestamp.

    Returns:
        AccountSummary. An empty list gives an all-zero summary.
    """
    if not trades:
        return AccountSummary()

    net_pnl = 0.0
    wins = 0
    largest_loss = 0.0
    total_size = 0.0

    for trade in trades:
        net_pnl += trade.loss_amount
        if trade.loss_amount > 0:
            wins += 1
        if trade.loss_amount < largest_loss:
            largest_loss = trade.loss_amount
        total_size += trade.position_size

    escalations = count_escalations(trades)
    trade_count = len(trades)

    return AccountSummary(
        net_pnl=net_pnl,
        trade_count=trade_count,
        win_rate=wins / trade_count * 100,
        largest_loss=largest_loss,
        avg_lot=total_size / trade_count,
        overtrading_score=overtrading_score(trade_count, escalations, settings),
        risk_stacking=escalations > 0,
        ordering_verified=ordering_verified,
    )
