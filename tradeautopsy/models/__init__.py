"""Data models for TradeAutopsy."""

from tradeautopsy.models.trade import Direction, TradeCandidate
from tradeautopsy.models.summary import AccountSummary
from tradeautopsy.models.result import Confidence, InferenceResult

__all__ = [
    "AccountSummary",
    "Confidence",
    "Direction",
    "InferenceResult",
    "TradeCandidate",
]
