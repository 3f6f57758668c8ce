"""InferenceResult data model."""

from typing import Literal
from pydantic import BaseModel, Field

from tradeautopsy.models.summary import AccountSummary
from tradeautopsy.models.trade import TradeCandidate

# "medium" is reserved and not produced yet.
Confidence = Literal["high", "medium", "low"]


class InferenceResult(BaseModel):
    """Trades and summary reconstructed from one or more text blocks."""

    trades: list[TradeCandidate] = Field(default_factory=list, description="Deduplicated trades")
    account_summary: AccountSummary = Field(
        default_factory=AccountSummary, description="Account-level statistics"
    )
    confidence: Confidence = Field(default="low", description="high if any trade was recovered")

    model_config = {"frozen": True}
