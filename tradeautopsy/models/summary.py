"""AccountSummary data model."""

from pydantic import BaseModel, Field


class AccountSummary(BaseModel):
    """Account-level behavioural statistics over a list of trades."""

    net_pnl: float = Field(default=0.0, description="Sum of all trade P&L")
    trade_count: int = Field(default=0, ge=0, description="Number of trades")
    win_rate: float = Field(default=0.0, ge=0, le=100, description="Win rate percentage")
    largest_loss: float = Field(default=0.0, le=0, description="Most negative single P&L")
    avg_lot: float = Field(default=0.0, ge=0, description="Mean position size")
    overtrading_score: float = Field(default=0.0, ge=0, le=100, description="Overtrading heuristic (0-100)")
    risk_stacking: bool = Field(default=False, description="Size escalation after a loss was seen")
    ordering_verified: bool = Field(
        default=False, description="Trades were ordered by timestamp rather than input order"
    )

    model_config = {"frozen": True}
