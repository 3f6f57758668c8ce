"""TradeCandidate data model."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Direction = Literal["buy", "sell", "unknown"]


class TradeCandidate(BaseModel):
    """A trade reconstructed from one row of OCR text.

    Extraction is lossy, so everything except the asset is best-effort.
    """

    asset: str = Field(..., min_length=1, description="Ticker symbol, uppercased, slash-stripped")
    direction: Direction = Field(default="unknown", description="Trade direction")
    entry_price: float = Field(default=0.0, ge=0, description="Entry price (0 if unrecoverable)")
    stop_loss: Optional[float] = Field(default=None, ge=0, description="Stop-loss price")
    take_profit: Optional[float] = Field(default=None, ge=0, description="Take-profit price")
    position_size: float = Field(
        default=0.1, gt=0, description="Lots/contracts/units (0.1 placeholder if undetectable)"
    )
    loss_amount: float = Field(default=0.0, description="Realized P&L, negative for a loss")
    timestamp: Optional[datetime] = Field(default=None, description="Trade time if an absolute date was found")
    platform: str = Field(default="unknown", description="Platform rules that produced this trade")
    block_index: int = Field(default=0, ge=0, description="Index of the source text block")

    model_config = {"frozen": True}
