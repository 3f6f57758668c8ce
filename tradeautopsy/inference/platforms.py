"""Platform detection and per-platform parsing rules.

Every known source format is described by a ``ParserRules`` record. The
row parser is a single implementation driven by these records, so adding
a platform means adding a table entry, not another parser.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class PlatformTag(str, Enum):
    """Known source formats for OCR'd screenshots."""

    TERMINAL = "terminal"
    EXCHANGE = "exchange"
    CHARTING = "charting"
    UNKNOWN = "unknown"


SKIP_KEYWORDS = ("balance", "credit", "total", "deposit", "withdrawal", "margin")

PNL_KEYWORDS = ("realized pnl", "realised pnl", "closed pnl", "pnl", "p&l", "profit")
SIZE_KEYWORDS = ("qty", "size", "contracts", "volume", "lots")
ENTRY_KEYWORDS = ("entry price", "avg. price", "open price", "entry")


class ParserRules(BaseModel):
    """Line-filtering and role-assignment rules for one platform."""

    platform: PlatformTag = Field(..., description="Platform these rules parse")
    min_line_length: int = Field(default=10, ge=0, description="Shorter lines are noise")
    skip_keywords: tuple[str, ...] = Field(
        default=SKIP_KEYWORDS, description="Ledger/header vocabulary that disqualifies a line"
    )
    require_direction: bool = Field(
        default=True, description="Keep only lines with buy/sell/long/short"
    )
    min_numbers: int = Field(default=2, ge=1, description="Fewer numeric tokens means noise")
    pnl_strategy: Literal["last", "keyword"] = Field(
        default="last", description="How the P&L token is chosen"
    )
    pnl_keywords: tuple[str, ...] = Field(default=PNL_KEYWORDS)
    size_keywords: tuple[str, ...] = Field(default=())
    entry_keywords: tuple[str, ...] = Field(default=())
    window: int = Field(default=0, ge=0, description="Following lines folded into one row")
    assign_stops: bool = Field(
        default=False, description="Use leftover tokens as stop-loss/take-profit"
    )

    model_config = {"frozen": True}


# Checked in this order; the first tag with a fully present group wins.
SIGNATURES: tuple[tuple[PlatformTag, tuple[tuple[str, ...], ...]], ...] = (
    (
        PlatformTag.TERMINAL,
        (
            ("metatrader",),
            ("mt4",),
            ("mt5",),
            ("ctrader",),
            ("ticket", "profit"),
            ("s / l", "t / p"),
        ),
    ),
    (
        PlatformTag.EXCHANGE,
        (
            ("realized pnl",),
            ("realised pnl",),
            ("closed pnl",),
            ("qty", "side"),
        ),
    ),
    (
        PlatformTag.CHARTING,
        (
            ("tradingview",),
            ("strategy", "entry"),
            ("entry", "exit"),
        ),
    ),
)


PLATFORM_RULES: dict[PlatformTag, ParserRules] = {
    PlatformTag.TERMINAL: ParserRules(
        platform=PlatformTag.TERMINAL,
        pnl_strategy="last",
        assign_stops=True,
    ),
    PlatformTag.EXCHANGE: ParserRules(
        platform=PlatformTag.EXCHANGE,
        pnl_strategy="keyword",
        size_keywords=SIZE_KEYWORDS,
        entry_keywords=ENTRY_KEYWORDS,
        window=3,
    ),
    PlatformTag.CHARTING: ParserRules(
        platform=PlatformTag.CHARTING,
        pnl_strategy="keyword",
        size_keywords=SIZE_KEYWORDS,
        entry_keywords=ENTRY_KEYWORDS,
        window=1,
    ),
}

GENERIC_RULES = ParserRules(
    platform=PlatformTag.UNKNOWN,
    require_direction=False,
    pnl_strategy="last",
)


def detect(text: str) -> PlatformTag:
    """Classify a block of OCR text by keyword signatures.

    Args:
        text: Raw OCR text.

    Returns:
        The first matching platform tag, or ``PlatformTag.UNKNOWN``.
    """
    lowered = text.lower()

    for tag, groups in SIGNATURES:
        for group in groups:
            if all(token in lowered for token in group):
                return tag

    return PlatformTag.UNKNOWN


def rules_for(tag: PlatformTag) -> ParserRules:
    """Get the parsing rules for a platform, falling back to generic rules."""
    return PLATFORM_RULES.get(tag, GENERIC_RULES)
