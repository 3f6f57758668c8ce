"""Public entry point for trade inference from OCR text."""

from typing import Optional, Sequence, Union

from tradeautopsy.config import InferenceSettings
from tradeautopsy.inference.dedupe import dedupe
from tradeautopsy.inference.events import Observer, emit
from tradeautopsy.inference.parser import parse_block
from tradeautopsy.inference.platforms import GENERIC_RULES, PlatformTag, detect, rules_for
from tradeautopsy.inference.summary import summarize
from tradeautopsy.models import InferenceResult, TradeCandidate


def parse_text(
    text: str,
    block_index: int = 0,
    settings: Optional[InferenceSettings] = None,
    observer: Optional[Observer] = None,
) -> list[TradeCandidate]:
    """Detect the platform of one text block and parse it.

    Falls back to the generic parser when the platform is unknown or the
    platform parser finds nothing.
    """
    tag = detect(text)
    emit(observer, "block", f"detected platform '{tag.value}'", block_index, platform=tag.value)

    trades: list[TradeCandidate] = []
    if tag is not PlatformTag.UNKNOWN:
        trades = parse_block(text, rules_for(tag), settings, block_index, observer)
        if not trades:
            emit(observer, "fallback", f"no {tag.value} trades, trying generic parser", block_index)

    if not trades:
        trades = parse_block(text, GENERIC_RULES, settings, block_index, observer)

    return trades


def infer_trades(
    inputs: Union[str, Sequence[str]],
    settings: Optional[InferenceSettings] = None,
    sort_by_timestamp: bool = False,
    observer: Optional[Observer] = None,
) -> InferenceResult:
    """Reconstruct trades and account statistics from OCR text.

    Blocks are processed in the order given; the combined list is
    deduplicated and summarized. This never raises for text input, an
    unparseable batch just yields no trades and ``confidence="low"``.

    Args:
        inputs: One OCR text block or a sequence of them (one per screenshot).
        settings: Inference settings. Defaults to ``InferenceSettings()``.
        sort_by_timestamp: Order trades by their timestamps before
            summarizing. Only applied when every trade has one.
        observer: Optional callback receiving progress events.

    Returns:
        InferenceResult with trades, summary and confidence.
    """
    settings = settings or InferenceSettings()
    texts = [inputs] if isinstance(inputs, str) else list(inputs)

    candidates: list[TradeCandidate] = []
    for index, text in enumerate(texts):
        candidates.extend(parse_text(text, index, settings, observer))

    trades = dedupe(candidates)
    emit(observer, "dedupe", f"{len(candidates)} candidates, {len(trades)} unique")

    ordering_verified = False
    if sort_by_timestamp and trades:
        if all(trade.timestamp is not None for trade in trades):
            trades = sorted(trades, key=lambda trade: trade.timestamp)
            ordering_verified = True
        else:
            emit(observer, "summary", "not every trade has a timestamp, keeping input order")

    summary = summarize(trades, settings, ordering_verified=ordering_verified)
    emit(
        observer,
        "summary",
        f"{summary.trade_count} trades, net P&L {summary.net_pnl:.2f}",
        risk_stacking=summary.risk_stacking,
    )

    return InferenceResult(
        trades=trades,
        account_summary=summary,
        confidence="high" if trades else "low",
    )
