"""Rule-driven row parser.

One implementation serves every platform; the differences between a
terminal history table, an exchange PnL log and a charting-tool trade
list live in their ``ParserRules``. The generic fallback is the same
parser run with ``GENERIC_RULES``.
"""

from typing import Optional

from tradeautopsy.config import InferenceSettings
from tradeautopsy.inference.events import Observer, emit
from tradeautopsy.inference.normalize import normalize_lines
from tradeautopsy.inference.platforms import ParserRules
from tradeautopsy.inference.tokens import (
    assign_roles,
    classify,
    extract_asset,
    extract_direction,
    extract_timestamp,
    has_direction,
    strip_datetimes,
    tokenize,
)
from tradeautopsy.models import TradeCandidate


def is_ledger_line(line: str, rules: ParserRules) -> bool:
    """Check for balance/deposit/margin style header or ledger rows."""
    lowered = line.lower()
    return any(keyword in lowered for keyword in rules.skip_keywords)


def row_text(lines: list[str], index: int, rules: ParserRules) -> str:
    """Join a trade line with the neighbouring lines its fields spill onto.

    The window ends at the next line that starts another trade (has both a
    direction keyword and a symbol). Ledger lines inside it are skipped.
    """
    parts = [lines[index]]

    for line in lines[index + 1:index + 1 + rules.window]:
        if has_direction(line) and extract_asset(line) is not None:
            break
        if is_ledger_line(line, rules):
            continue
        parts.append(line)

    return " ".join(parts)


def parse_block(
    text: str,
    rules: ParserRules,
    settings: Optional[InferenceSettings] = None,
    block_index: int = 0,
    observer: Optional[Observer] = None,
) -> list[TradeCandidate]:
    """Parse one block of OCR text into trade candidates.

    Lines that are too short, look like ledger rows, lack a required
    direction keyword, lack a symbol or carry too few numbers are skipped.
    This never raises; it may return an empty list.

    Args:
        text: Raw OCR text for one screenshot.
        rules: Platform rules to apply.
        settings: Inference settings (placeholder size, lot range).
        block_index: Index of this block in the batch.
        observer: Optional event callback.

    Returns:
        Trade candidates in line order.
    """
    settings = settings or InferenceSettings()
    lines = normalize_lines(text)
    trades = []

    for i, line in enumerate(lines):
        if len(line) < rules.min_line_length:
            continue

        if is_ledger_line(line, rules):
            emit(observer, "skip", f"ledger line: {line}", block_index)
            continue

        if rules.require_direction and not has_direction(line):
            continue

        asset = extract_asset(line)
        if asset is None:
            continue

        row = row_text(lines, i, rules)
        numeric_text = strip_datetimes(row)
        tokens = tokenize(numeric_text)

        if len(tokens) < rules.min_numbers:
            emit(observer, "skip", f"{asset}: only {len(tokens)} number(s) in row", block_index)
            continue

        roles = assign_roles(classify(tokens, numeric_text, rules, settings), rules, settings)

        trade = TradeCandidate(
            asset=asset,
            direction=extract_direction(line),
            entry_price=roles.entry_price,
            stop_loss=roles.stop_loss,
            take_profit=roles.take_profit,
            position_size=roles.position_size,
            loss_amount=roles.loss_amount,
            timestamp=extract_timestamp(row),
            platform=rules.platform.value,
            block_index=block_index,
        )
        emit(
            observer,
            "trade",
            f"{trade.asset} {trade.direction} {trade.position_size} lots, P&L {trade.loss_amount}",
            block_index,
            platform=rules.platform.value,
        )
        trades.append(trade)

    return trades
