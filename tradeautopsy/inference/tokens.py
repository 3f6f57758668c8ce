"""Field extraction for a single trade row.

Numeric role assignment is a pipeline of pure functions::

    tokenize(text) -> classify(tokens, text, rules, settings) -> assign_roles(...)

so every heuristic can be tested on its own.
"""

import math
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tradeautopsy.config import InferenceSettings
from tradeautopsy.inference.platforms import ParserRules
from tradeautopsy.models import Direction

_FX = "EUR|USD|GBP|JPY|AUD|NZD|CAD|CHF|SGD|HKD|SEK|NOK|DKK|ZAR|MXN|TRY|PLN|CNH|HUF|CZK"
_CRYPTO_QUOTES = "USDT|USDC|BUSD|USD|EUR|BTC"
_SYMBOLS = "|".join([
    rf"(?:{_FX})/?(?:{_FX})",
    rf"(?:XAU|XAG|XPT|XPD)/?(?:{_FX})",
    rf"(?:BTC|ETH)(?:/?(?:{_CRYPTO_QUOTES}))?",
    rf"(?:SOL|XRP|BNB|DOGE|LTC|ADA|DOT|AVAX|LINK|MATIC)/?(?:{_CRYPTO_QUOTES})",
    r"USOIL|UKOIL|XTIUSD|XBRUSD|WTI|BRENT",
    r"US30|US100|US500|NAS100|SPX500|USTEC|GER30|GER40|DE30|DE40|UK100|JP225|HK50|DOW|NDX",
])

# Broker suffixes such as "EURUSDm", "EURUSD.pro" or "BTCUSDT.P" are matched but not kept.
ASSET_PATTERN = re.compile(
    rf"(?<![A-Za-z0-9])(?P<symbol>{_SYMBOLS})(?:[._][A-Za-z0-9]{{1,4}}|[m+#])?(?![A-Za-z0-9])",
    re.IGNORECASE,
)
DIRECTION_PATTERN = re.compile(r"\b(buy|long|sell|short)\b", re.IGNORECASE)

_ISO_DATE = re.compile(
    r"(?<!\d)(?P<year>\d{4})[./-](?P<month>\d{1,2})[./-](?P<day>\d{1,2})"
    r"(?:[ T]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)?(?!\d)"
)
_DAY_FIRST_DATE = re.compile(
    r"(?<!\d)(?P<day>\d{1,2})[./-](?P<month>\d{1,2})[./-](?P<year>\d{4})"
    r"(?:[ T]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)?(?!\d)"
)
_CLOCK_TIME = re.compile(r"(?<!\d)\d{1,2}:\d{2}(?::\d{2})?(?!\d)")

# Signed decimal-looking numbers, never glued to a preceding symbol or digit
# (so "US30" yields nothing).
_NUMBER = re.compile(r"(?<![\w.,])(?P<sign>[-+]?)[$€£¥]?(?P<body>\d+(?:[.,]\d+)*)")
_PERCENT_SUFFIX = re.compile(r"[.,]*\s?%")

# Commas separating CSV-like fields: next to a letter, sign or currency
# symbol, or between two dotted decimals ("0.50,1.1050").
_FIELD_COMMA = re.compile(r"(?<=[A-Za-z]),|,(?=[-+$€£¥A-Za-z])")
_DECIMAL_LIST_COMMA = re.compile(r"(\d\.\d+),(?=\d+\.\d)")

# Max characters between a keyword and the number it anchors.
ANCHOR_GAP = 20

# A keyword right after one of these refers to an open position.
_UNREALIZED_WORDS = ("unrealized", "unrealised", "floating")


class NumericToken(BaseModel):
    """A decimal number found in a row, with its position."""

    value: float = Field(..., description="Parsed value")
    start: int = Field(..., ge=0, description="Offset of the token in the row text")
    raw: str = Field(..., description="Token text as matched")

    model_config = {"frozen": True}


class ClassifiedToken(BaseModel):
    """A numeric token plus the roles it could plausibly fill."""

    token: NumericToken
    pnl_anchor: bool = Field(default=False, description="Follows a P&L keyword")
    size_anchor: bool = Field(default=False, description="Follows a size keyword")
    entry_anchor: bool = Field(default=False, description="Follows an entry keyword")
    lot_sized: bool = Field(default=False, description="Within the plausible lot-size range")

    model_config = {"frozen": True}


class RoleAssignment(BaseModel):
    """Numeric fields of a trade after role assignment."""

    loss_amount: float = 0.0
    position_size: float = Field(default=0.1, gt=0)
    entry_price: float = Field(default=0.0, ge=0)
    stop_loss: Optional[float] = Field(default=None, ge=0)
    take_profit: Optional[float] = Field(default=None, ge=0)

    model_config = {"frozen": True}


def extract_asset(line: str) -> Optional[str]:
    """Find the first ticker symbol in a line.

    Returns:
        The symbol uppercased with any slash and broker suffix removed,
        or None if the line has no recognizable symbol.
    """
    match = ASSET_PATTERN.search(line)
    if not match:
        return None
    return match.group("symbol").upper().replace("/", "")


def extract_direction(line: str) -> Direction:
    """Get the direction from the first buy/long/sell/short keyword."""
    match = DIRECTION_PATTERN.search(line)
    if not match:
        return "unknown"
    return "buy" if match.group(1).lower() in ("buy", "long") else "sell"


def has_direction(line: str) -> bool:
    """Check whether a line carries a directional keyword."""
    return DIRECTION_PATTERN.search(line) is not None


def _to_datetime(match: re.Match) -> Optional[datetime]:
    parts = match.groupdict()
    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
        )
    except ValueError:
        return None


def extract_timestamp(text: str) -> Optional[datetime]:
    """Get the first absolute date (with optional time) in the text.

    Year-first dates are preferred. For ``DD/MM/YYYY`` the day comes first
    unless the second field cannot be a month. Clock times without a date
    never produce a timestamp.
    """
    match = _ISO_DATE.search(text)
    if match:
        return _to_datetime(match)

    match = _DAY_FIRST_DATE.search(text)
    if not match:
        return None

    timestamp = _to_datetime(match)
    if timestamp is None and int(match.group("month")) > 12:
        # Month-first, e.g. 01/15/2024
        parts = match.groupdict()
        try:
            timestamp = datetime(
                int(parts["year"]),
                int(parts["day"]),
                int(parts["month"]),
                int(parts["hour"] or 0),
                int(parts["minute"] or 0),
                int(parts["second"] or 0),
            )
        except ValueError:
            return None
    return timestamp


def strip_datetimes(text: str) -> str:
    """Remove dates and clock times so their digits are not read as numbers."""
    text = _ISO_DATE.sub(" ", text)
    text = _DAY_FIRST_DATE.sub(" ", text)
    return _CLOCK_TIME.sub(" ", text)


def parse_number(sign: str, body: str) -> Optional[float]:
    """Parse a matched number, resolving ``.``/``,`` separators.

    When both separators appear the rightmost one is the decimal point.
    Repeated identical separators, or a single comma followed by exactly
    three digits after a non-zero lead group, are thousands grouping. Any
    other single separator is the decimal point.

    Args:
        sign: ``"-"``, ``"+"`` or ``""``.
        body: Digits and separators.

    Returns:
        The value if the token has a fractional part and is finite,
        otherwise None.
    """
    dot = body.rfind(".")
    comma = body.rfind(",")

    if dot >= 0 and comma >= 0:
        decimal_sep = "." if dot > comma else ","
        thousands_sep = "," if decimal_sep == "." else "."
        integer, fraction = body.rsplit(decimal_sep, 1)
        integer = integer.replace(thousands_sep, "")
        if not integer.isdigit():
            return None
    elif dot >= 0 or comma >= 0:
        sep = "." if dot >= 0 else ","
        if body.count(sep) > 1:
            return None
        integer, fraction = body.split(sep)
        if sep == "," and len(fraction) == 3 and len(integer) <= 3 and integer != "0":
            return None
    else:
        return None

    try:
        value = float(f"{sign}{integer}.{fraction}")
    except ValueError:
        return None

    if not math.isfinite(value):
        return None
    return value


def split_fields(text: str) -> str:
    """Replace comma field separators with spaces.

    Decimal and thousands commas are left alone. The result has the same
    length as ``text`` so token offsets still index the original.
    """
    text = _FIELD_COMMA.sub(" ", text)
    return _DECIMAL_LIST_COMMA.sub(r"\1 ", text)


def tokenize(text: str) -> list[NumericToken]:
    """Find decimal-looking numbers in reading order.

    Plain integers (ticket ids, dates, times) and percentages are not
    returned; tokens that fail to parse are dropped.
    """
    text = split_fields(text)
    tokens = []
    for match in _NUMBER.finditer(text):
        if _PERCENT_SUFFIX.match(text, match.end()):
            continue
        value = parse_number(match.group("sign"), match.group("body"))
        if value is None:
            continue
        tokens.append(NumericToken(value=value, start=match.start(), raw=match.group(0)))
    return tokens


def _keyword_ends(text: str, keywords: tuple[str, ...]) -> list[int]:
    lowered = text.lower()
    ends = []
    for keyword in keywords:
        pattern = rf"(?<![a-z]){re.escape(keyword)}(?![a-z])"
        for m in re.finditer(pattern, lowered):
            before = lowered[max(0, m.start() - 20):m.start()].rstrip()
            if before.endswith(_UNREALIZED_WORDS):
                continue
            ends.append(m.end())
    return sorted(ends)


def _anchored(tokens: list[NumericToken], text: str, keywords: tuple[str, ...]) -> set[int]:
    """Indexes of tokens that directly follow one of the keywords."""
    anchored = set()
    for end in _keyword_ends(text, keywords):
        for i, token in enumerate(tokens):
            if token.start < end:
                continue
            if token.start - end <= ANCHOR_GAP:
                anchored.add(i)
            break
    return anchored


def classify(
    tokens: list[NumericToken],
    text: str,
    rules: ParserRules,
    settings: Optional[InferenceSettings] = None,
) -> list[ClassifiedToken]:
    """Mark the roles each token could fill.

    Args:
        tokens: Tokens from ``tokenize(text)``.
        text: The row text the tokens were read from.
        rules: Platform rules supplying the keyword anchors.
        settings: Lot-size range.

    Returns:
        One ClassifiedToken per input token, same order.
    """
    settings = settings or InferenceSettings()

    pnl = _anchored(tokens, text, rules.pnl_keywords) if rules.pnl_strategy == "keyword" else set()
    size = _anchored(tokens, text, rules.size_keywords)
    entry = _anchored(tokens, text, rules.entry_keywords)

    return [
        ClassifiedToken(
            token=token,
            pnl_anchor=i in pnl,
            size_anchor=i in size,
            entry_anchor=i in entry,
            lot_sized=0 < token.value < settings.max_position_size,
        )
        for i, token in enumerate(tokens)
    ]


def _pick_pnl(classified: list[ClassifiedToken], rules: ParserRules) -> int:
    if rules.pnl_strategy == "keyword":
        for i, item in enumerate(classified):
            if item.pnl_anchor:
                return i
    # Terminal history tables put P&L in the rightmost column.
    return len(classified) - 1


def _pick_size(classified: list[ClassifiedToken], claimed: set[int]) -> Optional[int]:
    for i, item in enumerate(classified):
        if i not in claimed and item.size_anchor and item.lot_sized:
            return i

    best = None
    for i, item in enumerate(classified):
        if i in claimed or not item.lot_sized or item.entry_anchor:
            continue
        if best is None or item.token.value < classified[best].token.value:
            best = i
    return best


def _pick_entry(classified: list[ClassifiedToken], claimed: set[int]) -> Optional[int]:
    for i, item in enumerate(classified):
        if i not in claimed and item.entry_anchor and item.token.value != 0:
            return i
    for i, item in enumerate(classified):
        if i not in claimed and item.token.value != 0:
            return i
    return None


def assign_roles(
    classified: list[ClassifiedToken],
    rules: ParserRules,
    settings: Optional[InferenceSettings] = None,
) -> RoleAssignment:
    """Resolve which token is P&L, size, entry and stops.

    Priority order:
        1. P&L: last token, or the first keyword-anchored one for log formats.
        2. Size: a keyword-anchored lot-sized token, else the smallest
           unclaimed token in the lot range that no entry keyword anchors,
           else the placeholder size.
        3. Entry: a keyword-anchored token, else the leftmost unclaimed
           non-zero token (absolute value).
        4. Stops (terminal rows only): the next two leftovers become
           stop-loss and take-profit. Zero means "not set".

    Args:
        classified: Output of ``classify``.
        rules: Platform rules.
        settings: Placeholder size.

    Returns:
        The assigned numeric fields.
    """
    settings = settings or InferenceSettings()

    if not classified:
        return RoleAssignment(position_size=settings.default_position_size)

    claimed: set[int] = set()

    pnl_index = _pick_pnl(classified, rules)
    claimed.add(pnl_index)

    size_index = _pick_size(classified, claimed)
    if size_index is not None:
        claimed.add(size_index)

    entry_index = _pick_entry(classified, claimed)
    if entry_index is not None:
        claimed.add(entry_index)

    stop_loss = None
    take_profit = None
    if rules.assign_stops:
        leftovers = [item.token.value for i, item in enumerate(classified) if i not in claimed]
        if len(leftovers) > 0 and leftovers[0] != 0:
            stop_loss = abs(leftovers[0])
        if len(leftovers) > 1 and leftovers[1] != 0:
            take_profit = abs(leftovers[1])

    return RoleAssignment(
        loss_amount=classified[pnl_index].token.value,
        position_size=(
            classified[size_index].token.value
            if size_index is not None
            else settings.default_position_size
        ),
        entry_price=abs(classified[entry_index].token.value) if entry_index is not None else 0.0,
        stop_loss=stop_loss,
        take_profit=take_profit,
    )
