"""Trade inference from OCR text."""

from tradeautopsy.inference.dedupe import dedupe
from tradeautopsy.inference.engine import infer_trades, parse_text
from tradeautopsy.inference.events import InferenceEvent, logging_observer
from tradeautopsy.inference.parser import parse_block
from tradeautopsy.inference.platforms import (
    GENERIC_RULES,
    PLATFORM_RULES,
    ParserRules,
    PlatformTag,
    detect,
)
from tradeautopsy.inference.summary import summarize

__all__ = [
    "GENERIC_RULES",
    "InferenceEvent",
    "PLATFORM_RULES",
    "ParserRules",
    "PlatformTag",
    "dedupe",
    "detect",
    "infer_trades",
    "logging_observer",
    "parse_block",
    "parse_text",
    "summarize",
]
