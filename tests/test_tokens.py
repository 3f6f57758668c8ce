"""Tests for field extraction and numeric role assignment.

**Feature: trade-inference**
"""

from datetime import datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradeautopsy.config import InferenceSettings
from tradeautopsy.inference.normalize import normalize_text
from tradeautopsy.inference.platforms import GENERIC_RULES, PLATFORM_RULES, PlatformTag
from tradeautopsy.inference.tokens import (
    assign_roles,
    classify,
    extract_asset,
    extract_direction,
    extract_timestamp,
    parse_number,
    split_fields,
    strip_datetimes,
    tokenize,
)

TERMINAL = PLATFORM_RULES[PlatformTag.TERMINAL]
EXCHANGE = PLATFORM_RULES[PlatformTag.EXCHANGE]


def values(text: str) -> list[float]:
    return [token.value for token in tokenize(text)]


def roles(text: str, rules=GENERIC_RULES, inference_settings=None):
    tokens = tokenize(text)
    return assign_roles(classify(tokens, text, rules, inference_settings), rules, inference_settings)


class TestNormalization:
    """Table artifacts and whitespace are cleaned without losing lines."""

    def test_pipes_and_box_drawing_removed(self):
        assert normalize_text("| EURUSD │ buy ┃ 0.50 |") == "EURUSD buy 0.50"

    def test_unicode_minus(self):
        assert normalize_text("P&L −25.00") == "P&L -25.00"

    def test_line_structure_kept(self):
        assert normalize_text("a  b\r\nc\t\td\re") == "a b\nc d\ne"

    def test_control_characters_dropped(self):
        assert normalize_text("EUR\x00USD\x07") == "EURUSD"


class TestTokenize:
    """
    **Feature: trade-inference, Property 3: Numeric Token Extraction**

    *For any* row, decimal-looking numbers are read left to right with
    either separator, and malformed tokens are dropped.
    """

    def test_reading_order(self):
        assert values("EURUSD buy 0.50 1.1050 1.1000 1.1100 -25.00") == [
            0.5, 1.105, 1.1, 1.11, -25.0,
        ]

    def test_integers_ignored(self):
        assert values("Ticket 51234567 qty 3 0.10") == [0.1]

    def test_index_symbol_digits_ignored(self):
        assert values("US30 buy 0.50 -12.00") == [0.5, -12.0]
        assert values("NAS100 sell 1.00 15000.25 80.00") == [1.0, 15000.25, 80.0]

    def test_comma_decimal_separator(self):
        assert values("EURUSD 0,50 1,1050 -25,00") == [0.5, 1.105, -25.0]

    def test_thousands_grouping(self):
        assert values("BTCUSD 50,000.00") == [50000.0]
        assert values("DE40 1.234,56") == [1234.56]
        assert values("BTCUSD 1,234") == []

    def test_signed_and_currency_prefixed(self):
        assert values("P&L +45.20 or $-12.50 or $99.99") == [45.2, -12.5, 99.99]

    def test_percentages_ignored(self):
        assert values("Realized PnL -12.35 USDT (-5.20%) ROI 3.5 %") == [-12.35]

    def test_long_percentage_run(self):
        text = "1." + "1" * 100_000 + "%"
        assert tokenize(text) == []
        assert values(text + " 0.50") == [0.5]

    def test_comma_field_separators(self):
        assert values("EURUSD,buy,0.50,1.1050,1.1000,1.1100,-25.00") == [
            0.5, 1.105, 1.1, 1.11, -25.0,
        ]
        assert values("Qty,0.010,Entry,43250.50,PnL,$12.35") == [0.01, 43250.5, 12.35]

    def test_comma_separators_keep_offsets(self):
        text = "EURUSD,buy,0.50,-25.00"
        tokens = tokenize(text)

        assert len(split_fields(text)) == len(text)
        assert [t.raw for t in tokens] == ["0.50", "-25.00"]
        for token in tokens:
            assert text[token.start:token.start + len(token.raw)] == token.raw

    def test_decimal_commas_not_split(self):
        assert split_fields("EURUSD 0,50 1,1050 -25,00") == "EURUSD 0,50 1,1050 -25,00"
        assert split_fields("BTCUSD 50,000.00 DE40 1.234,56") == "BTCUSD 50,000.00 DE40 1.234,56"

    def test_dates_and_times_removed(self):
        text = "2024.01.15 10:30:00 EURUSD 0.10 15/01/2024 12:00"
        assert values(strip_datetimes(text)) == [0.1]

    def test_parse_number_rejects_malformed(self):
        assert parse_number("", "1.2.3") is None
        assert parse_number("", "1,2.3,4") is None
        assert parse_number("", "123") is None
        assert parse_number("", "9" * 400 + ".5") is None

    def test_parse_number_accepts_valid(self):
        assert parse_number("-", "25.00") == -25.0
        assert parse_number("", "0,500") == 0.5
        assert parse_number("+", "1,1050") == 1.105

    @given(text=st.text(max_size=300))
    @settings(max_examples=200)
    def test_tokens_are_finite(self, text: str):
        """*For any* text, every token is a finite float."""
        for token in tokenize(text):
            assert token.value == token.value
            assert abs(token.value) != float("inf")


class TestFieldExtraction:
    """Asset, direction and timestamp extraction."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("EURUSD buy 0.50", "EURUSD"),
            ("eur/usd buy", "EURUSD"),
            ("sell XAUUSDm 1.00", "XAUUSD"),
            ("BTCUSDT.P Long", "BTCUSDT"),
            ("EURUSD.pro 0.10", "EURUSD"),
            ("Perpetual ETH/USDT short", "ETHUSDT"),
            ("US30 buy", "US30"),
            ("nas100 sell", "NAS100"),
        ],
    )
    def test_assets(self, line: str, expected: str):
        assert extract_asset(line) == expected

    @pytest.mark.parametrize(
        "line",
        ["Profit Volume Symbol", "Shadow window", "buy 0.50 1.1050 -25.00", ""],
    )
    def test_no_asset(self, line: str):
        assert extract_asset(line) is None

    def test_directions(self):
        assert extract_direction("EURUSD buy 0.50") == "buy"
        assert extract_direction("Exit Long") == "buy"
        assert extract_direction("SELL limit") == "sell"
        assert extract_direction("Perpetual Short") == "sell"
        assert extract_direction("EURUSD 0.50") == "unknown"
        assert extract_direction("buyer seller") == "unknown"

    def test_first_direction_wins(self):
        assert extract_direction("buy then sell") == "buy"
        assert extract_direction("short covered with a buy") == "sell"

    def test_timestamps(self):
        assert extract_timestamp("2024.01.15 10:30:45 buy") == datetime(2024, 1, 15, 10, 30, 45)
        assert extract_timestamp("opened 2024-01-15") == datetime(2024, 1, 15)
        assert extract_timestamp("15/01/2024 10:30") == datetime(2024, 1, 15, 10, 30)
        assert extract_timestamp("01/15/2024") == datetime(2024, 1, 15)

    def test_no_timestamp(self):
        assert extract_timestamp("10:30 EURUSD") is None
        assert extract_timestamp("2024.13.45") is None
        assert extract_timestamp("") is None


class TestRoleAssignment:
    """
    **Feature: trade-inference, Property 4: Numeric Role Assignment**

    *For any* row, P&L is claimed first, then size, then entry.
    """

    def test_clean_row(self):
        result = roles("EURUSD buy 0.50 1.1050 1.1000 1.1100 -25.00")

        assert result.loss_amount == -25.0
        assert result.position_size == 0.5
        assert result.entry_price == 1.105
        assert result.stop_loss is None

    def test_placeholder_size_when_undetectable(self):
        """The placeholder is exactly 0.1 when no token is lot-sized."""
        result = roles("BTCUSD buy 50000.00 -100.00")

        assert result.position_size == 0.1
        assert result.entry_price == 50000.0
        assert result.loss_amount == -100.0

    def test_placeholder_size_from_settings(self):
        custom = InferenceSettings(default_position_size=0.01)
        assert roles("BTCUSD buy 50000.00 -100.00", inference_settings=custom).position_size == 0.01

    def test_size_excludes_zero_and_large(self):
        result = roles("BTCUSD 0.00 2500.00 64000.00 -15.00")

        assert result.position_size == 0.1
        assert result.entry_price == 2500.0

    def test_entry_is_absolute(self):
        result = roles("EURUSD 0.10 -1.1050 12.00")
        assert result.entry_price == 1.105

    def test_terminal_stops(self):
        result = roles("EURUSD buy 0.50 1.1050 1.1000 1.1100 1.1020 -15.00", TERMINAL)

        assert result.entry_price == 1.105
        assert result.stop_loss == 1.1
        assert result.take_profit == 1.11

    def test_terminal_zero_stops_unset(self):
        result = roles("EURUSD buy 0.50 1.1050 0.00 0.00 1.1020 -15.00", TERMINAL)

        assert result.stop_loss is None
        assert result.take_profit is None

    def test_keyword_anchors(self):
        text = "BTCUSDT Long Realized PnL -12.35 Qty 0.010 Entry Price 43,250.50 Mark Price 43,100.00"
        result = roles(text, EXCHANGE)

        assert result.loss_amount == -12.35
        assert result.position_size == 0.01
        assert result.entry_price == 43250.5

    def test_keyword_pnl_falls_back_to_last(self):
        result = roles("BTCUSDT Long 0.010 43250.50 -12.35", EXCHANGE)
        assert result.loss_amount == -12.35

    @pytest.mark.parametrize("prefix", ["Unrealized", "Unrealised", "Floating"])
    def test_unrealized_pnl_not_anchored(self, prefix: str):
        text = f"BTCUSDT Long {prefix} PnL 99.00 Qty 0.010 Entry Price 43250.50 Closed PnL -12.35"
        result = roles(text, EXCHANGE)

        assert result.loss_amount == -12.35
        assert result.position_size == 0.01
        assert result.entry_price == 43250.5

    def test_open_position_pnl_falls_back_to_last(self):
        result = roles("BTCUSDT Long Unrealized PnL 99.00 Qty 0.010 -4.50", EXCHANGE)
        assert result.loss_amount == -4.5

    def test_entry_anchor_not_taken_as_size(self):
        result = roles("EURUSD Long Entry 1.1050 PnL 20.00", EXCHANGE)

        assert result.entry_price == 1.105
        assert result.position_size == 0.1

    def test_classification_flags(self):
        text = "PnL -5.00 Qty 2.00 Entry 1500.00"
        classified = classify(tokenize(text), text, EXCHANGE)

        assert [c.pnl_anchor for c in classified] == [True, False, False]
        assert [c.size_anchor for c in classified] == [False, True, False]
        assert [c.entry_anchor for c in classified] == [False, False, True]
        assert [c.lot_sized for c in classified] == [False, True, False]

    def test_no_tokens(self):
        result = assign_roles([], GENERIC_RULES)

        assert result.position_size == 0.1
        assert result.loss_amount == 0.0
        assert result.entry_price == 0.0
