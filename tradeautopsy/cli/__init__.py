"""CLI commands for TradeAutopsy.

This package provides the command-line interface for running trade
inference over OCR text files.
"""

from tradeautopsy.cli.main import cli, main

__all__ = ["cli", "main"]
