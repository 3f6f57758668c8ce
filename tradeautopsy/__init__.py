"""TradeAutopsy - reconstruct trades from OCR'd trading screenshots."""

__version__ = "0.1.0"
