"""Text normalization applied before any row parsing."""

import re

# Box-drawing block, pipes and the broken bar OCR produces for table rules.
_TABLE_CHARS = re.compile("[\u2500-\u257f|\u00a6]")
_CONTROL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SPACES = re.compile("[ \t\u00a0\u2000-\u200b\u202f\u3000]+")

_MINUS_SIGNS = str.maketrans({
    "\u2212": "-",
    "\u2012": "-",
    "\u2013": "-",
    "\ufe63": "-",
    "\uff0d": "-",
})


def normalize_text(text: str) -> str:
    """Clean OCR text while keeping its line structure.

    Table-drawing characters become spaces, unicode minus variants become
    ``-``, control characters are dropped and runs of whitespace inside a
    line collapse to a single space.

    Args:
        text: Raw OCR text.

    Returns:
        Normalized text with one trimmed row per line.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.translate(_MINUS_SIGNS)
    text = _CONTROL_CHARS.sub("", text)
    text = _TABLE_CHARS.sub(" ", text)

    return "\n".join(_SPACES.sub(" ", line).strip() for line in text.split("\n"))


def normalize_lines(text: str) -> list[str]:
    """Normalize text and split it into lines."""
    return normalize_text(text).split("\n")
