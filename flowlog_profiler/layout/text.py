"""
Label measurement and wrapping.

There is no canvas to measure glyphs against, so text extent is estimated from
an average glyph width; East Asian wide and fullwidth characters count double.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass


@dataclass(frozen=True)
class TextMetrics:
    """Approximate metrics for a single proportional font size."""

    font_size: float = 12.0
    char_width: float = 7.0

    def measure(self, text: str) -> float:
        width = 0.0
        for ch in str(text):
            if unicodedata.combining(ch):
                continue
            wide = unicodedata.east_asian_width(ch) in ("W", "F")
            width += self.char_width * (2 if wide else 1)
        return width


def wrap_lines(text: str, max_width: float, metrics: TextMetrics) -> list[str]:
    """Greedy word wrap.

    Words are joined while the line still fits; a single word wider than
    ``max_width`` stays on its own line unbroken. Empty text yields ``[""]``.
    """
    words = str(text).split()
    if not words:
        return [""]

    lines = []
    cur = words[0]
    for word in words[1:]:
        candidate = f"{cur} {word}"
        if metrics.measure(candidate) <= max_width:
            cur = candidate
        else:
            lines.append(cur)
            cur = word
    lines.append(cur)
    return lines


def fmt_num(value: float) -> str:
    """Compact fixed-point rendering for drawing coordinates (at most 2 decimals)."""
    s = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s
