"""Tests for label measurement and wrapping."""

from __future__ import annotations

from flowlog_profiler.layout.text import TextMetrics, fmt_num, wrap_lines


class TestMeasure:
    def test_ascii(self):
        assert TextMetrics().measure("abc") == 21

    def test_wide_characters_count_double(self):
        assert TextMetrics().measure("漢字") == 28

    def test_combining_marks_ignored(self):
        assert TextMetrics().measure("é") == 7


class TestWrap:
    def test_greedy(self):
        assert wrap_lines("alpha beta gamma", 70, TextMetrics()) == ["alpha beta", "gamma"]

    def test_long_word_kept_whole(self):
        assert wrap_lines("x" * 50, 70, TextMetrics()) == ["x" * 50]

    def test_empty(self):
        assert wrap_lines("   ", 100, TextMetrics()) == [""]


class TestFmtNum:
    def test_trims(self):
        assert fmt_num(1.0) == "1"
        assert fmt_num(2.5) == "2.5"
        assert fmt_num(-0.001) == "0"
        assert fmt_num(1234567.125) == "1234567.12"
