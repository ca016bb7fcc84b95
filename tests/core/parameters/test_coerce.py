from __future__ import annotations

import pytest

from glosskit.core.parameters.coerce import (
    clamp_int,
    coerce_choice,
    coerce_float,
    coerce_name,
    coerce_non_negative_float,
    coerce_non_negative_int,
    coerce_text,
    normalize_dimension,
    parse_int_prefix,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12px", 12), (" -3 ", -3), ("+7", 7), (9, 9), (4.8, 4), ("px", None), ("", None), (None, None), (True, None)],
)
def test_parse_int_prefix(value, expected) -> None:
    assert parse_int_prefix(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("16", 16), ("4", 8), ("500", 120), ("24px", 24), ("abc", 16), ("", 16)],
)
def test_clamp_int_font_size_range(value, expected: int) -> None:
    assert clamp_int(value, 8, 120, 16) == expected


def test_coerce_float() -> None:
    assert coerce_float("12.5", 0.0) == 12.5
    assert coerce_float("150", 0.0, lo=0.0, hi=100.0) == 100.0
    assert coerce_float("-1", 5.0, lo=0.0) == 0.0
    assert coerce_float("x", 5.0) == 5.0
    assert coerce_float("inf", 5.0) == 5.0
    assert coerce_float(None, 5.0) == 5.0
    assert coerce_float(False, 5.0) == 5.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [("200", 200.0), (" 64.5 ", 64.5), ("", 176.0), ("abc", 176.0), ("0", 176.0), ("-10", 176.0), (None, 176.0)],
)
def test_normalize_dimension(value, expected: float) -> None:
    assert normalize_dimension(value, 176.0) == expected


def test_coerce_non_negative_int() -> None:
    assert coerce_non_negative_int("12", 3) == 12
    assert coerce_non_negative_int(0, 3) == 0
    assert coerce_non_negative_int(-1, 3) == 3
    assert coerce_non_negative_int("x", 3) == 3
    assert coerce_non_negative_int(True, 3) == 3
    assert coerce_non_negative_int(float("nan"), 3) == 3


def test_coerce_non_negative_float() -> None:
    assert coerce_non_negative_float("2.5", 1.0) == 2.5
    assert coerce_non_negative_float(0, 1.0) == 0.0
    assert coerce_non_negative_float("-2", 1.0) == 1.0
    assert coerce_non_negative_float("nope", 1.0) == 1.0


def test_coerce_choice_text_and_name() -> None:
    choices = ("flex-start", "center", "flex-end")
    assert coerce_choice(" flex-end ", choices, "center") == "flex-end"
    assert coerce_choice("left", choices, "center") == "center"
    assert coerce_choice(3, choices, "center") == "center"

    assert coerce_text("", "fallback") == ""
    assert coerce_text(12, "fallback") == "fallback"

    assert coerce_name("  Inter ", "x") == "Inter"
    assert coerce_name("   ", "x") == "x"
    assert coerce_name(None, "x") == "x"
