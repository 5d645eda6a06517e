import math

import pytest

from ucsfe.numeric import format_decimal4, parse_decimal_str, round2, round_to


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1.234, 1.23),
        (1.235, 1.24),
        (1.0, 1.0),
        (0.0, 0.0),
        (-1.235, -1.24),
    ],
)
def test_round2_basic(value, expected):
    assert round2(value) == expected


def test_round_to():
    assert abs(round_to(1.2346, 2) - 1.23) < 1e-9
    assert abs(round_to(1.2345, 3) - 1.235) < 1e-9
    assert abs(round_to(0.0, 2) - 0.0) < 1e-9


def test_round_to_doc_example():
    assert abs(round_to(1.2346, 3) - 1.235) < 1e-9


def test_round_to_zero_decimals_matches_round2_scale():
    assert round_to(2.5, 0) == 3.0
    assert round_to(-2.5, 0) == -3.0


def test_round_to_negative_decimals_rejected():
    with pytest.raises(ValueError):
        round_to(1.0, -1)


def test_round_to_keeps_non_finite():
    assert math.isinf(round_to(math.inf, 2))


def test_parse_decimal_str():
    assert parse_decimal_str("1.23") == 1.23
    assert parse_decimal_str("") is None
    assert parse_decimal_str("abc") is None


def test_parse_decimal_str_trims_and_rejects_underscores():
    assert parse_decimal_str("  2.5 ") == 2.5
    assert parse_decimal_str("1_000") is None


def test_format_decimal4():
    assert format_decimal4(1.23) == "1.2300"
    assert format_decimal4(0.0) == "0.0000"
    assert format_decimal4(1.23456) == "1.2346"


def test_format_then_parse_round_trip():
    for value in (0.5, 12.25, -3.0625):
        assert parse_decimal_str(format_decimal4(value)) == value