"""Tests for money formatting and rounding helpers."""

import pytest

from fintrack.utils.formatting import format_inr, round_half_up


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "0"),
        (999, "999"),
        (2000, "2,000"),
        (123456, "1,23,456"),
        (1234567.5, "12,34,567.5"),
        (10.125, "10.125"),
        (-500, "-500"),
    ],
)
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(250.4) == 250
