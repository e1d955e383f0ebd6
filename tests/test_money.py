"""Tests for money and point helpers."""
from decimal import Decimal

import pytest

from homeledger.errors import InvalidAmount
from homeledger.utils.money import (
    cash_from_points,
    currency_quantum,
    format_currency,
    format_duration,
    points_from_cash,
    round_currency,
    to_decimal,
    to_points,
)


class TestToDecimal:
    """Test input conversion."""

    def test_accepts_numbers_and_strings(self):
        """Test ints, floats, strings and decimals convert."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("12.50") == Decimal("12.50")
        assert to_decimal(" 3 ") == Decimal("3")
        assert to_decimal(Decimal("1.1")) == Decimal("1.1")

    def test_float_keeps_written_value(self):
        """Test floats convert through their repr, not their binary value."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(10.07) == Decimal("10.07")

    @pytest.mark.parametrize("value", ["1e5000", "1e16", "-1e16", 10 ** 20])
    def test_rejects_huge_values(self, value):
        """Test amounts of 10**16 or more are out of range."""
        with pytest.raises(InvalidAmount):
            to_decimal(value)

    def test_accepts_large_values_in_range(self):
        """Test amounts just under the limit still convert."""
        assert to_decimal("9999999999999999") == Decimal("9999999999999999")

    @pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity", True, None, [1]])
    def test_rejects_non_numbers(self, value):
        """Test anything that is not a finite number fails."""
        with pytest.raises(InvalidAmount):
            to_decimal(value)


class TestToPoints:
    """Test point count validation."""

    def test_accepts_non_negative_int(self):
        """Test whole, non-negative counts pass through."""
        assert to_points(0) == 0
        assert to_points(42) == 42

    @pytest.mark.parametrize("value", [-1, 2.0, "3", False, 10 ** 16])
    def test_rejects_invalid(self, value):
        """Test negative, fractional, non-int and oversized counts fail."""
        with pytest.raises(InvalidAmount):
            to_points(value)


class TestPointConversion:
    """Test cash/point conversion."""

    def test_points_round_down(self):
        """Test fractional points are dropped."""
        assert points_from_cash(Decimal("10.07"), Decimal("1.0")) == 10
        assert points_from_cash(Decimal("0.99"), Decimal("0.25")) == 3
        assert points_from_cash(Decimal("20"), Decimal("0.25")) == 80
        assert points_from_cash(Decimal("25"), Decimal("0.10")) == 250

    def test_points_floor_is_exact(self):
        """Test quotients past the context precision are not rounded up first."""
        assert points_from_cash(Decimal("9.99999999999999999999999999999"), Decimal("1")) == 9
        assert points_from_cash(Decimal("0.999999999999999999999999999999"), Decimal("0.1")) == 9

    def test_points_overflow(self):
        """Test point counts beyond the context precision are rejected."""
        with pytest.raises(InvalidAmount):
            points_from_cash(Decimal("1e15"), Decimal("1e-20"))

    def test_cash_from_points_exact(self):
        """Test point value is an exact product."""
        assert cash_from_points(40, Decimal("0.25")) == Decimal("10")
        assert cash_from_points(3, Decimal("0.333")) == Decimal("0.999")


class TestCurrency:
    """Test rounding and formatting."""

    def test_quantum(self):
        """Test the smallest currency unit follows the precision."""
        assert currency_quantum(2) == Decimal("0.01")
        assert currency_quantum(1) == Decimal("0.1")

    def test_round_half_up(self):
        """Test half cents round away from zero."""
        assert round_currency("2.345") == Decimal("2.35")
        assert round_currency("2.344") == Decimal("2.34")
        assert round_currency("-2.345") == Decimal("-2.35")

    def test_format_currency(self):
        """Test display formatting."""
        assert format_currency(Decimal("40")) == "$40.00"
        assert format_currency("-5.5") == "-$5.50"
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(3, symbol="€") == "€3.00"


class TestFormatDuration:
    """Test duration formatting."""

    def test_hours_minutes_seconds(self):
        assert format_duration(3723) == "1h 2m 3s"

    def test_minutes_seconds(self):
        assert format_duration(125) == "2m 5s"

    def test_seconds_only(self):
        assert format_duration(7) == "7s"

    def test_negative_is_zero(self):
        assert format_duration(-5) == "0s"
