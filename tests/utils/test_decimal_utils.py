# tests/utils/test_decimal_utils.py
"""
Tests for exact decimal helpers.

Test Coverage:
- to_decimal: accepted inputs, float / non-finite rejection
- normalize_decimal: canonical string form
- round_decimal: half-up rounding
- percentage_change: two decimals, N/A on zero base
"""

from decimal import Decimal

import pytest

from worthline.services.exceptions import InvalidDecimalError, ValidationError
from worthline.utils.decimal_utils import (
    PERCENTAGE_NOT_AVAILABLE,
    normalize_decimal,
    percentage_change,
    round_decimal,
    to_decimal,
)


class TestToDecimal:
    """Tests for to_decimal()."""

    def test_parses_string_exactly(self):
        """Decimal strings keep every digit."""
        assert to_decimal("100.50") == Decimal("100.50")
        assert to_decimal("0.1") + to_decimal("0.2") == Decimal("0.3")

    def test_strips_whitespace(self):
        assert to_decimal("  42 ") == Decimal("42")

    def test_accepts_int_and_decimal(self):
        assert to_decimal(7) == Decimal("7")
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")

    def test_rejects_float(self):
        """Floats would bring binary rounding error."""
        with pytest.raises(InvalidDecimalError):
            to_decimal(0.1)

    def test_rejects_bool(self):
        with pytest.raises(InvalidDecimalError):
            to_decimal(True)

    @pytest.mark.parametrize("value", ["abc", "", "1,000", "NaN", "Infinity", "-inf"])
    def test_rejects_garbage_and_non_finite(self, value):
        with pytest.raises(InvalidDecimalError):
            to_decimal(value)

    def test_error_carries_field(self):
        """Error is a ValidationError naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            to_decimal("x", field="amount")
        assert exc_info.value.field == "amount"


class TestNormalizeDecimal:
    """Tests for normalize_decimal()."""

    @pytest.mark.parametrize("value,expected", [
        ("100.50", "100.5"),
        ("12.0", "12"),
        ("12.000", "12"),
        ("1000", "1000"),
        ("1E+3", "1000"),
        ("0.000001", "0.000001"),
        ("-0", "0"),
        ("-0.00", "0"),
        ("0E-8", "0"),
        ("-5.250", "-5.25"),
    ])
    def test_canonical_form(self, value, expected):
        assert normalize_decimal(Decimal(value)) == expected

    def test_never_uses_exponent(self):
        """Very small values are written out in full."""
        assert normalize_decimal(Decimal("1E-10")) == "0.0000000001"


class TestRoundDecimal:
    """Tests for round_decimal()."""

    def test_half_up(self):
        assert round_decimal(Decimal("2.345"), 2) == Decimal("2.35")
        assert round_decimal(Decimal("2.344"), 2) == Decimal("2.34")

    def test_half_away_from_zero_for_negatives(self):
        assert round_decimal(Decimal("-2.345"), 2) == Decimal("-2.35")

    def test_zero_places(self):
        assert round_decimal(Decimal("2.5"), 0) == Decimal("3")

    def test_negative_places_rejected(self):
        with pytest.raises(ValueError):
            round_decimal(Decimal("1"), -1)


class TestPercentageChange:
    """Tests for percentage_change()."""

    def test_gain(self):
        assert percentage_change(Decimal("100"), Decimal("150")) == "50.00"

    def test_loss(self):
        assert percentage_change(Decimal("300"), Decimal("200")) == "-33.33"

    def test_unchanged(self):
        assert percentage_change(Decimal("80"), Decimal("80")) == "0.00"

    def test_tiny_loss_is_not_negative_zero(self):
        """A change that rounds to zero is reported as 0.00, not -0.00."""
        assert percentage_change(Decimal("100000"), Decimal("99999.999")) == "0.00"

    def test_zero_initial_is_not_available(self):
        assert percentage_change(Decimal("0"), Decimal("10")) == PERCENTAGE_NOT_AVAILABLE
        assert PERCENTAGE_NOT_AVAILABLE == "N/A"

    def test_half_up_rounding(self):
        """1/8 = 12.5% exactly; 1/3 rounds to 33.33."""
        assert percentage_change(Decimal("8"), Decimal("9")) == "12.50"
        assert percentage_change(Decimal("3"), Decimal("4")) == "33.33"
