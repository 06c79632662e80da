"""Tests for literal normalization and literal IR types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from posql.core.config import ParserLimits
from posql.core.errors import (
    IntegerOutOfRangeError,
    InvalidNumericLiteralError,
    InvalidTimestampError,
    PrecisionExceededError,
)
from posql.core.ir import (
    U64_MAX,
    BooleanLiteral,
    DecimalLiteral,
    IntegerLiteral,
    TextLiteral,
    TimestampLiteral,
    TimeUnit,
)
from posql.core.literals import (
    normalize_boolean,
    normalize_number,
    normalize_text,
    normalize_timestamp,
    normalize_unsigned,
)

JAN_1_2024 = 1704067200


# ============================================================================
# Numbers
# ============================================================================


class TestNormalizeNumber:
    """Numeric literals keep every digit."""

    def test_integer(self) -> None:
        assert normalize_number("42") == IntegerLiteral(value=42)

    def test_negative_integer(self) -> None:
        assert normalize_number("-42") == IntegerLiteral(value=-42)

    def test_leading_zeros(self) -> None:
        assert normalize_number("007") == IntegerLiteral(value=7)

    def test_negative_zero(self) -> None:
        assert normalize_number("-0") == IntegerLiteral(value=0)

    def test_decimal_keeps_trailing_zeros(self) -> None:
        assert normalize_number("123.450") == DecimalLiteral(value=123450, scale=3, precision=6)

    def test_small_decimal(self) -> None:
        assert normalize_number("0.001") == DecimalLiteral(value=1, scale=3, precision=3)

    def test_negative_decimal(self) -> None:
        assert normalize_number("-1.5") == DecimalLiteral(value=-15, scale=1, precision=2)

    def test_zero_decimal(self) -> None:
        assert normalize_number("0.00") == DecimalLiteral(value=0, scale=2, precision=2)

    def test_decimal_distinct_from_integer(self) -> None:
        assert normalize_number("1.0") != normalize_number("1")

    def test_max_precision_integer(self) -> None:
        result = normalize_number("9" * 75)
        assert result == IntegerLiteral(value=int("9" * 75))

    def test_precision_exceeded_integer(self) -> None:
        with pytest.raises(PrecisionExceededError) as exc:
            normalize_number("9" * 76)
        assert exc.value.digits == 76
        assert exc.value.limit == 75

    def test_precision_exceeded_decimal(self) -> None:
        with pytest.raises(PrecisionExceededError):
            normalize_number("1." + "0" * 75)

    def test_leading_zeros_do_not_count(self) -> None:
        assert normalize_number("0" * 80 + "1") == IntegerLiteral(value=1)

    def test_thousands_of_leading_zeros(self) -> None:
        result = normalize_number("0" * 5000 + "1.5")
        assert result == DecimalLiteral(value=15, scale=1, precision=2)

    def test_zero_padded_zero(self) -> None:
        assert normalize_number("0" * 5000) == IntegerLiteral(value=0)

    def test_custom_precision_limit(self) -> None:
        limits = ParserLimits(max_decimal_precision=5)
        assert normalize_number("12345", limits=limits) == IntegerLiteral(value=12345)
        with pytest.raises(PrecisionExceededError, match="6 significant digits, maximum is 5"):
            normalize_number("123.456", limits=limits)

    def test_not_a_number(self) -> None:
        with pytest.raises(InvalidNumericLiteralError):
            normalize_number("abc")

    def test_exponent_not_accepted(self) -> None:
        with pytest.raises(InvalidNumericLiteralError):
            normalize_number("1e5")


class TestNormalizeUnsigned:
    """LIMIT and OFFSET counts."""

    def test_value(self) -> None:
        assert normalize_unsigned("10") == 10

    def test_max(self) -> None:
        assert normalize_unsigned(str(U64_MAX)) == U64_MAX

    def test_too_large(self) -> None:
        with pytest.raises(IntegerOutOfRangeError):
            normalize_unsigned(str(U64_MAX + 1))

    def test_negative(self) -> None:
        with pytest.raises(IntegerOutOfRangeError) as exc:
            normalize_unsigned("-1")
        assert exc.value.text == "-1"

    def test_leading_zeros(self) -> None:
        assert normalize_unsigned("0" * 5000 + "7") == 7

    def test_thousands_of_digits(self) -> None:
        text = "1" + "0" * 5000
        with pytest.raises(IntegerOutOfRangeError) as exc:
            normalize_unsigned(text)
        assert exc.value.text == text
        assert "(5001 characters)" in exc.value.message
        assert len(exc.value.message) < 100

    def test_negative_zero(self) -> None:
        assert normalize_unsigned("-0") == 0

    def test_fraction(self) -> None:
        with pytest.raises(InvalidNumericLiteralError):
            normalize_unsigned("1.5")


class TestOtherLiterals:
    def test_boolean(self) -> None:
        assert normalize_boolean("TRUE") == BooleanLiteral(value=True)
        assert normalize_boolean("false") == BooleanLiteral(value=False)

    def test_text(self) -> None:
        assert normalize_text("O'Brien") == TextLiteral(value="O'Brien")
        assert str(TextLiteral(value="O'Brien")) == "'O''Brien'"


# ============================================================================
# Timestamps
# ============================================================================


class TestNormalizeTimestamp:
    """RFC 3339 timestamps resolve to an exact instant."""

    def test_epoch(self) -> None:
        result = normalize_timestamp("1970-01-01T00:00:00Z")
        assert result == TimestampLiteral(epoch=0, unit=TimeUnit.SECOND, offset_seconds=0)

    def test_offset_is_applied(self) -> None:
        result = normalize_timestamp("1970-01-01T01:00:00+01:00")
        assert result.epoch == 0
        assert result.offset_seconds == 3600

    def test_negative_offset(self) -> None:
        result = normalize_timestamp("1970-01-01T00:00:00-05:30")
        assert result.epoch == 19800
        assert result.offset_seconds == -19800

    def test_millisecond_unit(self) -> None:
        result = normalize_timestamp("2024-01-01T00:00:00.5Z")
        assert result.unit == TimeUnit.MILLISECOND
        assert result.epoch == JAN_1_2024 * 1000 + 500

    def test_microsecond_unit(self) -> None:
        result = normalize_timestamp("2024-01-01T00:00:00.1234Z")
        assert result.unit == TimeUnit.MICROSECOND
        assert result.epoch == JAN_1_2024 * 10**6 + 123400

    def test_nanosecond_unit(self) -> None:
        result = normalize_timestamp("2024-01-01T00:00:00.123456789Z")
        assert result.unit == TimeUnit.NANOSECOND
        assert result.epoch == JAN_1_2024 * 10**9 + 123456789

    def test_before_epoch(self) -> None:
        result = normalize_timestamp("1969-12-31T23:59:59.5Z")
        assert result.epoch == -500
        assert result.to_rfc3339() == "1969-12-31T23:59:59.500Z"

    def test_lowercase_and_space_separator(self) -> None:
        result = normalize_timestamp("2024-01-01 00:00:00z")
        assert result.to_rfc3339() == "2024-01-01T00:00:00Z"

    def test_rfc3339_keeps_offset(self) -> None:
        text = "2024-03-01T12:00:00.250+01:00"
        assert normalize_timestamp(text).to_rfc3339() == text

    def test_str(self) -> None:
        result = normalize_timestamp("2024-01-01T00:00:00Z")
        assert str(result) == "TIMESTAMP '2024-01-01T00:00:00Z'"

    def test_not_a_date(self) -> None:
        with pytest.raises(InvalidTimestampError) as exc:
            normalize_timestamp("2024-02-30T00:00:00Z")
        assert exc.value.text == "2024-02-30T00:00:00Z"

    def test_date_only(self) -> None:
        with pytest.raises(InvalidTimestampError, match="expected YYYY-MM-DD"):
            normalize_timestamp("2024-01-01")

    def test_missing_zone(self) -> None:
        with pytest.raises(InvalidTimestampError):
            normalize_timestamp("2024-01-01T00:00:00")

    def test_too_many_fraction_digits(self) -> None:
        with pytest.raises(InvalidTimestampError, match="at most 9"):
            normalize_timestamp("2024-01-01T00:00:00.1234567890Z")

    def test_offset_out_of_range(self) -> None:
        with pytest.raises(InvalidTimestampError, match="offset"):
            normalize_timestamp("2024-01-01T00:00:00+24:00")


# ============================================================================
# Literal models
# ============================================================================


class TestDecimalLiteral:
    def test_precision_must_match(self) -> None:
        with pytest.raises(ValidationError):
            DecimalLiteral(value=1, scale=0, precision=2)

    def test_str_small_negative(self) -> None:
        assert str(DecimalLiteral(value=-5, scale=2, precision=2)) == "-0.05"

    def test_str(self) -> None:
        assert str(DecimalLiteral(value=123450, scale=3, precision=6)) == "123.450"

    def test_scale_bounded(self) -> None:
        with pytest.raises(ValidationError):
            DecimalLiteral(value=1, scale=76, precision=76)

    def test_value_bounded(self) -> None:
        with pytest.raises(ValidationError, match="more than 75 digits"):
            DecimalLiteral(value=10**80, scale=0, precision=75)


class TestIntegerLiteral:
    def test_largest_value(self) -> None:
        assert str(IntegerLiteral(value=-(10**75 - 1))) == "-" + "9" * 75

    def test_value_bounded(self) -> None:
        with pytest.raises(ValidationError, match="more than 75 digits"):
            IntegerLiteral(value=10**75)


class TestTimestampLiteral:
    def test_range_ends_render(self) -> None:
        for text in ("0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59.999999999-01:00"):
            assert normalize_timestamp(text).to_rfc3339() == text

    def test_epoch_beyond_year_9999(self) -> None:
        with pytest.raises(ValidationError, match="outside years 0001-9999"):
            TimestampLiteral(epoch=10**20, unit=TimeUnit.SECOND, offset_seconds=0)

    def test_offset_pushes_out_of_range(self) -> None:
        first = normalize_timestamp("0001-01-01T00:00:00Z")
        with pytest.raises(ValidationError):
            TimestampLiteral(epoch=first.epoch, unit=TimeUnit.SECOND, offset_seconds=-1)
