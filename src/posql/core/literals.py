"""
Literal normalization.

Turns the raw text of literal tokens into exact IR values. Numbers keep every
digit they were written with; when a literal carries more significant digits
than the precision ceiling allows, normalization fails instead of rounding.

Usage:
    from posql.core.literals import normalize_number

    normalize_number("123.450")
    # DecimalLiteral(value=123450, scale=3, precision=6)
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from .config import DEFAULT_LIMITS, ParserLimits
from .errors import (
    IntegerOutOfRangeError,
    InvalidNumericLiteralError,
    InvalidTimestampError,
    PrecisionExceededError,
)
from .ir.literals import (
    BooleanLiteral,
    DecimalLiteral,
    IntegerLiteral,
    TextLiteral,
    TimestampLiteral,
    TimeUnit,
)
from .ir.query import U64_MAX
from .source import Span

_NUMBER_RE = re.compile(r"([+-]?)([0-9]+)(?:\.([0-9]+))?")

_TIMESTAMP_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})[Tt ]"
    r"([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(?:\.([0-9]+))?"
    r"([Zz]|[+-][0-9]{2}:[0-9]{2})"
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_FRACTION_UNITS: list[tuple[int, TimeUnit]] = [
    (0, TimeUnit.SECOND),
    (3, TimeUnit.MILLISECOND),
    (6, TimeUnit.MICROSECOND),
    (9, TimeUnit.NANOSECOND),
]

_NO_SPAN = Span(0, 0)

# Digits in 2**64 - 1
_U64_DIGITS = 20


def normalize_number(
    text: str,
    span: Span = _NO_SPAN,
    limits: ParserLimits = DEFAULT_LIMITS,
) -> IntegerLiteral | DecimalLiteral:
    """Normalize numeric literal text into an exact value.

    Text without a fractional part becomes an IntegerLiteral; text with one
    becomes a DecimalLiteral whose scale is the number of fractional digits,
    trailing zeros included.

    Args:
        text: Literal text, ``[+-]digits[.digits]``
        span: Location of the literal, for errors
        limits: Supplies the precision ceiling

    Raises:
        InvalidNumericLiteralError: If the text is not a plain decimal numeral
        PrecisionExceededError: If the literal has too many significant digits
    """
    m = _NUMBER_RE.fullmatch(text)
    if m is None:
        raise InvalidNumericLiteralError(text, span)

    sign, int_part, frac_part = m.group(1), m.group(2), m.group(3) or ""
    significant = len(int_part.lstrip("0"))
    precision = max(significant + len(frac_part), 1)
    if precision > limits.max_decimal_precision:
        raise PrecisionExceededError(precision, limits.max_decimal_precision, span)

    value = int((int_part.lstrip("0") + frac_part) or "0")
    if sign == "-":
        value = -value

    if not frac_part:
        return IntegerLiteral(value=value)
    return DecimalLiteral(value=value, scale=len(frac_part), precision=precision)


def normalize_unsigned(text: str, span: Span = _NO_SPAN) -> int:
    """Normalize a LIMIT/OFFSET count: a whole number in ``0..2**64-1``.

    Raises:
        InvalidNumericLiteralError: If the text has a fractional part
        IntegerOutOfRangeError: If the value is negative or too large
    """
    m = _NUMBER_RE.fullmatch(text)
    if m is None or m.group(3) is not None:
        raise InvalidNumericLiteralError(text, span)

    digits = m.group(2).lstrip("0") or "0"
    if len(digits) > _U64_DIGITS:
        raise IntegerOutOfRangeError(text, U64_MAX, span)

    value = int(digits)
    if (m.group(1) == "-" and value) or value > U64_MAX:
        raise IntegerOutOfRangeError(text, U64_MAX, span)
    return value


def normalize_boolean(text: str) -> BooleanLiteral:
    """TRUE/FALSE keyword text, in any case."""
    return BooleanLiteral(value=text.lower() == "true")


def normalize_text(value: str) -> TextLiteral:
    """String token value; the lexer has already resolved ``''`` escapes."""
    return TextLiteral(value=value)


def normalize_timestamp(text: str, span: Span = _NO_SPAN) -> TimestampLiteral:
    """Normalize the string of a ``TIMESTAMP '...'`` literal.

    Accepts RFC 3339 only: ``YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)``
    with up to nine fraction digits. The fraction length picks the unit
    (none: second, 1-3: millisecond, 4-6: microsecond, 7-9: nanosecond) and
    ``epoch`` counts that unit since the Unix epoch in UTC.

    Raises:
        InvalidTimestampError: If the text is malformed or not a real instant
    """
    m = _TIMESTAMP_RE.fullmatch(text)
    if m is None:
        raise InvalidTimestampError(
            text, "expected YYYY-MM-DDTHH:MM:SS[.fraction](Z|+HH:MM|-HH:MM)", span
        )

    year, month, day, hour, minute, second = (int(g) for g in m.group(1, 2, 3, 4, 5, 6))
    fraction = m.group(7) or ""
    zone = m.group(8)

    if len(fraction) > 9:
        raise InvalidTimestampError(text, "at most 9 fractional digits are supported", span)

    try:
        local = datetime(year, month, day, hour, minute, second, tzinfo=UTC)
    except ValueError as e:
        raise InvalidTimestampError(text, str(e), span) from e

    offset_seconds = 0
    if zone not in ("Z", "z"):
        offset_hours, offset_minutes = int(zone[1:3]), int(zone[4:6])
        if offset_hours > 23 or offset_minutes > 59:
            raise InvalidTimestampError(text, "UTC offset out of range", span)
        offset_seconds = offset_hours * 3600 + offset_minutes * 60
        if zone[0] == "-":
            offset_seconds = -offset_seconds

    seconds = (local - _EPOCH) // timedelta(seconds=1) - offset_seconds

    digits, unit = next((d, u) for d, u in _FRACTION_UNITS if d >= len(fraction))
    scaled_fraction = int(fraction.ljust(digits, "0")) if digits else 0
    epoch = seconds * 10**digits + scaled_fraction

    return TimestampLiteral(epoch=epoch, unit=unit, offset_seconds=offset_seconds)
