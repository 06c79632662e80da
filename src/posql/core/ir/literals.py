"""
Literal value types for the posql IR.

Numeric literals are exact. A decimal is an unscaled integer plus a scale
(minor units, as with money): 123.450 is
``DecimalLiteral(value=123450, scale=3, precision=6)``. Nothing is ever held
as a float.

Large integers are encoded as decimal strings in the interchange form so that
consumers without arbitrary-precision JSON numbers read them exactly.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from ..config import MAX_DECIMAL_PRECISION

_MAX_MAGNITUDE = 10**MAX_DECIMAL_PRECISION


def _within_precision(value: int) -> int:
    if abs(value) >= _MAX_MAGNITUDE:
        raise ValueError(f"value has more than {MAX_DECIMAL_PRECISION} digits")
    return value


class BooleanLiteral(BaseModel):
    """TRUE or FALSE."""

    kind: Literal["boolean"] = "boolean"
    value: bool

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return "TRUE" if self.value else "FALSE"


class IntegerLiteral(BaseModel):
    """A whole number, arbitrary precision up to the digit ceiling."""

    kind: Literal["integer"] = "integer"
    value: int

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("value")
    @classmethod
    def _check_magnitude(cls, value: int) -> int:
        return _within_precision(value)

    @field_serializer("value")
    def _serialize_value(self, value: int) -> str:
        return str(value)

    def __str__(self) -> str:
        return str(self.value)


class DecimalLiteral(BaseModel):
    """
    An exact decimal: ``value * 10**-scale``.

    Attributes:
        value: Unscaled signed integer (all digits of the literal)
        scale: Number of fractional digits, trailing zeros included
        precision: Significant integer digits plus scale (at least 1)
    """

    kind: Literal["decimal"] = "decimal"
    value: int = Field(description="Unscaled digits")
    scale: int = Field(ge=0, le=MAX_DECIMAL_PRECISION, description="Digits after the decimal point")
    precision: int = Field(ge=1, le=MAX_DECIMAL_PRECISION, description="Total significant digits")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("value")
    @classmethod
    def _check_magnitude(cls, value: int) -> int:
        return _within_precision(value)

    @model_validator(mode="after")
    def _check_precision(self) -> DecimalLiteral:
        expected = max(len(str(abs(self.value))), self.scale)
        if self.precision != expected:
            raise ValueError(
                f"precision {self.precision} does not match value {self.value} "
                f"at scale {self.scale} (expected {expected})"
            )
        return self

    @field_serializer("value")
    def _serialize_value(self, value: int) -> str:
        return str(value)

    def __str__(self) -> str:
        digits = str(abs(self.value))
        if self.scale:
            digits = digits.rjust(self.scale + 1, "0")
            digits = f"{digits[: -self.scale]}.{digits[-self.scale :]}"
        return f"-{digits}" if self.value < 0 else digits


class TextLiteral(BaseModel):
    """A single-quoted string, with escapes already resolved."""

    kind: Literal["text"] = "text"
    value: str

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        escaped = self.value.replace("'", "''")
        return f"'{escaped}'"


class TimeUnit(StrEnum):
    """Resolution of a timestamp literal, chosen by its fraction digits."""

    SECOND = "second"
    MILLISECOND = "millisecond"
    MICROSECOND = "microsecond"
    NANOSECOND = "nanosecond"

    @property
    def digits(self) -> int:
        return _UNIT_DIGITS[self]


_UNIT_DIGITS: dict[TimeUnit, int] = {
    TimeUnit.SECOND: 0,
    TimeUnit.MILLISECOND: 3,
    TimeUnit.MICROSECOND: 6,
    TimeUnit.NANOSECOND: 9,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Wall-clock seconds since the epoch that datetime can represent
_MIN_LOCAL_SECONDS = (datetime(1, 1, 1, tzinfo=UTC) - _EPOCH) // timedelta(seconds=1)
_MAX_LOCAL_SECONDS = (datetime(9999, 12, 31, 23, 59, 59, tzinfo=UTC) - _EPOCH) // timedelta(
    seconds=1
)


class TimestampLiteral(BaseModel):
    """
    An instant written as ``TIMESTAMP '2024-03-01T12:00:00.250+01:00'``.

    Attributes:
        epoch: The UTC instant as a count of ``unit`` since 1970-01-01T00:00:00Z
        unit: Resolution of ``epoch``
        offset_seconds: UTC offset the literal was written in
    """

    kind: Literal["timestamp"] = "timestamp"
    epoch: int
    unit: TimeUnit
    offset_seconds: int = Field(ge=-86399, le=86399)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_range(self) -> TimestampLiteral:
        local = self.epoch // 10**self.unit.digits + self.offset_seconds
        if not _MIN_LOCAL_SECONDS <= local <= _MAX_LOCAL_SECONDS:
            raise ValueError(
                f"epoch {self.epoch} ({self.unit}) is outside years 0001-9999 "
                f"at offset {self.offset_seconds}s"
            )
        return self

    @field_serializer("epoch")
    def _serialize_epoch(self, epoch: int) -> str:
        return str(epoch)

    def to_rfc3339(self) -> str:
        """Render the instant in its original offset, at its own resolution."""
        per_second = 10**self.unit.digits
        seconds, fraction = divmod(self.epoch, per_second)
        local = _EPOCH + timedelta(seconds=seconds + self.offset_seconds)

        text = (
            f"{local.year:04d}-{local.month:02d}-{local.day:02d}"
            f"T{local.hour:02d}:{local.minute:02d}:{local.second:02d}"
        )
        if self.unit.digits:
            text += "." + str(fraction).rjust(self.unit.digits, "0")

        if self.offset_seconds == 0:
            return text + "Z"
        sign = "+" if self.offset_seconds > 0 else "-"
        hours, minutes = divmod(abs(self.offset_seconds) // 60, 60)
        return f"{text}{sign}{hours:02d}:{minutes:02d}"

    def __str__(self) -> str:
        return f"TIMESTAMP '{self.to_rfc3339()}'"


LiteralExpr = BooleanLiteral | IntegerLiteral | DecimalLiteral | TextLiteral | TimestampLiteral
