"""
Parser limits and their configuration sources.

The defaults are the hard ceilings of the dialect. Limits can be tightened
(never loosened) per call, from the environment, or from a TOML file:

    POSQL_MAX_IDENTIFIER_LENGTH=32 posql parse "SELECT a FROM t"

    # posql.toml
    [limits]
    max_nesting_depth = 32

Usage:
    from posql.core.config import load_limits

    limits = load_limits()
    query = parse(sql, limits=limits)
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MAX_IDENTIFIER_LENGTH = 64
MAX_DECIMAL_PRECISION = 75
MAX_NESTING_DEPTH = 100
DEFAULT_NESTING_DEPTH = 64

# Environment variable names, keyed by ParserLimits field
ENV_VARS: dict[str, str] = {
    "max_identifier_length": "POSQL_MAX_IDENTIFIER_LENGTH",
    "max_decimal_precision": "POSQL_MAX_DECIMAL_PRECISION",
    "max_nesting_depth": "POSQL_MAX_NESTING_DEPTH",
}


class ParserLimits(BaseModel):
    """
    Bounds enforced while parsing.

    Attributes:
        max_identifier_length: Longest accepted identifier, in characters
        max_decimal_precision: Most significant digits in a numeric literal
        max_nesting_depth: Deepest accepted expression nesting
    """

    max_identifier_length: int = Field(default=MAX_IDENTIFIER_LENGTH, ge=1, le=MAX_IDENTIFIER_LENGTH)
    max_decimal_precision: int = Field(default=MAX_DECIMAL_PRECISION, ge=1, le=MAX_DECIMAL_PRECISION)
    max_nesting_depth: int = Field(default=DEFAULT_NESTING_DEPTH, ge=1, le=MAX_NESTING_DEPTH)

    model_config = ConfigDict(frozen=True, extra="forbid")


DEFAULT_LIMITS = ParserLimits()


def load_limits(environ: dict[str, str] | None = None) -> ParserLimits:
    """Build limits from ``POSQL_*`` environment variables.

    Unset variables keep their defaults. Values that are not integers or fall
    outside the allowed range are ignored with a warning.

    Args:
        environ: Mapping to read instead of ``os.environ``
    """
    env = os.environ if environ is None else environ
    values: dict[str, int] = {}

    for field_name, var in ENV_VARS.items():
        raw = env.get(var, "").strip()
        if not raw:
            continue
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", var, raw)
            continue

        try:
            ParserLimits(**{field_name: value})
        except ValidationError:
            logger.warning(
                "Ignoring %s=%d: outside the allowed range, using default %d",
                var,
                value,
                ParserLimits.model_fields[field_name].default,
            )
            continue
        values[field_name] = value

    return ParserLimits(**values)


def load_limits_file(path: Path) -> ParserLimits:
    """Read limits from the ``[limits]`` table of a TOML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the table contains unknown keys or out-of-range values
    """
    with open(path, "rb") as f:
        config = tomllib.load(f)

    table = config.get("limits", {})
    try:
        return ParserLimits(**table)
    except ValidationError as e:
        raise ValueError(f"Invalid [limits] in {path}: {e}") from e
