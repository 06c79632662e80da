"""Shared pytest fixtures for posql tests."""

import pytest

from posql.core import ir
from posql.core.config import ParserLimits
from posql.core.parser import parse

FULL_QUERY = (
    "SELECT a, SUM(b * 2) AS total, COUNT(*) AS n "
    "FROM sxt.orders AS o "
    "WHERE a >= 10 AND NOT (b = 'x') OR c < 1.50 "
    "GROUP BY a "
    "ORDER BY total DESC, a "
    "LIMIT 10 OFFSET 5;"
)


@pytest.fixture
def full_query_text() -> str:
    """Query text exercising every clause."""
    return FULL_QUERY


@pytest.fixture
def full_query() -> ir.Query:
    """Parsed form of ``full_query_text``."""
    return parse(FULL_QUERY)


@pytest.fixture
def tight_limits() -> ParserLimits:
    """Limits well below the defaults, for boundary tests."""
    return ParserLimits(max_identifier_length=8, max_decimal_precision=5, max_nesting_depth=3)
