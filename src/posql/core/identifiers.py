"""
Identifier normalization.

Unquoted identifiers are case-folded to lower case; quoted identifiers keep
their text exactly. Length is bounded and unquoted names may not collide with
reserved keywords.
"""

from __future__ import annotations

from .config import DEFAULT_LIMITS, ParserLimits
from .errors import EmptyIdentifierError, IdentifierTooLongError, ReservedKeywordError
from .ir.identifiers import Identifier
from .lexer import KEYWORDS
from .source import Span

_NO_SPAN = Span(0, 0)


def normalize_identifier(
    raw: str,
    quoted: bool,
    span: Span = _NO_SPAN,
    limits: ParserLimits = DEFAULT_LIMITS,
) -> Identifier:
    """
    Produce the canonical Identifier for raw identifier text.

    Args:
        raw: Identifier text without delimiting quotes (escapes resolved)
        quoted: Whether the text was written in double quotes
        span: Location of the identifier, for errors
        limits: Supplies the maximum identifier length

    Returns:
        Identifier with the normalized name

    Raises:
        EmptyIdentifierError: If the text is empty
        IdentifierTooLongError: If the text is longer than the limit
        ReservedKeywordError: If unquoted text is a reserved keyword
    """
    if not raw:
        raise EmptyIdentifierError(span)

    name = raw if quoted else raw.lower()
    if len(name) > limits.max_identifier_length:
        raise IdentifierTooLongError(len(name), limits.max_identifier_length, span)

    if not quoted and name in KEYWORDS:
        raise ReservedKeywordError(name, span)

    return Identifier(name=name)
