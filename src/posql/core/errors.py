"""
Error types for posql lexing, parsing, normalization and decoding.

Every failure raised for malformed query text is a ``ParseError``. The set of
concrete variants is closed; callers branch on ``kind`` (lexical, syntactic,
semantic) or on ``code`` for the specific variant, and read the span and the
variant's payload attributes directly.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from .source import Span, char_index


class ErrorKind(StrEnum):
    """Stage at which parsing failed."""

    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"


class PosqlError(Exception):
    """Base exception for all posql errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DecodeError(PosqlError):
    """
    Raised when an interchange document cannot be decoded into a Query.

    Examples:
    - Invalid JSON
    - Unknown node kind
    - Missing or extra fields
    """

    pass


class ParseError(PosqlError):
    """
    Raised when query text cannot be turned into an AST.

    Subclasses set ``kind`` and ``code``. ``detail()`` returns the
    variant-specific payload.
    """

    kind: ClassVar[ErrorKind]
    code: ClassVar[str]

    def __init__(self, message: str, span: Span):
        self.span = span
        super().__init__(message)

    def detail(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Machine-readable form of the error."""
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "span": self.span.to_dict(),
            "detail": self.detail(),
        }

    def __str__(self) -> str:
        return f"{self.kind.value} error at {self.span}: {self.message}"


class LexicalError(ParseError):
    """Input text contains something that is not a token."""

    kind = ErrorKind.LEXICAL


class SyntacticError(ParseError):
    """Tokens do not form a query accepted by the grammar."""

    kind = ErrorKind.SYNTACTIC


class SemanticError(ParseError):
    """A well-formed token carries a value that cannot be normalized."""

    kind = ErrorKind.SEMANTIC


# ---------------------------------------------------------------------------
# Lexical variants
# ---------------------------------------------------------------------------


class UnexpectedCharacterError(LexicalError):
    code = "unexpected_character"

    def __init__(self, char: str, span: Span):
        self.char = char
        super().__init__(f"Unexpected character: {char!r}", span)

    def detail(self) -> dict[str, Any]:
        return {"char": self.char}


class UnterminatedLiteralError(LexicalError):
    code = "unterminated_literal"

    def __init__(self, literal: str, span: Span):
        self.literal = literal
        super().__init__(f"Unterminated {literal}", span)

    def detail(self) -> dict[str, Any]:
        return {"literal": self.literal}


class MalformedNumberError(LexicalError):
    code = "malformed_number"

    def __init__(self, text: str, span: Span):
        self.text = text
        super().__init__(
            f"Malformed numeric literal {text!r} (exponent notation is not supported)",
            span,
        )

    def detail(self) -> dict[str, Any]:
        return {"text": self.text}


class InvalidEncodingError(LexicalError):
    code = "invalid_encoding"

    def __init__(self, reason: str, span: Span):
        self.reason = reason
        super().__init__(f"Invalid UTF-8 input: {reason}", span)

    def detail(self) -> dict[str, Any]:
        return {"reason": self.reason}


# ---------------------------------------------------------------------------
# Syntactic variants
# ---------------------------------------------------------------------------


class UnexpectedTokenError(SyntacticError):
    code = "unexpected_token"

    def __init__(self, found: str, expected: tuple[str, ...], span: Span):
        self.found = found
        self.expected = expected
        if expected:
            wanted = ", ".join(expected)
            message = f"Unexpected {found}, expected one of {{{wanted}}}"
        else:
            message = f"Unexpected {found}"
        super().__init__(message, span)

    def detail(self) -> dict[str, Any]:
        return {"found": self.found, "expected": list(self.expected)}


class NestingTooDeepError(SyntacticError):
    code = "nesting_too_deep"

    def __init__(self, depth: int, limit: int, span: Span, measure: str = "nesting"):
        self.depth = depth
        self.limit = limit
        self.measure = measure
        if measure == "height":
            message = (
                f"Expression tree height {depth} exceeds max_nesting_depth {limit} "
                "(each chained operator adds a level)"
            )
        else:
            message = f"Expression nesting depth {depth} exceeds max_nesting_depth {limit}"
        super().__init__(message, span)

    def detail(self) -> dict[str, Any]:
        return {"depth": self.depth, "limit": self.limit, "measure": self.measure}


# ---------------------------------------------------------------------------
# Semantic variants
# ---------------------------------------------------------------------------


class PrecisionExceededError(SemanticError):
    code = "precision_exceeded"

    def __init__(self, digits: int, limit: int, span: Span):
        self.digits = digits
        self.limit = limit
        super().__init__(
            f"Numeric literal has {digits} significant digits, maximum is {limit}",
            span,
        )

    def detail(self) -> dict[str, Any]:
        return {"digits": self.digits, "limit": self.limit}


class InvalidNumericLiteralError(SemanticError):
    code = "invalid_numeric_literal"

    def __init__(self, text: str, span: Span):
        self.text = text
        super().__init__(f"Invalid numeric literal {text!r}", span)

    def detail(self) -> dict[str, Any]:
        return {"text": self.text}


class IntegerOutOfRangeError(SemanticError):
    code = "integer_out_of_range"

    def __init__(self, text: str, maximum: int, span: Span):
        self.text = text
        self.maximum = maximum
        super().__init__(f"Integer {_abbreviate(text)} is outside the range 0..{maximum}", span)

    def detail(self) -> dict[str, Any]:
        return {"text": _abbreviate(self.text), "maximum": str(self.maximum)}


class IdentifierTooLongError(SemanticError):
    code = "identifier_too_long"

    def __init__(self, length: int, limit: int, span: Span):
        self.length = length
        self.limit = limit
        super().__init__(f"Identifier is {length} characters long, maximum is {limit}", span)

    def detail(self) -> dict[str, Any]:
        return {"length": self.length, "limit": self.limit}


class EmptyIdentifierError(SemanticError):
    code = "empty_identifier"

    def __init__(self, span: Span):
        super().__init__("Identifier must not be empty", span)


class ReservedKeywordError(SemanticError):
    code = "reserved_keyword"

    def __init__(self, keyword: str, span: Span):
        self.keyword = keyword
        super().__init__(
            f"{keyword.upper()} is a reserved keyword; quote it to use it as an identifier",
            span,
        )

    def detail(self) -> dict[str, Any]:
        return {"keyword": self.keyword}


class InvalidTimestampError(SemanticError):
    code = "invalid_timestamp"

    def __init__(self, text: str, reason: str, span: Span):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid timestamp {text!r}: {reason}", span)

    def detail(self) -> dict[str, Any]:
        return {"text": self.text, "reason": self.reason}


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _abbreviate(text: str, keep: int = 24) -> str:
    """Shorten literal text for messages: ``1000000000...0 (5001 characters)``."""
    if len(text) <= keep:
        return text
    return f"{text[:10]}...{text[-1]} ({len(text)} characters)"


def format_error(error: ParseError, source: str, context_lines: int = 2) -> str:
    """
    Format a parse error with a snippet of the surrounding source.

    Args:
        error: The error to format
        source: The query text that was parsed
        context_lines: Lines of context to show before the error line

    Returns:
        Formatted string like::

            1:8 syntactic error [unexpected_token]
               1 | SELECT FROM t
                          ^^^^
            Unexpected FROM, expected one of {...}
    """
    span = error.span
    header = f"{span.line}:{span.column} {error.kind.value} error [{error.code}]"
    lines = source.split("\n")
    if not source or span.line > len(lines):
        return f"{header}\n{error.message}"

    formatted = [header]
    start_line = max(1, span.line - context_lines)
    for line_num in range(start_line, span.line + 1):
        prefix = f"{line_num:4d} | "
        formatted.append(prefix + lines[line_num - 1])

    # Marker width: characters covered by the span on the error line
    start = char_index(source, span.start)
    end = char_index(source, span.end)
    line_text = lines[span.line - 1]
    width = max(1, min(end - start, len(line_text) - span.column + 1))
    marker_pos = len(f"{span.line:4d} | ") + span.column - 1
    formatted.append(" " * marker_pos + "^" * width)
    formatted.append(error.message)
    return "\n".join(formatted)
