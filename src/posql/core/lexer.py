"""
Lexer for the posql query dialect.

Converts query text into a lazy stream of tokens. Every token carries a Span
with its byte range in the UTF-8 encoding of the text plus the line and
column where it starts, so diagnostics point at the exact source bytes.

Whitespace and comments (``-- ...`` and ``/* ... */``) produce no tokens.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum, auto

from .errors import (
    InvalidEncodingError,
    MalformedNumberError,
    UnexpectedCharacterError,
    UnterminatedLiteralError,
)
from .source import Span


class TokenKind(StrEnum):
    """Token types in the posql dialect."""

    # Keywords
    SELECT = auto()
    FROM = auto()
    WHERE = auto()
    GROUP = auto()
    BY = auto()
    ORDER = auto()
    ASC = auto()
    DESC = auto()
    LIMIT = auto()
    OFFSET = auto()
    AS = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    TRUE = auto()
    FALSE = auto()
    TIMESTAMP = auto()

    # Names and literals
    IDENT = auto()
    QUOTED_IDENT = auto()
    NUMBER = auto()
    STRING = auto()

    # Operators
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    DOT = auto()
    SEMICOLON = auto()

    # End of input
    EOF = auto()

    @property
    def is_keyword(self) -> bool:
        return self.value in KEYWORDS

    @property
    def display(self) -> str:
        """How the kind is named in error messages."""
        if self.is_keyword:
            return self.value.upper()
        return _DISPLAY[self]


# Reserved words, matched case-insensitively
KEYWORDS: dict[str, TokenKind] = {
    "select": TokenKind.SELECT,
    "from": TokenKind.FROM,
    "where": TokenKind.WHERE,
    "group": TokenKind.GROUP,
    "by": TokenKind.BY,
    "order": TokenKind.ORDER,
    "asc": TokenKind.ASC,
    "desc": TokenKind.DESC,
    "limit": TokenKind.LIMIT,
    "offset": TokenKind.OFFSET,
    "as": TokenKind.AS,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "timestamp": TokenKind.TIMESTAMP,
}

_DISPLAY: dict[TokenKind, str] = {
    TokenKind.IDENT: "identifier",
    TokenKind.QUOTED_IDENT: "quoted identifier",
    TokenKind.NUMBER: "number",
    TokenKind.STRING: "string",
    TokenKind.EQ: "'='",
    TokenKind.NE: "'<>'",
    TokenKind.LT: "'<'",
    TokenKind.LE: "'<='",
    TokenKind.GT: "'>'",
    TokenKind.GE: "'>='",
    TokenKind.PLUS: "'+'",
    TokenKind.MINUS: "'-'",
    TokenKind.STAR: "'*'",
    TokenKind.SLASH: "'/'",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.COMMA: "','",
    TokenKind.DOT: "'.'",
    TokenKind.SEMICOLON: "';'",
    TokenKind.EOF: "end of input",
}

_TWO_CHAR: dict[str, TokenKind] = {
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
    "<>": TokenKind.NE,
    "!=": TokenKind.NE,
}

_SINGLE_CHAR: dict[str, TokenKind] = {
    "=": TokenKind.EQ,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    ";": TokenKind.SEMICOLON,
}

# After these, a '+' or '-' is an operator rather than a sign
_OPERAND_END = frozenset(
    {
        TokenKind.IDENT,
        TokenKind.QUOTED_IDENT,
        TokenKind.NUMBER,
        TokenKind.STRING,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.RPAREN,
    }
)


@dataclass(frozen=True, slots=True)
class Token:
    """
    A single token.

    Attributes:
        kind: Type of token
        value: Token text; quoted identifiers and strings are unescaped,
            keywords and identifiers keep their original case
        span: Source location
    """

    kind: TokenKind
    value: str
    span: Span

    def describe(self) -> str:
        """Name of this token for error messages."""
        if self.kind in (TokenKind.IDENT, TokenKind.NUMBER):
            return f"{self.kind.display} {self.value!r}"
        if self.kind == TokenKind.QUOTED_IDENT:
            return f'{self.kind.display} "{self.value}"'
        if self.kind == TokenKind.STRING:
            return "string literal"
        return self.kind.display

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.span.start}:{self.span.end})"


def _is_digit(ch: str | None) -> bool:
    return ch is not None and "0" <= ch <= "9"


def _utf8_width(ch: str) -> int:
    code = ord(ch)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


class Lexer:
    """
    Lexer for posql.

    Iterating a Lexer scans the text lazily, one token at a time, and ends
    with a single EOF token. Each iteration starts from the beginning.
    """

    def __init__(self, text: str):
        """
        Initialize lexer.

        Args:
            text: Query text to tokenize
        """
        self.text = text

    def __iter__(self) -> Iterator[Token]:
        return _Scanner(self.text).scan()

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire text.

        Returns:
            List of tokens ending with EOF

        Raises:
            LexicalError: If the text contains something that is not a token
        """
        return list(self)


# The stream type handed to the parser; restartable from the start
TokenStream = Lexer


class _Scanner:
    """Single pass over the text; tracks character, byte and line positions."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.offset = 0
        self.line = 1
        self.column = 1
        self.prev_kind: TokenKind | None = None

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating byte offset and line/column."""
        ch = self.text[self.pos]
        self.pos += 1
        self.offset += _utf8_width(ch)
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

    def mark(self) -> tuple[int, int, int]:
        return self.offset, self.line, self.column

    def span_from(self, mark: tuple[int, int, int]) -> Span:
        offset, line, column = mark
        return Span(offset, self.offset, line, column)

    def scan(self) -> Iterator[Token]:
        while True:
            self.skip_trivia()
            ch = self.current_char()
            start = self.mark()

            if ch is None:
                yield Token(TokenKind.EOF, "", self.span_from(start))
                return

            token = self.read_token(ch, start)
            self.prev_kind = token.kind
            yield token

    def skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        while True:
            ch = self.current_char()
            if ch is None:
                return
            if ch.isspace():
                self.advance()
            elif ch == "-" and self.peek_char() == "-":
                while self.current_char() not in (None, "\n"):
                    self.advance()
            elif ch == "/" and self.peek_char() == "*":
                self.skip_block_comment()
            else:
                return

    def skip_block_comment(self) -> None:
        start = self.mark()
        self.advance()
        self.advance()
        while True:
            ch = self.current_char()
            if ch is None:
                raise UnterminatedLiteralError("block comment", self.span_from(start))
            if ch == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                return
            self.advance()

    def read_token(self, ch: str, start: tuple[int, int, int]) -> Token:
        if _is_digit(ch):
            return self.read_number(start)

        if ch in "+-" and self._sign_allowed():
            return self.read_number(start)

        if ch.isalpha() or ch == "_":
            word = self.read_identifier()
            kind = KEYWORDS.get(word.lower(), TokenKind.IDENT)
            return Token(kind, word, self.span_from(start))

        if ch == '"':
            value = self.read_quoted('"', "quoted identifier", start)
            return Token(TokenKind.QUOTED_IDENT, value, self.span_from(start))

        if ch == "'":
            value = self.read_quoted("'", "string literal", start)
            return Token(TokenKind.STRING, value, self.span_from(start))

        two = self.text[self.pos : self.pos + 2]
        if two in _TWO_CHAR:
            self.advance()
            self.advance()
            return Token(_TWO_CHAR[two], two, self.span_from(start))

        if ch in _SINGLE_CHAR:
            self.advance()
            return Token(_SINGLE_CHAR[ch], ch, self.span_from(start))

        self.advance()
        raise UnexpectedCharacterError(ch, self.span_from(start))

    def _sign_allowed(self) -> bool:
        """A sign belongs to a number only in operand position, glued to a digit."""
        nxt = self.peek_char()
        if nxt is None or not _is_digit(nxt):
            return False
        return self.prev_kind not in _OPERAND_END

    def read_number(self, start: tuple[int, int, int]) -> Token:
        """Read ``[sign] digits [. digits]``; exponents are rejected."""
        chars = []
        if self.current_char() in ("+", "-"):
            chars.append(self.current_char())
            self.advance()

        self._read_digits(chars)
        if self.current_char() == "." and _is_digit(self.peek_char()):
            chars.append(".")
            self.advance()
            self._read_digits(chars)

        current = self.current_char()
        trailing_fraction = current == "." and _is_digit(self.peek_char())
        if current is not None and (current.isalpha() or current == "_" or trailing_fraction):
            # Swallow the rest of the run so the span covers e.g. "1e-5" whole
            while True:
                current = self.current_char()
                if current is None:
                    break
                exponent_sign = current in "+-" and chars[-1] in "eE"
                if not (current.isalnum() or current in "._" or exponent_sign):
                    break
                chars.append(current)
                self.advance()
            raise MalformedNumberError("".join(chars), self.span_from(start))

        return Token(TokenKind.NUMBER, "".join(chars), self.span_from(start))

    def _read_digits(self, chars: list[str]) -> None:
        current = self.current_char()
        while current is not None and _is_digit(current):
            chars.append(current)
            self.advance()
            current = self.current_char()

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        current = self.current_char()
        while current is not None and (current.isalnum() or current == "_"):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_quoted(self, quote: str, what: str, start: tuple[int, int, int]) -> str:
        """Read a quoted run; a doubled quote stands for one quote character."""
        self.advance()  # skip opening quote
        chars = []
        while True:
            current = self.current_char()
            if current is None:
                raise UnterminatedLiteralError(what, self.span_from(start))
            self.advance()
            if current == quote:
                if self.current_char() == quote:
                    chars.append(quote)
                    self.advance()
                    continue
                return "".join(chars)
            chars.append(current)


def decode_source(source: str | bytes) -> str:
    """
    Return query text as a string of Unicode scalar values.

    Raises:
        InvalidEncodingError: For invalid UTF-8 bytes or lone surrogates
    """
    if isinstance(source, bytes):
        try:
            return source.decode("utf-8")
        except UnicodeDecodeError as e:
            prefix = source[: e.start].decode("utf-8")
            raise InvalidEncodingError(e.reason, _span_at(prefix, e.start, e.end)) from e

    try:
        source.encode("utf-8")
    except UnicodeEncodeError as e:
        prefix = source[: e.start]
        start = len(prefix.encode("utf-8"))
        raise InvalidEncodingError(e.reason, _span_at(prefix, start, start + 3)) from e
    return source


def _span_at(prefix: str, start: int, end: int) -> Span:
    line = prefix.count("\n") + 1
    column = len(prefix) - (prefix.rfind("\n") + 1) + 1
    return Span(start, end, line, column)


def tokenize(source: str | bytes) -> list[Token]:
    """
    Convenience function to tokenize query text.

    Args:
        source: Query text, or its UTF-8 bytes

    Returns:
        List of tokens ending with EOF
    """
    return Lexer(decode_source(source)).tokenize()
