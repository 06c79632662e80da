"""Core posql functionality: lexer, parser, AST, canonical codec, limits."""

from . import ir
from .codec import decode, digest, encode
from .config import DEFAULT_LIMITS, ParserLimits, load_limits, load_limits_file
from .errors import (
    DecodeError,
    ErrorKind,
    LexicalError,
    ParseError,
    PosqlError,
    SemanticError,
    SyntacticError,
    format_error,
)
from .lexer import Token, TokenKind, TokenStream, tokenize
from .parser import parse, parse_expression
from .source import Span

__all__ = [
    "ir",
    "parse",
    "parse_expression",
    "tokenize",
    "Token",
    "TokenKind",
    "TokenStream",
    "Span",
    "encode",
    "decode",
    "digest",
    "PosqlError",
    "ParseError",
    "LexicalError",
    "SyntacticError",
    "SemanticError",
    "DecodeError",
    "ErrorKind",
    "format_error",
    "ParserLimits",
    "DEFAULT_LIMITS",
    "load_limits",
    "load_limits_file",
]
