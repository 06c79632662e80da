"""Tests for error types and error formatting."""

from __future__ import annotations

import pytest

from posql.core.errors import (
    DecodeError,
    ErrorKind,
    LexicalError,
    MalformedNumberError,
    ParseError,
    PosqlError,
    PrecisionExceededError,
    SemanticError,
    SyntacticError,
    UnexpectedTokenError,
    format_error,
)
from posql.core.parser import parse


def parse_error(sql: str) -> ParseError:
    with pytest.raises(ParseError) as exc:
        parse(sql)
    return exc.value


class TestHierarchy:
    def test_kinds(self) -> None:
        assert LexicalError.kind == ErrorKind.LEXICAL
        assert SyntacticError.kind == ErrorKind.SYNTACTIC
        assert SemanticError.kind == ErrorKind.SEMANTIC

    def test_variant_kinds(self) -> None:
        assert MalformedNumberError.kind == ErrorKind.LEXICAL
        assert UnexpectedTokenError.kind == ErrorKind.SYNTACTIC
        assert PrecisionExceededError.kind == ErrorKind.SEMANTIC

    def test_base_classes(self) -> None:
        assert issubclass(ParseError, PosqlError)
        assert issubclass(DecodeError, PosqlError)
        assert not issubclass(DecodeError, ParseError)


class TestErrorPayload:
    def test_to_dict(self) -> None:
        err = parse_error("SELECT FROM WHERE")
        data = err.to_dict()
        assert data["kind"] == "syntactic"
        assert data["code"] == "unexpected_token"
        assert data["span"] == {"start": 7, "end": 11, "line": 1, "column": 8}
        assert data["detail"]["found"] == "FROM"
        assert "identifier" in data["detail"]["expected"]

    def test_precision_detail(self) -> None:
        err = parse_error(f"SELECT {'1' * 80} FROM t")
        assert err.code == "precision_exceeded"
        assert err.detail() == {"digits": 80, "limit": 75}

    def test_str(self) -> None:
        err = parse_error("SELECT FROM t")
        assert str(err).startswith("syntactic error at 1:8 [7, 11): Unexpected FROM")

    def test_message_lists_expected(self) -> None:
        err = parse_error("SELECT a FROM t WHERE")
        assert err.message.startswith("Unexpected end of input, expected one of {")


class TestFormatError:
    def test_single_line(self) -> None:
        source = "SELECT FROM t"
        err = parse_error(source)
        lines = format_error(err, source).splitlines()
        assert lines[0] == "1:8 syntactic error [unexpected_token]"
        assert lines[1] == "   1 | SELECT FROM t"
        assert lines[2] == " " * 14 + "^^^^"
        assert lines[3] == err.message

    def test_context_lines(self) -> None:
        source = "SELECT a\nFROM t\nWHERE a = #"
        err = parse_error(source)
        lines = format_error(err, source).splitlines()
        assert lines[0] == "3:11 lexical error [unexpected_character]"
        assert lines[1] == "   1 | SELECT a"
        assert lines[3] == "   3 | WHERE a = #"
        assert lines[4] == " " * 17 + "^"

    def test_multibyte_marker(self) -> None:
        source = "SELECT 'é' FROM"
        err = parse_error(source)
        lines = format_error(err, source).splitlines()
        assert lines[2] == " " * (7 + 15) + "^"

    def test_empty_source(self) -> None:
        err = parse_error("")
        assert format_error(err, "") == (
            "1:1 syntactic error [unexpected_token]\n" + err.message
        )
