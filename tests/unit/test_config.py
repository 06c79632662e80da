"""Tests for parser limits configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from posql.core.config import DEFAULT_LIMITS, ParserLimits, load_limits, load_limits_file


class TestParserLimits:
    def test_defaults(self) -> None:
        assert DEFAULT_LIMITS.max_identifier_length == 64
        assert DEFAULT_LIMITS.max_decimal_precision == 75
        assert DEFAULT_LIMITS.max_nesting_depth == 64

    def test_cannot_loosen(self) -> None:
        with pytest.raises(ValidationError):
            ParserLimits(max_identifier_length=65)
        with pytest.raises(ValidationError):
            ParserLimits(max_nesting_depth=101)

    def test_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ParserLimits(max_decimal_precision=0)

    def test_unknown_field(self) -> None:
        with pytest.raises(ValidationError):
            ParserLimits(max_query_length=10)


class TestLoadLimits:
    def test_empty_environment(self) -> None:
        assert load_limits({}) == DEFAULT_LIMITS

    def test_reads_variables(self) -> None:
        limits = load_limits(
            {
                "POSQL_MAX_IDENTIFIER_LENGTH": "32",
                "POSQL_MAX_DECIMAL_PRECISION": "38",
                "POSQL_MAX_NESTING_DEPTH": " 10 ",
            }
        )
        assert limits == ParserLimits(
            max_identifier_length=32, max_decimal_precision=38, max_nesting_depth=10
        )

    def test_not_an_integer(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="posql.core.config"):
            limits = load_limits({"POSQL_MAX_IDENTIFIER_LENGTH": "abc"})
        assert limits.max_identifier_length == 64
        assert "not an integer" in caplog.text

    def test_out_of_range(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="posql.core.config"):
            limits = load_limits({"POSQL_MAX_DECIMAL_PRECISION": "500"})
        assert limits.max_decimal_precision == 75
        assert "outside the allowed range" in caplog.text

    def test_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POSQL_MAX_NESTING_DEPTH", "12")
        assert load_limits().max_nesting_depth == 12


class TestLoadLimitsFile:
    def test_reads_table(self, tmp_path: Path) -> None:
        path = tmp_path / "posql.toml"
        path.write_text("[limits]\nmax_nesting_depth = 8\n")
        assert load_limits_file(path).max_nesting_depth == 8

    def test_missing_table_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "posql.toml"
        path.write_text("[other]\nkey = 1\n")
        assert load_limits_file(path) == DEFAULT_LIMITS

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "posql.toml"
        path.write_text("[limits]\nmax_nesting_depth = 1000\n")
        with pytest.raises(ValueError, match=r"Invalid \[limits\]"):
            load_limits_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_limits_file(tmp_path / "absent.toml")
