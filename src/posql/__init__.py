"""
posql - a parser for a restricted, verifiable SQL query dialect.

Turns query text into a typed, canonical AST with precise error locations.
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

# Re-export commonly used types for convenience
from .core import ir
from .core.codec import decode, digest, encode
from .core.config import ParserLimits, load_limits
from .core.errors import DecodeError, ErrorKind, ParseError, PosqlError, format_error
from .core.lexer import tokenize
from .core.parser import parse, parse_expression


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("posql-parser")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "parse",
    "parse_expression",
    "tokenize",
    "encode",
    "decode",
    "digest",
    "PosqlError",
    "ParseError",
    "DecodeError",
    "ErrorKind",
    "format_error",
    "ParserLimits",
    "load_limits",
]
