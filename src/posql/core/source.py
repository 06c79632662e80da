"""
Source positions for posql diagnostics.

Spans are byte ranges into the UTF-8 encoding of the query text. Line and
column are carried alongside for human-readable messages.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Span:
    """
    A half-open byte range ``[start, end)`` into the query text.

    Attributes:
        start: Byte offset of the first byte
        end: Byte offset one past the last byte
        line: Line number of ``start`` (1-indexed)
        column: Column of ``start`` in characters (1-indexed)
    """

    start: int
    end: int
    line: int = 1
    column: int = 1

    def __len__(self) -> int:
        return self.end - self.start

    def to(self, other: Span) -> Span:
        """Span covering ``self`` through the end of ``other``."""
        return Span(self.start, other.end, self.line, self.column)

    def to_dict(self) -> dict[str, int]:
        return {
            "start": self.start,
            "end": self.end,
            "line": self.line,
            "column": self.column,
        }

    def __str__(self) -> str:
        return f"{self.line}:{self.column} [{self.start}, {self.end})"


def char_index(text: str, offset: int) -> int:
    """Convert a UTF-8 byte offset into ``text`` back to a character index."""
    return len(text.encode("utf-8")[:offset].decode("utf-8", errors="ignore"))
