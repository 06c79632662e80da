"""
Identifier types for the posql IR.

An Identifier holds only its normalized name: unquoted names arrive
lower-cased, quoted names arrive verbatim. Whether the source text was quoted
is not part of the node, so ``a``, ``A`` and ``"a"`` are the same identifier
while ``"A"`` is a different one.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..config import MAX_IDENTIFIER_LENGTH
from ..lexer import KEYWORDS


class Identifier(BaseModel):
    """A normalized column, table, schema or alias name."""

    name: str = Field(min_length=1, max_length=MAX_IDENTIFIER_LENGTH, description="Normalized name")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def parse(cls, text: str) -> Identifier:
        """Normalize identifier text the way the query parser does.

        Text wrapped in double quotes is taken verbatim (``""`` unescapes to
        ``"``); anything else is case-folded and checked against the reserved
        keywords.

        Raises:
            SemanticError: If the identifier is empty, too long or reserved
        """
        from ..identifiers import normalize_identifier

        if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
            return normalize_identifier(text[1:-1].replace('""', '"'), quoted=True)
        return normalize_identifier(text, quoted=False)

    @property
    def needs_quotes(self) -> bool:
        """True when the name would not survive re-parsing unquoted."""
        first = self.name[0]
        if not (first.isalpha() or first == "_"):
            return True
        if not all(c.isalnum() or c == "_" for c in self.name):
            return True
        if self.name.lower() != self.name:
            return True
        return self.name in KEYWORDS

    def __str__(self) -> str:
        if self.needs_quotes:
            escaped = self.name.replace('"', '""')
            return f'"{escaped}"'
        return self.name


class TableRef(BaseModel):
    """
    Reference to a table, optionally qualified by its schema.

    Examples:
        - TableRef(table=Identifier(name="t")) → t
        - TableRef(schema_name=Identifier(name="sxt"), table=...) → sxt.t
    """

    schema_name: Identifier | None = Field(default=None, description="Schema qualifier")
    table: Identifier = Field(description="Table name")

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        if self.schema_name is None:
            return str(self.table)
        return f"{self.schema_name}.{self.table}"
