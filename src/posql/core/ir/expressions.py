"""
Expression types for the posql IR.

Supports:
- Literals: TRUE, 42, 123.450, 'text', TIMESTAMP '2024-01-01T00:00:00Z'
- Column references: amount, t.amount
- Logic: AND, OR, NOT
- Comparison: =, <>, <, <=, >, >=
- Arithmetic: +, -, *, /
- Aggregates: SUM(x), COUNT(x), COUNT(*), MIN(x), MAX(x), FIRST(x)

Every node carries a ``kind`` tag so the union decodes without guessing.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .identifiers import Identifier
from .literals import (
    BooleanLiteral,
    DecimalLiteral,
    IntegerLiteral,
    TextLiteral,
    TimestampLiteral,
)

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary operators for expressions."""

    # Logical
    AND = "AND"
    OR = "OR"
    # Comparison
    EQ = "="
    NE = "<>"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def is_logical(self) -> bool:
        return self in (BinaryOp.AND, BinaryOp.OR)

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS

    @property
    def is_arithmetic(self) -> bool:
        return self in (BinaryOp.ADD, BinaryOp.SUB, BinaryOp.MUL, BinaryOp.DIV)


_COMPARISONS = frozenset(
    {BinaryOp.EQ, BinaryOp.NE, BinaryOp.LT, BinaryOp.LE, BinaryOp.GT, BinaryOp.GE}
)


class UnaryOp(StrEnum):
    """Unary operators for expressions."""

    NOT = "NOT"


class AggregateFunction(StrEnum):
    """Aggregate functions recognized in expressions."""

    SUM = "SUM"
    COUNT = "COUNT"
    MIN = "MIN"
    MAX = "MAX"
    FIRST = "FIRST"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class ColumnRef(BaseModel):
    """
    Reference to a column, optionally qualified by a table name or alias.

    Examples:
        - ColumnRef(column=Identifier(name="amount")) → amount
        - ColumnRef(table=Identifier(name="t"), column=...) → t.amount
    """

    kind: Literal["column"] = "column"
    table: Identifier | None = Field(default=None, description="Table name or alias")
    column: Identifier = Field(description="Column name")

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        if self.table is None:
            return str(self.column)
        return f"{self.table}.{self.column}"


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"({self.op.value} {self.operand})"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    kind: Literal["binary"] = "binary"
    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class AggregateExpr(BaseModel):
    """
    Aggregate call: SUM(x), COUNT(*), ...

    ``argument`` is None only for ``COUNT(*)``.
    """

    kind: Literal["aggregate"] = "aggregate"
    function: AggregateFunction
    argument: Expr | None = Field(default=None, description="None for COUNT(*)")

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        inner = "*" if self.argument is None else str(self.argument)
        return f"{self.function.value}({inner})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = Annotated[
    BooleanLiteral
    | IntegerLiteral
    | DecimalLiteral
    | TextLiteral
    | TimestampLiteral
    | ColumnRef
    | UnaryExpr
    | BinaryExpr
    | AggregateExpr,
    Field(discriminator="kind"),
]

# Rebuild models for recursive forward references
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()
AggregateExpr.model_rebuild()


def expr_height(expr: BaseModel) -> int:
    """Height of an expression tree; a leaf has height 1."""
    height = 0
    level = [expr]
    while level:
        height += 1
        next_level = []
        for node in level:
            if isinstance(node, UnaryExpr):
                next_level.append(node.operand)
            elif isinstance(node, BinaryExpr):
                next_level.extend((node.left, node.right))
            elif isinstance(node, AggregateExpr) and node.argument is not None:
                next_level.append(node.argument)
        level = next_level
    return height
