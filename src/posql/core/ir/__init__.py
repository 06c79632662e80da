"""
posql Intermediate AST types.

All node types are re-exported from this package.
"""

from .expressions import (
    AggregateExpr,
    AggregateFunction,
    BinaryExpr,
    BinaryOp,
    ColumnRef,
    Expr,
    UnaryExpr,
    UnaryOp,
    expr_height,
)
from .identifiers import Identifier, TableRef
from .literals import (
    BooleanLiteral,
    DecimalLiteral,
    IntegerLiteral,
    LiteralExpr,
    TextLiteral,
    TimestampLiteral,
    TimeUnit,
)
from .query import (
    U64_MAX,
    AliasedExpr,
    AllColumns,
    OrderByItem,
    OrderDirection,
    Query,
    SelectItem,
    Slice,
    TableExpr,
)

__all__ = [
    # Identifiers
    "Identifier",
    "TableRef",
    # Literals
    "BooleanLiteral",
    "DecimalLiteral",
    "IntegerLiteral",
    "LiteralExpr",
    "TextLiteral",
    "TimestampLiteral",
    "TimeUnit",
    # Expressions
    "AggregateExpr",
    "AggregateFunction",
    "BinaryExpr",
    "BinaryOp",
    "ColumnRef",
    "Expr",
    "UnaryExpr",
    "UnaryOp",
    "expr_height",
    # Query
    "AliasedExpr",
    "AllColumns",
    "OrderByItem",
    "OrderDirection",
    "Query",
    "SelectItem",
    "Slice",
    "TableExpr",
    "U64_MAX",
]
