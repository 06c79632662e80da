"""
Query (root node) types for the posql IR.

A Query is the whole tree produced by one parse. It renders back to
canonical SQL with ``str()``; re-parsing that text yields an equal Query.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .expressions import Expr
from .identifiers import Identifier, TableRef

U64_MAX = 2**64 - 1


class AllColumns(BaseModel):
    """``*`` in the select list."""

    kind: Literal["all_columns"] = "all_columns"

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return "*"


class AliasedExpr(BaseModel):
    """A select-list expression with an optional ``AS`` alias."""

    kind: Literal["aliased"] = "aliased"
    expr: Expr
    alias: Identifier | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        if self.alias is None:
            return str(self.expr)
        return f"{self.expr} AS {self.alias}"


SelectItem = Annotated[AllColumns | AliasedExpr, Field(discriminator="kind")]


class TableExpr(BaseModel):
    """The FROM source: a table reference with an optional alias."""

    table: TableRef
    alias: Identifier | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        if self.alias is None:
            return str(self.table)
        return f"{self.table} AS {self.alias}"


class OrderDirection(StrEnum):
    ASC = "ASC"
    DESC = "DESC"


class OrderByItem(BaseModel):
    """One ORDER BY key. An omitted direction is stored as ASC."""

    expr: Expr
    direction: OrderDirection = OrderDirection.ASC

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"{self.expr} {self.direction.value}"


class Slice(BaseModel):
    """LIMIT and OFFSET, each an unsigned 64-bit count."""

    limit: int | None = Field(default=None, ge=0, le=U64_MAX)
    offset: int | None = Field(default=None, ge=0, le=U64_MAX)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_serializer("limit", "offset")
    def _serialize_count(self, value: int | None) -> str | None:
        return None if value is None else str(value)

    def __str__(self) -> str:
        parts = []
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        if self.offset is not None:
            parts.append(f"OFFSET {self.offset}")
        return " ".join(parts)


class Query(BaseModel):
    """
    Root of the Intermediate AST.

    Attributes:
        projection: Select list, in source order (never empty)
        source: FROM table expression
        where: Filter predicate
        group_by: GROUP BY keys, in source order
        order_by: ORDER BY keys, in source order
        slice: LIMIT/OFFSET, None when neither clause is present
    """

    projection: tuple[SelectItem, ...] = Field(min_length=1)
    source: TableExpr
    where: Expr | None = None
    group_by: tuple[Expr, ...] = ()
    order_by: tuple[OrderByItem, ...] = ()
    slice: Slice | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        parts = [
            "SELECT " + ", ".join(str(item) for item in self.projection),
            f"FROM {self.source}",
        ]
        if self.where is not None:
            parts.append(f"WHERE {self.where}")
        if self.group_by:
            parts.append("GROUP BY " + ", ".join(str(e) for e in self.group_by))
        if self.order_by:
            parts.append("ORDER BY " + ", ".join(str(o) for o in self.order_by))
        if self.slice is not None:
            parts.append(str(self.slice))
        return " ".join(parts)
