"""
Recursive descent parser for the posql query dialect.

Each ``parse_*`` method implements one grammar rule, given as the first line
of its docstring (``grammar_gen`` assembles the EBNF reference from them).

Precedence, loosest to tightest: OR, AND, NOT, comparison
(non-associative), ``+ -``, ``* /``. Binary operators associate left.

Parsing stops at the first error. Unexpected-token errors list every token
kind that could have continued the query at that point.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from typing import NamedTuple

from .config import DEFAULT_LIMITS, ParserLimits
from .errors import NestingTooDeepError, ParseError, UnexpectedTokenError
from .identifiers import normalize_identifier
from .ir.expressions import (
    AggregateExpr,
    AggregateFunction,
    BinaryExpr,
    BinaryOp,
    ColumnRef,
    Expr,
    UnaryExpr,
    UnaryOp,
)
from .ir.identifiers import Identifier, TableRef
from .ir.query import (
    AliasedExpr,
    AllColumns,
    OrderByItem,
    OrderDirection,
    Query,
    SelectItem,
    Slice,
    TableExpr,
)
from .lexer import Token, TokenKind, TokenStream, decode_source
from .literals import (
    normalize_boolean,
    normalize_number,
    normalize_text,
    normalize_timestamp,
    normalize_unsigned,
)

logger = logging.getLogger(__name__)

_COMPARISON_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NE: BinaryOp.NE,
    TokenKind.LT: BinaryOp.LT,
    TokenKind.LE: BinaryOp.LE,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.GE: BinaryOp.GE,
}

_ADDITIVE_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.PLUS: BinaryOp.ADD,
    TokenKind.MINUS: BinaryOp.SUB,
}

_MULTIPLICATIVE_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.STAR: BinaryOp.MUL,
    TokenKind.SLASH: BinaryOp.DIV,
}

_AGGREGATES: dict[str, AggregateFunction] = {f.value.lower(): f for f in AggregateFunction}


class _Parsed(NamedTuple):
    """An expression together with its tree height."""

    expr: Expr
    height: int


class _Parser:
    """Recursive descent parser over a lazy token stream."""

    def __init__(self, tokens: Iterator[Token], limits: ParserLimits = DEFAULT_LIMITS) -> None:
        self.tokens = tokens
        self.limits = limits
        self.lookahead: deque[Token] = deque()
        self.expected: set[TokenKind] = set()
        self.depth = 0

    # -- Token handling --

    def _fill(self, count: int) -> None:
        while len(self.lookahead) < count:
            if self.lookahead and self.lookahead[-1].kind == TokenKind.EOF:
                return
            self.lookahead.append(next(self.tokens))

    @property
    def current(self) -> Token:
        self._fill(1)
        return self.lookahead[0]

    def peek(self, offset: int = 0) -> Token:
        self._fill(offset + 1)
        return self.lookahead[min(offset, len(self.lookahead) - 1)]

    def advance(self) -> Token:
        tok = self.current
        if tok.kind != TokenKind.EOF:
            self.lookahead.popleft()
        self.expected.clear()
        return tok

    def check(self, *kinds: TokenKind) -> bool:
        """True if the current token is one of ``kinds``; otherwise note them as expected."""
        if self.current.kind in kinds:
            return True
        self.expected.update(kinds)
        return False

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.check(*kinds):
            return self.advance()
        return None

    def expect(self, *kinds: TokenKind) -> Token:
        if self.check(*kinds):
            return self.advance()
        raise self.error()

    def error(self) -> UnexpectedTokenError:
        tok = self.current
        expected = tuple(sorted(kind.display for kind in self.expected))
        return UnexpectedTokenError(tok.describe(), expected, tok.span)

    # -- Nesting bounds --

    def _enter(self, tok: Token) -> None:
        self.depth += 1
        if self.depth > self.limits.max_nesting_depth:
            raise NestingTooDeepError(self.depth, self.limits.max_nesting_depth, tok.span)

    def _leave(self) -> None:
        self.depth -= 1

    def _node(self, expr: Expr, height: int, tok: Token) -> _Parsed:
        if height > self.limits.max_nesting_depth:
            raise NestingTooDeepError(
                height, self.limits.max_nesting_depth, tok.span, measure="height"
            )
        return _Parsed(expr, height)

    # -- Statement rules --

    def parse_query(self) -> Query:
        """query := SELECT select_list FROM table_expr [WHERE expr] [GROUP BY expr_list] [ORDER BY order_list] [LIMIT uint] [OFFSET uint] [";"] EOF"""
        self.expect(TokenKind.SELECT)
        projection = self.parse_select_list()

        self.expect(TokenKind.FROM)
        source = self.parse_table_expr()

        where = None
        if self.match(TokenKind.WHERE):
            where = self.parse_expr().expr

        group_by: tuple[Expr, ...] = ()
        if self.match(TokenKind.GROUP):
            self.expect(TokenKind.BY)
            group_by = self.parse_expr_list()

        order_by: tuple[OrderByItem, ...] = ()
        if self.match(TokenKind.ORDER):
            self.expect(TokenKind.BY)
            order_by = self.parse_order_list()

        limit = offset = None
        if self.match(TokenKind.LIMIT):
            limit = self.parse_uint()
        if self.match(TokenKind.OFFSET):
            offset = self.parse_uint()

        self.match(TokenKind.SEMICOLON)
        self.expect(TokenKind.EOF)

        return Query(
            projection=projection,
            source=source,
            where=where,
            group_by=group_by,
            order_by=order_by,
            slice=None if limit is None and offset is None else Slice(limit=limit, offset=offset),
        )

    def parse_select_list(self) -> tuple[SelectItem, ...]:
        """select_list := select_item ("," select_item)*"""
        items = [self.parse_select_item()]
        while self.match(TokenKind.COMMA):
            items.append(self.parse_select_item())
        return tuple(items)

    def parse_select_item(self) -> SelectItem:
        """select_item := "*" | expr [AS ident]"""
        if self.match(TokenKind.STAR):
            return AllColumns()

        expr = self.parse_expr().expr
        alias = None
        if self.match(TokenKind.AS):
            alias = self.parse_identifier()
        return AliasedExpr(expr=expr, alias=alias)

    def parse_table_expr(self) -> TableExpr:
        """table_expr := ident ["." ident] [[AS] ident]"""
        first = self.parse_identifier()
        if self.match(TokenKind.DOT):
            table = TableRef(schema_name=first, table=self.parse_identifier())
        else:
            table = TableRef(table=first)

        alias = None
        if self.match(TokenKind.AS) or self.check(TokenKind.IDENT, TokenKind.QUOTED_IDENT):
            alias = self.parse_identifier()
        return TableExpr(table=table, alias=alias)

    def parse_expr_list(self) -> tuple[Expr, ...]:
        """expr_list := expr ("," expr)*"""
        exprs = [self.parse_expr().expr]
        while self.match(TokenKind.COMMA):
            exprs.append(self.parse_expr().expr)
        return tuple(exprs)

    def parse_order_list(self) -> tuple[OrderByItem, ...]:
        """order_list := order_item ("," order_item)*"""
        items = [self.parse_order_item()]
        while self.match(TokenKind.COMMA):
            items.append(self.parse_order_item())
        return tuple(items)

    def parse_order_item(self) -> OrderByItem:
        """order_item := expr [ASC | DESC]"""
        expr = self.parse_expr().expr
        direction = OrderDirection.ASC
        if self.match(TokenKind.DESC):
            direction = OrderDirection.DESC
        else:
            self.match(TokenKind.ASC)
        return OrderByItem(expr=expr, direction=direction)

    def parse_uint(self) -> int:
        """uint := NUMBER (whole, 0 to 2**64-1)"""
        tok = self.expect(TokenKind.NUMBER)
        return normalize_unsigned(tok.value, tok.span)

    def parse_identifier(self) -> Identifier:
        """ident := IDENT | QUOTED_IDENT"""
        tok = self.current
        if tok.kind.is_keyword:
            # Routed through the normalizer so the collision is reported as such
            self.advance()
            return normalize_identifier(tok.value, False, tok.span, self.limits)
        tok = self.expect(TokenKind.IDENT, TokenKind.QUOTED_IDENT)
        quoted = tok.kind == TokenKind.QUOTED_IDENT
        return normalize_identifier(tok.value, quoted, tok.span, self.limits)

    # -- Expression rules --

    def parse_expr(self) -> _Parsed:
        """expr := or_expr"""
        return self.parse_or_expr()

    def parse_or_expr(self) -> _Parsed:
        """or_expr := and_expr (OR and_expr)*"""
        left = self.parse_and_expr()
        while op_tok := self.match(TokenKind.OR):
            right = self.parse_and_expr()
            left = self._binary(BinaryOp.OR, left, right, op_tok)
        return left

    def parse_and_expr(self) -> _Parsed:
        """and_expr := not_expr (AND not_expr)*"""
        left = self.parse_not_expr()
        while op_tok := self.match(TokenKind.AND):
            right = self.parse_not_expr()
            left = self._binary(BinaryOp.AND, left, right, op_tok)
        return left

    def parse_not_expr(self) -> _Parsed:
        """not_expr := NOT not_expr | comparison"""
        if op_tok := self.match(TokenKind.NOT):
            self._enter(op_tok)
            operand = self.parse_not_expr()
            self._leave()
            return self._node(
                UnaryExpr(op=UnaryOp.NOT, operand=operand.expr), operand.height + 1, op_tok
            )
        return self.parse_comparison()

    def parse_comparison(self) -> _Parsed:
        """comparison := additive [("=" | "<>" | "<" | "<=" | ">" | ">=") additive]"""
        left = self.parse_additive()
        if self.check(*_COMPARISON_OPS):
            op_tok = self.advance()
            right = self.parse_additive()
            return self._binary(_COMPARISON_OPS[op_tok.kind], left, right, op_tok)
        return left

    def parse_additive(self) -> _Parsed:
        """additive := multiplicative (("+" | "-") multiplicative)*"""
        left = self.parse_multiplicative()
        while self.check(*_ADDITIVE_OPS):
            op_tok = self.advance()
            right = self.parse_multiplicative()
            left = self._binary(_ADDITIVE_OPS[op_tok.kind], left, right, op_tok)
        return left

    def parse_multiplicative(self) -> _Parsed:
        """multiplicative := primary (("*" | "/") primary)*"""
        left = self.parse_primary()
        while self.check(*_MULTIPLICATIVE_OPS):
            op_tok = self.advance()
            right = self.parse_primary()
            left = self._binary(_MULTIPLICATIVE_OPS[op_tok.kind], left, right, op_tok)
        return left

    def parse_primary(self) -> _Parsed:
        """primary := literal | aggregate | column_ref | "(" expr ")\""""
        tok = self.current

        # Parenthesized expression
        if self.match(TokenKind.LPAREN):
            self._enter(tok)
            inner = self.parse_or_expr()
            self.expect(TokenKind.RPAREN)
            self._leave()
            return inner

        if self.check(TokenKind.IDENT, TokenKind.QUOTED_IDENT):
            function = _AGGREGATES.get(tok.value.lower()) if tok.kind == TokenKind.IDENT else None
            if function is not None and self.peek(1).kind == TokenKind.LPAREN:
                return self.parse_aggregate(function)
            return _Parsed(self.parse_column_ref(), 1)

        return _Parsed(self.parse_literal(), 1)

    def parse_literal(self) -> Expr:
        """literal := TRUE | FALSE | NUMBER | STRING | TIMESTAMP STRING"""
        tok = self.current

        if self.check(TokenKind.TRUE, TokenKind.FALSE):
            self.advance()
            return normalize_boolean(tok.value)
        if self.check(TokenKind.NUMBER):
            self.advance()
            return normalize_number(tok.value, tok.span, self.limits)
        if self.check(TokenKind.STRING):
            self.advance()
            return normalize_text(tok.value)
        if self.check(TokenKind.TIMESTAMP):
            self.advance()
            text_tok = self.expect(TokenKind.STRING)
            return normalize_timestamp(text_tok.value, tok.span.to(text_tok.span))

        raise self.error()

    def parse_aggregate(self, function: AggregateFunction) -> _Parsed:
        """aggregate := (SUM | COUNT | MIN | MAX | FIRST) "(" expr ")" | COUNT "(" "*" ")\""""
        name_tok = self.advance()
        self.expect(TokenKind.LPAREN)

        if function == AggregateFunction.COUNT and self.match(TokenKind.STAR):
            self.expect(TokenKind.RPAREN)
            return _Parsed(AggregateExpr(function=function), 1)

        self._enter(name_tok)
        argument = self.parse_or_expr()
        self.expect(TokenKind.RPAREN)
        self._leave()
        return self._node(
            AggregateExpr(function=function, argument=argument.expr),
            argument.height + 1,
            name_tok,
        )

    def parse_column_ref(self) -> ColumnRef:
        """column_ref := ident ["." ident]"""
        first = self.parse_identifier()
        if self.match(TokenKind.DOT):
            return ColumnRef(table=first, column=self.parse_identifier())
        return ColumnRef(column=first)

    def _binary(self, op: BinaryOp, left: _Parsed, right: _Parsed, op_tok: Token) -> _Parsed:
        expr = BinaryExpr(op=op, left=left.expr, right=right.expr)
        return self._node(expr, max(left.height, right.height) + 1, op_tok)


def parse(source: str | bytes, limits: ParserLimits | None = None) -> Query:
    """Parse query text into a Query AST.

    Args:
        source: Query text, or its UTF-8 bytes
        limits: Bounds to enforce (defaults to the dialect ceilings)

    Returns:
        The root Query node.

    Raises:
        ParseError: The first lexical, syntactic or semantic error found.
    """
    text = decode_source(source)
    logger.debug("Parsing query (%d characters)", len(text))

    parser = _Parser(iter(TokenStream(text)), limits or DEFAULT_LIMITS)
    try:
        query = parser.parse_query()
    except ParseError as e:
        logger.debug("Parse failed: %s", e)
        raise

    logger.debug(
        "Parsed query on %s: %d select items, where=%s, %d group keys, %d order keys",
        query.source.table,
        len(query.projection),
        query.where is not None,
        len(query.group_by),
        len(query.order_by),
    )
    return query


def parse_expression(source: str | bytes, limits: ParserLimits | None = None) -> Expr:
    """Parse a standalone expression, e.g. a WHERE predicate.

    Raises:
        ParseError: If the text is not exactly one expression.
    """
    text = decode_source(source)
    parser = _Parser(iter(TokenStream(text)), limits or DEFAULT_LIMITS)
    expr = parser.parse_expr().expr
    parser.expect(TokenKind.EOF)
    return expr
