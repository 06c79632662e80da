"""
Canonical interchange encoding for Query ASTs.

The encoding is compact JSON: UTF-8, no insignificant whitespace, object keys
in model declaration order, every node tagged with its ``kind`` and every
unbounded integer written as a decimal string. Equal ASTs always encode to
identical bytes, so the encoding (or its digest) can serve as a commitment to
the query.

Usage:
    from posql.core.codec import decode, encode

    data = encode(query)
    assert decode(data) == query
"""

from __future__ import annotations

import hashlib
import json

from pydantic import ValidationError

from .config import DEFAULT_LIMITS, ParserLimits
from .errors import DecodeError
from .ir.expressions import expr_height
from .ir.query import AliasedExpr, Query


def encode(query: Query) -> bytes:
    """Encode a Query to its canonical bytes."""
    payload = query.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode(data: bytes | str, limits: ParserLimits = DEFAULT_LIMITS) -> Query:
    """
    Decode canonical bytes back into a Query.

    The decoded tree must satisfy the same nesting bound as a parsed one.

    Raises:
        DecodeError: If the document is not a valid Query encoding
    """
    try:
        query = Query.model_validate_json(data, strict=False)
    except ValidationError as e:
        raise DecodeError(f"Invalid query document: {e}") from e

    for expr in _expressions(query):
        height = expr_height(expr)
        if height > limits.max_nesting_depth:
            raise DecodeError(
                f"Expression nesting depth {height} exceeds limit {limits.max_nesting_depth}"
            )
    return query


def digest(query: Query) -> str:
    """SHA-256 hex digest of the canonical encoding."""
    return hashlib.sha256(encode(query)).hexdigest()


def _expressions(query: Query) -> list:
    exprs = [item.expr for item in query.projection if isinstance(item, AliasedExpr)]
    if query.where is not None:
        exprs.append(query.where)
    exprs.extend(query.group_by)
    exprs.extend(item.expr for item in query.order_by)
    return exprs
