"""
Grammar documentation generator for the posql query dialect.

Introspects the parser (the first docstring line of every ``parse_*`` rule)
and the lexer keyword table to produce an EBNF grammar reference that cannot
drift from the implementation.

Usage:
    python -m posql.core.grammar_gen           # print to stdout
    posql grammar                              # same, from the CLI
"""

from __future__ import annotations

import inspect

from .config import MAX_DECIMAL_PRECISION, MAX_IDENTIFIER_LENGTH
from .lexer import KEYWORDS
from .parser import _Parser

# ---------------------------------------------------------------------------
# Helpers - introspection
# ---------------------------------------------------------------------------


def get_rules() -> list[tuple[str, str]]:
    """
    Return ``(rule_name, production)`` pairs in parser definition order.

    Each ``parse_*`` method documents its rule as ``name := production`` on
    the first docstring line. Methods without such a line are skipped.
    """
    rules: list[tuple[str, str]] = []
    for name, member in vars(_Parser).items():
        if not name.startswith("parse_") or not callable(member):
            continue
        doc = inspect.getdoc(member) or ""
        first = doc.splitlines()[0] if doc else ""
        if ":=" not in first:
            continue
        rule, _, production = first.partition(":=")
        rules.append((rule.strip(), production.strip()))
    return rules


def get_keywords() -> list[str]:
    """Reserved keywords, upper-cased and sorted."""
    return sorted(word.upper() for word in KEYWORDS)


# ---------------------------------------------------------------------------
# Main assembly
# ---------------------------------------------------------------------------

_EBNF_HEADER = """\
(*
  posql query dialect -- EBNF Grammar
  ===================================
  Auto-generated by grammar_gen.py from parser source code.
  Do not edit manually; run `posql grammar` to regenerate.
*)
"""

_LEXICAL_SECTION = f"""\
(* =============================================================================
   Tokens
   ============================================================================= *)

IDENT         ::= /[A-Za-z_][A-Za-z0-9_]*/ ;     (* case-folded, max {MAX_IDENTIFIER_LENGTH} chars *)
QUOTED_IDENT  ::= '"' ( /[^"]/ | '""' )* '"' ;    (* case preserved *)
NUMBER        ::= /[+-]?[0-9]+(\\.[0-9]+)?/ ;     (* max {MAX_DECIMAL_PRECISION} digits *)
STRING        ::= "'" ( /[^']/ | "''" )* "'" ;
COMMENT       ::= "--" /[^\\n]*/ | "/*" /.*?/ "*/" ;
"""


def _format_rule(rule: str, production: str) -> str:
    if len(rule) < 14:
        return f"{rule:<14}::= {production} ;"
    return f"{rule}\n{'':14}::= {production} ;"


def generate_grammar() -> str:
    """Assemble the full EBNF grammar text."""
    parts = [_EBNF_HEADER, _LEXICAL_SECTION]

    parts.append(
        "(* =============================================================================\n"
        "   Reserved Keywords (case-insensitive)\n"
        "   ============================================================================= *)\n"
    )
    parts.append(" ".join(get_keywords()) + "\n")

    parts.append(
        "(* =============================================================================\n"
        "   Rules\n"
        "   ============================================================================= *)\n"
    )
    parts.append("\n".join(_format_rule(rule, production) for rule, production in get_rules()))
    return "\n".join(parts) + "\n"


if __name__ == "__main__":
    print(generate_grammar(), end="")
