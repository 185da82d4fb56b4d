"""Render the filter AST as a human-readable preview string."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    MULTI_VALUE_OPERATORS,
    NEGATED_OPERATORS,
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    Logic,
    Node,
    OperatorKind,
)
from filterbar.search.builder import build
from filterbar.search.normalizer import is_blank, split_values

_RANGE_SYMBOLS: dict[str, str] = {
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}

PLACEHOLDER = "-"


def _text(value: Any) -> str:
    return PLACEHOLDER if is_blank(value) else str(value)


def _range_text(clause: Clause, options: CompilerOptions) -> str:
    parts: list[str] = []
    if not is_blank(clause.min_value):
        op = clause.min_operator or options.range_min_operator
        parts.append(f"{_RANGE_SYMBOLS.get(op, op)} {clause.min_value}")
    if not is_blank(clause.max_value):
        op = clause.max_operator or options.range_max_operator
        parts.append(f"{_RANGE_SYMBOLS.get(op, op)} {clause.max_value}")
    return " and ".join(parts) if parts else PLACEHOLDER


def format_clause(clause: Clause, options: CompilerOptions = DEFAULT_OPTIONS) -> str:
    """Format one clause, e.g. ``status: active`` or ``NOT host: exists``.

    Incomplete clauses still render, with ``-`` for a missing value and
    ``...`` for a missing field.
    """
    field = (clause.field or "").strip()
    if not field:
        return "..."

    op = clause.operator
    if op in (OperatorKind.EXISTS, OperatorKind.DOES_NOT_EXIST):
        text = f"{field}: exists"
    elif op == OperatorKind.RANGE:
        text = f"{field}: {_range_text(clause, options)}"
    elif op in (OperatorKind.PREFIX, OperatorKind.WILDCARD, OperatorKind.QUERY_STRING):
        text = f'{field}: {op} "{_text(clause.value)}"'
    elif op in MULTI_VALUE_OPERATORS:
        items = split_values(clause.values if clause.values else clause.value)
        text = f"{field}: {', '.join(str(v) for v in items) or PLACEHOLDER}"
    else:
        text = f"{field}: {_text(clause.value)}"

    return f"NOT {text}" if op in NEGATED_OPERATORS else text


def render(
    node: Node | None,
    parent_operator: Logic | None = None,
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> str:
    """Render a node, adding parentheses only where operators change.

    A bool node is wrapped in parentheses iff it has a parent whose
    operator differs from its own. The top-level call passes no parent.
    """
    if node is None:
        return ""
    if not isinstance(node, BoolNode):
        return format_clause(node.clause, options)

    joined = f" {node.operator} ".join(
        render(child, node.operator, options) for child in node.children
    )
    if parent_operator is not None and parent_operator != node.operator:
        return f"({joined})"
    return joined


def build_preview(
    clauses: Sequence[Clause],
    groups: Sequence[ExplicitGroup] | None = None,
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> str:
    """Build the AST for a filter bar and render its preview."""
    return render(build(clauses, groups, options), None, options)
