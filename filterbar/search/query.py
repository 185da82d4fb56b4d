"""Compile the filter AST into an Elasticsearch bool query document."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from filterbar.exceptions import UnknownOperatorError, ValidationError
from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    Leaf,
    Logic,
    Node,
    NormalizedClause,
    OperatorKind,
    Range,
    Scalar,
    ValueList,
)
from filterbar.search.builder import build
from filterbar.search.normalizer import normalize

logger = logging.getLogger(__name__)

QueryDoc = dict[str, Any]


def match_all() -> QueryDoc:
    return {"match_all": {}}


def is_match_all(doc: QueryDoc | None) -> bool:
    """Whether a compiled document is empty or the match-all sentinel."""
    return not doc or (len(doc) == 1 and "match_all" in doc)


def _must_not(doc: QueryDoc) -> QueryDoc:
    return {"bool": {"must_not": [doc]}}


def _scalar(nc: NormalizedClause) -> Any:
    assert isinstance(nc.value, Scalar)
    return nc.value.value


def _equality(nc: NormalizedClause) -> QueryDoc:
    value = _scalar(nc)
    if nc.is_exact_match_field or nc.is_numeric:
        return {"term": {nc.field: value}}
    return {"match": {nc.field: value}}


def _terms(nc: NormalizedClause) -> QueryDoc:
    assert isinstance(nc.value, ValueList)
    return {"terms": {nc.field: list(nc.value.values)}}


def _range(nc: NormalizedClause) -> QueryDoc:
    bounds = nc.value
    assert isinstance(bounds, Range)
    body: dict[str, Any] = {}
    if bounds.min_value is not None:
        body[bounds.min_operator] = bounds.min_value
    if bounds.max_value is not None:
        body[bounds.max_operator] = bounds.max_value
    return {"range": {nc.field: body}}


def _wildcard(field: str, pattern: str, options: CompilerOptions) -> QueryDoc:
    return {
        "wildcard": {
            field: {"value": pattern, "case_insensitive": options.wildcard_case_insensitive}
        }
    }


def compile_clause(nc: NormalizedClause, options: CompilerOptions = DEFAULT_OPTIONS) -> QueryDoc:
    """Build the query document for one normalized clause."""
    op = nc.operator

    if op == OperatorKind.IS:
        return _equality(nc)
    if op == OperatorKind.IS_NOT:
        return _must_not(_equality(nc))
    if op == OperatorKind.IS_ONE_OF:
        return _terms(nc)
    if op == OperatorKind.IS_NOT_ONE_OF:
        return _must_not(_terms(nc))
    if op == OperatorKind.EXISTS:
        return {"exists": {"field": nc.field}}
    if op == OperatorKind.DOES_NOT_EXIST:
        return _must_not({"exists": {"field": nc.field}})
    if op == OperatorKind.RANGE:
        return _range(nc)
    if op == OperatorKind.PREFIX:
        value = _scalar(nc)
        if nc.is_exact_match_field:
            return {"prefix": {nc.field: value}}
        return _wildcard(nc.field, f"{value}*", options)
    if op == OperatorKind.WILDCARD:
        return _wildcard(nc.field, _scalar(nc), options)
    if op == OperatorKind.QUERY_STRING:
        return {"query_string": {"default_field": nc.field, "query": _scalar(nc)}}

    raise UnknownOperatorError(op)


def compile_leaf(clause: Clause, options: CompilerOptions = DEFAULT_OPTIONS) -> QueryDoc | None:
    """Compile one clause, or return ``None`` when it cannot contribute.

    Incomplete clauses are skipped quietly; unknown operators are skipped
    with a warning.
    """
    try:
        return compile_clause(normalize(clause, options), options)
    except ValidationError as e:
        logger.debug("Skipping clause %s: %s", clause.id, e)
    except UnknownOperatorError as e:
        logger.warning("Skipping clause %s: %s", clause.id, e)
    return None


def compile_node(node: Node | None, options: CompilerOptions = DEFAULT_OPTIONS) -> QueryDoc:
    """Compile an AST node into a query document.

    ``None`` compiles to match-all. Children that compile to nothing are
    dropped; a node left with one child collapses to that child.
    """
    if node is None:
        return match_all()

    if isinstance(node, Leaf):
        doc = compile_leaf(node.clause, options)
        return doc if doc is not None else match_all()

    children = [compile_node(child, options) for child in node.children]
    children = [doc for doc in children if not is_match_all(doc)]

    if not children:
        return match_all()
    if len(children) == 1:
        return children[0]
    if node.operator == Logic.OR:
        return {"bool": {"should": children, "minimum_should_match": 1}}
    return {"bool": {"must": children}}


def build_query(
    clauses: Sequence[Clause],
    groups: Sequence[ExplicitGroup] | None = None,
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> QueryDoc:
    """Compile a filter bar into ``{"query": <document>}``.

    Args:
        clauses: Clause sequence in filter-bar order.
        groups: Optional explicit groups over clause indices.
        options: Compiler options.

    Returns:
        The top-level search request body.
    """
    return {"query": compile_node(build(clauses, groups, options), options)}
