"""Kibana filter objects for single clauses.

Kibana stores each pill of its filter bar as an object with a ``meta``
block describing the clause and the ES ``query`` it stands for. Negation
lives in ``meta.negate``; the ``query`` is always the positive form, so
``status is_not 500`` becomes::

    {
      "meta": {"type": "phrase", "field": "status", "params": {"query": 500},
               "negate": true, "disabled": false},
      "query": {"term": {"status": 500}}
    }
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from typing import Any

from filterbar.exceptions import UnknownOperatorError, ValidationError
from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    Clause,
    CompilerOptions,
    NormalizedClause,
    OperatorKind,
    Range,
    Scalar,
    ValueList,
)
from filterbar.search.normalizer import normalize
from filterbar.search.query import compile_clause

logger = logging.getLogger(__name__)

KibanaFilter = dict[str, Any]

_POSITIVE: dict[OperatorKind, OperatorKind] = {
    OperatorKind.IS_NOT: OperatorKind.IS,
    OperatorKind.IS_NOT_ONE_OF: OperatorKind.IS_ONE_OF,
    OperatorKind.DOES_NOT_EXIST: OperatorKind.EXISTS,
}

_FILTER_TYPES: dict[OperatorKind, str] = {
    OperatorKind.IS: "phrase",
    OperatorKind.IS_ONE_OF: "phrases",
    OperatorKind.EXISTS: "exists",
    OperatorKind.RANGE: "range",
    OperatorKind.PREFIX: "custom",
    OperatorKind.WILDCARD: "custom",
    OperatorKind.QUERY_STRING: "query_string",
}


def _params(nc: NormalizedClause) -> Any:
    value = nc.value
    if isinstance(value, Range):
        params: dict[str, Any] = {}
        if value.min_value is not None:
            params[value.min_operator] = value.min_value
        if value.max_value is not None:
            params[value.max_operator] = value.max_value
        return params
    if isinstance(value, ValueList):
        return list(value.values)
    if isinstance(value, Scalar):
        return {"query": value.value}
    return None


def to_kibana_filter(clause: Clause, options: CompilerOptions = DEFAULT_OPTIONS) -> KibanaFilter:
    """Project one clause onto Kibana's filter object.

    Disabled clauses are projected too, with ``meta.disabled`` set.

    Raises:
        ValidationError: If the clause is incomplete.
        UnknownOperatorError: If the operator is not known.
    """
    nc = normalize(clause, options)
    positive = dataclasses.replace(
        nc, operator=_POSITIVE.get(nc.operator, nc.operator), negated=False
    )

    meta: dict[str, Any] = {"type": _FILTER_TYPES[positive.operator], "field": nc.field}
    params = _params(positive)
    if params is not None:
        meta["params"] = params
    meta["negate"] = nc.negated
    meta["disabled"] = clause.disabled

    return {"meta": meta, "query": compile_clause(positive, options)}


def to_kibana_filters(
    clauses: Sequence[Clause], options: CompilerOptions = DEFAULT_OPTIONS
) -> list[KibanaFilter]:
    """Project every complete clause, in filter-bar order."""
    filters: list[KibanaFilter] = []
    for clause in clauses:
        try:
            filters.append(to_kibana_filter(clause, options))
        except ValidationError as e:
            logger.debug("Skipping clause %s: %s", clause.id, e)
        except UnknownOperatorError as e:
            logger.warning("Skipping clause %s: %s", clause.id, e)
    return filters
