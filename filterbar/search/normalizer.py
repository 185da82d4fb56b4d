"""Validate and canonicalize a single filter clause."""

from __future__ import annotations

import math
import re
from typing import Any

from filterbar.exceptions import UnknownOperatorError, ValidationError
from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    MULTI_VALUE_OPERATORS,
    NEGATED_OPERATORS,
    Clause,
    CompilerOptions,
    FilterValue,
    NormalizedClause,
    NoValue,
    OperatorKind,
    Range,
    Scalar,
    ValueList,
)

_NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")

_MIN_OPERATORS: frozenset[str] = frozenset({"gt", "gte"})
_MAX_OPERATORS: frozenset[str] = frozenset({"lt", "lte"})

# Operators whose single value must be a non-empty string.
_TEXT_VALUE_OPERATORS: frozenset[str] = frozenset(
    {OperatorKind.PREFIX, OperatorKind.WILDCARD, OperatorKind.QUERY_STRING}
)


def is_numeric(value: Any) -> bool:
    """Return whether a value counts as numeric for query generation.

    Finite numbers qualify (booleans, NaN and infinities do not), as do
    strings that look like an optionally negative integer or decimal once
    trimmed.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        return bool(_NUMERIC_RE.match(value.strip()))
    return False


def coerce_number(value: Any) -> Any:
    """Convert a numeric string to ``int``/``float``; other values pass through."""
    if isinstance(value, str) and is_numeric(value):
        text = value.strip()
        return float(text) if "." in text else int(text)
    return value


def is_blank(value: Any) -> bool:
    """``None`` and the empty string mean "not filled in"."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def split_values(raw: Any) -> list[Any]:
    """Turn a list or comma-separated string into a list of values."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [v.strip() if isinstance(v, str) else v for v in raw if not is_blank(v)]
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return [raw]


def is_exact_match_field(field: str, options: CompilerOptions = DEFAULT_OPTIONS) -> bool:
    return bool(options.keyword_suffix) and field.endswith(options.keyword_suffix)


def _require_finite(name: str, value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(name, value, "must be a finite number")
    return value


def parse_operator(operator: Any) -> OperatorKind:
    """Resolve an operator name, raising UnknownOperatorError otherwise."""
    try:
        return OperatorKind(operator)
    except ValueError:
        raise UnknownOperatorError(operator) from None


def _normalize_range(clause: Clause, exact: bool, options: CompilerOptions) -> Range:
    min_op = clause.min_operator or options.range_min_operator
    max_op = clause.max_operator or options.range_max_operator
    if min_op not in _MIN_OPERATORS:
        raise ValidationError("min_operator", min_op, "must be one of gt, gte")
    if max_op not in _MAX_OPERATORS:
        raise ValidationError("max_operator", max_op, "must be one of lt, lte")

    has_min = not is_blank(clause.min_value)
    has_max = not is_blank(clause.max_value)
    if not has_min and not has_max:
        raise ValidationError("range", None, "needs a lower or upper bound")

    def bound(value: Any) -> Any:
        _require_finite("range", value)
        if exact:
            return value
        return coerce_number(value)

    return Range(
        min_value=bound(clause.min_value) if has_min else None,
        max_value=bound(clause.max_value) if has_max else None,
        min_operator=min_op,
        max_operator=max_op,
    )


def normalize(clause: Clause, options: CompilerOptions = DEFAULT_OPTIONS) -> NormalizedClause:
    """Validate a clause and derive the flags code generation needs.

    Args:
        clause: The raw clause. It is never modified.
        options: Compiler options (keyword suffix, range defaults).

    Returns:
        The normalized clause.

    Raises:
        ValidationError: If the field is empty or a required value is missing.
        UnknownOperatorError: If the operator is not an :class:`OperatorKind`.
    """
    operator = parse_operator(clause.operator)

    if clause.field is not None and not isinstance(clause.field, str):
        raise ValidationError("field", clause.field, "must be a string")
    field = (clause.field or "").strip()
    if not field:
        raise ValidationError("field", clause.field, "must not be empty")

    exact = is_exact_match_field(field, options)
    negated = operator in NEGATED_OPERATORS
    numeric = False
    value: FilterValue

    if operator in (OperatorKind.EXISTS, OperatorKind.DOES_NOT_EXIST):
        value = NoValue()
    elif operator == OperatorKind.RANGE:
        value = _normalize_range(clause, exact, options)
    elif operator in MULTI_VALUE_OPERATORS:
        items = split_values(clause.values if clause.values else clause.value)
        if not items:
            raise ValidationError("values", clause.value, f"'{operator}' needs at least one value")
        value = ValueList(tuple(_require_finite("values", v) for v in items))
    else:
        raw = clause.value
        if is_blank(raw):
            raise ValidationError("value", raw, f"'{operator}' needs a value")
        _require_finite("value", raw)
        if operator in _TEXT_VALUE_OPERATORS:
            value = Scalar(str(raw).strip() if isinstance(raw, str) else str(raw))
        elif not exact and is_numeric(raw):
            numeric = True
            value = Scalar(coerce_number(raw))
        else:
            value = Scalar(raw)

    return NormalizedClause(
        field=field,
        operator=operator,
        value=value,
        negated=negated,
        is_exact_match_field=exact,
        is_numeric=numeric,
    )
