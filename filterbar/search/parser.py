"""Parse the one-line filter-bar syntax into clauses and explicit groups.

Syntax::

    status is active OR type is "power user"
    bytes range >= 100 < 2000 AND (tags is_one_of web, api OR host exists)
    -debug is true AND message prefix "GET /"

Clauses are ``field operator [value]`` joined by ``AND``/``OR``. A leading
``-`` disables a clause. A parenthesized run becomes one explicit group;
every connector inside it must be the same and gives the group its type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from typing import Any

from lark import Lark, Token, Transformer, UnexpectedInput
from lark.exceptions import VisitError

from filterbar.exceptions import FilterParseError
from filterbar.search.ast_nodes import Clause, ExplicitGroup, Logic, generate_id

_MIN_CMP: dict[str, str] = {">": "gt", ">=": "gte"}
_MAX_CMP: dict[str, str] = {"<": "lt", "<=": "lte"}


def _load_grammar() -> str:
    """Load the Lark grammar from the package resources."""
    return resources.files("filterbar.search").joinpath("grammar.lark").read_text()


_parser = Lark(
    _load_grammar(),
    parser="earley",
    ambiguity="resolve",
)


@dataclass
class ParsedFilterBar:
    """Clauses and explicit groups read from a filter-bar expression."""

    clauses: list[Clause] = field(default_factory=list)
    groups: list[ExplicitGroup] = field(default_factory=list)


@dataclass
class _Group:
    type: Logic
    clauses: list[Clause]


class _FilterBarTransformer(Transformer):
    """Transform the Lark parse tree into clauses and groups."""

    def start(self, items: list[Any]) -> ParsedFilterBar:
        return items[0]

    def filter_bar(self, items: list[Any]) -> ParsedFilterBar:
        result = ParsedFilterBar()
        connector: Logic | None = None
        for item in items:
            if isinstance(item, Token):
                connector = Logic(str(item))
                continue
            if isinstance(item, Clause):
                item.connector = connector
                result.clauses.append(item)
            else:
                # Group members after the first are joined by the group type.
                item.clauses[0].connector = connector
                first = len(result.clauses)
                result.clauses.extend(item.clauses)
                result.groups.append(
                    ExplicitGroup(
                        id=generate_id("group"),
                        type=item.type,
                        clause_indices=tuple(range(first, len(result.clauses))),
                    )
                )
        return result

    def group(self, items: list[Any]) -> _Group:
        clauses = [c for c in items if isinstance(c, Clause)]
        connectors = {str(t) for t in items if isinstance(t, Token)}
        if len(connectors) != 1:
            raise ValueError("mixed AND/OR inside one group; use nested filter bars instead")
        group_type = Logic(connectors.pop())
        for clause in clauses[1:]:
            clause.connector = group_type
        return _Group(type=group_type, clauses=clauses)

    def clause(self, items: list[Any]) -> Clause:
        disabled = isinstance(items[0], Token) and items[0].type == "DISABLED"
        if disabled:
            items = items[1:]
        field_name = str(items[0])
        predicate: dict[str, Any] = items[1]
        return Clause(field=field_name, disabled=disabled, **predicate)

    def exists_op(self, items: list[Any]) -> dict[str, Any]:
        return {"operator": str(items[0])}

    def single_op(self, items: list[Any]) -> dict[str, Any]:
        return {"operator": str(items[0]), "value": items[1]}

    def multi_op(self, items: list[Any]) -> dict[str, Any]:
        return {"operator": str(items[0]), "values": list(items[1:])}

    def range_op(self, items: list[Any]) -> dict[str, Any]:
        result: dict[str, Any] = {"operator": "range"}
        for cmp, value in items:
            if cmp in _MIN_CMP and "min_value" not in result:
                result["min_value"] = value
                result["min_operator"] = _MIN_CMP[cmp]
            elif cmp in _MAX_CMP and "max_value" not in result:
                result["max_value"] = value
                result["max_operator"] = _MAX_CMP[cmp]
            else:
                raise ValueError(f"range has two bounds on the same side ({cmp})")
        return result

    def bound(self, items: list[Any]) -> tuple[str, str]:
        return str(items[0]), items[1]

    def value(self, items: list[Any]) -> str:
        return str(items[0])

    def QUOTED_STRING(self, token: Token) -> str:
        raw = str(token)[1:-1]
        return raw.replace('\\"', '"').replace("\\\\", "\\")


_transformer = _FilterBarTransformer()


def parse_filter_bar(text: str) -> ParsedFilterBar:
    """Parse a one-line filter-bar expression.

    Args:
        text: The expression to parse.

    Returns:
        The clauses in order and the explicit groups over them.

    Raises:
        FilterParseError: If the expression cannot be parsed.
    """
    text = text.strip()
    if not text:
        return ParsedFilterBar()

    try:
        tree = _parser.parse(text)
        return _transformer.transform(tree)
    except UnexpectedInput as e:
        raise FilterParseError(text, str(e)) from e
    except VisitError as e:
        raise FilterParseError(text, str(e.orig_exc)) from e
