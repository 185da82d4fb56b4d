"""Field catalog and operator metadata for the filter bar UI.

The catalog only drives which operators are offered for a field; the
compiler itself never needs it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from filterbar.exceptions import ValidationError
from filterbar.search.ast_nodes import OperatorKind


@dataclass(frozen=True)
class OperatorDef:
    """Operator metadata shown in the operator picker."""

    value: OperatorKind
    label: str
    description: str
    requires_value: bool
    supports_multiple_values: bool


OPERATORS: tuple[OperatorDef, ...] = (
    OperatorDef(OperatorKind.IS, "is", "Equals a value", True, False),
    OperatorDef(OperatorKind.IS_NOT, "is not", "Does not equal a value", True, False),
    OperatorDef(OperatorKind.IS_ONE_OF, "is one of", "Equals any of the values", True, True),
    OperatorDef(
        OperatorKind.IS_NOT_ONE_OF,
        "is not one of",
        "Does not equal any of the values",
        True,
        True,
    ),
    OperatorDef(OperatorKind.EXISTS, "exists", "Field exists", False, False),
    OperatorDef(
        OperatorKind.DOES_NOT_EXIST, "does not exist", "Field does not exist", False, False
    ),
    OperatorDef(OperatorKind.RANGE, "is between", "Within a range", True, False),
    OperatorDef(OperatorKind.PREFIX, "starts with", "Starts with prefix", True, False),
    OperatorDef(OperatorKind.WILDCARD, "matches pattern", "Matches wildcard pattern", True, False),
    OperatorDef(OperatorKind.QUERY_STRING, "query string", "Lucene query syntax", True, False),
)

_OPERATORS_BY_VALUE: dict[str, OperatorDef] = {op.value: op for op in OPERATORS}

FIELD_TYPES: frozenset[str] = frozenset({"string", "number", "date", "boolean", "ip"})

_ALL = tuple(op.value for op in OPERATORS)
_TEXT_ONLY = frozenset({OperatorKind.PREFIX, OperatorKind.WILDCARD})

# Operators offered by default for each field type.
DEFAULT_OPERATORS_BY_TYPE: dict[str, tuple[OperatorKind, ...]] = {
    "string": tuple(op for op in _ALL if op != OperatorKind.RANGE),
    "number": tuple(op for op in _ALL if op not in _TEXT_ONLY),
    "date": tuple(op for op in _ALL if op not in _TEXT_ONLY),
    "ip": tuple(op for op in _ALL if op not in _TEXT_ONLY),
    "boolean": (
        OperatorKind.IS,
        OperatorKind.IS_NOT,
        OperatorKind.EXISTS,
        OperatorKind.DOES_NOT_EXIST,
    ),
}


def get_operator_def(operator: str) -> OperatorDef | None:
    return _OPERATORS_BY_VALUE.get(operator)


def operator_requires_value(operator: str) -> bool:
    """Unknown operators are assumed to need a value."""
    op_def = get_operator_def(operator)
    return op_def.requires_value if op_def is not None else True


def operator_supports_multiple_values(operator: str) -> bool:
    op_def = get_operator_def(operator)
    return op_def.supports_multiple_values if op_def is not None else False


@dataclass(frozen=True)
class FieldDefinition:
    """A field offered by the field picker.

    Attributes:
        name: Field name as indexed, e.g. ``host.name.keyword``.
        type: One of ``string``, ``number``, ``date``, ``boolean``, ``ip``.
        label: Display label; defaults to the name.
        operators: Explicit operator list; ``None`` uses the type defaults.
    """

    name: str
    type: str = "string"
    label: str = ""
    operators: tuple[OperatorKind, ...] | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def allowed_operators(self) -> tuple[OperatorKind, ...]:
        if self.operators is not None:
            return self.operators
        return DEFAULT_OPERATORS_BY_TYPE.get(self.type, _ALL)


@dataclass
class FieldCatalog:
    """Ordered collection of available fields."""

    fields: list[FieldDefinition] = field(default_factory=list)

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, name: str) -> FieldDefinition | None:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None

    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def operators_for(self, name: str) -> tuple[OperatorKind, ...]:
        """Operators to offer for a field; unknown fields get all of them."""
        definition = self.get(name)
        if definition is None:
            return _ALL
        return definition.allowed_operators()

    @classmethod
    def from_list(cls, items: Iterable[Any]) -> FieldCatalog:
        """Build a catalog from field names or ``{name, type}`` mappings.

        Raises:
            ValidationError: If an entry has no name, an unknown type or
                an unknown operator.
        """
        fields: list[FieldDefinition] = []
        for item in items:
            if isinstance(item, str):
                item = {"name": item}
            if not isinstance(item, dict) or not item.get("name"):
                raise ValidationError("field catalog entry", item, "needs a name")

            field_type = item.get("type", "string")
            if field_type not in FIELD_TYPES:
                raise ValidationError(
                    "field type", field_type, f"must be one of {', '.join(sorted(FIELD_TYPES))}"
                )

            operators = item.get("operators")
            if operators is not None:
                try:
                    operators = tuple(OperatorKind(op) for op in operators)
                except ValueError as e:
                    raise ValidationError("operators", operators, str(e)) from e

            fields.append(
                FieldDefinition(
                    name=str(item["name"]),
                    type=field_type,
                    label=str(item.get("label", "")),
                    operators=operators,
                )
            )
        return cls(fields=fields)
