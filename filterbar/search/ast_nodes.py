"""Data classes for filter clauses, explicit groups and the boolean AST."""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class OperatorKind(StrEnum):
    """Filter operators offered by the filter bar."""

    IS = "is"
    IS_NOT = "is_not"
    IS_ONE_OF = "is_one_of"
    IS_NOT_ONE_OF = "is_not_one_of"
    EXISTS = "exists"
    DOES_NOT_EXIST = "does_not_exist"
    RANGE = "range"
    PREFIX = "prefix"
    WILDCARD = "wildcard"
    QUERY_STRING = "query_string"


class Logic(StrEnum):
    """Boolean connector between clauses."""

    AND = "AND"
    OR = "OR"


NEGATED_OPERATORS: frozenset[str] = frozenset(
    {OperatorKind.IS_NOT, OperatorKind.DOES_NOT_EXIST, OperatorKind.IS_NOT_ONE_OF}
)

MULTI_VALUE_OPERATORS: frozenset[str] = frozenset(
    {OperatorKind.IS_ONE_OF, OperatorKind.IS_NOT_ONE_OF}
)


def generate_id(prefix: str = "filter") -> str:
    """Return a unique identifier for a clause or group."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class CompilerOptions:
    """Knobs shared by the normalizer, builders and compiler.

    Attributes:
        keyword_suffix: Field suffix marking exact-match (keyword) fields.
        default_connector: Connector assumed when a clause carries none.
        wildcard_case_insensitive: Value of ``case_insensitive`` on wildcard queries.
        range_min_operator: Lower-bound operator when a range clause names none.
        range_max_operator: Upper-bound operator when a range clause names none.
    """

    keyword_suffix: str = ".keyword"
    default_connector: Logic = Logic.AND
    wildcard_case_insensitive: bool = True
    range_min_operator: str = "gt"
    range_max_operator: str = "lt"


DEFAULT_OPTIONS = CompilerOptions()


@dataclass
class GroupMeta:
    """Group tag carried by a clause that belongs to an explicit group."""

    group_id: str
    group_type: Logic
    is_group_start: bool = False
    is_group_end: bool = False


@dataclass
class Clause:
    """One field/operator/value filter unit as the filter bar holds it.

    ``connector`` links the clause to its predecessor and is ignored on
    the first clause of the sequence. Values are kept raw here; the
    normalizer turns them into a :data:`FilterValue`.
    """

    field: str = ""
    operator: str = OperatorKind.IS
    value: Any = None
    values: list[Any] | None = None
    min_value: Any = None
    max_value: Any = None
    min_operator: str | None = None
    max_operator: str | None = None
    disabled: bool = False
    connector: Logic | None = None
    # dataclasses.field: the "field" attribute above shadows the bare name here
    id: str = dataclasses.field(default_factory=generate_id)
    group_meta: GroupMeta | None = None


@dataclass(frozen=True)
class ExplicitGroup:
    """A user-declared contiguous run of clauses with its own AND/OR type."""

    id: str
    type: Logic
    clause_indices: tuple[int, ...]

    @property
    def start(self) -> int:
        return self.clause_indices[0]

    @property
    def end(self) -> int:
        return self.clause_indices[-1]

    def is_contiguous(self) -> bool:
        """Whether the indices form one gap-free run."""
        return all(b == a + 1 for a, b in zip(self.clause_indices, self.clause_indices[1:]))


# ---------------------------------------------------------------------------
# Normalized values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NoValue:
    """Operators that take no value (``exists``, ``does_not_exist``)."""


@dataclass(frozen=True)
class Scalar:
    """A single value, already coerced to a number where applicable."""

    value: Any


@dataclass(frozen=True)
class ValueList:
    """Values for the one-of operators."""

    values: tuple[Any, ...]


@dataclass(frozen=True)
class Range:
    """Range bounds; ``None`` means the side is open."""

    min_value: Any = None
    max_value: Any = None
    min_operator: str = "gt"
    max_operator: str = "lt"


FilterValue = NoValue | Scalar | ValueList | Range


@dataclass(frozen=True)
class NormalizedClause:
    """A validated clause ready for code generation."""

    field: str
    operator: OperatorKind
    value: FilterValue
    negated: bool = False
    is_exact_match_field: bool = False
    is_numeric: bool = False


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Leaf:
    """AST leaf wrapping one clause.

    Leaves compare and hash by identity: the wrapped clause is mutable.
    """

    clause: Clause

    @property
    def id(self) -> str:
        return self.clause.id


@dataclass(frozen=True)
class BoolNode:
    """AND/OR node.

    ``group_id`` is set when the node stands for an explicit group; such
    nodes are atomic and never extended by the left fold.
    """

    operator: Logic
    children: tuple[Node, ...]
    group_id: str | None = None

    @property
    def is_explicit_group(self) -> bool:
        return self.group_id is not None


Node = Leaf | BoolNode


@dataclass(frozen=True)
class Separator:
    """UI connector shown between clause ``index - 1`` and clause ``index``."""

    index: int
    connector_type: Logic
    is_group_boundary: bool
    group_id: str | None = None
