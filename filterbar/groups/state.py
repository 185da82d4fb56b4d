"""Filter-bar state and its JSON form.

The host application persists the filter bar as opaque JSON using the
camelCase keys of the dashboard front end::

    {
      "clauses": [
        {"field": "status", "operator": "is", "value": "active"},
        {"field": "type", "operator": "is", "value": "user", "logic": "OR"}
      ],
      "groups": [{"id": "g1", "type": "OR", "filterIndices": [0, 1]}],
      "customLabel": "Active users"
    }

``filters`` is accepted as an alias of ``clauses``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from filterbar.exceptions import StateFormatError
from filterbar.search.ast_nodes import Clause, ExplicitGroup, GroupMeta, Logic, generate_id

# JSON key -> Clause attribute
_CLAUSE_KEYS: dict[str, str] = {
    "id": "id",
    "field": "field",
    "operator": "operator",
    "value": "value",
    "values": "values",
    "minValue": "min_value",
    "maxValue": "max_value",
    "minOperator": "min_operator",
    "maxOperator": "max_operator",
    "disabled": "disabled",
}


@dataclass
class FilterBarState:
    """Source of truth for one filter bar.

    Attributes:
        clauses: Clauses in display order.
        groups: Explicit groups over clause indices.
        selection: Selected clause indices, in click order.
        last_clicked: Anchor for shift-range selection.
        custom_label: Label the user gave the filter bar, if any.
    """

    clauses: list[Clause] = field(default_factory=list)
    groups: list[ExplicitGroup] = field(default_factory=list)
    selection: list[int] = field(default_factory=list)
    last_clicked: int | None = None
    custom_label: str | None = None

    def group_of(self, index: int) -> ExplicitGroup | None:
        """Return the group containing clause ``index``, if any."""
        for group in self.groups:
            if index in group.clause_indices:
                return group
        return None

    def get_group(self, group_id: str) -> ExplicitGroup | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterBarState:
        """Load state from its JSON form.

        Raises:
            StateFormatError: If the data does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise StateFormatError("top level must be an object")

        raw_clauses = data.get("clauses", data.get("filters", []))
        raw_groups = data.get("groups", [])
        if not isinstance(raw_clauses, list):
            raise StateFormatError("'clauses' must be a list")
        if not isinstance(raw_groups, list):
            raise StateFormatError("'groups' must be a list")

        custom_label = data.get("customLabel")
        if custom_label is not None and not isinstance(custom_label, str):
            raise StateFormatError("'customLabel' must be a string")

        clauses = [_clause_from_dict(item, i) for i, item in enumerate(raw_clauses)]
        groups = [_group_from_dict(item, i) for i, item in enumerate(raw_groups)]
        return cls(clauses=clauses, groups=groups, custom_label=custom_label)

    def to_dict(self) -> dict[str, Any]:
        """Serialize clauses and groups; selection is transient and left out."""
        data: dict[str, Any] = {
            "clauses": [_clause_to_dict(c, i) for i, c in enumerate(self.clauses)],
            "groups": [
                {"id": g.id, "type": str(g.type), "filterIndices": list(g.clause_indices)}
                for g in self.groups
            ],
        }
        if self.custom_label:
            data["customLabel"] = self.custom_label
        return data


def _parse_logic(value: Any, where: str) -> Logic:
    try:
        return Logic(str(value).upper())
    except ValueError:
        raise StateFormatError(f"{where}: expected AND or OR, got {value!r}") from None


def _clause_from_dict(item: Any, position: int) -> Clause:
    if not isinstance(item, dict):
        raise StateFormatError(f"clause {position} must be an object")

    kwargs: dict[str, Any] = {}
    for key, attr in _CLAUSE_KEYS.items():
        if key in item and item[key] is not None:
            kwargs[attr] = item[key]

    for key in ("field", "operator"):
        if key in item and not isinstance(item[key], str):
            raise StateFormatError(f"clause {position}: '{key}' must be a string")
    if "values" in kwargs and not isinstance(kwargs["values"], list):
        raise StateFormatError(f"clause {position}: 'values' must be a list")
    if not isinstance(kwargs.get("disabled", False), bool):
        raise StateFormatError(f"clause {position}: 'disabled' must be true or false")
    kwargs["id"] = str(kwargs.get("id") or generate_id())

    logic = item.get("logic")
    if logic is not None:
        kwargs["connector"] = _parse_logic(logic, f"clause {position} logic")

    meta = item.get("groupMeta")
    if isinstance(meta, dict) and meta.get("groupId"):
        kwargs["group_meta"] = GroupMeta(
            group_id=str(meta["groupId"]),
            group_type=_parse_logic(meta.get("groupType", "AND"), f"clause {position} groupType"),
            is_group_start=bool(meta.get("isGroupStart", False)),
            is_group_end=bool(meta.get("isGroupEnd", False)),
        )
    return Clause(**kwargs)


def _group_from_dict(item: Any, position: int) -> ExplicitGroup:
    if not isinstance(item, dict):
        raise StateFormatError(f"group {position} must be an object")
    indices = item.get("filterIndices", item.get("clauseIndices"))
    if not isinstance(indices, list) or not all(
        isinstance(i, int) and not isinstance(i, bool) for i in indices
    ):
        raise StateFormatError(f"group {position}: 'filterIndices' must be a list of integers")
    members = sorted(set(indices))
    if len(members) < 2:
        raise StateFormatError(f"group {position}: needs at least two clauses")
    if members[-1] - members[0] != len(members) - 1:
        raise StateFormatError(f"group {position}: clauses must be contiguous, got {members}")
    return ExplicitGroup(
        id=str(item.get("id") or generate_id("group")),
        type=_parse_logic(item.get("type", "AND"), f"group {position} type"),
        clause_indices=tuple(members),
    )


def _clause_to_dict(clause: Clause, position: int) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, attr in _CLAUSE_KEYS.items():
        value = getattr(clause, attr)
        if value is not None:
            data[key] = value
    data["operator"] = str(clause.operator)
    if position > 0 and clause.connector is not None:
        data["logic"] = str(clause.connector)
    if clause.group_meta is not None:
        data["groupMeta"] = {
            "groupId": clause.group_meta.group_id,
            "groupType": str(clause.group_meta.group_type),
            "isGroupStart": clause.group_meta.is_group_start,
            "isGroupEnd": clause.group_meta.is_group_end,
        }
    return data
