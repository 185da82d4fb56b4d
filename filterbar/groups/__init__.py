"""Explicit group bookkeeping and filter-bar state."""

from filterbar.groups.manager import (
    ast,
    clear_selection,
    create_group,
    create_implicit_group,
    group_node,
    group_preview,
    insert_clause_after,
    preview,
    query,
    remove_clause,
    remove_group,
    select,
    separators,
    update_clause,
)
from filterbar.groups.state import FilterBarState

__all__ = [
    "FilterBarState",
    "ast",
    "clear_selection",
    "create_group",
    "create_implicit_group",
    "group_node",
    "group_preview",
    "insert_clause_after",
    "preview",
    "query",
    "remove_clause",
    "remove_group",
    "select",
    "separators",
    "update_clause",
]
