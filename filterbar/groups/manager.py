"""Group membership bookkeeping for the filter bar.

Every operation takes the :class:`FilterBarState` it acts on, validates
its input first and only then mutates, so a failed operation leaves the
state exactly as it was. The AST, query and preview are derived from the
state on demand and never stored.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Literal

from filterbar.exceptions import ClauseIndexError, GroupNotFoundError, InvalidGroupError
from filterbar.groups.state import FilterBarState
from filterbar.search import tree
from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    GroupMeta,
    Logic,
    Node,
    Separator,
    generate_id,
)
from filterbar.search.builder import build, connector_of
from filterbar.search.preview import render
from filterbar.search.query import QueryDoc, compile_node

logger = logging.getLogger(__name__)

Modifier = Literal["none", "ctrl", "shift"]


def _check_index(state: FilterBarState, index: int) -> None:
    if not 0 <= index < len(state.clauses):
        raise ClauseIndexError(index, len(state.clauses))


def _sync_group_meta(state: FilterBarState) -> None:
    """Re-tag every clause from the group list."""
    for clause in state.clauses:
        clause.group_meta = None
    for group in state.groups:
        last = len(group.clause_indices) - 1
        for position, index in enumerate(group.clause_indices):
            if 0 <= index < len(state.clauses):
                state.clauses[index].group_meta = GroupMeta(
                    group_id=group.id,
                    group_type=group.type,
                    is_group_start=position == 0,
                    is_group_end=position == last,
                )


def clear_selection(state: FilterBarState) -> None:
    state.selection = []
    state.last_clicked = None


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select(state: FilterBarState, index: int, modifier: Modifier = "none") -> list[int]:
    """Update the selection for a click on clause ``index``.

    ``none`` selects only ``index``; ``ctrl`` toggles it; ``shift``
    selects the inclusive range from the last clicked clause (or just
    ``index`` when nothing was clicked before).

    Returns:
        The new selection.
    """
    _check_index(state, index)

    if modifier == "shift" and state.last_clicked is not None:
        start, end = sorted((state.last_clicked, index))
        state.selection = list(range(start, end + 1))
    elif modifier == "ctrl":
        if index in state.selection:
            state.selection = [i for i in state.selection if i != index]
        else:
            state.selection = [*state.selection, index]
    elif modifier in ("none", "shift"):
        state.selection = [index]
    else:
        raise ValueError(f"Unknown selection modifier: {modifier!r}")

    state.last_clicked = index
    return list(state.selection)


def is_selected(state: FilterBarState, index: int) -> bool:
    return index in state.selection


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


def validate_selection(indices: list[int] | tuple[int, ...]) -> tuple[int, ...]:
    """Return the sorted selection if it can form a group.

    Raises:
        InvalidGroupError: If fewer than two clauses are selected or the
            selection has gaps.
    """
    ordered = tuple(sorted(set(indices)))
    if len(ordered) < 2:
        raise InvalidGroupError(list(indices), "select at least two clauses")
    if any(b != a + 1 for a, b in zip(ordered, ordered[1:])):
        raise InvalidGroupError(list(indices), "clauses must be adjacent")
    return ordered


def create_group(state: FilterBarState, group_type: Logic | str) -> ExplicitGroup:
    """Group the selected clauses.

    Existing groups overlapping the selection are replaced. On success the
    selection is cleared.

    Raises:
        InvalidGroupError: If the selection is too small or not contiguous.
            The state is left untouched.
    """
    indices = validate_selection(state.selection)
    for index in indices:
        _check_index(state, index)
    logic = Logic(str(group_type).upper())

    group = ExplicitGroup(id=generate_id("group"), type=logic, clause_indices=indices)
    state.groups = [g for g in state.groups if not set(g.clause_indices) & set(indices)]
    state.groups.append(group)
    _sync_group_meta(state)
    clear_selection(state)

    logger.debug("Created %s group %s over %s", logic, group.id, indices)
    return group


def create_implicit_group(
    state: FilterBarState, index: int, group_type: Logic | str
) -> ExplicitGroup | None:
    """Group clause ``index`` with the clause after it.

    On the last clause there is nothing to pair with, so the clause is
    only selected and ``None`` is returned.
    """
    _check_index(state, index)
    if index >= len(state.clauses) - 1:
        state.selection = [index]
        state.last_clicked = index
        return None

    previous = (list(state.selection), state.last_clicked)
    state.selection = [index, index + 1]
    try:
        return create_group(state, group_type)
    except InvalidGroupError:
        state.selection, state.last_clicked = previous
        raise


def remove_group(state: FilterBarState, group_id: str) -> ExplicitGroup:
    """Ungroup the clauses of a group.

    Raises:
        GroupNotFoundError: If no group has this id.
    """
    group = state.get_group(group_id)
    if group is None:
        raise GroupNotFoundError(group_id)
    state.groups = [g for g in state.groups if g.id != group_id]
    _sync_group_meta(state)
    return group


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------


def _shift_after_removal(group: ExplicitGroup, index: int) -> ExplicitGroup:
    remaining = tuple(i - 1 if i > index else i for i in group.clause_indices if i != index)
    return dataclasses.replace(group, clause_indices=remaining)


def remove_clause(state: FilterBarState, index: int) -> list[Separator]:
    """Delete clause ``index`` and keep group indices in step.

    A group losing the clause keeps its other members, renumbered; if
    fewer than two remain the group is dissolved. Groups after the clause
    move down by one.

    Returns:
        The recomputed separators.
    """
    _check_index(state, index)

    groups: list[ExplicitGroup] = []
    for group in state.groups:
        if index in group.clause_indices or group.start > index:
            group = _shift_after_removal(group, index)
        if len(group.clause_indices) < 2:
            logger.debug("Dissolving group %s", group.id)
            continue
        groups.append(group)

    del state.clauses[index]
    state.groups = groups
    _sync_group_meta(state)
    clear_selection(state)
    return separators(state)


def insert_clause_after(
    state: FilterBarState,
    index: int,
    connector: Logic | str = Logic.AND,
    clause: Clause | None = None,
) -> Clause:
    """Insert a clause right after clause ``index`` (``-1`` for the front).

    The new clause never joins a group. Inserting between two members of
    the same group would split it, so that is refused.

    Raises:
        InvalidGroupError: If the position lies inside a group.
    """
    if not -1 <= index < len(state.clauses):
        raise ClauseIndexError(index, len(state.clauses))

    for group in state.groups:
        if group.start <= index < group.end:
            raise InvalidGroupError(
                list(group.clause_indices), f"cannot insert inside group {group.id}"
            )

    new_clause = clause if clause is not None else Clause()
    new_clause.connector = Logic(str(connector).upper())
    position = index + 1

    state.groups = [
        dataclasses.replace(g, clause_indices=tuple(i + 1 for i in g.clause_indices))
        if g.start >= position
        else g
        for g in state.groups
    ]
    state.clauses.insert(position, new_clause)
    _sync_group_meta(state)
    clear_selection(state)
    return new_clause


def update_clause(state: FilterBarState, index: int, **changes: Any) -> Clause:
    """Replace attributes of clause ``index``; group membership is kept."""
    _check_index(state, index)
    if "id" in changes or "group_meta" in changes:
        raise ValueError("id and group_meta are managed by the filter bar")
    if "connector" in changes and changes["connector"] is not None:
        changes["connector"] = Logic(str(changes["connector"]).upper())
    updated = dataclasses.replace(state.clauses[index], **changes)
    state.clauses[index] = updated
    return updated


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


def separators(
    state: FilterBarState, options: CompilerOptions = DEFAULT_OPTIONS
) -> list[Separator]:
    """Return the connector shown between each pair of adjacent clauses.

    Inside a group the separator shows the group type; elsewhere it shows
    the clause's own connector and flags whether a group starts or ends
    there.
    """
    result: list[Separator] = []
    for index in range(1, len(state.clauses)):
        prev_group = state.group_of(index - 1)
        curr_group = state.group_of(index)

        if prev_group is not None and prev_group is curr_group:
            result.append(Separator(index, prev_group.type, False, prev_group.id))
            continue

        result.append(
            Separator(
                index=index,
                connector_type=connector_of(state.clauses[index], options),
                is_group_boundary=prev_group is not None or curr_group is not None,
                group_id=curr_group.id if curr_group is not None else None,
            )
        )
    return result


def ast(state: FilterBarState, options: CompilerOptions = DEFAULT_OPTIONS) -> Node | None:
    return build(state.clauses, state.groups, options)


def query(state: FilterBarState, options: CompilerOptions = DEFAULT_OPTIONS) -> QueryDoc:
    """Compile the filter bar into ``{"query": ...}``."""
    return {"query": compile_node(ast(state, options), options)}


def preview(state: FilterBarState, options: CompilerOptions = DEFAULT_OPTIONS) -> str:
    return render(ast(state, options), None, options)


def group_node(
    state: FilterBarState, group_id: str, options: CompilerOptions = DEFAULT_OPTIONS
) -> BoolNode:
    """Return the AST node an explicit group compiles to.

    Raises:
        GroupNotFoundError: If the built AST has no node for the group,
            for example when fewer than two of its clauses are enabled.
    """
    node = tree.find_group(ast(state, options), group_id)
    if node is None:
        raise GroupNotFoundError(group_id)
    return node


def group_preview(
    state: FilterBarState, group_id: str, options: CompilerOptions = DEFAULT_OPTIONS
) -> str:
    return render(group_node(state, group_id, options), None, options)
