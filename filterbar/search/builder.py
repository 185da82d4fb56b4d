"""Build the boolean AST from a clause sequence and optional explicit groups.

Grouping is strictly left-associative, the way the Kibana filter bar does
it: clauses are folded left to right, a run of the same connector stays
flat, and a connector change wraps everything accumulated so far as the
left child of a new node.

    A, B (AND), C (OR), D (AND)  ->  ((A AND B) OR C) AND D

Explicit groups are built as atomic subtrees first; the ungrouped runs
between them are folded on their own, and the resulting segments are
stitched together with the same left fold.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from filterbar.search.ast_nodes import (
    DEFAULT_OPTIONS,
    BoolNode,
    Clause,
    CompilerOptions,
    ExplicitGroup,
    Leaf,
    Logic,
    Node,
)

logger = logging.getLogger(__name__)


def connector_of(clause: Clause, options: CompilerOptions = DEFAULT_OPTIONS) -> Logic:
    """Return the connector linking ``clause`` to its predecessor."""
    if clause.connector is None:
        return options.default_connector
    return Logic(str(clause.connector).upper())


def _absorbs(node: Node, operator: Logic) -> bool:
    # Only implicit nodes may be extended; explicit groups stay atomic.
    return isinstance(node, BoolNode) and not node.is_explicit_group and node.operator == operator


def combine(left: Node, right: Node, operator: Logic) -> BoolNode:
    """Join two subtrees with ``operator`` under the left-fold rule.

    An implicit left node with the same operator is extended instead of
    wrapped. An implicit right node with the same operator is spliced in
    so that same-operator runs never nest.
    """
    children: tuple[Node, ...] = left.children if _absorbs(left, operator) else (left,)
    if _absorbs(right, operator):
        children += right.children
    else:
        children += (right,)
    return BoolNode(operator, children)


def _fold(clauses: Sequence[Clause], options: CompilerOptions) -> Node | None:
    if not clauses:
        return None
    result: Node = Leaf(clauses[0])
    for clause in clauses[1:]:
        result = combine(result, Leaf(clause), connector_of(clause, options))
    return result


def build_ast(
    clauses: Sequence[Clause],
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> Node | None:
    """Build the implicit left-associative AST.

    Disabled clauses are dropped first. The connector of the first
    remaining clause is ignored.

    Returns:
        ``None`` for no enabled clauses, a :class:`Leaf` for one,
        otherwise a :class:`BoolNode`.
    """
    enabled = [c for c in clauses if not c.disabled]
    return _fold(enabled, options)


def usable_groups(groups: Sequence[ExplicitGroup], size: int) -> list[ExplicitGroup]:
    """Return the groups that can take part in a build, ordered by start.

    Groups that point past the end of the clause sequence, are too small,
    have gaps, or overlap a group already accepted are skipped.
    """
    accepted: list[ExplicitGroup] = []
    taken: set[int] = set()
    for group in sorted(groups, key=lambda g: min(g.clause_indices, default=-1)):
        indices = group.clause_indices
        if len(indices) < 2 or not group.is_contiguous():
            logger.warning(
                "Ignoring group %s: indices %s are not a contiguous run", group.id, indices
            )
            continue
        if indices[0] < 0 or indices[-1] >= size:
            logger.warning(
                "Ignoring group %s: indices %s outside %d clauses", group.id, indices, size
            )
            continue
        if taken.intersection(indices):
            logger.warning("Ignoring group %s: overlaps another group", group.id)
            continue
        taken.update(indices)
        accepted.append(group)
    return accepted


def _segments(
    size: int, groups: list[ExplicitGroup]
) -> list[tuple[ExplicitGroup | None, range]]:
    """Partition ``[0, size)`` into group ranges and ungrouped runs."""
    by_start = {g.start: g for g in groups}
    segments: list[tuple[ExplicitGroup | None, range]] = []
    index = 0
    while index < size:
        group = by_start.get(index)
        if group is not None:
            segments.append((group, range(group.start, group.end + 1)))
            index = group.end + 1
            continue
        end = index
        while end < size and end not in by_start:
            end += 1
        segments.append((None, range(index, end)))
        index = end
    return segments


def _group_subtree(group: ExplicitGroup, members: list[Clause]) -> Node:
    if len(members) == 1:
        return Leaf(members[0])
    return BoolNode(group.type, tuple(Leaf(c) for c in members), group_id=group.id)


def build_grouped_ast(
    clauses: Sequence[Clause],
    groups: Sequence[ExplicitGroup],
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> Node | None:
    """Build the AST with explicit groups layered over the clause sequence.

    Group indices refer to positions in ``clauses`` including disabled
    ones. Disabled clauses are skipped inside their segment; a segment
    with no enabled clause disappears. Each segment joins the running
    result with the connector of its first enabled clause.
    """
    segment_nodes: list[tuple[Clause, Node]] = []
    for group, span in _segments(len(clauses), usable_groups(groups, len(clauses))):
        members = [clauses[i] for i in span if not clauses[i].disabled]
        if not members:
            continue
        if group is None:
            node = _fold(members, options)
        else:
            node = _group_subtree(group, members)
        if node is not None:
            segment_nodes.append((members[0], node))

    if not segment_nodes:
        return None

    result = segment_nodes[0][1]
    for first, node in segment_nodes[1:]:
        result = combine(result, node, connector_of(first, options))
    logger.debug("Built grouped AST from %d segments", len(segment_nodes))
    return result


def build(
    clauses: Sequence[Clause],
    groups: Sequence[ExplicitGroup] | None = None,
    options: CompilerOptions = DEFAULT_OPTIONS,
) -> Node | None:
    """Build the AST, using the group overlay only when groups exist."""
    if groups:
        return build_grouped_ast(clauses, groups, options)
    return build_ast(clauses, options)
