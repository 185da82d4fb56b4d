"""Persistent operations over the filter AST.

Nodes are immutable; every edit returns a rebuilt tree and leaves the
input untouched.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Collection, Iterator
from typing import Any

from filterbar.exceptions import GroupError
from filterbar.search.ast_nodes import BoolNode, Clause, Leaf, Logic, Node


def walk(node: Node | None) -> Iterator[Node]:
    """Yield every node depth-first, parents before children."""
    if node is None:
        return
    yield node
    if isinstance(node, BoolNode):
        for child in node.children:
            yield from walk(child)


def clauses(node: Node | None) -> list[Clause]:
    """Return the clauses of all leaves in left-to-right order."""
    return [n.clause for n in walk(node) if isinstance(n, Leaf)]


def find_clause(node: Node | None, clause_id: str) -> Leaf | None:
    for n in walk(node):
        if isinstance(n, Leaf) and n.clause.id == clause_id:
            return n
    return None


def find_group(node: Node | None, group_id: str) -> BoolNode | None:
    for n in walk(node):
        if isinstance(n, BoolNode) and n.group_id == group_id:
            return n
    return None


def depth(node: Node | None) -> int:
    """Nesting depth; a single leaf has depth 1."""
    if node is None:
        return 0
    if isinstance(node, Leaf):
        return 1
    return 1 + max(depth(child) for child in node.children)


def _rebuild(node: Node, leaf_fn: Callable[[Leaf], Node | None]) -> Node | None:
    if isinstance(node, Leaf):
        return leaf_fn(node)

    rebuilt = [
        child for child in (_rebuild(c, leaf_fn) for c in node.children) if child is not None
    ]
    if not rebuilt:
        return None
    if len(rebuilt) == 1:
        return rebuilt[0]

    # an implicit child left with the parent's operator is spliced in
    children: tuple[Node, ...] = ()
    for child in rebuilt:
        if (
            isinstance(child, BoolNode)
            and not child.is_explicit_group
            and child.operator == node.operator
        ):
            children += child.children
        else:
            children += (child,)

    if children == node.children:
        return node
    return dataclasses.replace(node, children=children)


def remove_clause(node: Node | None, clause_id: str) -> Node | None:
    """Return the tree without the clause; single-child nodes collapse."""
    if node is None:
        return None
    return _rebuild(node, lambda leaf: None if leaf.clause.id == clause_id else leaf)


def update_clause(node: Node | None, clause_id: str, **changes: Any) -> Node | None:
    """Return the tree with one clause's attributes replaced."""
    if node is None:
        return None

    def apply(leaf: Leaf) -> Node:
        if leaf.clause.id != clause_id:
            return leaf
        return Leaf(dataclasses.replace(leaf.clause, **changes))

    return _rebuild(node, apply)


def wrap_in_group(
    node: Node | None,
    clause_ids: Collection[str],
    operator: Logic,
    group_id: str,
) -> Node:
    """Wrap the given clauses in one explicit group.

    The group takes the place of the first wrapped clause; the other
    wrapped clauses are removed from where they were.

    Raises:
        GroupError: If fewer than two of the clauses are in the tree.
    """
    wanted = set(clause_ids)
    members = tuple(n for n in walk(node) if isinstance(n, Leaf) and n.clause.id in wanted)
    if node is None or len(members) < 2:
        raise GroupError(f"A group needs at least two clauses, found {len(members)}")

    group = BoolNode(Logic(operator), members, group_id=group_id)

    def place(leaf: Leaf) -> Node | None:
        if leaf is members[0]:
            return group
        if leaf.clause.id in wanted:
            return None
        return leaf

    result = _rebuild(node, place)
    assert result is not None
    return result
