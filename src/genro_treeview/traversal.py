# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Traversal helpers over sequences of TreeNode.

All functions here are pure: they never modify the nodes they receive.
The store builds every new state out of them, so they are also the place
where the tree's structural rules live:

- search is depth-first, pre-order, and stops at the first match
- the flattened view includes a node's children only when the node is
  expanded and actually has children
- removal returns new lists and leaves the input untouched
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Iterator, Sequence

from .node import TreeNode


@dataclass(frozen=True)
class FlatTreeNode:
    """One visible row of the flattened view.

    Attributes:
        node: The node shown on this row.
        depth: Nesting level, 0 for roots.
        parent_id: Id of the parent node, None for roots.
        index: Position of the node among its siblings.
    """

    node: TreeNode
    depth: int
    parent_id: str | None
    index: int

    @property
    def id(self) -> str:
        return self.node.id


def iter_nodes(
    nodes: Sequence[TreeNode], depth: int = 0
) -> Iterator[tuple[int, TreeNode]]:
    """Yield (depth, node) for every node in pre-order, ignoring expansion."""
    for node in nodes:
        yield depth, node
        if node.children:
            yield from iter_nodes(node.children, depth + 1)


def find_node(nodes: Sequence[TreeNode], node_id: str) -> TreeNode | None:
    """Return the node with the given id, or None if absent."""
    for node in nodes:
        if node.id == node_id:
            return node
        if node.children:
            found = find_node(node.children, node_id)
            if found is not None:
                return found
    return None


def find_parent_node(
    nodes: Sequence[TreeNode],
    node_id: str,
    _parent: TreeNode | None = None,
) -> tuple[bool, TreeNode | None]:
    """Locate the immediate parent of a node.

    Returns:
        Tuple of (found, parent) where:
        - (True, parent) if the node lives under parent
        - (True, None) if the node is a root
        - (False, None) if the node is not in the tree
    """
    for node in nodes:
        if node.id == node_id:
            return True, _parent
        if node.children:
            found, parent = find_parent_node(node.children, node_id, node)
            if found:
                return True, parent
    return False, None


def get_descendant_ids(node: TreeNode) -> list[str]:
    """Return the node's own id followed by every id beneath it, in pre-order."""
    return [descendant.id for _, descendant in iter_nodes([node])]


def collect_ids(nodes: Sequence[TreeNode]) -> list[str]:
    """Return every id of the given forest in pre-order."""
    return [node.id for _, node in iter_nodes(nodes)]


def flatten_tree(
    nodes: Sequence[TreeNode],
    expanded_ids: Collection[str],
    depth: int = 0,
    parent_id: str | None = None,
) -> list[FlatTreeNode]:
    """Build the visible linear sequence of rows.

    Pre-order walk that descends into a node only if its id is in
    expanded_ids and it has at least one child. Expanded ids of leaves are
    simply ignored.

    Example:
        >>> tree = [TreeNode('1', 'root', children=[TreeNode('2', 'child')])]
        >>> [(row.id, row.depth) for row in flatten_tree(tree, {'1'})]
        [('1', 0), ('2', 1)]
    """
    result: list[FlatTreeNode] = []
    for index, node in enumerate(nodes):
        result.append(FlatTreeNode(node, depth, parent_id, index))
        if node.children and node.id in expanded_ids:
            result.extend(flatten_tree(node.children, expanded_ids, depth + 1, node.id))
    return result


def clone_nodes(nodes: Sequence[TreeNode]) -> list[TreeNode]:
    """Deep-copy a forest."""
    return [node.copy() for node in nodes]


def remove_node(nodes: Sequence[TreeNode], node_id: str) -> list[TreeNode]:
    """Return a copy of the forest without the node (and its subtree).

    Subtrees that do not contain the node are shared with the input, so
    callers that go on mutating the result must clone first.
    """
    result: list[TreeNode] = []
    for node in nodes:
        if node.id == node_id:
            continue
        if node.children:
            pruned = remove_node(node.children, node_id)
            if len(pruned) != len(node.children) or any(
                a is not b for a, b in zip(pruned, node.children)
            ):
                node = TreeNode(
                    node.id,
                    node.name,
                    children=pruned,
                    editable=node.editable,
                    attr=dict(node.attr),
                )
        result.append(node)
    return result
