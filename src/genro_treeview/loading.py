# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Loading functions turning caller data into owned TreeNode lists."""

from __future__ import annotations

from typing import Any, Iterable

from .exceptions import DuplicateNodeIdError
from .node import TreeNode
from .traversal import iter_nodes


def load_nodes(source: Iterable[TreeNode | dict[str, Any]] | None) -> list[TreeNode]:
    """Build an owned list of root nodes from caller data.

    Each item may be a TreeNode (deep-copied, so later changes made by the
    caller do not leak into the store) or a dict accepted by
    TreeNode.from_dict().

    Args:
        source: Root-level nodes, or None for an empty tree.

    Returns:
        A new list of TreeNode.

    Raises:
        TypeError: If an item is neither a TreeNode nor a dict.
        InvalidNodeError: If a dict lacks id or name.
        DuplicateNodeIdError: If an id occurs more than once.

    Example:
        >>> load_nodes([{'id': 'a', 'name': 'A'}, TreeNode('b', 'B')])
        [TreeNode('a', 'A'), TreeNode('b', 'B')]
    """
    if source is None:
        return []

    nodes: list[TreeNode] = []
    for item in source:
        if isinstance(item, TreeNode):
            nodes.append(item.copy())
        elif isinstance(item, dict):
            nodes.append(TreeNode.from_dict(item))
        else:
            raise TypeError(
                f"node must be TreeNode or dict, not {type(item).__name__}"
            )

    check_unique_ids(nodes)
    return nodes


def check_unique_ids(nodes: Iterable[TreeNode], taken: set[str] | None = None) -> None:
    """Raise DuplicateNodeIdError if an id repeats within nodes or taken."""
    seen = set(taken) if taken else set()
    for _, node in iter_nodes(list(nodes)):
        if node.id in seen:
            raise DuplicateNodeIdError(node.id)
        seen.add(node.id)
