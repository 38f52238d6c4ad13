# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView exceptions."""

from __future__ import annotations


class TreeViewError(Exception):
    """Base exception for tree view store errors."""

    pass


class NodeNotFoundError(TreeViewError, KeyError):
    """Raised when a node id is not present in the tree."""

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node '{self.node_id}' not found"


class CycleError(TreeViewError):
    """Raised when a node would be moved into its own subtree."""

    pass


class DuplicateNodeIdError(TreeViewError):
    """Raised when a node id occurs more than once in a tree."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate node id '{node_id}'")
        self.node_id = node_id


class InvalidNodeError(TreeViewError, ValueError):
    """Raised when node data cannot be turned into a TreeNode."""

    pass
