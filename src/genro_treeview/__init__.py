# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeView - State management for tree view widgets.

A lightweight, zero-dependency library holding the hierarchy, expansion,
selection, focus, drag and edit state of a tree view, with a flattened
view for rendering and keyboard navigation.
"""

__version__ = "0.1.0"

from .exceptions import (
    CycleError,
    DuplicateNodeIdError,
    InvalidNodeError,
    NodeNotFoundError,
    TreeViewError,
)
from .loading import load_nodes
from .node import TreeNode
from .state import DragState, TreeState
from .store import DerivedView, TreeStore, create_tree_store
from .traversal import FlatTreeNode, flatten_tree

__all__ = [
    # Core classes
    "TreeStore",
    "TreeNode",
    "create_tree_store",
    # State
    "TreeState",
    "DragState",
    "FlatTreeNode",
    "DerivedView",
    # Helpers
    "flatten_tree",
    "load_nodes",
    # Exceptions
    "TreeViewError",
    "NodeNotFoundError",
    "CycleError",
    "DuplicateNodeIdError",
    "InvalidNodeError",
]
