# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Immutable state snapshots owned by the tree store."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from .node import TreeNode


@dataclass(frozen=True)
class DragState:
    """Intent of an in-progress drag gesture. Never mutates the tree."""

    is_dragging: bool = False
    source_id: str | None = None
    target_id: str | None = None


@dataclass(frozen=True)
class TreeState:
    """Whole state of a tree view.

    A new TreeState is produced by every committed operation; subscribers
    can therefore keep a snapshot without seeing it change later. The
    node lists inside a snapshot must be treated as read-only.

    Attributes:
        nodes: Root-level nodes, owning the whole hierarchy.
        expanded_ids: Ids of expanded nodes.
        selected_ids: Ids of selected nodes.
        focused_id: Keyboard cursor, or None.
        drag_state: Current drag gesture.
        editing_id: Node under inline rename, or None.
    """

    nodes: list[TreeNode] = field(default_factory=list)
    expanded_ids: frozenset[str] = frozenset()
    selected_ids: frozenset[str] = frozenset()
    focused_id: str | None = None
    drag_state: DragState = field(default_factory=DragState)
    editing_id: str | None = None

    @classmethod
    def initial(cls, nodes: Sequence[TreeNode] = ()) -> TreeState:
        """Return a state holding nodes with every auxiliary field empty."""
        return cls(nodes=list(nodes))

    def evolve(self, **changes) -> TreeState:
        """Return a copy of this state with the given fields replaced."""
        return replace(self, **changes)

    def referenced_ids(self) -> set[str]:
        """Return every node id held by the auxiliary fields."""
        ids = set(self.expanded_ids) | set(self.selected_ids)
        for node_id in (
            self.focused_id,
            self.editing_id,
            self.drag_state.source_id,
            self.drag_state.target_id,
        ):
            if node_id is not None:
                ids.add(node_id)
        return ids
