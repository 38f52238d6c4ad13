# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeStore - State container behind a tree view widget.

This module provides the TreeStore class, the single owner of a tree
view's node hierarchy and of the auxiliary state the widget needs:
expanded nodes, selection, keyboard focus, the inline-rename target and
the current drag gesture.

Key Features:
    - **Snapshot state**: every operation replaces the whole TreeState
    - **Reactive subscriptions**: subscribers receive each new snapshot
    - **Flattened view**: pre-order rows honoring expansion, always derived
    - **Safe restructuring**: cycle guard and reference cleanup on move/delete
    - **Keyboard navigation**: next/previous/parent/child and typeahead

Failure Policy:
    Operations referring to an unknown id, a move into the node's own
    subtree, or a missing parent leave the state untouched and notify
    nobody. Ids can vanish between an event being queued and handled, so
    this is the normal path, not an error. With ``raise_on_error=True``
    the same guards raise instead, which helps while developing a widget.

Example:
    Basic usage::

        store = TreeStore([
            {'id': '1', 'name': 'root', 'children': [{'id': '2', 'name': 'child'}]},
        ])
        store.subscribe(lambda state: print(sorted(state.expanded_ids)))

        store.expand('1')               # prints ['1']
        store.navigate_next()           # '1'
        store.move_node('1', '2')       # no-op: '2' is inside '1'
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from ..exceptions import CycleError, DuplicateNodeIdError, NodeNotFoundError, TreeViewError
from ..loading import check_unique_ids, load_nodes
from ..node import TreeNode
from ..state import DragState, TreeState
from ..traversal import (
    FlatTreeNode,
    clone_nodes,
    collect_ids,
    find_node,
    find_parent_node,
    flatten_tree,
    get_descendant_ids,
    iter_nodes,
    remove_node,
)
from .derived import DerivedView
from .subscription import SubscriptionMixin

RenameCallback = Callable[[str, str, str], Any]


class TreeStore(SubscriptionMixin):
    """State container for a tree view.

    TreeStore provides:
    - expansion: toggle_expand, expand, collapse, expand_all, collapse_all
    - selection: select_node, select_range, select_all, clear_selection, set_focus
    - editing: start_editing, stop_editing, rename_node
    - structure: create_node, delete_node, move_node, set_nodes
    - drag session: start_drag, set_drag_target, end_drag
    - navigation: navigate_* and find_by_letter (queries, never mutate)

    Mutating methods return the state current after the call; it is the
    same object as before when the call was a no-op.

    Attributes:
        visible_nodes: DerivedView over the flattened rows.

    Example:
        >>> store = TreeStore([{'id': 'a', 'name': 'Alpha'}])
        >>> store.select_node('a').selected_ids
        frozenset({'a'})
    """

    __slots__ = ('_state', '_subscribers', '_raise_on_error', '_logger', 'visible_nodes')

    def __init__(
        self,
        nodes: Iterable[TreeNode | dict[str, Any]] | None = None,
        raise_on_error: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize a TreeStore.

        Args:
            nodes: Initial root-level nodes, as TreeNode or dicts. They are
                deep-copied: the store owns its hierarchy.
            raise_on_error: If True, guard failures (unknown id, cycle,
                duplicate id) raise a TreeViewError subclass instead of
                being silent no-ops.
            logger: Logger for guard and mutation messages. Defaults to the
                module logger.

        Raises:
            DuplicateNodeIdError: If an id occurs twice in nodes.
        """
        self._state = TreeState.initial(load_nodes(nodes))
        self._subscribers: dict[str, Callable[[TreeState], None]] = {}
        self._raise_on_error = raise_on_error
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self.visible_nodes = DerivedView(
            self, lambda state: flatten_tree(state.nodes, state.expanded_ids)
        )

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"TreeStore({[node.id for node in self._state.nodes]})"

    def __len__(self) -> int:
        """Return the total number of nodes in the tree."""
        return sum(1 for _ in iter_nodes(self._state.nodes))

    def __contains__(self, node_id: str) -> bool:
        return find_node(self._state.nodes, node_id) is not None

    # ==================== State Plumbing ====================

    @property
    def state(self) -> TreeState:
        """The current state snapshot."""
        return self._state

    @property
    def nodes(self) -> list[TreeNode]:
        """Root-level nodes of the current state (read-only)."""
        return self._state.nodes

    @property
    def raise_on_error(self) -> bool:
        return self._raise_on_error

    def _subscription_value(self) -> TreeState:
        return self._state

    def _commit(self, new_state: TreeState) -> TreeState:
        """Install new_state and notify subscribers, unless nothing changed."""
        if new_state is self._state:
            return new_state
        self._state = new_state
        self._notify()
        return new_state

    def _skip(self, operation: str, error: TreeViewError) -> TreeState:
        """Handle a guard failure: log it, then raise or keep the state."""
        self._logger.debug("%s skipped: %s", operation, error)
        if self._raise_on_error:
            raise error
        return self._state

    def set_state(self, state: TreeState) -> TreeState:
        """Replace the whole state as is. No guard is applied."""
        return self._commit(state)

    def update(self, updater: Callable[[TreeState], TreeState]) -> TreeState:
        """Replace the state with updater(current state). No guard is applied."""
        return self._commit(updater(self._state))

    def set_nodes(self, nodes: Iterable[TreeNode | dict[str, Any]]) -> TreeState:
        """Replace the node hierarchy, keeping every other field as is.

        Expanded, selected, focused, editing and drag ids are NOT reconciled
        with the new nodes: the caller decides whether stale ids matter.

        Raises:
            DuplicateNodeIdError: If an id occurs twice in nodes.
        """
        return self._commit(self._state.evolve(nodes=load_nodes(nodes)))

    # ==================== Lookup ====================

    def find_node(self, node_id: str) -> TreeNode | None:
        """Return the node with the given id, or None."""
        return find_node(self._state.nodes, node_id)

    def get_node(self, node_id: str) -> TreeNode:
        """Return the node with the given id.

        Raises:
            NodeNotFoundError: If the id is not in the tree.
        """
        node = find_node(self._state.nodes, node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def find_parent_node(self, node_id: str) -> tuple[bool, TreeNode | None]:
        """Locate the parent of a node.

        Returns:
            (True, parent) for a nested node, (True, None) for a root,
            (False, None) if the id is not in the tree.
        """
        return find_parent_node(self._state.nodes, node_id)

    def get_descendant_ids(self, node: TreeNode | str) -> list[str]:
        """Return the id of node and of all nodes beneath it, in pre-order.

        Accepts a node or an id; an unknown id yields an empty list.
        """
        if isinstance(node, str):
            found = find_node(self._state.nodes, node)
            if found is None:
                return []
            node = found
        return get_descendant_ids(node)

    def get_visible_nodes(self) -> list[FlatTreeNode]:
        """Return the flattened view of the current state."""
        return flatten_tree(self._state.nodes, self._state.expanded_ids)

    # ==================== Expansion ====================

    def _expandable(self, operation: str, node_id: str) -> bool:
        node = find_node(self._state.nodes, node_id)
        if node is None:
            self._skip(operation, NodeNotFoundError(node_id))
            return False
        if not node.has_children:
            self._logger.debug("%s skipped: '%s' has no children", operation, node_id)
            return False
        return True

    def toggle_expand(self, node_id: str) -> TreeState:
        """Expand a collapsed node or collapse an expanded one.

        No-op for nodes without children.
        """
        if not self._expandable('toggle_expand', node_id):
            return self._state
        if node_id in self._state.expanded_ids:
            expanded = self._state.expanded_ids - {node_id}
        else:
            expanded = self._state.expanded_ids | {node_id}
        return self._commit(self._state.evolve(expanded_ids=expanded))

    def expand(self, node_id: str) -> TreeState:
        """Expand a node. No-op for nodes without children."""
        if not self._expandable('expand', node_id):
            return self._state
        if node_id in self._state.expanded_ids:
            return self._state
        return self._commit(
            self._state.evolve(expanded_ids=self._state.expanded_ids | {node_id})
        )

    def collapse(self, node_id: str) -> TreeState:
        """Collapse a node. Idempotent."""
        if node_id not in self._state.expanded_ids:
            return self._state
        return self._commit(
            self._state.evolve(expanded_ids=self._state.expanded_ids - {node_id})
        )

    def expand_all(self, max_depth: int | None = None) -> TreeState:
        """Expand every node that has children.

        The previous expansion is replaced, not merged.

        Args:
            max_depth: If given, only nodes at depth < max_depth are
                expanded (roots are at depth 0), and the walk does not go
                below a node left collapsed.
        """
        expanded: set[str] = set()

        def _traverse(nodes: list[TreeNode], depth: int) -> None:
            for node in nodes:
                if not node.has_children:
                    continue
                if max_depth is None or depth < max_depth:
                    expanded.add(node.id)
                    _traverse(node.children, depth + 1)

        _traverse(self._state.nodes, 0)
        return self._commit(self._state.evolve(expanded_ids=frozenset(expanded)))

    def collapse_all(self) -> TreeState:
        """Collapse every node."""
        return self._commit(self._state.evolve(expanded_ids=frozenset()))

    # ==================== Selection ====================

    def select_node(self, node_id: str, multi: bool = False) -> TreeState:
        """Select a node and move the focus to it.

        Args:
            node_id: Node to select.
            multi: If False, the selection becomes just this node. If True,
                the node's membership in the selection is toggled.
        """
        if find_node(self._state.nodes, node_id) is None:
            return self._skip('select_node', NodeNotFoundError(node_id))
        if multi:
            selected = self._state.selected_ids ^ {node_id}
        else:
            selected = frozenset({node_id})
        return self._commit(
            self._state.evolve(selected_ids=selected, focused_id=node_id)
        )

    def select_range(self, start_id: str, end_id: str) -> TreeState:
        """Add every visible row between two nodes (inclusive) to the selection.

        The order of the two ids does not matter. No-op if either node is
        not visible (unknown, or hidden under a collapsed ancestor).
        """
        rows = self.get_visible_nodes()
        start = _index_of(rows, start_id)
        end = _index_of(rows, end_id)
        if start == -1 or end == -1:
            missing = start_id if start == -1 else end_id
            return self._skip('select_range', NodeNotFoundError(missing))
        if start > end:
            start, end = end, start
        added = {row.id for row in rows[start:end + 1]}
        return self._commit(
            self._state.evolve(selected_ids=self._state.selected_ids | added)
        )

    def select_all(self) -> TreeState:
        """Select every node, including those under collapsed branches."""
        return self._commit(
            self._state.evolve(selected_ids=frozenset(collect_ids(self._state.nodes)))
        )

    def clear_selection(self) -> TreeState:
        return self._commit(self._state.evolve(selected_ids=frozenset()))

    def set_focus(self, node_id: str | None) -> TreeState:
        """Move the keyboard cursor to a node, or clear it with None."""
        if node_id is not None and find_node(self._state.nodes, node_id) is None:
            return self._skip('set_focus', NodeNotFoundError(node_id))
        return self._commit(self._state.evolve(focused_id=node_id))

    # ==================== Editing ====================

    def start_editing(self, node_id: str) -> TreeState:
        """Mark a node as being renamed inline.

        No-op for unknown nodes and for nodes with ``editable=False``.
        """
        node = find_node(self._state.nodes, node_id)
        if node is None:
            return self._skip('start_editing', NodeNotFoundError(node_id))
        if node.editable is False:
            self._logger.debug("start_editing skipped: '%s' is not editable", node_id)
            return self._state
        return self._commit(self._state.evolve(editing_id=node_id))

    def stop_editing(self) -> TreeState:
        return self._commit(self._state.evolve(editing_id=None))

    def rename_node(
        self,
        node_id: str,
        new_name: str,
        on_rename: RenameCallback | None = None,
    ) -> TreeState:
        """Rename a node and end inline editing.

        The hierarchy is cloned before the name changes, so earlier
        snapshots keep the old name. The editing target is cleared even when
        the node is unknown.

        Args:
            node_id: Node to rename.
            new_name: The new name.
            on_rename: Optional callback receiving (node_id, new_name,
                old_name), called once the new state is computed and before
                subscribers are notified. Not called for unknown nodes.
        """
        nodes = clone_nodes(self._state.nodes)
        node = find_node(nodes, node_id)
        if node is None:
            self._skip('rename_node', NodeNotFoundError(node_id))
            if self._state.editing_id is None:
                return self._state
            return self._commit(self._state.evolve(editing_id=None))

        old_name = node.name
        node.name = new_name
        new_state = self._state.evolve(nodes=nodes, editing_id=None)
        if on_rename is not None:
            on_rename(node_id, new_name, old_name)
        self._logger.debug("Renamed '%s': %r -> %r", node_id, old_name, new_name)
        return self._commit(new_state)

    # ==================== Structure ====================

    def create_node(
        self, parent_id: str | None, new_node: TreeNode | dict[str, Any]
    ) -> TreeState:
        """Append a node to a parent, or to the roots when parent_id is None.

        A leaf parent becomes a branch. The parent is expanded so the new
        node is visible. The store keeps its own copy of new_node.

        No-op if the parent is unknown or if any id of new_node (or of its
        children) is already in the tree.

        Raises:
            TypeError: If new_node is neither a TreeNode nor a dict.
            InvalidNodeError: If a dict lacks id or name.
        """
        (node,) = load_nodes([new_node])
        try:
            check_unique_ids([node], taken=set(collect_ids(self._state.nodes)))
        except DuplicateNodeIdError as error:
            return self._skip('create_node', error)

        nodes = clone_nodes(self._state.nodes)
        if parent_id is None:
            nodes.append(node)
            new_state = self._state.evolve(nodes=nodes)
        else:
            parent = find_node(nodes, parent_id)
            if parent is None:
                return self._skip('create_node', NodeNotFoundError(parent_id))
            if parent.children is None:
                parent.children = []
            parent.children.append(node)
            new_state = self._state.evolve(
                nodes=nodes, expanded_ids=self._state.expanded_ids | {parent_id}
            )
        self._logger.debug("Created '%s' under %r", node.id, parent_id)
        return self._commit(new_state)

    def delete_node(self, node_id: str) -> TreeState:
        """Remove a node and its whole subtree.

        The removed ids are purged from expansion, selection, focus, the
        editing target and the drag state. No-op if the node is unknown.
        """
        node = find_node(self._state.nodes, node_id)
        if node is None:
            return self._skip('delete_node', NodeNotFoundError(node_id))

        removed = frozenset(get_descendant_ids(node))
        state = self._state
        drag = state.drag_state
        if drag.source_id in removed:
            drag = DragState()
        elif drag.target_id in removed:
            drag = DragState(drag.is_dragging, drag.source_id, None)

        new_state = state.evolve(
            nodes=remove_node(state.nodes, node_id),
            expanded_ids=state.expanded_ids - removed,
            selected_ids=state.selected_ids - removed,
            focused_id=None if state.focused_id in removed else state.focused_id,
            editing_id=None if state.editing_id in removed else state.editing_id,
            drag_state=drag,
        )
        self._logger.debug("Deleted '%s' (%d nodes)", node_id, len(removed))
        return self._commit(new_state)

    def move_node(self, source_id: str, target_id: str) -> TreeState:
        """Move a node (with its subtree) under a target, as on drop.

        Resolution of the destination:
        - a branch target (even an empty one) receives the node as last child
        - a leaf target redirects to its parent, so the node lands as the
          target's sibling
        - a root-level leaf target makes the node a new last root

        The destination is expanded. No-op when source and target are the
        same node, when either is unknown, or when the target lies inside
        the source's subtree.
        """
        if source_id == target_id:
            return self._skip('move_node', CycleError(f"Cannot move '{source_id}' onto itself"))

        nodes = self._state.nodes
        source = find_node(nodes, source_id)
        if source is None:
            return self._skip('move_node', NodeNotFoundError(source_id))
        target = find_node(nodes, target_id)
        if target is None:
            return self._skip('move_node', NodeNotFoundError(target_id))

        subtree_ids = set(get_descendant_ids(source))
        if target_id in subtree_ids:
            return self._skip(
                'move_node', CycleError(f"Cannot move '{source_id}' into its own subtree")
            )

        destination_id: str | None = target_id
        if target.is_leaf:
            _, parent = find_parent_node(nodes, target_id)
            destination_id = parent.id if parent is not None else None
        if destination_id in subtree_ids:
            return self._skip(
                'move_node', CycleError(f"Cannot move '{source_id}' under '{destination_id}'")
            )

        moved = source.copy()
        new_nodes = clone_nodes(remove_node(nodes, source_id))
        if destination_id is None:
            new_nodes.append(moved)
            new_state = self._state.evolve(nodes=new_nodes)
        else:
            destination = find_node(new_nodes, destination_id)
            if destination is None:
                return self._skip('move_node', NodeNotFoundError(destination_id))
            if destination.children is None:
                destination.children = []
            destination.children.append(moved)
            new_state = self._state.evolve(
                nodes=new_nodes,
                expanded_ids=self._state.expanded_ids | {destination_id},
            )
        self._logger.debug("Moved '%s' under %r", source_id, destination_id)
        return self._commit(new_state)

    # ==================== Drag & Drop ====================

    def start_drag(self, source_id: str) -> TreeState:
        """Begin a drag session for a node. Does not touch the hierarchy."""
        if find_node(self._state.nodes, source_id) is None:
            return self._skip('start_drag', NodeNotFoundError(source_id))
        return self._commit(
            self._state.evolve(drag_state=DragState(True, source_id, None))
        )

    def set_drag_target(self, target_id: str | None) -> TreeState:
        """Record the node currently hovered by the drag, or None."""
        if target_id is not None and find_node(self._state.nodes, target_id) is None:
            return self._skip('set_drag_target', NodeNotFoundError(target_id))
        drag = self._state.drag_state
        return self._commit(
            self._state.evolve(drag_state=DragState(drag.is_dragging, drag.source_id, target_id))
        )

    def end_drag(self) -> TreeState:
        """Reset the drag session. The caller performs move_node on drop."""
        return self._commit(self._state.evolve(drag_state=DragState()))

    # ==================== Navigation ====================

    def navigate_next(self) -> str | None:
        """Id of the row after the focused one.

        Without focus, the first row. At the last row, or when the focused
        node is not visible, the focused id itself. None for an empty view.
        """
        rows = self.get_visible_nodes()
        if not rows:
            return None
        focused_id = self._state.focused_id
        if focused_id is None:
            return rows[0].id
        index = _index_of(rows, focused_id)
        if index == -1 or index >= len(rows) - 1:
            return focused_id
        return rows[index + 1].id

    def navigate_previous(self) -> str | None:
        """Id of the row before the focused one.

        Without focus, the first row. At the first row, or when the focused
        node is not visible, the focused id itself. None for an empty view.
        """
        rows = self.get_visible_nodes()
        if not rows:
            return None
        focused_id = self._state.focused_id
        if focused_id is None:
            return rows[0].id
        index = _index_of(rows, focused_id)
        if index <= 0:
            return focused_id
        return rows[index - 1].id

    def navigate_first(self) -> str | None:
        rows = self.get_visible_nodes()
        return rows[0].id if rows else None

    def navigate_last(self) -> str | None:
        rows = self.get_visible_nodes()
        return rows[-1].id if rows else None

    def navigate_to_parent(self) -> str | None:
        """Id of the focused node's parent; None for roots or without focus."""
        focused_id = self._state.focused_id
        if focused_id is None:
            return None
        _, parent = find_parent_node(self._state.nodes, focused_id)
        return parent.id if parent is not None else None

    def navigate_to_first_child(self) -> str | None:
        """Id of the focused node's first child, if the node is expanded."""
        focused_id = self._state.focused_id
        if focused_id is None:
            return None
        node = find_node(self._state.nodes, focused_id)
        if node is None or not node.has_children:
            return None
        if focused_id not in self._state.expanded_ids:
            return None
        return node.children[0].id

    def find_by_letter(self, letter: str) -> str | None:
        """Typeahead: next visible row whose name starts with letter.

        Matching is case-insensitive. The search starts right after the
        focused row and wraps around to the top, ending on the focused row
        itself.
        """
        rows = self.get_visible_nodes()
        if not rows:
            return None
        focused_id = self._state.focused_id
        index = _index_of(rows, focused_id) if focused_id is not None else -1
        prefix = letter.lower()
        for row in rows[index + 1:] + rows[:index + 1]:
            if row.node.name.lower().startswith(prefix):
                return row.id
        return None


def _index_of(rows: list[FlatTreeNode], node_id: str) -> int:
    """Position of node_id in rows, or -1."""
    for i, row in enumerate(rows):
        if row.id == node_id:
            return i
    return -1


def create_tree_store(
    initial_nodes: Iterable[TreeNode | dict[str, Any]] | None = None,
    **options: Any,
) -> TreeStore:
    """Create a TreeStore holding initial_nodes.

    Args:
        initial_nodes: Root-level nodes (TreeNode or dicts). Defaults to none.
        **options: Forwarded to TreeStore (raise_on_error, logger).
    """
    return TreeStore(initial_nodes, **options)
