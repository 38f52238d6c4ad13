# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView node class."""

from __future__ import annotations

from typing import Any

from .exceptions import InvalidNodeError

_NODE_KEYS = ('id', 'name', 'children', 'editable')


class TreeNode:
    """A node in a tree view hierarchy.

    Each node has:
    - id: Identifier, unique across the whole tree
    - name: The label shown by the renderer and matched by typeahead
    - children: List of child nodes, or None for a leaf
    - editable: Optional flag; False forbids inline rename
    - attr: Dictionary of presentation attributes (icons and the like),
      opaque to the store

    A node whose ``children`` is None is a leaf. A node with an empty list
    is a branch that happens to be empty: it can receive dropped nodes but
    cannot be expanded until something is added to it.

    Example:
        >>> node = TreeNode('src', 'src', children=[TreeNode('a', 'a.py')])
        >>> node.is_branch
        True
        >>> node.children[0].is_leaf
        True
    """

    __slots__ = ('id', 'name', 'children', 'editable', 'attr')

    def __init__(
        self,
        id: str,
        name: str,
        children: list[TreeNode] | None = None,
        editable: bool | None = None,
        attr: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a TreeNode.

        Args:
            id: The node's unique identifier.
            name: The node's display name.
            children: Child nodes. None makes the node a leaf.
            editable: Optional rename permission. None means unspecified.
            attr: Optional dictionary of presentation attributes.
        """
        self.id = id
        self.name = name
        self.children = children
        self.editable = editable
        self.attr = attr or {}

    def __repr__(self) -> str:
        if self.children is None:
            return f"TreeNode({self.id!r}, {self.name!r})"
        return f"TreeNode({self.id!r}, {self.name!r}, children={len(self.children)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeNode):
            return NotImplemented
        return (
            self.id == other.id
            and self.name == other.name
            and self.editable == other.editable
            and self.attr == other.attr
            and self.children == other.children
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def is_branch(self) -> bool:
        """True if this node has a children list (possibly empty)."""
        return self.children is not None

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children list at all."""
        return self.children is None

    @property
    def has_children(self) -> bool:
        """True if this node has at least one child."""
        return bool(self.children)

    def get_attr(self, attr: str | None = None, default: Any = None) -> Any:
        """Get attribute value or all attributes.

        Args:
            attr: Attribute name. If None, returns all attributes.
            default: Default value if attribute not found.

        Returns:
            Attribute value, default, or dict of all attributes.
        """
        if attr is None:
            return self.attr
        return self.attr.get(attr, default)

    def set_attr(self, _attr: dict[str, Any] | None = None, **kwargs: Any) -> None:
        """Set attributes on the node.

        Args:
            _attr: Dictionary of attributes to set.
            **kwargs: Additional attributes as keyword arguments.
        """
        if _attr:
            self.attr.update(_attr)
        self.attr.update(kwargs)

    def copy(self) -> TreeNode:
        """Return a deep copy of this node and its whole subtree."""
        children = None
        if self.children is not None:
            children = [child.copy() for child in self.children]
        return TreeNode(
            self.id,
            self.name,
            children=children,
            editable=self.editable,
            attr=dict(self.attr),
        )

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Convert to plain dict (recursive).

        Attributes are merged at the top level. The ``children`` key is
        omitted for leaves and ``editable`` is omitted when unset, so the
        result round-trips through from_dict().
        """
        result: dict[str, Any] = dict(self.attr)
        result['id'] = self.id
        result['name'] = self.name
        if self.editable is not None:
            result['editable'] = self.editable
        if self.children is not None:
            result['children'] = [child.as_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TreeNode:
        """Build a node (and its subtree) from a plain dict.

        Keys other than id, name, children and editable become attributes.

        Raises:
            InvalidNodeError: If data (or a child) is not a dict or TreeNode,
                if id or name is missing, or if children is not a list.

        Example:
            >>> TreeNode.from_dict({'id': '1', 'name': 'root', 'children': []})
            TreeNode('1', 'root', children=0)
        """
        if not isinstance(data, dict):
            raise InvalidNodeError(
                f"node must be TreeNode or dict, not {type(data).__name__}"
            )
        if 'id' not in data or 'name' not in data:
            raise InvalidNodeError(f"Node data requires 'id' and 'name': {data!r}")

        raw_children = data.get('children')
        children = None
        if raw_children is not None:
            if not isinstance(raw_children, (list, tuple)):
                raise InvalidNodeError(
                    f"children of '{data['id']}' must be a list, "
                    f"not {type(raw_children).__name__}"
                )
            children = [
                child.copy() if isinstance(child, TreeNode) else cls.from_dict(child)
                for child in raw_children
            ]

        attr = {k: v for k, v in data.items() if k not in _NODE_KEYS}
        return cls(
            data['id'],
            data['name'],
            children=children,
            editable=data.get('editable'),
            attr=attr,
        )
