# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeStore package - State container for tree view widgets.

The package is organized into:
- core: Main TreeStore class with expansion, selection, editing,
  restructuring, drag session and keyboard navigation
- subscription: Subscriber registration and notification
- derived: Read-only views computed from a store's state

Example:
    >>> from genro_treeview import create_tree_store
    >>> store = create_tree_store([{'id': 'a', 'name': 'Alpha'}])
    >>> store.navigate_first()
    'a'
"""

from .core import TreeStore, create_tree_store
from .derived import DerivedView
from .subscription import SubscriptionMixin

__all__ = ["TreeStore", "create_tree_store", "DerivedView", "SubscriptionMixin"]
