# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Derived, read-only projections of a tree store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from .subscription import SubscriptionMixin

if TYPE_CHECKING:
    from ..state import TreeState
    from .core import TreeStore


class DerivedView(SubscriptionMixin):
    """A value computed from a store's state, kept in sync with it.

    The view subscribes to its source only while it has subscribers of its
    own; reading ``value`` without subscribers computes it on the spot from
    the current state.

    Example:
        >>> rows = DerivedView(store, lambda state: len(state.selected_ids))
        >>> rows.subscribe(print)
        0
    """

    __slots__ = ('_source', '_compute', '_subscribers', '_value', '_detach')

    def __init__(
        self, source: TreeStore, compute: Callable[[TreeState], Any]
    ) -> None:
        self._source = source
        self._compute = compute
        self._subscribers: dict[str, Callable[[Any], None]] = {}
        self._value: Any = None
        self._detach: Callable[[], None] | None = None

    @property
    def value(self) -> Any:
        """Current derived value."""
        if self._detach is None:
            return self._compute(self._source.state)
        return self._value

    def _subscription_value(self) -> Any:
        return self.value

    def _on_source_change(self, state: TreeState) -> None:
        self._value = self._compute(state)
        self._notify()

    def subscribe(
        self,
        callback: Callable[[Any], None],
        subscriber_id: str | None = None,
    ) -> Callable[[], None]:
        if self._detach is None:
            # First subscriber: start following the source. The source
            # calls back immediately, before anyone is registered here.
            self._detach = self._source.subscribe(self._on_source_change)
        try:
            unsubscribe = super().subscribe(callback, subscriber_id)
        except Exception:
            self._release_if_idle()
            raise

        def _unsubscribe() -> None:
            unsubscribe()
            self._release_if_idle()

        return _unsubscribe

    def unsubscribe(self, subscriber_id: str) -> bool:
        removed = super().unsubscribe(subscriber_id)
        self._release_if_idle()
        return removed

    def _release_if_idle(self) -> None:
        if not self._subscribers and self._detach is not None:
            self._detach()
            self._detach = None
