# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Subscription support for reactive state containers.

Subscribers are plain callables receiving the full current value (the
push model: the value itself, never a diff). They are stored by
subscriber id, in registration order, and are called synchronously:

- once on subscribe, with the value at that moment
- once after every committed change

A subscriber removed while a notification round is running is not called
for the rest of that round; the other subscribers are unaffected. A
subscriber whose first call raises is not registered.
"""

from __future__ import annotations

from itertools import count
from typing import Any, Callable

SubscriberCallback = Callable[[Any], None]

_subscriber_ids = count(1)


class SubscriptionMixin:
    """Mixin adding subscribe/unsubscribe/notify to a value holder.

    Subclasses create ``self._subscribers = {}`` in __init__ and implement
    ``_subscription_value()``.
    """

    __slots__ = ()

    _subscribers: dict[str, SubscriberCallback]

    def _subscription_value(self) -> Any:
        raise NotImplementedError

    def subscribe(
        self,
        callback: SubscriberCallback,
        subscriber_id: str | None = None,
    ) -> Callable[[], None]:
        """Register a subscriber and call it with the current value.

        Args:
            callback: Function receiving the value.
            subscriber_id: Optional id. Registering again with the same id
                replaces the previous callback.

        Returns:
            A function that removes this subscription when called.

        Example:
            >>> unsubscribe = store.subscribe(lambda state: print(state.focused_id))
            None
            >>> unsubscribe()
        """
        if subscriber_id is None:
            subscriber_id = f'subscriber_{next(_subscriber_ids)}'
        self._subscribers[subscriber_id] = callback
        try:
            callback(self._subscription_value())
        except Exception:
            if self._subscribers.get(subscriber_id) is callback:
                del self._subscribers[subscriber_id]
            raise

        def _unsubscribe() -> None:
            if self._subscribers.get(subscriber_id) is callback:
                del self._subscribers[subscriber_id]

        return _unsubscribe

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Remove a subscriber by id.

        Returns:
            True if a subscriber was removed, False if the id was unknown.
        """
        return self._subscribers.pop(subscriber_id, None) is not None

    @property
    def subscriber_ids(self) -> list[str]:
        """Ids of the registered subscribers, in registration order."""
        return list(self._subscribers)

    def _notify(self) -> None:
        """Push the current value to every registered subscriber.

        A subscriber may change the value from its callback. The nested
        round then delivers the newer value to everyone, and this round
        stops so that nobody is left holding the older one.
        """
        value = self._subscription_value()
        for subscriber_id, callback in list(self._subscribers.items()):
            if self._subscription_value() is not value:
                return
            if self._subscribers.get(subscriber_id) is callback:
                callback(value)
