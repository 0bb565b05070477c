"""Explicit subscription primitives used to drive reloads.

Any object with ``subscribe(callback) -> subscription`` can act as a trigger
source, as long as the returned subscription has ``unsubscribe()``.
``ChangeNotifier`` is the simplest such source.
"""

from typing import Any, Callable, List, Optional


class Subscription:
    """Handle returned by ``ChangeNotifier.subscribe``."""

    def __init__(self, notifier: "ChangeNotifier", callback: Callable[[], Any]):
        self._notifier: Optional[ChangeNotifier] = notifier
        self.callback = callback

    @property
    def active(self) -> bool:
        return self._notifier is not None

    def unsubscribe(self) -> None:
        if self._notifier is None:
            return
        self._notifier._remove(self)
        self._notifier = None


class ChangeNotifier:
    """
    Minimal change source: call ``notify()`` after mutating watched state.

    Subscribers decide for themselves whether the value they watch changed.
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []

    def subscribe(self, callback: Callable[[], Any]) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def notify(self) -> None:
        """
        Call every live subscriber.

        A failing callback does not stop delivery to the others; the first
        error is raised once every subscriber has been called.
        """
        first_error: Optional[Exception] = None
        # Copy: a callback may unsubscribe while we iterate
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception as e:
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
