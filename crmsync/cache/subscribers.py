"""Observer list notified whenever the cache snapshot changes."""

import logging
from collections.abc import Callable

from crmsync.models.snapshot import LocalData

logger = logging.getLogger(__name__)

Subscriber = Callable[[LocalData], None]
Unsubscribe = Callable[[], None]


class SubscriberRegistry:
    """Fans a snapshot out to every registered callback."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Register a callback.

        Args:
            callback: Called with the full snapshot after every cache mutation

        Returns:
            Function removing the callback; calling it more than once is harmless
        """
        self._subscribers.append(callback)
        logger.debug(f"Subscriber registered ({len(self._subscribers)} total)")

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
                logger.debug(f"Subscriber removed ({len(self._subscribers)} remaining)")

        return unsubscribe

    def notify(self, snapshot: LocalData) -> None:
        """Invoke every subscriber once with ``snapshot``."""
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Subscriber {callback!r} failed: {e}")
