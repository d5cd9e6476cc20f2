import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by `CartCountSignal.subscribe`; usable as a context manager."""

    def __init__(self, signal: "CartCountSignal", callback: Callable[[int], None]):
        self._signal = signal
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._signal._remove(self._callback)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


class CartCountSignal:
    """
    Observable item count behind the cart badge.

    The root coordinator owns the one instance; pages publish to it after
    every cart mutation and views subscribe to render it.
    """

    def __init__(self, value: int = 0):
        self._value = value
        self._subscribers: List[Callable[[int], None]] = []

    @property
    def value(self) -> int:
        return self._value

    def set(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"Item count cannot be negative: {count}")
        if count == self._value:
            return
        self._value = count
        for callback in list(self._subscribers):
            callback(count)

    def subscribe(self, callback: Callable[[int], None], replay: bool = True) -> Subscription:
        """
        Registers `callback` for count changes.

        Args:
            callback: Called with the new count on every change.
            replay: Also call it once right away with the current count.

        Returns:
            The Subscription to release when the view goes away.
        """
        self._subscribers.append(callback)
        if replay:
            callback(self._value)
        return Subscription(self, callback)

    def _remove(self, callback: Callable[[int], None]) -> None:
        self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
