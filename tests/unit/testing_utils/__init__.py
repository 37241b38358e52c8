"""Test utilities shared by the unit tests."""
from __future__ import annotations

from typing import Any, Callable, List

from events_to_async import PushCallback, Unsubscribe


class EventSource:
    """
    A minimal push-based event source.

    Listeners are called synchronously, in the thread that calls
    :py:meth:`emit`. The source also counts how many times a listener
    has been removed, so that tests can assert that subscriptions are
    released exactly once.
    """

    def __init__(self: EventSource) -> None:
        """Initialise a new instance."""
        self._listeners: List[Callable[..., None]] = []
        self.removals = 0

    @property
    def listener_count(self: EventSource) -> int:
        """
        Return the number of registered listeners.

        :return: the number of registered listeners.
        """
        return len(self._listeners)

    def add_listener(self: EventSource, listener: Callable[..., None]) -> None:
        """
        Register a listener.

        :param listener: the listener to register.
        """
        self._listeners.append(listener)

    def remove_listener(
        self: EventSource, listener: Callable[..., None]
    ) -> None:
        """
        Unregister a listener.

        :param listener: the listener to unregister.
        """
        self._listeners.remove(listener)
        self.removals += 1

    def emit(self: EventSource, *args: Any) -> None:
        """
        Call every registered listener with the given arguments.

        :param args: the positional arguments of the event.
        """
        for listener in list(self._listeners):
            listener(*args)

    def adapter(self: EventSource, push: PushCallback) -> Unsubscribe:
        """
        Subscribe a push callback to this source.

        :param push: the push callback.

        :return: a callable that unsubscribes the push callback.
        """
        self.add_listener(push)
        return lambda: self.remove_listener(push)

