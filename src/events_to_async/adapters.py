"""
This module specifies the subscription adapter contract.

A subscription adapter is the only thing this package knows about an
event source. It is a callable that is given a push callback, registers
that callback with the source, and returns a callable that undoes the
registration:

.. code-block:: python

    def adapter(push: PushCallback) -> Unsubscribe:
        emitter.on("up", push)
        return lambda: emitter.off("up", push)

Helpers are provided for building adapters from an add/remove listener
pair, and for sources that call back from threads other than the one
running the event loop.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from typing_extensions import Protocol

PushCallback = Callable[..., None]
"""Callback that the event source calls with each event's arguments."""

Unsubscribe = Callable[[], Any]
"""Callable that removes a push callback from its event source."""

_logger = logging.getLogger(__name__)


class SubscriptionAdapter(Protocol):  # pylint: disable=too-few-public-methods
    """
    Interface specification for subscription adapters.

    The push callback may be called any number of times, with the
    positional arguments of each event. Calls must not overlap. Once the
    returned unsubscribe callable has been called, the push callback
    must not be called again. Consumers in this package call it at most
    once.
    """

    def __call__(self: SubscriptionAdapter, push: PushCallback) -> Unsubscribe:
        """
        Register a push callback with an event source.

        :param push: the callback to be called with each event.

        :return: a callable that unregisters the push callback.
        """  # noqa: DAR202
        ...


def listener_adapter(
    add_listener: Callable[[PushCallback], Any],
    remove_listener: Callable[[PushCallback], Any],
) -> SubscriptionAdapter:
    """
    Build a subscription adapter from an add/remove listener pair.

    This covers the common case of an event source with symmetrical
    registration methods. For example:

    .. code-block:: python

        adapter = listener_adapter(
            functools.partial(emitter.on, "up"),
            functools.partial(emitter.off, "up"),
        )

    :param add_listener: callable that registers a listener.
    :param remove_listener: callable that unregisters a listener
        registered with ``add_listener``.

    :return: a subscription adapter.
    """

    def _subscribe(push: PushCallback) -> Unsubscribe:
        add_listener(push)
        return lambda: remove_listener(push)

    return _subscribe


def threadsafe_adapter(
    adapter: SubscriptionAdapter,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> SubscriptionAdapter:
    """
    Wrap an adapter whose event source pushes from other threads.

    The consumers in this package are not thread-safe: they expect every
    push to happen in the thread that runs their event loop. This
    wrapper hands each push over to the loop with
    :py:meth:`asyncio.loop.call_soon_threadsafe`, which keeps pushes in
    the order in which they were made.

    Pushes that reach the loop after the subscription has been
    cancelled are dropped.

    :param adapter: the adapter to wrap.
    :param loop: the event loop to deliver pushes to. If omitted, the
        loop running at the time of the call is used.

    :return: a subscription adapter that delivers pushes on ``loop``.
    """
    target_loop = loop or asyncio.get_running_loop()

    def _subscribe(push: PushCallback) -> Unsubscribe:
        subscribed = threading.Event()
        subscribed.set()

        def _deliver(*args: Any) -> None:
            if subscribed.is_set():
                push(*args)
            else:
                _logger.debug("Dropped event delivered after unsubscribe.")

        def _push_from_any_thread(*args: Any) -> None:
            if subscribed.is_set():
                target_loop.call_soon_threadsafe(_deliver, *args)

        unsubscribe = adapter(_push_from_any_thread)

        def _unsubscribe() -> Any:
            subscribed.clear()
            return unsubscribe()

        return _unsubscribe

    return _subscribe
