"""This module provides an async iterator over the events of a push source."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from enum import Enum
from types import TracebackType
from typing import (
    Any,
    Callable,
    Deque,
    NamedTuple,
    Optional,
    Tuple,
    Type,
    Union,
)

from .adapters import SubscriptionAdapter, Unsubscribe
from .cancellation import CancellationBinding, CancellationTokenProtocol
from .deferred import Deferred
from .errors import AbortError, FaultError, UnsubscribeFailure

EventRecord = Tuple[Any, ...]
"""The positional arguments of a single push."""


class IteratorState(Enum):
    """Lifecycle state of an :py:class:`EventIterator`."""

    ACTIVE = "active"
    """Subscribed, and delivering events."""

    FINISHED = "finished"
    """Terminated; drains buffered events, then reports completion."""

    ERRORED = "errored"
    """Faulted or cancelled; drains buffered events, then raises."""


class PullResult(NamedTuple):
    """The result of a single pull from an :py:class:`EventIterator`."""

    value: Optional[EventRecord]
    """The event's positional arguments, or None if ``done``."""

    done: bool
    """Whether the iterator has finished."""


_DONE = PullResult(None, True)


class EventIterator:
    """
    An async iterator over the events of a push-based event source.

    The iterator subscribes to its source as soon as it is created.
    Each push is handed to the oldest outstanding :py:meth:`pull`, if
    there is one, or else buffered until somebody pulls it. Events are
    therefore consumed in exactly the order in which they were pushed,
    and concurrent pulls are served first come, first served. The buffer
    is unbounded.

    Usage example:

    .. code-block:: python

        async with on(adapter) as events:
            async for (value,) in events:
                if value > 10:
                    break

    The subscription is released on the first of:

    - :py:meth:`terminate` (also called by :py:meth:`aclose` and on
      leaving an ``async with`` block). Outstanding pulls then resolve
      as done, as does every later pull once the buffer is drained.
    - :py:meth:`fault`. Every later pull, once the buffer is drained,
      raises the injected error. Pulls that were already outstanding
      are left waiting until the iterator is terminated.
    - firing of the cancellation token. Outstanding pulls, and every
      later pull once the buffer is drained, raise
      :py:class:`AbortError`.

    **NOTE**: ``async for`` does not close the iterator when you break
    out of the loop, so you need to terminate it yourself, or use it as
    an async context manager as above.
    """

    def __init__(
        self: EventIterator,
        adapter: SubscriptionAdapter,
        cancellation: Optional[CancellationTokenProtocol] = None,
    ) -> None:
        """
        Initialise a new instance, and subscribe to the event source.

        :param adapter: the subscription adapter for the event source.
        :param cancellation: an optional token; when it fires, the
            iterator is aborted.
        """
        # Invariant: at most one of these is nonempty at any time
        self._buffer: Deque[EventRecord] = deque()
        self._waiters: Deque[Deferred[PullResult]] = deque()

        self._state = IteratorState.ACTIVE
        self._error: Optional[BaseException] = None
        self._logger = logging.getLogger(self.__class__.__name__)

        self._unsubscribe: Optional[Unsubscribe] = adapter(self._push)
        self._logger.debug("Subscribed to event source.")

        self._cancellation = CancellationBinding(cancellation, self._abort)
        self._cancellation.bind()

    # ------------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------------

    @property
    def state(self: EventIterator) -> IteratorState:
        """
        Return the lifecycle state of this iterator.

        :return: the lifecycle state of this iterator.
        """
        return self._state

    @property
    def buffered(self: EventIterator) -> int:
        """
        Return the number of events pushed but not yet pulled.

        :return: the number of buffered events.
        """
        return len(self._buffer)

    @property
    def waiting(self: EventIterator) -> int:
        """
        Return the number of pulls waiting for an event.

        :return: the number of outstanding pulls.
        """
        return len(self._waiters)

    async def pull(self: EventIterator) -> PullResult:
        """
        Return the next event, waiting for it to be pushed if need be.

        :return: the next event, or a done result if the iterator has
            been terminated and its buffer drained.

        :raises BaseException: the stored error, if the iterator has
            been faulted or cancelled and its buffer drained.
        """  # noqa: DAR401
        if self._buffer:
            return PullResult(self._buffer.popleft(), False)
        if self._state is IteratorState.FINISHED:
            return _DONE
        if self._state is IteratorState.ERRORED:
            assert self._error is not None  # for the type-checker
            # a fresh traceback each time, so repeated pulls do not pile up
            raise self._error.with_traceback(None)

        deferred: Deferred[PullResult] = Deferred()
        self._waiters.append(deferred)
        try:
            return await deferred
        except asyncio.CancelledError:
            if deferred in self._waiters:
                self._waiters.remove(deferred)
            elif _holds_event(deferred):
                # matched by a push just before the cancellation landed
                self._buffer.appendleft(deferred.future.result().value)
            raise

    async def terminate(self: EventIterator) -> PullResult:
        """
        Stop iterating, and unsubscribe from the event source.

        Outstanding pulls resolve as done. This is safe to call more
        than once, and on an iterator that has already been faulted, in
        which case it only settles outstanding pulls.

        :return: a done result.
        """
        try:
            if self._state is IteratorState.ACTIVE:
                self._state = IteratorState.FINISHED
                self._logger.debug("Terminated.")
                self._release()
        finally:
            self._settle_waiters(lambda waiter: waiter.resolve(_DONE))
        return _DONE

    async def fault(
        self: EventIterator,
        error: Union[BaseException, Type[BaseException], None] = None,
    ) -> PullResult:
        """
        Inject an error, and unsubscribe from the event source.

        Once any buffered events have been pulled, every later pull
        raises ``error``. Pulls that are already outstanding are not
        affected.

        Faulting an iterator that is no longer active does nothing.

        :param error: the error to inject. An exception class is
            instantiated without arguments. If omitted, a
            :py:class:`FaultError` is used.

        :return: a done result.
        """
        if self._state is not IteratorState.ACTIVE:
            return _DONE
        if error is None:
            error = FaultError("Event iterator faulted")
        elif isinstance(error, type):
            error = error()

        self._state = IteratorState.ERRORED
        self._error = error
        self._logger.debug(f"Faulted with {error!r}.")
        self._release()
        return _DONE

    async def aclose(self: EventIterator) -> None:
        """Terminate this iterator."""
        await self.terminate()

    def __aiter__(self: EventIterator) -> EventIterator:
        """
        Return this iterator.

        :return: this iterator.
        """
        return self

    async def __anext__(self: EventIterator) -> EventRecord:
        """
        Return the positional arguments of the next event.

        :return: the positional arguments of the next event.

        :raises StopAsyncIteration: once the iterator has finished.
        """
        result = await self.pull()
        if result.done:
            raise StopAsyncIteration
        assert result.value is not None  # for the type-checker
        return result.value

    async def __aenter__(self: EventIterator) -> EventIterator:
        """
        Enter a context in which this iterator is used.

        :return: this iterator.
        """
        return self

    async def __aexit__(
        self: EventIterator,
        exc_type: Optional[Type[BaseException]],
        exception: Optional[BaseException],
        trace: Optional[TracebackType],
    ) -> None:
        """
        Terminate this iterator on leaving the context.

        :param exc_type: the type of exception thrown in the with block
        :param exception: the exception thrown in the with block
        :param trace: a traceback
        """
        await self.terminate()

    # ------------------------------------------------------------------------
    # Private methods
    # ------------------------------------------------------------------------

    def _push(self: EventIterator, *args: Any) -> None:
        record = tuple(args)
        while self._waiters:
            waiter = self._waiters.popleft()
            # a waiter is already done if its pull was cancelled
            if not waiter.done():
                waiter.resolve(PullResult(record, False))
                return
        self._buffer.append(record)

    def _abort(self: EventIterator, reason: Any) -> None:
        if self._state is not IteratorState.ACTIVE:
            return
        error = AbortError(reason)
        self._state = IteratorState.ERRORED
        self._error = error
        self._logger.debug(f"Cancelled ({reason!r}).")
        try:
            self._release()
        finally:
            self._settle_waiters(lambda waiter: waiter.reject(error))

    def _settle_waiters(
        self: EventIterator, settle: Callable[[Deferred[PullResult]], None]
    ) -> None:
        waiters, self._waiters = self._waiters, deque()
        for waiter in waiters:
            settle(waiter)

    def _release(self: EventIterator) -> None:
        self._cancellation.release()
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is None:
            return
        try:
            unsubscribe()
        except Exception as error:
            self._logger.warning(f"Failed to unsubscribe: {error}")
            raise UnsubscribeFailure(
                f"Failed to unsubscribe from event source: {error}"
            ) from error


def _holds_event(deferred: Deferred[PullResult]) -> bool:
    future = deferred.future
    return (
        future.done()
        and not future.cancelled()
        and future.exception() is None
        and not future.result().done
    )


def on(
    adapter: SubscriptionAdapter,
    cancellation: Optional[CancellationTokenProtocol] = None,
) -> EventIterator:
    """
    Return an async iterator over the events of a push source.

    :param adapter: the subscription adapter for the event source.
    :param cancellation: an optional token; when it fires, the iterator
        is aborted.

    :return: an iterator, already subscribed to the event source.
    """
    return EventIterator(adapter, cancellation)
