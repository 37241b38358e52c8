"""This module provides a single-settlement future with exposed controls."""
from __future__ import annotations

import asyncio
from typing import Any, Generator, Generic, Optional, TypeVar

T = TypeVar("T")


class Deferred(Generic[T]):
    """
    A future that can be settled from outside the awaiting code.

    A deferred wraps an :py:class:`asyncio.Future` and exposes its
    ``resolve`` and ``reject`` controls to whoever holds it. The first
    call to either control settles the deferred; any later call is
    silently ignored. This allows a producer to settle a deferred
    without checking whether someone else got there first, or whether
    the awaiting task has given up and been cancelled.

    .. code-block:: python

        deferred = Deferred[int]()
        loop.call_later(1.0, deferred.resolve, 42)
        value = await deferred  # 42
    """

    def __init__(
        self: Deferred[T], loop: Optional[asyncio.AbstractEventLoop] = None
    ) -> None:
        """
        Initialise a new instance.

        :param loop: the event loop that the deferred belongs to. If
            omitted, the running loop is used.
        """
        self._future: asyncio.Future[T] = (
            loop or asyncio.get_running_loop()
        ).create_future()

    def resolve(self: Deferred[T], value: T) -> None:
        """
        Settle this deferred with a value, unless it is already settled.

        :param value: the value that the deferred resolves to.
        """
        if not self._future.done():
            self._future.set_result(value)

    def reject(self: Deferred[T], error: BaseException) -> None:
        """
        Settle this deferred with an error, unless it is already settled.

        :param error: the exception that awaiting the deferred raises.
        """
        if not self._future.done():
            self._future.set_exception(error)

    def done(self: Deferred[T]) -> bool:
        """
        Return whether this deferred has settled.

        A deferred whose awaiting task was cancelled counts as settled.

        :return: whether this deferred has settled.
        """
        return self._future.done()

    @property
    def future(self: Deferred[T]) -> asyncio.Future[T]:
        """
        Return the underlying future.

        :return: the underlying future.
        """
        return self._future

    def __await__(self: Deferred[T]) -> Generator[Any, None, T]:
        """
        Wait for this deferred to settle.

        :return: an iterator that the ``await`` expression drives.
        """
        return self._future.__await__()
