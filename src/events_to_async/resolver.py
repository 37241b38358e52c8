"""This module provides for awaiting the first event of a push source."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .adapters import SubscriptionAdapter, Unsubscribe
from .cancellation import CancellationBinding, CancellationTokenProtocol
from .deferred import Deferred
from .errors import AbortError, UnsubscribeFailure
from .iterator import EventRecord

_logger = logging.getLogger(__name__)


def once(
    adapter: SubscriptionAdapter,
    cancellation: Optional[CancellationTokenProtocol] = None,
) -> asyncio.Future[EventRecord]:
    """
    Return a future that resolves to the first event of a push source.

    The subscription is made before this function returns, so an event
    pushed between the call and the ``await`` is not missed:

    .. code-block:: python

        first = once(adapter)
        trigger_the_event()
        (value,) = await first

    However the future settles, the subscription is released exactly
    once: when the first event arrives, when the cancellation token
    fires, or when the future itself is cancelled. Events pushed after
    the first one have no effect.

    This must be called from a coroutine or callback running in an
    event loop.

    :param adapter: the subscription adapter for the event source.
    :param cancellation: an optional token. If it fires before the
        first event arrives, the future raises :py:class:`AbortError`.

    :return: a future that resolves to the positional arguments of the
        first event.
    """
    deferred: Deferred[EventRecord] = Deferred()
    unsubscribe = adapter(lambda *args: deferred.resolve(tuple(args)))
    binding = CancellationBinding(
        cancellation, lambda reason: deferred.reject(AbortError(reason))
    )
    binding.bind()
    return asyncio.ensure_future(_settle(deferred, unsubscribe, binding))


async def _settle(
    deferred: Deferred[EventRecord],
    unsubscribe: Unsubscribe,
    binding: CancellationBinding,
) -> EventRecord:
    try:
        return await deferred
    finally:
        binding.release()
        try:
            unsubscribe()
        except Exception as error:
            _logger.warning(f"Failed to unsubscribe: {error}")
            raise UnsubscribeFailure(
                f"Failed to unsubscribe from event source: {error}"
            ) from error
