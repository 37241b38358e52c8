"""This module provides the exceptions raised by this package."""
from __future__ import annotations

from typing import Any


class EventsToAsyncError(Exception):
    """Base class for all errors raised by this package."""


class AbortError(EventsToAsyncError):
    """
    Raised when a cancellation token fires before a value arrives.

    The reason given to the token, if any, is kept in :py:attr:`reason`.
    """

    def __init__(self: AbortError, reason: Any = None) -> None:
        """
        Initialise a new instance.

        :param reason: the reason the token was cancelled with.
        """
        super().__init__("Abort Error" if reason is None else str(reason))
        self.reason = reason


class FaultError(EventsToAsyncError):
    """Default error injected into an event iterator by ``fault()``."""


class UnsubscribeFailure(EventsToAsyncError):
    """
    Raised when a subscription adapter's unsubscribe callable fails.

    The original exception is available as ``__cause__``.
    """
