"""This module provides cancellation tokens, and their binding to consumers."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from typing_extensions import Protocol

CancelListener = Callable[[Any], None]

_logger = logging.getLogger(__name__)


class CancellationTokenProtocol(Protocol):
    """
    Interface specification for cancellation tokens.

    A cancellation token is a one-shot notification. Once it has fired,
    its ``cancelled`` property is True, and every listener registered
    with it has been called, exactly once, with the reason it was given.
    A token may also expose that reason as a ``reason`` property.
    """

    @property
    def cancelled(self: CancellationTokenProtocol) -> bool:
        """
        Return whether this token has fired.

        :return: whether this token has fired.
        """  # noqa: DAR202
        ...

    def add_cancel_listener(
        self: CancellationTokenProtocol, listener: CancelListener
    ) -> None:
        """
        Register a listener to be called when this token fires.

        :param listener: callable to be called with the cancellation
            reason.
        """
        ...

    def remove_cancel_listener(
        self: CancellationTokenProtocol, listener: CancelListener
    ) -> None:
        """
        Unregister a listener.

        :param listener: a listener previously registered with
            ``add_cancel_listener``.
        """
        ...


class CancellationToken:
    """
    A concrete one-shot cancellation token.

    .. code-block:: python

        token = CancellationToken()
        events = on(adapter, cancellation=token)
        ...
        token.cancel("shutting down")

    The first call to :py:meth:`cancel` fires the token; later calls
    have no effect. Listeners are called synchronously, in the order in
    which they were registered. If a listener raises, the remaining
    listeners are still called, and then the first error is re-raised
    to the caller of :py:meth:`cancel`.
    """

    def __init__(self: CancellationToken) -> None:
        """Initialise a new instance."""
        self._listeners: List[CancelListener] = []
        self._cancelled = False
        self._reason: Any = None

    @property
    def cancelled(self: CancellationToken) -> bool:
        """
        Return whether this token has fired.

        :return: whether this token has fired.
        """
        return self._cancelled

    @property
    def reason(self: CancellationToken) -> Any:
        """
        Return the reason this token fired with.

        :return: the reason this token fired with, or None.
        """
        return self._reason

    def add_cancel_listener(
        self: CancellationToken, listener: CancelListener
    ) -> None:
        """
        Register a listener to be called when this token fires.

        If the token has already fired, the listener is called
        immediately.

        :param listener: callable to be called with the cancellation
            reason.
        """
        if self._cancelled:
            listener(self._reason)
        else:
            self._listeners.append(listener)

    def remove_cancel_listener(
        self: CancellationToken, listener: CancelListener
    ) -> None:
        """
        Unregister a listener.

        Removing a listener that is not registered does nothing.

        :param listener: a listener previously registered with
            ``add_cancel_listener``.
        """
        if listener in self._listeners:
            self._listeners.remove(listener)

    def cancel(self: CancellationToken, reason: Any = None) -> None:
        """
        Fire this token.

        :param reason: an optional reason, passed to every listener.

        :raises Exception: the first exception raised by a listener.
        """  # noqa: DAR401
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason

        listeners, self._listeners = self._listeners, []
        first_error: Optional[Exception] = None
        for listener in listeners:
            try:
                listener(reason)
            except Exception as error:  # pylint: disable=broad-except
                _logger.warning(f"Cancel listener {listener} failed: {error}")
                if first_error is None:
                    first_error = error
        if first_error is not None:
            raise first_error


class CancellationBinding:
    """
    Wiring from a cancellation token to a consumer's termination path.

    A binding registers at most one listener with its token, and
    removes it again when released. Consumers release their binding as
    part of their own termination, so that a long-lived token does not
    accumulate listeners of consumers that are long gone.
    """

    def __init__(
        self: CancellationBinding,
        token: Optional[CancellationTokenProtocol],
        on_cancel: CancelListener,
    ) -> None:
        """
        Initialise a new instance.

        :param token: the token to bind to. If None, the binding does
            nothing.
        :param on_cancel: callable to be called, with the cancellation
            reason, when the token fires.
        """
        self._token = token
        self._on_cancel = on_cancel
        self._registered = False

    def bind(self: CancellationBinding) -> None:
        """
        Start listening to the token.

        If the token has already fired, ``on_cancel`` is called
        immediately.
        """
        if self._token is None or self._registered:
            return
        if self._token.cancelled:
            self._on_cancel(getattr(self._token, "reason", None))
            return
        self._registered = True
        self._token.add_cancel_listener(self._fire)

    def release(self: CancellationBinding) -> None:
        """Stop listening to the token. Releasing twice does nothing."""
        if self._token is not None and self._registered:
            self._registered = False
            self._token.remove_cancel_listener(self._fire)

    def _fire(self: CancellationBinding, reason: Any) -> None:
        self._registered = False
        self._on_cancel(reason)
