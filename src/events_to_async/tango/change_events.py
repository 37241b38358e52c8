"""This module provides a subscription adapter for Tango attribute events."""
from __future__ import annotations

import asyncio
from typing import Callable, Optional

import tango

from ..adapters import (
    PushCallback,
    SubscriptionAdapter,
    Unsubscribe,
    threadsafe_adapter,
)


def change_event_adapter(
    device: "str | tango.DeviceProxy",
    attribute_name: str,
    event_type: tango.EventType = tango.EventType.CHANGE_EVENT,
    dev_factory: Optional[Callable[[str], tango.DeviceProxy]] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> SubscriptionAdapter:
    """
    Return a subscription adapter for events of a Tango device attribute.

    Each event is pushed with a single argument, the
    :py:class:`tango.EventData` received from Tango. Tango calls back
    from its own threads, so pushes are handed over to the event loop
    (see :py:func:`~events_to_async.adapters.threadsafe_adapter`).

    Usage example:

    .. code-block:: python

        adapter = change_event_adapter("sys/tg_test/1", "State")
        async with on(adapter) as events:
            async for (event_data,) in events:
                if event_data.attr_value.value == tango.DevState.ON:
                    break

    **NOTE**: Upon subscription, Tango immediately sends an event with
    the current value of the attribute.

    :param device: either a device name or an existing
        :py:class:`tango.DeviceProxy`.
    :param attribute_name: name of the device attribute to subscribe
        to. Case-sensitive.
    :param event_type: the type of event to subscribe to. The default
        is ``CHANGE_EVENT``.
    :param dev_factory: optional factory used to create the device
        proxy when ``device`` is a name. If None,
        :py:class:`tango.DeviceProxy` is used.
    :param loop: the event loop to deliver events to. If omitted, the
        loop running at the time of the call is used.

    :return: a subscription adapter.
    """
    proxy = _get_or_create_device(device, dev_factory)

    def _subscribe(push: PushCallback) -> Unsubscribe:
        subscription_id = proxy.subscribe_event(
            attribute_name, event_type, push
        )
        return lambda: proxy.unsubscribe_event(subscription_id)

    return threadsafe_adapter(_subscribe, loop)


def _get_or_create_device(
    device: "str | tango.DeviceProxy",
    dev_factory: Optional[Callable[[str], tango.DeviceProxy]] = None,
) -> tango.DeviceProxy:
    """
    Get an existing device proxy or create a new one.

    :param device: the name of the device or a DeviceProxy instance
    :param dev_factory: optional factory function to create device
        proxies

    :return: a DeviceProxy instance

    :raises ValueError: if ``device`` is neither a string nor a
        DeviceProxy
    """
    if isinstance(device, str):
        return (dev_factory or tango.DeviceProxy)(device)

    if isinstance(device, tango.DeviceProxy):
        return device

    raise ValueError(
        "The device must be the name of a Tango device (as a str) "
        "or a Tango DeviceProxy instance. Instead, it is of type "
        f"{type(device)}."
    )
