"""This module implements test harness for testing push-to-pull consumers."""
from typing import Callable

import pytest

from events_to_async import PushCallback, Unsubscribe

from .testing_utils import EventSource


@pytest.fixture()
def event_source() -> EventSource:
    """
    Return an event source for testing.

    This is a pytest fixture.

    :return: an event source for testing.
    """
    return EventSource()


@pytest.fixture()
def failing_adapter() -> Callable[[PushCallback], Unsubscribe]:
    """
    Return a subscription adapter whose unsubscribe callable raises.

    :return: a subscription adapter.
    """

    def _unsubscribe() -> None:
        raise RuntimeError("event source went away")

    def _adapter(push: PushCallback) -> Unsubscribe:
        return _unsubscribe

    return _adapter
