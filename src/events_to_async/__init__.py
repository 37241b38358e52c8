"""
This package bridges push-based event sources into async consumption.

See README.rst for more information.
"""

__version__ = "0.1.0"


__all__ = [
    "AbortError",
    "CancellationToken",
    "CancellationTokenProtocol",
    "Deferred",
    "EventIterator",
    "EventRecord",
    "EventsToAsyncError",
    "FaultError",
    "IteratorState",
    "PullResult",
    "PushCallback",
    "SubscriptionAdapter",
    "Unsubscribe",
    "UnsubscribeFailure",
    "listener_adapter",
    "on",
    "once",
    "threadsafe_adapter",
]


from .adapters import (
    PushCallback,
    SubscriptionAdapter,
    Unsubscribe,
    listener_adapter,
    threadsafe_adapter,
)
from .cancellation import CancellationToken, CancellationTokenProtocol
from .deferred import Deferred
from .errors import (
    AbortError,
    EventsToAsyncError,
    FaultError,
    UnsubscribeFailure,
)
from .iterator import (
    EventIterator,
    EventRecord,
    IteratorState,
    PullResult,
    on,
)
from .resolver import once
