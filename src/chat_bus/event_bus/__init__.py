"""Event Bus System for Decoupled Component Communication.

This package provides an in-process publish/subscribe bus that lets the chat
backend's components react to each other's events without direct imports.
It supports:

- **Typed Channels**: ``Channel[T]`` binds a payload type to a channel name
- **Multiple Listeners**: Any number of listeners per channel, each stored once
- **Safe Unsubscription**: Listeners may unsubscribe (themselves or others)
  while a payload is being dispatched
- **Error Isolation**: A failing listener does not stop the others
- **Explicit Lifecycle**: Buses are constructed and closed by their owner;
  there is no global instance

## Quick Start

```python
from chat_bus.event_bus import Channel, EventBus

COUNT = Channel[int]("count")

with EventBus() as bus:
    stop = bus.subscribe(COUNT, lambda value: print(f"count event received: {value}"))
    bus.publish(COUNT, 42)
    stop()
```

For listener base classes and exceptions, see `core.py`.
For the dispatch contract and API reference, see `bus.py`.

"""

from .bus import EventBus, create_event_bus, log_listener_error
from .core import (
    Channel,
    EventBusClosedError,
    EventBusError,
    EventHandler,
    ListenerError,
    ListenerRegistrationError,
    Unsubscribe,
)
from .enums import ErrorPolicy

__all__ = [
    "Channel",
    "ErrorPolicy",
    "EventBus",
    "EventBusClosedError",
    "EventBusError",
    "EventHandler",
    "ListenerError",
    "ListenerRegistrationError",
    "Unsubscribe",
    "create_event_bus",
    "log_listener_error",
]
