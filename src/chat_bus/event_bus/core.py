"""Core Event Bus Components.

This module contains the fundamental abstractions for the event bus system.
They have no dependency on the bus implementation and can be shared by
producers and consumers alike.

## Key Components

- **Channel**: Typed channel key binding a payload type to a name
- **EventHandler**: Base class for class-based listeners
- **EventBusError**: Base exception for all event bus related errors
- **ListenerRegistrationError**: Raised when a listener cannot be subscribed
- **ListenerError**: Wraps an exception raised by a listener during dispatch
- **EventBusClosedError**: Raised when a closed bus is used

## Usage Example

```python
from pydantic import BaseModel

from chat_bus.event_bus import Channel, EventBus, EventHandler

class MessageReceived(BaseModel):
    session_id: str
    content: str

MESSAGE_RECEIVED = Channel[MessageReceived]("message_received")

class AuditTrail(EventHandler[MessageReceived]):
    def __init__(self) -> None:
        self.seen: list[str] = []

    def handle(self, payload: MessageReceived) -> None:
        self.seen.append(payload.content)

bus = EventBus()
bus.subscribe(MESSAGE_RECEIVED, AuditTrail())
bus.publish(MESSAGE_RECEIVED, MessageReceived(session_id="s1", content="hi"))
```

"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

Listener = Callable[[Any], Any]
Unsubscribe = Callable[[], None]

T = TypeVar("T")


class Channel(Generic[T]):
    """Named channel key carrying the payload type ``T`` for type checkers.

    Channels compare and hash by name, so two declarations with the same name
    address the same listeners. The payload type only exists statically; the
    bus never inspects or validates payloads.

    Example:
        ```python
        COUNT = Channel[int]("count")
        bus.subscribe(COUNT, lambda value: print(value + 1))
        bus.publish(COUNT, 42)
        ```
    """

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("Channel name must be a non-empty string")
        self._name = name

    @property
    def name(self) -> str:
        """Get the channel name."""
        return self._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Channel):
            return NotImplemented
        return self._name == other._name

    def __hash__(self) -> int:
        return hash((Channel, self._name))

    def __repr__(self) -> str:
        return f"Channel({self._name!r})"

    def __str__(self) -> str:
        return self._name


def channel_name(channel: Hashable) -> str:
    """Return a human readable name for any channel identifier."""
    if isinstance(channel, Channel):
        return channel.name
    return str(getattr(channel, "value", channel))


class EventHandler(ABC, Generic[T]):
    """Base class for class-based listeners.

    Subclasses implement ``handle``; instances are callable and can be passed
    straight to ``EventBus.subscribe``. Identity is the instance itself, so
    subscribing the same instance twice still registers it once.
    """

    @abstractmethod
    def handle(self, payload: T) -> Any:
        """Handle a published payload.

        Args:
            payload: The value published on the channel this handler listens to.

        Returns:
            Optional result. An awaitable result is scheduled by ``publish``
            and awaited by ``publish_and_wait``.
        """

    def __call__(self, payload: T) -> Any:
        """Make the handler callable."""
        return self.handle(payload)


class EventBusError(Exception):
    """Base exception for all event bus related errors.

    Use this for catching any event bus related error:
        ```python
        try:
            bus.publish(channel, payload)
        except EventBusError as e:
            logger.error(f"Event bus error: {e}")
        ```
    """


class ListenerRegistrationError(EventBusError):
    """Raised when a listener cannot be subscribed.

    This occurs when:
    - The listener is not callable
    - The listener is not hashable and cannot be stored in a listener set
    """


class ListenerError(EventBusError):
    """Raised or reported when a listener fails during dispatch.

    Attributes:
        channel: Channel the payload was published on
        listener: The listener that failed
        original: The exception raised by the listener
    """

    def __init__(self, channel: Hashable, listener: Listener, original: BaseException):
        self.channel = channel
        self.listener = listener
        self.original = original
        super().__init__(
            f"Listener {describe_listener(listener)} failed on channel '{channel_name(channel)}': "
            f"{type(original).__name__}: {original}"
        )


class EventBusClosedError(EventBusError):
    """Raised when subscribing to or publishing on a closed bus."""


def describe_listener(listener: Listener) -> str:
    """Return a short, stable description of a listener for log messages."""
    name = getattr(listener, "__qualname__", None)
    if name is None:
        name = type(listener).__qualname__
    return name


ErrorReporter = Callable[[ListenerError], None]
