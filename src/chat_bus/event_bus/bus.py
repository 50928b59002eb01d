"""Event Bus Implementation.

This module provides the main EventBus class that handles subscriptions and
synchronous, in-process dispatch of payloads to listeners.

## Dispatch Contract

- **Independent Channels**: Channels never affect one another
- **Set Semantics**: A listener reference is stored at most once per channel
- **Unordered Delivery**: Listeners currently run in subscription order, but
  callers must not depend on any order
- **Dispatch Snapshot**: ``publish`` captures the listeners before iterating.
  Listeners subscribed during dispatch are not called in that round; listeners
  unsubscribed during dispatch are skipped if they have not run yet. Each
  subscription is a distinct registration, so a listener unsubscribed and
  subscribed again during dispatch counts as added and waits for the next round
- **Error Policy**: ``ErrorPolicy.ISOLATE`` reports a failing listener and keeps
  going, ``ErrorPolicy.FAIL_FAST`` raises ``ListenerError`` and stops the round
- **Async Listeners**: Awaitable results are scheduled on the running loop;
  ``publish`` never waits for them. Use ``publish_and_wait`` to await them

## Usage

```python
from chat_bus.event_bus import Channel, EventBus

MESSAGE = Channel[str]("message")

bus = EventBus()
stop = bus.subscribe(MESSAGE, lambda text: print(f"message event received: {text}"))
bus.publish(MESSAGE, "Hello subscribers!")
stop()
bus.publish(MESSAGE, "Nobody hears this")
```

"""

import asyncio
import inspect
import threading
from collections.abc import Awaitable, Callable, Hashable
from functools import partial
from typing import TYPE_CHECKING, Any, TypeVar, overload

from loguru import logger

from .core import (
    Channel,
    ErrorReporter,
    EventBusClosedError,
    Listener,
    ListenerError,
    ListenerRegistrationError,
    Unsubscribe,
    channel_name,
    describe_listener,
)
from .enums import ErrorPolicy

T = TypeVar("T")

if TYPE_CHECKING:
    from chat_bus.settings import Settings


def log_listener_error(error: ListenerError) -> None:
    """Default error reporter: log the failure with its traceback."""
    logger.opt(exception=error.original).error(str(error))


class EventBus:
    """In-process publish/subscribe bus with independent channels.

    Channels are any hashable value; ``Channel[T]`` keys additionally let type
    checkers match publishers and subscribers on the payload type. All
    registry access is guarded by a lock that is released before listeners
    run, so listeners may call back into the bus.

    Example:
        ```python
        bus = EventBus(error_policy=ErrorPolicy.ISOLATE)
        bus.subscribe("count", lambda value: print(f"count event received: {value}"))
        bus.publish("count", 42)
        ```
    """

    def __init__(
        self,
        error_policy: ErrorPolicy | str = ErrorPolicy.ISOLATE,
        error_reporter: ErrorReporter | None = None,
    ) -> None:
        """Initialize a new EventBus instance.

        Args:
            error_policy: What ``publish`` does when a listener raises.
            error_reporter: Receives isolated listener failures and failures of
                scheduled async listeners. Defaults to logging them.
        """
        # dict keys double as an insertion-ordered set; values are registration tokens
        self._channels: dict[Hashable, dict[Listener, object]] = {}
        self._lock = threading.Lock()
        self._error_policy = ErrorPolicy(error_policy)
        self._error_reporter = error_reporter or log_listener_error
        self._pending_tasks: set[asyncio.Future[Any]] = set()
        self._closed = False
        logger.debug(f"EventBus initialized (error_policy={self._error_policy})")

    @property
    def error_policy(self) -> ErrorPolicy:
        """Get the error policy applied by ``publish``."""
        return self._error_policy

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    @overload
    def subscribe(self, channel: Channel[T], listener: Callable[[T], Any]) -> Unsubscribe: ...

    @overload
    def subscribe(self, channel: Hashable, listener: Listener) -> Unsubscribe: ...

    def subscribe(self, channel: Hashable, listener: Listener) -> Unsubscribe:
        """Subscribe a listener to a channel.

        Subscribing the same listener reference again is a no-op.

        Args:
            channel: Channel identifier
            listener: Callable invoked with every payload published on the channel

        Returns:
            A function that unsubscribes this listener from this channel. Only
            its first call has an effect.

        Raises:
            ListenerRegistrationError: If the listener is not callable or not hashable
            EventBusClosedError: If the bus has been closed
        """
        if not callable(listener):
            raise ListenerRegistrationError(f"Listener must be callable: {listener!r}")
        if not isinstance(listener, Hashable):
            raise ListenerRegistrationError(f"Listener must be hashable: {listener!r}")

        with self._lock:
            self._ensure_open()
            listeners = self._channels.setdefault(channel, {})
            if listener in listeners:
                logger.trace(f"Listener {describe_listener(listener)} already subscribed to '{channel_name(channel)}'")
            else:
                listeners[listener] = object()
                logger.debug(f"Subscribed {describe_listener(listener)} to '{channel_name(channel)}'")

        unsubscribed = False

        def unsubscribe() -> None:
            nonlocal unsubscribed
            if unsubscribed:
                return
            unsubscribed = True
            self.unsubscribe(channel, listener)

        return unsubscribe

    @overload
    def unsubscribe(self, channel: Channel[T], listener: Callable[[T], Any]) -> None: ...

    @overload
    def unsubscribe(self, channel: Hashable, listener: Listener) -> None: ...

    def unsubscribe(self, channel: Hashable, listener: Listener) -> None:
        """Remove a listener from a channel.

        Unknown channels and listeners are ignored. A channel left without
        listeners is dropped from the registry.
        """
        with self._lock:
            listeners = self._channels.get(channel)
            if listeners is None or listener not in listeners:
                return
            del listeners[listener]
            if not listeners:
                del self._channels[channel]
        logger.debug(f"Unsubscribed {describe_listener(listener)} from '{channel_name(channel)}'")

    @overload
    def publish(self, channel: Channel[T], payload: T) -> None: ...

    @overload
    def publish(self, channel: Hashable, payload: Any) -> None: ...

    def publish(self, channel: Hashable, payload: Any) -> None:
        """Publish a payload to every listener of a channel.

        Listeners run synchronously in the calling thread. Awaitable results
        are scheduled on the running event loop and not waited for.

        Args:
            channel: Channel identifier
            payload: Value passed unchanged to every listener

        Raises:
            ListenerError: Under ``ErrorPolicy.FAIL_FAST``, for the first failing listener
            EventBusClosedError: If the bus has been closed
        """
        snapshot = self._snapshot(channel)
        if not snapshot:
            logger.trace(f"No listeners for '{channel_name(channel)}'")
            return

        logger.trace(f"Publishing to '{channel_name(channel)}' ({len(snapshot)} listeners)")
        for listener, token in snapshot:
            if not self._is_registered(channel, listener, token):
                logger.trace(f"Skipping {describe_listener(listener)}, unsubscribed during dispatch")
                continue
            try:
                result = listener(payload)
            except Exception as e:
                self._handle_failure(channel, listener, e)
                continue
            if inspect.isawaitable(result):
                self._schedule(channel, listener, result)

    @overload
    async def publish_and_wait(self, channel: Channel[T], payload: T) -> list[Any]: ...

    @overload
    async def publish_and_wait(self, channel: Hashable, payload: Any) -> list[Any]: ...

    async def publish_and_wait(self, channel: Hashable, payload: Any) -> list[Any]:
        """Publish a payload and wait for async listeners to complete.

        Dispatch follows the same snapshot rules as ``publish``. Awaitable
        results are awaited concurrently once every listener has been invoked.

        Returns:
            One entry per invoked listener: its (awaited) result, or under
            ``ErrorPolicy.ISOLATE`` the exception it raised

        Raises:
            ListenerError: Under ``ErrorPolicy.FAIL_FAST``, for the first failing
                listener in dispatch order
            EventBusClosedError: If the bus has been closed
        """
        snapshot = self._snapshot(channel)
        if not snapshot:
            logger.trace(f"No listeners for '{channel_name(channel)}'")
            return []

        outcomes: list[Any] = []
        awaiting: dict[int, tuple[Listener, Awaitable[Any]]] = {}
        try:
            for listener, token in snapshot:
                if not self._is_registered(channel, listener, token):
                    continue
                try:
                    result = listener(payload)
                except Exception as e:
                    self._handle_failure(channel, listener, e)
                    outcomes.append(e)
                    continue
                if inspect.isawaitable(result):
                    awaiting[len(outcomes)] = (listener, result)
                outcomes.append(result)
        except ListenerError:
            for _, awaitable in awaiting.values():
                if inspect.iscoroutine(awaitable):
                    awaitable.close()
            raise

        if awaiting:
            logger.trace(f"Awaiting {len(awaiting)} async listeners on '{channel_name(channel)}'")
            results = await asyncio.gather(*(awaitable for _, awaitable in awaiting.values()), return_exceptions=True)
            for (index, (listener, _)), result in zip(awaiting.items(), results, strict=True):
                if isinstance(result, BaseException):
                    # CancelledError included, a cancelled listener did not complete
                    self._handle_failure(channel, listener, result)
                outcomes[index] = result

        failed = sum(1 for outcome in outcomes if isinstance(outcome, BaseException))
        if failed:
            logger.warning(f"Channel '{channel_name(channel)}': {len(outcomes) - failed} successful, {failed} failed listeners")
        return outcomes

    def clear(self, channel: Hashable | None = None) -> None:
        """Remove the listeners of one channel, or of all channels."""
        with self._lock:
            if channel is None:
                self._channels.clear()
            else:
                self._channels.pop(channel, None)
        if channel is None:
            logger.debug("Cleared all channels")
        else:
            logger.debug(f"Cleared channel '{channel_name(channel)}'")

    def listener_count(self, channel: Hashable) -> int:
        """Get the number of listeners subscribed to a channel."""
        with self._lock:
            return len(self._channels.get(channel, ()))

    def has_listeners(self, channel: Hashable) -> bool:
        """Check whether a channel has at least one listener."""
        return self.listener_count(channel) > 0

    def channels(self) -> list[Hashable]:
        """Get all channels that currently have listeners."""
        with self._lock:
            return list(self._channels)

    def close(self) -> None:
        """Drop every subscription and reject further use of the bus.

        Async listeners already scheduled keep running.
        """
        with self._lock:
            self._channels.clear()
            self._closed = True
        logger.debug("EventBus closed")

    def __enter__(self) -> "EventBus":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise EventBusClosedError("EventBus is closed")

    def _snapshot(self, channel: Hashable) -> tuple[tuple[Listener, object], ...]:
        with self._lock:
            self._ensure_open()
            return tuple(self._channels.get(channel, {}).items())

    def _is_registered(self, channel: Hashable, listener: Listener, token: object) -> bool:
        with self._lock:
            return self._channels.get(channel, {}).get(listener) is token

    def _handle_failure(self, channel: Hashable, listener: Listener, exc: BaseException) -> None:
        error = ListenerError(channel, listener, exc)
        if self._error_policy is ErrorPolicy.FAIL_FAST:
            raise error from exc
        self._report(error)

    def _report(self, error: ListenerError) -> None:
        try:
            self._error_reporter(error)
        except Exception:
            logger.opt(exception=True).error(f"Error reporter failed while reporting: {error}")

    def _schedule(self, channel: Hashable, listener: Listener, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self._handle_failure(
                channel,
                listener,
                RuntimeError("Async listener requires a running event loop; use publish_and_wait or publish from a coroutine"),
            )
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending_tasks.add(task)
        task.add_done_callback(partial(self._on_task_done, channel, listener))
        logger.trace(f"Scheduled async listener {describe_listener(listener)}")

    def _on_task_done(self, channel: Hashable, listener: Listener, task: asyncio.Future[Any]) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # publish has already returned, so failures are always reported
            self._report(ListenerError(channel, listener, exc))


def create_event_bus(settings: "Settings | None" = None) -> EventBus:
    """Create an EventBus configured from settings.

    Args:
        settings: Settings to use. Defaults to the cached application settings.

    Returns:
        A new, independent EventBus instance
    """
    if settings is None:
        # Lazy import, settings import the bus enums
        from chat_bus.settings import get_settings

        settings = get_settings()
    return EventBus(error_policy=settings.error_policy)
