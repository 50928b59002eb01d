"""Chat events for the chat backend.

This module provides the chat channels, their payload types and listeners
for decoupled communication between the request-handling layer and the
components reacting to it.
"""

from loguru import logger

from chat_bus.event_bus import EventBus, Unsubscribe
from chat_bus.events.exchange import echo_reply, publish_exchange
from chat_bus.events.handlers import MessageReceivedLogger, ResponseCompletedLogger, SessionTranscript
from chat_bus.events.types import (
    MESSAGE_RECEIVED,
    RESPONSE_CHUNK,
    RESPONSE_COMPLETED,
    MessageReceivedEvent,
    ResponseChunkEvent,
    ResponseCompletedEvent,
)

__all__ = [
    "MESSAGE_RECEIVED",
    "RESPONSE_CHUNK",
    "RESPONSE_COMPLETED",
    "MessageReceivedEvent",
    "MessageReceivedLogger",
    "ResponseChunkEvent",
    "ResponseCompletedEvent",
    "ResponseCompletedLogger",
    "SessionTranscript",
    "echo_reply",
    "publish_exchange",
    "register_event_handlers",
]


def register_event_handlers(bus: EventBus) -> list[Unsubscribe]:
    """Register the logging listeners on a bus.

    Args:
        bus: The bus to subscribe to

    Returns:
        The unsubscribe functions of the registered listeners
    """
    logger.debug("Registering chat event handlers")

    unsubscribers = [
        bus.subscribe(MESSAGE_RECEIVED, MessageReceivedLogger()),
        bus.subscribe(RESPONSE_COMPLETED, ResponseCompletedLogger()),
    ]

    logger.info("Chat event handlers registered successfully")
    return unsubscribers
