"""Producer side of a chat exchange.

The request-handling layer calls these helpers instead of publishing each
chat event by hand, so every exchange emits the same sequence: one
``MESSAGE_RECEIVED``, one ``RESPONSE_CHUNK`` per streamed piece, then one
``RESPONSE_COMPLETED``.
"""

from collections.abc import Iterable

from chat_bus.event_bus import EventBus
from chat_bus.events.types import (
    MESSAGE_RECEIVED,
    RESPONSE_CHUNK,
    RESPONSE_COMPLETED,
    MessageReceivedEvent,
    ResponseChunkEvent,
    ResponseCompletedEvent,
)


def publish_exchange(bus: EventBus, session_id: str, message: str, reply_chunks: Iterable[str]) -> str:
    """Publish a full chat exchange.

    Args:
        bus: Bus to publish on
        session_id: Chat session identifier
        message: The user's message
        reply_chunks: The model response as it is streamed

    Returns:
        The complete reply text
    """
    bus.publish(MESSAGE_RECEIVED, MessageReceivedEvent(session_id=session_id, content=message))

    parts: list[str] = []
    for index, delta in enumerate(reply_chunks):
        parts.append(delta)
        bus.publish(RESPONSE_CHUNK, ResponseChunkEvent(session_id=session_id, index=index, delta=delta))

    reply = "".join(parts)
    bus.publish(RESPONSE_COMPLETED, ResponseCompletedEvent(session_id=session_id, content=reply, chunk_count=len(parts)))
    return reply


def echo_reply(message: str) -> list[str]:
    """Build a word-by-word echo reply, used where no model is attached."""
    words = f"You said: {message}".split(" ")
    return [word if i == 0 else f" {word}" for i, word in enumerate(words)]
