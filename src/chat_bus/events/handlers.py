"""Chat event listeners.

This module contains listeners that react to chat events: loggers for the
operational trail and a transcript that assembles streamed responses.
"""

from collections import defaultdict

from loguru import logger

from chat_bus.event_bus import EventBus, EventHandler, Unsubscribe
from chat_bus.events.types import (
    MESSAGE_RECEIVED,
    RESPONSE_CHUNK,
    RESPONSE_COMPLETED,
    MessageReceivedEvent,
    ResponseChunkEvent,
    ResponseCompletedEvent,
)


class MessageReceivedLogger(EventHandler[MessageReceivedEvent]):
    """Log every incoming chat message."""

    def handle(self, payload: MessageReceivedEvent) -> None:
        logger.info(f"Message received in session {payload.session_id} ({payload.role}, {len(payload.content)} chars)")
        logger.debug(f"   Received at: {payload.received_at.isoformat()}")


class ResponseCompletedLogger(EventHandler[ResponseCompletedEvent]):
    """Log completed model responses."""

    def handle(self, payload: ResponseCompletedEvent) -> None:
        logger.info(f"Response completed in session {payload.session_id} ({payload.chunk_count} chunks)")


class SessionTranscript:
    """Assemble per-session transcripts from chat events.

    Streamed chunks are buffered until the response completes, then the
    assembled text is appended to the transcript as an assistant turn.
    """

    def __init__(self) -> None:
        self._turns: dict[str, list[tuple[str, str]]] = defaultdict(list)
        self._buffers: dict[str, list[str]] = defaultdict(list)

    def on_message(self, payload: MessageReceivedEvent) -> None:
        self._turns[payload.session_id].append((payload.role, payload.content))

    def on_chunk(self, payload: ResponseChunkEvent) -> None:
        self._buffers[payload.session_id].append(payload.delta)

    def on_completed(self, payload: ResponseCompletedEvent) -> None:
        streamed = "".join(self._buffers.pop(payload.session_id, []))
        if streamed != payload.content:
            logger.warning(f"Session {payload.session_id}: streamed text differs from completed response, keeping the latter")
        self._turns[payload.session_id].append(("assistant", payload.content))

    def attach(self, bus: EventBus) -> list[Unsubscribe]:
        """Subscribe this transcript to the chat channels.

        Returns:
            The unsubscribe functions, one per channel
        """
        return [
            bus.subscribe(MESSAGE_RECEIVED, self.on_message),
            bus.subscribe(RESPONSE_CHUNK, self.on_chunk),
            bus.subscribe(RESPONSE_COMPLETED, self.on_completed),
        ]

    def turns(self, session_id: str) -> list[tuple[str, str]]:
        """Get the ``(role, content)`` turns recorded for a session."""
        return list(self._turns.get(session_id, []))

    def pending(self, session_id: str) -> str:
        """Get the text streamed so far for a response that has not completed."""
        return "".join(self._buffers.get(session_id, []))
