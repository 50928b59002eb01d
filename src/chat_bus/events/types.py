"""Chat event payloads and the channels they travel on.

This module contains the Pydantic payload models published by the chat
backend's request-handling layer, and the typed channels binding each model
to a channel name. Producers and consumers import the channel constants
rather than spelling channel names themselves.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from chat_bus.event_bus import Channel


class MessageReceivedEvent(BaseModel):
    """Published when a chat message reaches the backend."""

    session_id: str
    role: Literal["user", "system"] = "user"
    content: str
    received_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ResponseChunkEvent(BaseModel):
    """Published for every streamed piece of a model response."""

    session_id: str
    index: int = Field(ge=0, description="Position of the chunk in the response stream")
    delta: str


class ResponseCompletedEvent(BaseModel):
    """Published once a model response has been fully streamed."""

    session_id: str
    content: str
    chunk_count: int = Field(ge=0)


MESSAGE_RECEIVED = Channel[MessageReceivedEvent]("message_received")
RESPONSE_CHUNK = Channel[ResponseChunkEvent]("response_chunk")
RESPONSE_COMPLETED = Channel[ResponseCompletedEvent]("response_completed")
