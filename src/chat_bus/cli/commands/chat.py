"""Chat exchange simulation command."""

import typer
from rich.console import Console

from chat_bus.event_bus import EventBus
from chat_bus.events import SessionTranscript, echo_reply, publish_exchange, register_event_handlers

console = Console()


def chat(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Message sent by the user"),
    session: str = typer.Option("cli", "--session", "-s", help="Chat session identifier"),
):
    """Simulate one chat exchange over the chat channels.

    The reply echoes the message word by word, published as streamed chunks,
    and the transcript assembled by a listener is printed at the end.

    Examples:
        chat-bus chat "Hello there"
        chat-bus chat -s abc123 "Hello there"
    """
    bus: EventBus = ctx.obj

    register_event_handlers(bus)
    transcript = SessionTranscript()
    transcript.attach(bus)

    publish_exchange(bus, session, message, echo_reply(message))

    console.print(f"[bold]Transcript for session {session}[/bold]")
    for role, content in transcript.turns(session):
        console.print(f"{role}: {content}", markup=False)
