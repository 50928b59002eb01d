"""Subscribe / publish walkthrough command."""

import typer
from rich.console import Console

from chat_bus.event_bus import Channel, EventBus

console = Console()

MESSAGE = Channel[str]("message")
COUNT = Channel[int]("count")


def demo(ctx: typer.Context):
    """Run the basic subscribe / publish / unsubscribe walkthrough.

    Subscribes one listener to "message" and one to "count", publishes to
    both, then unsubscribes the "message" listener and publishes again.

    Examples:
        chat-bus demo
    """
    bus: EventBus = ctx.obj

    stop_message_listener = bus.subscribe(MESSAGE, lambda text: console.print(f"message event received: {text}"))
    bus.subscribe(COUNT, lambda value: console.print(f"count event received: {value}"))

    bus.publish(MESSAGE, "Hello subscribers!")
    bus.publish(COUNT, 42)

    stop_message_listener()
    bus.publish(MESSAGE, "Nobody hears this")

    console.print(f"[dim]Listeners left: message={bus.listener_count(MESSAGE)}, count={bus.listener_count(COUNT)}[/dim]")

