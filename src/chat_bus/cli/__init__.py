"""CLI module for chat-bus.

Provides command-line tools that exercise the event bus.
"""

from chat_bus.cli.app import app

__all__ = ["app"]
