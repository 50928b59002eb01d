"""CLI entry point.

Usage:
    python -m chat_bus.cli demo
    python -m chat_bus.cli chat "Hello there"
    chat-bus --log-level DEBUG chat "Hello there"
"""

from chat_bus.cli.app import app


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
