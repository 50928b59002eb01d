"""Main CLI application."""

import typer
from loguru import logger
from pydantic import ValidationError

from chat_bus.cli.commands import chat, demo
from chat_bus.event_bus import ErrorPolicy, create_event_bus
from chat_bus.logging import setup_logging
from chat_bus.settings import Settings, get_settings

CLI_FORMAT = "<level>{level: <8}</level> | <level>{message}</level>"

app = typer.Typer(
    name="chat-bus",
    help="Chat bus CLI - exercise the in-process event bus",
    no_args_is_help=True,
)


LOG_LEVEL_OPTION = typer.Option(
    None,
    help="Log level (overrides CHAT_BUS_LOG_LEVEL)",
    metavar="<level>",
)  # fmt: skip
ERROR_POLICY_OPTION = typer.Option(
    None,
    help="Listener failure handling (overrides CHAT_BUS_ERROR_POLICY)",
    case_sensitive=False,
)  # fmt: skip


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: str | None = LOG_LEVEL_OPTION,
    error_policy: ErrorPolicy | None = ERROR_POLICY_OPTION,
):
    """Global options for all commands."""
    overrides = {}
    if log_level is not None:
        overrides["log_level"] = log_level
    if error_policy is not None:
        overrides["error_policy"] = error_policy
    try:
        # Re-validate so CLI values get the same checks as env vars
        settings = Settings(**{**get_settings().model_dump(), **overrides})
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(settings.log_level, fmt=CLI_FORMAT)
    logger.trace(f"CLI settings: {settings.model_dump()}")

    # Every command shares one bus, closed when the command finishes
    bus = create_event_bus(settings)
    ctx.obj = bus
    ctx.call_on_close(bus.close)


app.command()(demo.demo)
app.command()(chat.chat)
