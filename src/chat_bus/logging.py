"""Logging configuration for the chat bus."""

import logging
import sys

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"


class InterceptHandler(logging.Handler):
    """Intercept standard logging messages toward loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str, fmt: str = CONSOLE_FORMAT) -> None:
    """Configure loguru as the single logging backend.

    Args:
        log_level: Log level to use (from settings, which handles env vars and CLI args).
        fmt: loguru format string for the stderr sink.
    """
    log_level = log_level.upper()

    logger.remove()  # Remove default handler
    logger.add(sys.stderr, format=fmt, level=log_level, colorize=True)
    logger.enable("chat_bus")

    # Listeners may use the stdlib logging module
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("asyncio").setLevel(log_level)

    logger.debug(f"Log level set to: {log_level}")
