"""Enums for the event bus.

Kept separate from ``bus.py`` so settings can reference them without
importing the bus itself.
"""

from enum import StrEnum


class ErrorPolicy(StrEnum):
    """How ``publish`` reacts to a listener raising an exception."""

    ISOLATE = "isolate"  # report the failure, keep dispatching
    FAIL_FAST = "fail_fast"  # abort the round, raise ListenerError
