"""UI components for terminal output."""

from ticketloop.ui.output import (
    BLUE,
    GRAY,
    GREEN,
    MAGENTA,
    NC,
    RED,
    YELLOW,
    error,
    log,
    rule,
    success,
    warn,
)
from ticketloop.ui.timer import LiveTimer

__all__ = [
    # Colors
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
    "GRAY",
    "MAGENTA",
    "NC",
    # Functions
    "log",
    "success",
    "warn",
    "error",
    "rule",
    # Classes
    "LiveTimer",
]
