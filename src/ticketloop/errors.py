"""Exceptions raised by the ticket engine."""

from typing import Optional


class TicketloopError(Exception):
    """Base ticketloop error."""


class DocumentUnreadable(TicketloopError):
    """A project document (specification, tickets, prompt) is missing or unreadable."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        message = f"Cannot read {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason


class InvalidCommand(TicketloopError):
    """The agent command is empty or cannot be split into an executable."""


class LaunchFailure(TicketloopError):
    """The OS refused to spawn the agent process."""

    def __init__(self, executable: str, reason: str) -> None:
        super().__init__(f"Failed to launch {executable}: {reason}")
        self.executable = executable
        self.reason = reason


class UserCancellation(TicketloopError):
    """The operator aborted the run."""


class ConfigError(TicketloopError):
    """A setting has the wrong type or an out-of-range value, or the prompt template is malformed."""
