"""Data models for ticketloop."""

from ticketloop.models.core import Ticket
from ticketloop.models.results import AgentOutcome, OutcomeKind, RunReport, TicketSnapshot
from ticketloop.models.state import BackoffState, RunConfig, RunPhase, RunState

__all__ = [
    # Core
    "Ticket",
    # Results
    "AgentOutcome",
    "OutcomeKind",
    "RunReport",
    "TicketSnapshot",
    # State
    "BackoffState",
    "RunConfig",
    "RunPhase",
    "RunState",
]
