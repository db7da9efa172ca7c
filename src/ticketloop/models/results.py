"""Result models for agent runs and reports."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OutcomeKind(Enum):
    """How a single ticket attempt ended."""

    SUCCESS = "success"
    AGENT_FAILURE = "agent_failure"  # Sentinel written without "success"
    INVALID_COMMAND = "invalid_command"
    LAUNCH_FAILURE = "launch_failure"
    DOCUMENT_UNREADABLE = "document_unreadable"
    INVALID_TEMPLATE = "invalid_template"


@dataclass
class AgentOutcome:
    """Outcome of one agent run, classified from the sentinel file content."""

    kind: OutcomeKind
    content: str = ""

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def from_sentinel(cls, content: str) -> "AgentOutcome":
        kind = OutcomeKind.SUCCESS if "success" in content.lower() else OutcomeKind.AGENT_FAILURE
        return cls(kind=kind, content=content)


@dataclass(frozen=True)
class TicketSnapshot:
    """Read-only view of a ticket for rendering."""

    number: int
    description: str
    completed: bool
    failed: bool
    start_time: Optional[float]
    end_time: Optional[float]
    error: Optional[str] = None

    @property
    def duration(self) -> Optional[float]:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "description": self.description,
            "completed": self.completed,
            "failed": self.failed,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "error": self.error,
        }


@dataclass(frozen=True)
class RunReport:
    """Snapshot of the whole run: tickets, phase, delay and totals."""

    phase: str
    current_index: int
    current_delay_seconds: int
    tickets: list[TicketSnapshot] = field(default_factory=list)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for t in self.tickets if t.completed)

    @property
    def failed(self) -> int:
        return sum(1 for t in self.tickets if t.failed)

    @property
    def pending(self) -> int:
        return sum(1 for t in self.tickets if not t.completed and not t.failed)

    @property
    def elapsed(self) -> Optional[float]:
        if self.started_at is None:
            return None
        if self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "current_index": self.current_index,
            "current_delay_seconds": self.current_delay_seconds,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "pending": self.pending,
            "total": len(self.tickets),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "elapsed": self.elapsed,
            "tickets": [t.to_dict() for t in self.tickets],
        }
