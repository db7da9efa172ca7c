"""Core domain models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Ticket:
    """A single unit of work parsed from the tickets document."""

    number: int
    description: str
    completed: bool = False
    failed: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    error: Optional[str] = None  # Short failure reason for the report

    @property
    def processed(self) -> bool:
        return self.completed or self.failed

    @property
    def duration(self) -> Optional[float]:
        """Seconds between start and end, None until both are recorded."""
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
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Ticket":
        return cls(
            number=d["number"],
            description=d.get("description", ""),
            completed=d.get("completed", False),
            failed=d.get("failed", False),
            start_time=d.get("start_time"),
            end_time=d.get("end_time"),
            error=d.get("error"),
        )
