"""State models for the run loop."""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from subprocess import Popen
from typing import Optional

from ticketloop.constants import (
    BASE_DELAY,
    DEFAULT_AGENT_COMMAND,
    MAX_DELAY,
    POLL_INTERVAL,
    RATE_LIMIT_MARKERS,
    SENTINEL_FILE,
)
from ticketloop.models.core import Ticket


class RunPhase(Enum):
    """States in the run loop state machine."""

    IDLE = auto()  # Waiting for confirmation
    RUNNING = auto()  # Agent process active for the current ticket
    COOLING_DOWN = auto()  # Waiting delay_seconds before the next ticket
    DONE = auto()  # Terminal: every ticket processed
    CANCELLED = auto()  # Terminal: operator aborted


@dataclass(frozen=True)
class BackoffState:
    """Cool-down delay between tickets."""

    delay_seconds: int = BASE_DELAY
    base: int = BASE_DELAY
    cap: int = MAX_DELAY


@dataclass
class RunConfig:
    """Everything the sequencer needs, resolved once before the run starts."""

    agent_command: str = DEFAULT_AGENT_COMMAND
    specification_path: Path = Path("specifications/specification.md")
    tickets_path: Path = Path("specifications/tickets.md")
    standard_prompt_path: Path = Path("specifications/standard-prompt.md")
    project: Optional[str] = None
    workdir: Path = field(default_factory=Path.cwd)
    sentinel_file: str = SENTINEL_FILE
    poll_interval: float = POLL_INTERVAL
    base_delay: int = BASE_DELAY
    max_delay: int = MAX_DELAY
    rate_limit_markers: tuple[str, ...] = RATE_LIMIT_MARKERS
    prompt_template: Optional[str] = None
    agent_log_dir: Optional[Path] = None
    debug: bool = False

    @property
    def sentinel_path(self) -> Path:
        return self.workdir / self.sentinel_file


@dataclass
class RunState:
    """Mutable state owned by the sequencer."""

    tickets: list[Ticket]
    backoff: BackoffState
    current_index: int = 0
    phase: RunPhase = RunPhase.IDLE
    active_process: Optional[Popen] = None
    started_at: Optional[float] = None
    finished_at: Optional[float] = None

    @property
    def current_delay_seconds(self) -> int:
        return self.backoff.delay_seconds

    @property
    def current_ticket(self) -> Optional[Ticket]:
        if 0 <= self.current_index < len(self.tickets):
            return self.tickets[self.current_index]
        return None
