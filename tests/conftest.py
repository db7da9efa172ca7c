"""Shared test fixtures."""

import sys
import textwrap
import threading

import pytest

from ticketloop.errors import InvalidCommand, LaunchFailure, UserCancellation
from ticketloop.models.core import Ticket
from ticketloop.models.results import AgentOutcome, OutcomeKind
from ticketloop.models.state import RunConfig


@pytest.fixture
def sample_tickets():
    return [
        Ticket(number=1, description="Set up project"),
        Ticket(number=2, description="Add parser"),
        Ticket(number=3, description="Wire CLI"),
    ]


@pytest.fixture
def documents(tmp_path):
    """Specification, tickets and standard prompt in tmp_path/specifications."""
    docs = tmp_path / "specifications"
    docs.mkdir()
    (docs / "specification.md").write_text("# Specification\nBuild a thing.\n")
    (docs / "tickets.md").write_text(
        "# Tickets\n## Ticket 1: Set up project\n## Ticket 2: Add parser\n### Ticket 3: Wire CLI\n"
    )
    (docs / "standard-prompt.md").write_text("You are a careful engineer.\n")
    return docs


@pytest.fixture
def run_config(tmp_path, documents):
    """RunConfig rooted in tmp_path with fast polling and no agent output capture."""
    return RunConfig(
        agent_command="agent --flag",
        specification_path=documents / "specification.md",
        tickets_path=documents / "tickets.md",
        standard_prompt_path=documents / "standard-prompt.md",
        workdir=tmp_path,
        poll_interval=0.01,
    )


@pytest.fixture
def agent_script(tmp_path):
    """Write a Python agent that records its prompt, writes the sentinel, then lingers.

    Usage: agent_script(content="success", delay=0.0, linger=30) -> command line
    """

    def make(content="success", delay=0.0, linger=30.0, write=True, exit_code=0):
        script = tmp_path / "fake_agent.py"
        script.write_text(
            textwrap.dedent(
                f"""
                import sys, time
                from pathlib import Path
                Path("prompt.txt").write_text(sys.argv[-1])
                print("agent output line", flush=True)
                time.sleep({delay})
                if {write!r}:
                    Path("killmenow.tmp").write_text({content!r})
                    Path("killmenow.tmp").replace("killmenow.md")
                    time.sleep({linger})
                sys.exit({exit_code})
                """
            )
        )
        return f"{sys.executable} {script}"

    return make


class FakeSupervisor:
    """Stands in for AgentSupervisor: scripted outcomes, records every launch."""

    def __init__(self, outcomes=None, start_errors=None):
        self.outcomes = list(outcomes or [])
        self.start_errors = dict(start_errors or {})  # ticket number -> exception
        self.started: list[tuple[str, str, int]] = []
        self.active = None
        self.max_active = 0
        self.cancelled = 0
        self.stale_cleared = 0
        self.on_wait = None  # optional hook called inside wait_for_completion

    def clear_stale_sentinel(self):
        self.stale_cleared += 1
        return False

    def start(self, command_line, rendered_prompt, ticket_number=None):
        error = self.start_errors.get(ticket_number)
        if error is not None:
            raise error
        if not command_line.split():
            raise InvalidCommand("Agent command is empty")
        assert self.active is None, "second agent started while one is active"
        self.active = object()
        self.max_active = max(self.max_active, 1)
        self.started.append((command_line, rendered_prompt, ticket_number))
        return self.active

    def wait_for_completion(self, cancel: threading.Event):
        if self.on_wait:
            self.on_wait()
        if cancel.is_set():
            self.active = None
            raise UserCancellation("cancelled")
        self.active = None
        if self.outcomes:
            return self.outcomes.pop(0)
        return AgentOutcome(OutcomeKind.SUCCESS, "success")

    def kill(self):
        self.active = None

    def cancel(self):
        self.cancelled += 1
        self.active = None


@pytest.fixture
def fake_supervisor():
    return FakeSupervisor


@pytest.fixture
def launch_failure():
    return LaunchFailure("agent", "No such file or directory")
