"""Run loop state machine: one ticket at a time, cool-down in between."""

import threading
import time
from typing import Callable, Optional

from ticketloop.agent.prompt import render_prompt
from ticketloop.agent.supervisor import AgentSupervisor
from ticketloop.backoff import next_backoff
from ticketloop.errors import (
    ConfigError,
    DocumentUnreadable,
    InvalidCommand,
    LaunchFailure,
    UserCancellation,
)
from ticketloop.models.core import Ticket
from ticketloop.models.results import AgentOutcome, OutcomeKind, RunReport
from ticketloop.models.state import BackoffState, RunConfig, RunPhase, RunState
from ticketloop.runner.report import build_report
from ticketloop.ui.output import NC, YELLOW, error, log, rule, success, warn
from ticketloop.ui.timer import LiveTimer
from ticketloop.utils.debug import debug_log
from ticketloop.utils.formatting import fmt_duration, truncate

TERMINAL_PHASES = (RunPhase.DONE, RunPhase.CANCELLED)


class Sequencer:
    """Owns the ticket list and drives the agent supervisor through it.

    Transitions:
        IDLE --confirm--> RUNNING (or DONE with no tickets)
        RUNNING --complete--> COOLING_DOWN | DONE
        COOLING_DOWN --timer_expired--> RUNNING
        any --cancel--> CANCELLED
    """

    def __init__(
        self,
        config: RunConfig,
        tickets: list[Ticket],
        supervisor: Optional[AgentSupervisor] = None,
    ):
        self.config = config
        self.supervisor = supervisor or AgentSupervisor(config)
        self.state = RunState(
            tickets=tickets,
            backoff=BackoffState(
                delay_seconds=config.base_delay, base=config.base_delay, cap=config.max_delay
            ),
        )
        self._cancel = threading.Event()
        # Set when a ticket fails before its agent could be launched
        self._pending_outcome: Optional[AgentOutcome] = None

    @property
    def phase(self) -> RunPhase:
        return self.state.phase

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _require(self, phase: RunPhase, action: str) -> None:
        if self.state.phase is not phase:
            raise RuntimeError(f"Cannot {action} in phase {self.state.phase.name}")

    def _finish(self, phase: RunPhase) -> RunPhase:
        self.state.phase = phase
        self.state.active_process = None
        self.state.finished_at = time.time()
        return phase

    def _start_current(self) -> RunPhase:
        """Stamp the current ticket and launch its agent."""
        ticket = self.state.tickets[self.state.current_index]
        total = len(self.state.tickets)

        print()
        rule()
        log(f"Ticket {ticket.number} ({self.state.current_index + 1}/{total}): {YELLOW}{ticket.description}{NC}")
        rule()

        ticket.start_time = time.time()
        self.state.phase = RunPhase.RUNNING
        self._pending_outcome = None
        try:
            prompt = render_prompt(self.config, ticket)
            debug_log(self.config, f"Prompt for ticket {ticket.number}", prompt)
            self.state.active_process = self.supervisor.start(
                self.config.agent_command, prompt, ticket_number=ticket.number
            )
        except DocumentUnreadable as e:
            self._pending_outcome = AgentOutcome(OutcomeKind.DOCUMENT_UNREADABLE, str(e))
        except ConfigError as e:
            self._pending_outcome = AgentOutcome(OutcomeKind.INVALID_TEMPLATE, str(e))
        except InvalidCommand as e:
            self._pending_outcome = AgentOutcome(OutcomeKind.INVALID_COMMAND, str(e))
        except LaunchFailure as e:
            self._pending_outcome = AgentOutcome(OutcomeKind.LAUNCH_FAILURE, str(e))
        if self._pending_outcome:
            error(self._pending_outcome.content)
        return self.state.phase

    def confirm(self) -> RunPhase:
        """Start the run with the first ticket."""
        self._require(RunPhase.IDLE, "confirm")
        self.state.started_at = time.time()
        self.state.current_index = 0
        self.supervisor.clear_stale_sentinel()
        if not self.state.tickets:
            warn("No tickets to run")
            return self._finish(RunPhase.DONE)
        return self._start_current()

    def complete(self, outcome: AgentOutcome) -> RunPhase:
        """Record the outcome of the current ticket and move on."""
        self._require(RunPhase.RUNNING, "complete")
        ticket = self.state.tickets[self.state.current_index]
        ticket.end_time = time.time()
        if outcome.success:
            ticket.completed = True
        else:
            ticket.failed = True
            ticket.error = truncate(outcome.content) if outcome.content else outcome.kind.value
        self.state.active_process = None
        self._pending_outcome = None

        elapsed = fmt_duration(ticket.duration or 0)
        if outcome.success:
            success(f"Ticket {ticket.number} completed in {elapsed}")
        else:
            error(f"Ticket {ticket.number} failed in {elapsed}: {ticket.error}")

        previous = self.state.backoff
        self.state.backoff = next_backoff(previous, outcome, self.config.rate_limit_markers)
        if self.state.backoff.delay_seconds > previous.delay_seconds:
            warn(f"Rate limit detected, cool-down raised to {self.state.backoff.delay_seconds}s")
        debug_log(
            self.config,
            f"Ticket {ticket.number} outcome",
            {"kind": outcome.kind.value, "delay_seconds": self.state.backoff.delay_seconds},
        )

        self.state.current_index += 1
        if self.state.current_index < len(self.state.tickets):
            self.state.phase = RunPhase.COOLING_DOWN
            return self.state.phase
        return self._finish(RunPhase.DONE)

    def timer_expired(self) -> RunPhase:
        """Cool-down over: start the next ticket."""
        self._require(RunPhase.COOLING_DOWN, "start next ticket")
        return self._start_current()

    def cancel(self) -> None:
        """Abort the run. Safe to call from a signal handler or another thread."""
        self._cancel.set()
        self.supervisor.cancel()

    def _mark_cancelled(self) -> None:
        self.supervisor.cancel()
        if self.state.phase not in TERMINAL_PHASES:
            self._finish(RunPhase.CANCELLED)
            warn("Run cancelled")

    def snapshot(self) -> RunReport:
        return build_report(self.state)

    def run(self) -> RunReport:
        """Drive the state machine until DONE or CANCELLED."""
        try:
            while self.state.phase not in TERMINAL_PHASES:
                if self._cancel.is_set():
                    raise UserCancellation("Run cancelled")
                handler = STATE_HANDLERS.get(self.state.phase)
                if handler is None:
                    raise RuntimeError(f"Unknown phase: {self.state.phase}")
                handler(self)
        except UserCancellation:
            self._mark_cancelled()
        return self.snapshot()


def handle_idle(seq: Sequencer) -> RunPhase:
    return seq.confirm()


def handle_running(seq: Sequencer) -> RunPhase:
    """Wait for the sentinel (or use the launch error) and record the outcome."""
    outcome = seq._pending_outcome
    if outcome is None:
        ticket = seq.state.tickets[seq.state.current_index]
        total_start = seq.state.started_at or time.time()
        with LiveTimer(f"Ticket {ticket.number}: agent running...", total_start, print_final=False):
            outcome = seq.supervisor.wait_for_completion(seq._cancel)
    return seq.complete(outcome)


def handle_cooling_down(seq: Sequencer) -> RunPhase:
    """Wait out the cool-down; a cancel request ends the wait early."""
    delay = seq.state.current_delay_seconds
    total_start = seq.state.started_at or time.time()
    with LiveTimer(
        f"Cooling down ({delay}s)...",
        total_start,
        print_final=False,
        deadline=time.time() + delay,
    ):
        if seq._cancel.wait(delay):
            raise UserCancellation("Cancelled during cool-down")
    return seq.timer_expired()


# Phase handler dispatch table
STATE_HANDLERS: dict[RunPhase, Callable[[Sequencer], RunPhase]] = {
    RunPhase.IDLE: handle_idle,
    RunPhase.RUNNING: handle_running,
    RunPhase.COOLING_DOWN: handle_cooling_down,
}
