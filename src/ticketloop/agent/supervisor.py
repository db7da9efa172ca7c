"""Agent process supervisor.

Launches one agent process at a time and decides when its work is finished.
The agent's exit status is not trusted: the only completion signal is a
sentinel file the agent writes into the working directory as its last action.
Once the file shows up it is read, deleted and classified, and the process is
killed whether or not it has exited on its own.
"""

import subprocess
import threading
from pathlib import Path
from typing import IO, Optional

from ticketloop.errors import InvalidCommand, LaunchFailure, UserCancellation
from ticketloop.models.results import AgentOutcome
from ticketloop.models.state import RunConfig
from ticketloop.ui.output import log, warn
from ticketloop.utils.debug import debug_log

KILL_WAIT_TIMEOUT = 5


class AgentSupervisor:
    """Run the agent for one ticket and watch for its sentinel file."""

    def __init__(self, config: RunConfig):
        self.config = config
        self._process: Optional[subprocess.Popen] = None
        self._output: Optional[IO] = None
        self._exit_noted = False
        # Re-entrant: cancel() may run from a signal handler on the main thread
        self._lock = threading.RLock()

    @property
    def active(self) -> Optional[subprocess.Popen]:
        return self._process

    @property
    def sentinel_path(self) -> Path:
        return self.config.sentinel_path

    def clear_stale_sentinel(self) -> bool:
        """Remove a sentinel left behind by an earlier run. Returns True if one was removed."""
        if not self.sentinel_path.exists():
            return False
        warn(f"Removing stale {self.config.sentinel_file} from a previous run")
        self._remove_sentinel()
        return True

    def _open_output(self, ticket_number: Optional[int]) -> Optional[IO]:
        """Per-ticket agent output file. Kept for the operator, never parsed."""
        if self.config.agent_log_dir is None or ticket_number is None:
            return None
        log_dir = Path(self.config.agent_log_dir)
        if not log_dir.is_absolute():
            log_dir = self.config.workdir / log_dir
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            return open(log_dir / f"ticket-{ticket_number}.log", "w")
        except OSError as e:
            warn(f"Cannot write agent output to {log_dir}: {e}")
            return None

    def start(
        self, command_line: str, rendered_prompt: str, ticket_number: Optional[int] = None
    ) -> subprocess.Popen:
        """Launch the agent with the prompt as its final argument. Does not wait for it."""
        tokens = command_line.split()
        if not tokens:
            raise InvalidCommand("Agent command is empty")

        with self._lock:
            if self._process is not None:
                raise RuntimeError("An agent process is already running")

            argv = tokens + [rendered_prompt]
            output = self._open_output(ticket_number)
            debug_log(
                self.config,
                f"Launching agent (ticket {ticket_number})",
                {"argv": tokens, "prompt_chars": len(rendered_prompt), "cwd": str(self.config.workdir)},
            )
            try:
                process = subprocess.Popen(
                    argv,
                    cwd=self.config.workdir,
                    stdin=subprocess.DEVNULL,
                    stdout=output if output else subprocess.DEVNULL,
                    stderr=subprocess.STDOUT if output else subprocess.DEVNULL,
                )
            except (OSError, ValueError) as e:
                # ValueError: argv the OS cannot take, e.g. an embedded null byte
                if output:
                    output.close()
                raise LaunchFailure(tokens[0], getattr(e, "strerror", None) or str(e)) from e

            self._process = process
            self._output = output
            self._exit_noted = False

        log(f"Agent started with PID {process.pid}: {tokens[0]} ({len(argv) - 1} args)")
        return process

    def read_sentinel(self) -> Optional[str]:
        """Sentinel content if the file exists, else None."""
        if not self.sentinel_path.is_file():
            return None
        try:
            return self.sentinel_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            # Present but unreadable still counts as a (failed) completion
            return f"unreadable sentinel: {e}"

    def _remove_sentinel(self) -> None:
        try:
            self.sentinel_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            warn(f"Could not delete {self.config.sentinel_file}: {e}")

    def _note_early_exit(self) -> None:
        """Warn once if the agent exited without writing the sentinel. Polling continues."""
        process = self._process
        if process is None or self._exit_noted:
            return
        code = process.poll()
        if code is not None:
            self._exit_noted = True
            warn(
                f"Agent exited with code {code} before writing {self.config.sentinel_file}; "
                "still waiting (Ctrl-C to abort)"
            )

    def wait_for_completion(self, cancel: threading.Event) -> AgentOutcome:
        """Poll for the sentinel file until it appears or the run is cancelled.

        Polls run back to back on this thread, so they never overlap.
        Raises UserCancellation if cancel is set; the sentinel is not checked again.
        """
        while True:
            if cancel.is_set():
                self.kill()
                raise UserCancellation("Cancelled while waiting for the agent")

            content = self.read_sentinel()
            if content is not None:
                self._remove_sentinel()
                outcome = AgentOutcome.from_sentinel(content)
                debug_log(self.config, f"Sentinel found ({outcome.kind.value})", content)
                # Termination is never awaited: stop the agent even on success
                self.kill()
                return outcome

            self._note_early_exit()
            cancel.wait(self.config.poll_interval)

    def kill(self) -> None:
        """Force-kill the active process (if any) and release its output file."""
        with self._lock:
            process, self._process = self._process, None
            output, self._output = self._output, None
        if process is not None:
            if process.poll() is None:
                log(f"Terminating agent process {process.pid}")
            process.kill()
            try:
                process.wait(timeout=KILL_WAIT_TIMEOUT)
            except subprocess.TimeoutExpired:
                warn(f"Agent process {process.pid} did not exit after kill")
        if output is not None:
            output.close()

    def cancel(self) -> None:
        """Abort immediately: kill whatever is running."""
        self.kill()
