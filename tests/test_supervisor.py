"""Tests for ticketloop.agent.supervisor (real subprocesses, fast polling)."""

import threading
from pathlib import Path

import pytest

from ticketloop.agent.supervisor import AgentSupervisor
from ticketloop.errors import InvalidCommand, LaunchFailure, UserCancellation
from ticketloop.models.results import OutcomeKind


def _cancel_after(seconds):
    cancel = threading.Event()
    timer = threading.Timer(seconds, cancel.set)
    timer.daemon = True
    timer.start()
    return cancel


class TestStart:
    def test_empty_command(self, run_config):
        sup = AgentSupervisor(run_config)
        with pytest.raises(InvalidCommand):
            sup.start("   ", "prompt")
        assert sup.active is None

    def test_missing_executable(self, run_config):
        sup = AgentSupervisor(run_config)
        with pytest.raises(LaunchFailure) as exc:
            sup.start("definitely-not-an-agent-binary --flag", "prompt")
        assert exc.value.executable == "definitely-not-an-agent-binary"
        assert sup.active is None

    def test_null_byte_in_prompt(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        with pytest.raises(LaunchFailure, match="null byte"):
            sup.start(agent_script(), "bad\x00prompt")
        assert sup.active is None

    def test_prompt_is_last_argument(self, run_config, agent_script, tmp_path):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(), "Please work on ticket 4.")
        outcome = sup.wait_for_completion(threading.Event())
        assert outcome.success
        assert (tmp_path / "prompt.txt").read_text() == "Please work on ticket 4."

    def test_refuses_second_process(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(write=False, delay=30), "p")
        try:
            with pytest.raises(RuntimeError):
                sup.start(agent_script(), "p")
        finally:
            sup.kill()
        assert sup.active is None

    def test_output_captured_per_ticket(self, run_config, agent_script, tmp_path):
        run_config.agent_log_dir = Path("logs")
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(), "p", ticket_number=7)
        sup.wait_for_completion(threading.Event())
        assert "agent output line" in (tmp_path / "logs" / "ticket-7.log").read_text()


class TestWaitForCompletion:
    def test_success_kills_lingering_agent(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        process = sup.start(agent_script(content="success", linger=30), "p")
        outcome = sup.wait_for_completion(threading.Event())
        assert outcome.kind is OutcomeKind.SUCCESS
        assert process.poll() is not None  # killed, not awaited
        assert sup.active is None

    def test_sentinel_deleted(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(), "p")
        sup.wait_for_completion(threading.Event())
        assert not run_config.sentinel_path.exists()

    def test_failure_content(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        process = sup.start(agent_script(content="failure", linger=30), "p")
        outcome = sup.wait_for_completion(threading.Event())
        assert outcome.kind is OutcomeKind.AGENT_FAILURE
        assert outcome.content == "failure"
        assert process.poll() is not None

    def test_success_case_insensitive(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(content="SUCCESS\n"), "p")
        assert sup.wait_for_completion(threading.Event()).success

    def test_nonzero_exit_ignored_when_sentinel_says_success(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(content="success", linger=0, exit_code=3), "p")
        assert sup.wait_for_completion(threading.Event()).success

    def test_late_sentinel(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(delay=0.3), "p")
        assert sup.wait_for_completion(threading.Event()).success

    def test_cancel_kills_agent(self, run_config, agent_script):
        sup = AgentSupervisor(run_config)
        process = sup.start(agent_script(write=False, delay=30), "p")
        with pytest.raises(UserCancellation):
            sup.wait_for_completion(_cancel_after(0.2))
        assert process.poll() is not None
        assert sup.active is None

    def test_early_exit_warns_and_keeps_polling(self, run_config, agent_script, capsys):
        sup = AgentSupervisor(run_config)
        sup.start(agent_script(write=False, exit_code=1), "p")
        with pytest.raises(UserCancellation):
            sup.wait_for_completion(_cancel_after(0.5))
        out = capsys.readouterr().out
        assert out.count("before writing killmenow.md") == 1


class TestSentinelFile:
    def test_read_absent(self, run_config):
        assert AgentSupervisor(run_config).read_sentinel() is None

    def test_clear_stale(self, run_config, capsys):
        run_config.sentinel_path.write_text("success")
        sup = AgentSupervisor(run_config)
        assert sup.clear_stale_sentinel() is True
        assert not run_config.sentinel_path.exists()
        assert "stale" in capsys.readouterr().out

    def test_clear_stale_absent(self, run_config):
        assert AgentSupervisor(run_config).clear_stale_sentinel() is False

    def test_kill_without_process(self, run_config):
        AgentSupervisor(run_config).kill()  # Should not raise
