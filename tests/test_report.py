"""Tests for ticketloop.runner.report."""

import json

from ticketloop.models.core import Ticket
from ticketloop.models.results import RunReport, TicketSnapshot
from ticketloop.models.state import BackoffState, RunPhase, RunState
from ticketloop.runner.report import build_report, print_summary, status_icon, write_report


def _state(tickets, phase=RunPhase.DONE):
    return RunState(
        tickets=tickets,
        backoff=BackoffState(delay_seconds=8),
        current_index=len(tickets),
        phase=phase,
        started_at=1000.0,
        finished_at=1090.0,
    )


def _snap(**kw):
    fields = dict(number=1, description="A", completed=False, failed=False, start_time=None, end_time=None)
    fields.update(kw)
    return TicketSnapshot(**fields)


class TestBuildReport:
    def test_copies_state(self):
        tickets = [
            Ticket(1, "A", completed=True, start_time=1000.0, end_time=1030.0),
            Ticket(2, "B", failed=True, start_time=1032.0, end_time=1090.0, error="failure"),
        ]
        report = build_report(_state(tickets))
        assert report.phase == "done"
        assert report.current_delay_seconds == 8
        assert report.succeeded == 1
        assert report.failed == 1
        assert report.pending == 0
        assert report.elapsed == 90.0
        assert report.tickets[0].duration == 30.0

    def test_snapshot_is_detached(self):
        tickets = [Ticket(1, "A")]
        report = build_report(_state(tickets, RunPhase.RUNNING))
        tickets[0].completed = True
        assert not report.tickets[0].completed

    def test_elapsed_none_while_running(self):
        state = _state([Ticket(1, "A")], RunPhase.RUNNING)
        state.finished_at = None
        assert build_report(state).elapsed is None


class TestStatusIcon:
    def test_icons(self):
        assert "✓" in status_icon(_snap(completed=True))
        assert "✗" in status_icon(_snap(failed=True))
        assert "~" in status_icon(_snap(start_time=1.0))
        assert status_icon(_snap()) == "○"


class TestPrintSummary:
    def test_all_completed(self, capsys):
        report = RunReport(
            phase="done",
            current_index=2,
            current_delay_seconds=2,
            tickets=[_snap(completed=True, start_time=0.0, end_time=5.0), _snap(number=2, completed=True)],
            started_at=0.0,
            finished_at=65.0,
        )
        print_summary(report)
        out = capsys.readouterr().out
        assert "Successful:\033[0m 2" in out
        assert "All 2 tickets completed" in out
        assert "1m 5s" in out

    def test_partial_failure_shows_error(self, capsys):
        report = RunReport(
            phase="done",
            current_index=2,
            current_delay_seconds=2,
            tickets=[_snap(completed=True), _snap(number=2, failed=True, error="rate limit hit")],
        )
        print_summary(report)
        out = capsys.readouterr().out
        assert "rate limit hit" in out
        assert "Completed 1/2 tickets" in out

    def test_all_failed(self, capsys):
        report = RunReport(phase="done", current_index=1, current_delay_seconds=2, tickets=[_snap(failed=True)])
        print_summary(report)
        assert "All 1 tickets failed" in capsys.readouterr().out

    def test_cancelled(self, capsys):
        report = RunReport(
            phase="cancelled",
            current_index=1,
            current_delay_seconds=2,
            tickets=[_snap(completed=True), _snap(number=2, start_time=1.0), _snap(number=3)],
        )
        print_summary(report)
        out = capsys.readouterr().out
        assert "Run cancelled" in out
        assert "Not run:\033[0m 2" in out
        assert "Cancelled after 1/3 tickets" in out


class TestWriteReport:
    def test_json(self, tmp_path):
        report = build_report(_state([Ticket(1, "A", completed=True, start_time=1000.0, end_time=1001.0)]))
        path = tmp_path / "out" / "run.json"
        write_report(report, path)
        data = json.loads(path.read_text())
        assert data["phase"] == "done"
        assert data["total"] == 1
        assert data["succeeded"] == 1
        assert data["tickets"][0]["duration"] == 1.0
        assert data["elapsed"] == 90.0
