"""Run snapshots and the final summary."""

import json
from pathlib import Path

from ticketloop.models.results import RunReport, TicketSnapshot
from ticketloop.models.state import RunState
from ticketloop.ui.output import BLUE, GREEN, NC, RED, YELLOW, error, rule, success, warn
from ticketloop.utils.formatting import fmt_clock, fmt_duration


def build_report(state: RunState) -> RunReport:
    """Copy the run state into an immutable report."""
    return RunReport(
        phase=state.phase.name.lower(),
        current_index=state.current_index,
        current_delay_seconds=state.current_delay_seconds,
        tickets=[
            TicketSnapshot(
                number=t.number,
                description=t.description,
                completed=t.completed,
                failed=t.failed,
                start_time=t.start_time,
                end_time=t.end_time,
                error=t.error,
            )
            for t in state.tickets
        ],
        started_at=state.started_at,
        finished_at=state.finished_at,
    )


def status_icon(ticket: TicketSnapshot) -> str:
    if ticket.completed:
        return f"{GREEN}✓{NC}"
    if ticket.failed:
        return f"{RED}✗{NC}"
    if ticket.start_time is not None:
        return f"{YELLOW}~{NC}"  # Started, interrupted before an outcome
    return "○"


def print_summary(report: RunReport) -> None:
    """Print per-ticket status, counts and total elapsed time."""
    print()
    rule()
    print(f"Run {report.phase}")
    rule()

    for t in report.tickets:
        duration = fmt_duration(t.duration) if t.duration is not None else "-"
        line = f"  {status_icon(t)} Ticket {t.number}: {t.description}"
        print(f"{line}  {BLUE}{fmt_clock(t.start_time)} {duration}{NC}")
        if t.failed and t.error:
            print(f"      {RED}{t.error}{NC}")

    total = len(report.tickets)
    elapsed = fmt_duration(report.elapsed) if report.elapsed is not None else "-"
    print()
    print(f"{GREEN}Successful:{NC} {report.succeeded}")
    print(f"{RED}Failed:{NC} {report.failed}")
    if report.pending:
        print(f"{YELLOW}Not run:{NC} {report.pending}")
    print(f"Total: {total}  ({elapsed})")

    if report.phase == "cancelled":
        warn(f"Cancelled after {report.succeeded + report.failed}/{total} tickets")
    elif report.failed and report.failed < total:
        warn(f"Completed {report.succeeded}/{total} tickets")
    elif report.failed:
        error(f"All {total} tickets failed")
    elif total:
        success(f"All {total} tickets completed! ({elapsed})")


def write_report(report: RunReport, path: Path) -> None:
    """Write the report as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report.to_dict(), f, indent=2)
        f.write("\n")
