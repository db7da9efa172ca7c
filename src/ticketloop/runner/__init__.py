"""Run loop and reporting."""

from ticketloop.runner.report import build_report, print_summary, write_report
from ticketloop.runner.sequencer import STATE_HANDLERS, Sequencer

__all__ = [
    "Sequencer",
    "STATE_HANDLERS",
    "build_report",
    "print_summary",
    "write_report",
]
