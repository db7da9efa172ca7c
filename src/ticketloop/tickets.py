"""Ticket extraction from markdown headings.

A ticket heading is any markdown heading whose text starts with the word
"ticket", optionally followed by a number and a separator:

    ## Ticket 1: Set up the project
    ### ticket #2 - Add the parser
    # TICKET 3 — Wire the CLI
    ## Ticket: Numbered automatically

Declared numbers are kept when they are positive and unique within the
document. Missing, zero or duplicate numbers are replaced by the next free
position-based number. The result is sorted by number.
"""

import re
from pathlib import Path

from ticketloop.models.core import Ticket
from ticketloop.utils.files import read_document

TICKET_HEADING_RE = re.compile(
    r"""
    ^\#+\s*             # one or more heading markers
    ticket(?![a-z])     # the keyword, not "tickets" or "ticketing"
    \s*\#?\s*           # optional "#" before the number
    (?P<number>\d+)?    # declared number
    \s*(?:[:\-–—]\s*)?  # one optional separator
    (?P<description>.*)$
    """,
    re.IGNORECASE | re.VERBOSE,
)


def _next_free(candidate: int, used: set[int]) -> int:
    while candidate in used:
        candidate += 1
    return candidate


def parse_tickets(text: str) -> list[Ticket]:
    """Parse ticket headings from markdown text. Never fails on content."""
    tickets: list[Ticket] = []
    used: set[int] = set()

    for raw_line in text.splitlines():
        line = raw_line.strip()
        match = TICKET_HEADING_RE.match(line)
        if not match:
            continue

        declared = int(match.group("number")) if match.group("number") else 0
        if declared > 0 and declared not in used:
            number = declared
        else:
            number = _next_free(len(tickets) + 1, used)
        used.add(number)

        tickets.append(Ticket(number=number, description=match.group("description").strip()))

    # sorted() is stable, so equal numbers would keep document order
    return sorted(tickets, key=lambda t: t.number)


def load_tickets(path: Path) -> list[Ticket]:
    """Read and parse a tickets document."""
    return parse_tickets(read_document(path))


def render_tickets(tickets: list[Ticket]) -> str:
    """Canonical markdown dump; parse_tickets() on it gives back the same list."""
    lines = []
    for t in tickets:
        heading = f"## Ticket {t.number}: {t.description}" if t.description else f"## Ticket {t.number}"
        lines.append(heading)
    return "\n".join(lines) + ("\n" if lines else "")
