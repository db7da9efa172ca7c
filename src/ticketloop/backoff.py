"""Cool-down policy between tickets."""

from dataclasses import replace
from typing import Iterable

from ticketloop.constants import RATE_LIMIT_MARKERS
from ticketloop.models.results import AgentOutcome
from ticketloop.models.state import BackoffState


def is_rate_limited(content: str, markers: Iterable[str] = RATE_LIMIT_MARKERS) -> bool:
    """True if the text mentions overload or rate limiting (case-insensitive)."""
    lower = content.lower()
    return any(m.lower() in lower for m in markers)


def next_backoff(
    current: BackoffState,
    outcome: AgentOutcome,
    markers: Iterable[str] = RATE_LIMIT_MARKERS,
) -> BackoffState:
    """Return the delay to wait before the next ticket.

    Success resets to base. A rate-limited failure doubles the delay up to cap.
    Any other failure leaves it unchanged.
    """
    if outcome.success:
        return replace(current, delay_seconds=current.base)
    if is_rate_limited(outcome.content, markers):
        doubled = max(current.delay_seconds, current.base) * 2
        return replace(current, delay_seconds=min(doubled, current.cap))
    return current
