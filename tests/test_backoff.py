"""Tests for ticketloop.backoff."""

from ticketloop.backoff import is_rate_limited, next_backoff
from ticketloop.models.results import AgentOutcome, OutcomeKind
from ticketloop.models.state import BackoffState


def _failure(content):
    return AgentOutcome(OutcomeKind.AGENT_FAILURE, content)


SUCCESS = AgentOutcome(OutcomeKind.SUCCESS, "success")


class TestIsRateLimited:
    def test_markers(self):
        assert is_rate_limited("Server overload, try later")
        assert is_rate_limited("429 Too Many Requests")
        assert is_rate_limited("hit the rate limit")

    def test_case_insensitive(self):
        assert is_rate_limited("RATE LIMIT")

    def test_plain_failure(self):
        assert not is_rate_limited("failure")
        assert not is_rate_limited("")

    def test_custom_markers(self):
        assert is_rate_limited("quota exhausted", markers=("quota",))
        assert not is_rate_limited("rate limit", markers=("quota",))


class TestNextBackoff:
    def test_repeated_rate_limits_double_to_cap(self):
        state = BackoffState()
        delays = []
        for _ in range(6):
            state = next_backoff(state, _failure("rate limit exceeded"))
            delays.append(state.delay_seconds)
        assert delays == [4, 8, 16, 30, 30, 30]

    def test_success_resets(self):
        state = BackoffState(delay_seconds=16)
        state = next_backoff(state, SUCCESS)
        assert state.delay_seconds == 2

    def test_success_then_overload(self):
        state = next_backoff(BackoffState(delay_seconds=16), SUCCESS)
        state = next_backoff(state, _failure("server overload"))
        assert state.delay_seconds == 4

    def test_plain_failure_unchanged(self):
        state = BackoffState(delay_seconds=8)
        assert next_backoff(state, _failure("failure")).delay_seconds == 8

    def test_launch_failure_unchanged(self):
        state = BackoffState(delay_seconds=4)
        outcome = AgentOutcome(OutcomeKind.LAUNCH_FAILURE, "Failed to launch agent: not found")
        assert next_backoff(state, outcome).delay_seconds == 4

    def test_delay_stays_within_bounds(self):
        state = BackoffState()
        outcomes = [_failure("too many requests")] * 10 + [SUCCESS, _failure("x")]
        for outcome in outcomes:
            state = next_backoff(state, outcome)
            assert 2 <= state.delay_seconds <= 30

    def test_custom_base_and_cap(self):
        state = BackoffState(delay_seconds=1, base=1, cap=5)
        for expected in (2, 4, 5):
            state = next_backoff(state, _failure("rate limit"))
            assert state.delay_seconds == expected
        assert next_backoff(state, SUCCESS).delay_seconds == 1

    def test_returns_new_state(self):
        state = BackoffState()
        new = next_backoff(state, _failure("rate limit"))
        assert state.delay_seconds == 2
        assert new is not state
