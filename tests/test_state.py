"""
Tests for the state tracker: transitions, last check and last change.
"""

import pytest

from monitoring.probe import ProbeOutcome
from monitoring.state import StatusRecord, StatusTracker, TransitionInfo


OK = ProbeOutcome.ok()
REFUSED = ProbeOutcome.failure("connection refused")
TIMED_OUT = ProbeOutcome.failure("Timed out.")
NO_REASON = ProbeOutcome.failure("")


def test_fresh_tracker_has_empty_record(clock):
    tracker = StatusTracker(clock=clock)

    assert tracker.snapshot() == StatusRecord()
    assert clock.reads == []


def test_first_outcome_is_always_a_transition(clock):
    tracker = StatusTracker(clock=clock)

    transition = tracker.record_outcome(OK)

    assert transition == TransitionInfo(changed=True, new_status="OK - successful ping")
    record = tracker.snapshot()
    assert record.status_text == "OK - successful ping"
    assert record.last_check == clock.reads[0]
    assert record.last_change == clock.reads[0]


def test_repeated_outcome_only_moves_last_check(clock):
    tracker = StatusTracker(clock=clock)
    tracker.record_outcome(REFUSED)
    first = tracker.snapshot()

    transition = tracker.record_outcome(REFUSED)

    assert transition == TransitionInfo(changed=False)
    second = tracker.snapshot()
    assert second.status_text == first.status_text
    assert second.last_change == first.last_change
    assert second.last_check > first.last_check


def test_different_reasons_are_different_statuses(clock):
    tracker = StatusTracker(clock=clock)
    tracker.record_outcome(REFUSED)

    transition = tracker.record_outcome(TIMED_OUT)

    assert transition.changed
    assert transition.new_status == "ERROR - unable to perform the ping (Timed out.)"


def test_snapshot_is_not_mutated_by_later_outcomes(clock):
    tracker = StatusTracker(clock=clock)
    tracker.record_outcome(OK)
    before = tracker.snapshot()

    tracker.record_outcome(REFUSED)

    assert before.status_text == "OK - successful ping"
    assert tracker.snapshot() is not before


@pytest.mark.parametrize(
    "sequence",
    [
        [OK, OK, OK],
        [OK, REFUSED, REFUSED, OK],
        [REFUSED, TIMED_OUT, TIMED_OUT, NO_REASON, NO_REASON, OK, OK],
        [NO_REASON, OK, NO_REASON, OK],
    ],
)
def test_last_change_moves_exactly_on_status_changes(clock, sequence):
    tracker = StatusTracker(clock=clock)
    previous_text = None
    previous_change = None

    for outcome in sequence:
        transition = tracker.record_outcome(outcome)
        record = tracker.snapshot()
        expected_change = outcome.status_text != previous_text

        assert transition.changed is expected_change
        assert record.last_check == clock.reads[-1]
        if expected_change:
            assert record.last_change == clock.reads[-1]
        else:
            assert record.last_change == previous_change

        previous_text = record.status_text
        previous_change = record.last_change

    assert len(clock.reads) == len(sequence)
