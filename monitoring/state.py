"""
============================================================================
DATABASE LIVENESS MONITOR - STATE TRACKER
============================================================================
Holds the single status record of the process and decides when the
reported status has changed.

The record is immutable. ``record_outcome`` builds a new one and swaps
it in with a single assignment, with no ``await`` in between, so a
status request running on the same event loop always reads a complete
record, never a half-updated one.
============================================================================
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from monitoring.probe import ProbeOutcome
from utils.helpers import TimeHelper


@dataclass(frozen=True)
class StatusRecord:
    """
    Last known status of the monitored database.

    All fields are ``None`` until the first probe completes.
    """
    status_text: Optional[str] = None
    last_check: Optional[datetime] = None
    last_change: Optional[datetime] = None


@dataclass(frozen=True)
class TransitionInfo:
    """Whether recording an outcome changed the reported status."""
    changed: bool
    new_status: Optional[str] = None


class StatusTracker:
    """
    Owner of the process-wide ``StatusRecord``.

    Parameters
    ----------
    clock : Callable[[], datetime]
        Source of the current time; defaults to UTC now.
    """

    def __init__(self, clock: Callable[[], datetime] = TimeHelper.get_utc_now):
        self._clock = clock
        self._record = StatusRecord()

    def snapshot(self) -> StatusRecord:
        """Return the latest committed record."""
        return self._record

    def record_outcome(self, outcome: ProbeOutcome) -> TransitionInfo:
        """
        Fold a probe outcome into the record.

        ``last_check`` always moves; ``status_text`` and ``last_change``
        move only when the status text differs from the stored one. The
        stored text starts absent, so the first outcome is always a change.
        """
        now = self._clock()
        status_text = outcome.status_text
        current = self._record

        if status_text == current.status_text:
            self._record = replace(current, last_check=now)
            return TransitionInfo(changed=False)

        self._record = StatusRecord(
            status_text=status_text,
            last_check=now,
            last_change=now,
        )
        return TransitionInfo(changed=True, new_status=status_text)
