"""
Tests for the fixed-period scheduler.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from monitoring.scheduler import Scheduler


class Recorder:
    """Job body that counts runs and tracks concurrency."""

    def __init__(self, duration: float = 0.0, error: Exception = None):
        self.duration = duration
        self.error = error
        self.runs = 0
        self.active = 0
        self.max_active = 0
        self.cancelled = 0

    async def __call__(self):
        self.runs += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.duration:
                await asyncio.sleep(self.duration)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.active -= 1
        if self.error is not None:
            raise self.error


@pytest.mark.asyncio
async def test_first_run_waits_one_interval():
    job = Recorder()
    scheduler = Scheduler()
    scheduler.register_job("probe", 200, job)

    await scheduler.start()
    try:
        await asyncio.sleep(0.1)
        assert job.runs == 0

        await asyncio.sleep(0.2)
        assert job.runs == 1
    finally:
        await scheduler.stop()


@pytest.mark.asyncio
async def test_runs_on_fixed_period():
    job = Recorder()
    scheduler = Scheduler()
    scheduler.register_job("probe", 50, job)

    await scheduler.start()
    await asyncio.sleep(0.525)
    await scheduler.stop()

    assert 7 <= job.runs <= 11
    assert scheduler.get_job_stats()[0]["run_count"] == job.runs


@pytest.mark.asyncio
async def test_last_run_is_reported_in_utc():
    job = Recorder()
    scheduler = Scheduler()
    scheduler.register_job("probe", 50, job)

    assert scheduler.get_job_stats()[0]["last_run"] is None

    await scheduler.start()
    await asyncio.sleep(0.12)
    await scheduler.stop()

    last_run = scheduler.get_job_stats()[0]["last_run"]
    assert last_run.endswith("Z")
    assert datetime.fromisoformat(last_run.replace("Z", "+00:00")).tzinfo == timezone.utc


@pytest.mark.asyncio
async def test_slow_runs_overlap_instead_of_delaying_schedule():
    job = Recorder(duration=0.3)
    scheduler = Scheduler()
    scheduler.register_job("probe", 50, job)

    await scheduler.start()
    await asyncio.sleep(0.28)
    in_flight = scheduler.get_job_stats()[0]["in_flight"]
    await scheduler.stop()

    assert job.runs >= 4
    assert job.max_active >= 2
    assert in_flight >= 2


@pytest.mark.asyncio
async def test_failing_runs_do_not_stop_schedule():
    job = Recorder(error=RuntimeError("alert send failed"))
    scheduler = Scheduler()
    scheduler.register_job("probe", 50, job)

    await scheduler.start()
    await asyncio.sleep(0.3)
    assert scheduler.is_running
    await scheduler.stop()

    stats = scheduler.get_job_stats()[0]
    assert job.runs >= 3
    assert stats["error_count"] == job.runs
    assert stats["run_count"] == 0


@pytest.mark.asyncio
async def test_stop_cancels_runs_in_flight():
    job = Recorder(duration=5.0)
    scheduler = Scheduler()
    scheduler.register_job("probe", 20, job)

    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert job.runs >= 1
    assert job.cancelled == job.runs
    assert job.active == 0
    assert scheduler.get_job_stats()[0]["in_flight"] == 0
    assert not scheduler.is_running


def test_interval_must_be_positive():
    scheduler = Scheduler()

    with pytest.raises(ValueError):
        scheduler.register_job("probe", 0, Recorder())
