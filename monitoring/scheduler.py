"""
============================================================================
DATABASE LIVENESS MONITOR - PERIODIC SCHEDULER
============================================================================
A lightweight, asyncio-native scheduler. All jobs run as coroutines in
the same event loop as the status endpoint.

Timing
------
A job first runs one full interval after ``start()``, then every
interval after that. Run times are computed from the previous scheduled
time, not from when the previous run finished, so the period never
drifts with probe duration.

Overlap
-------
Each run is launched as its own task. A run that takes longer than the
interval does not delay the next one; both are in flight at once.

Failures
--------
An exception from a run is logged and counted. It never stops the
schedule.
============================================================================
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Scheduler")


# ============================================================================
# JOB DEFINITION
# ============================================================================

@dataclass
class ScheduledJob:
    """
    Describes a single periodic background job.

    Attributes
    ----------
    name : str
        Human-readable identifier (used in logs).
    interval_ms : int
        How often the job runs, in milliseconds.
    coroutine_factory : Callable
        An async callable (no arguments) that performs the work.
    next_run : float
        Event-loop time at which the job should next execute.
    last_run : Optional[float]
        Epoch timestamp of the last successful execution.
    run_count : int
        Total number of successful executions since startup.
    error_count : int
        Total number of failed executions since startup.
    """
    name: str
    interval_ms: int
    coroutine_factory: Callable[[], Awaitable[Any]]
    next_run: float = 0.0
    last_run: Optional[float] = None
    run_count: int = 0
    error_count: int = 0
    in_flight: Set[asyncio.Task] = field(default_factory=set)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000


# ============================================================================
# SCHEDULER
# ============================================================================

class Scheduler:
    """
    Asyncio-based fixed-period job scheduler.

    Usage
    -----
        scheduler = Scheduler()
        scheduler.register_job("liveness_probe", 1000, monitor.run_cycle)
        await scheduler.start()
        # ... later ...
        await scheduler.stop()
    """

    def __init__(self):
        self._jobs: Dict[str, ScheduledJob] = {}
        self._running = False
        self._loop_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # JOB REGISTRATION
    # ------------------------------------------------------------------

    def register_job(
        self,
        name: str,
        interval_ms: int,
        coroutine_factory: Callable[[], Awaitable[Any]],
    ) -> None:
        """
        Register a new periodic job.

        Parameters
        ----------
        name : str
            Unique job name.
        interval_ms : int
            Period in milliseconds; must be positive.
        coroutine_factory : Callable
            An async callable that takes no arguments.
        """
        if interval_ms <= 0:
            raise ValueError(f"Job '{name}' needs a positive interval, got {interval_ms}")

        if name in self._jobs:
            logger.warning(f"Job '{name}' already registered, overwriting")

        self._jobs[name] = ScheduledJob(
            name=name,
            interval_ms=interval_ms,
            coroutine_factory=coroutine_factory,
        )
        logger.debug(f"Registered job '{name}' (interval={interval_ms}ms)")

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the scheduler loop. The first runs happen one interval from now."""
        if self._running:
            logger.warning("Scheduler is already running")
            return

        now = asyncio.get_running_loop().time()
        for job in self._jobs.values():
            job.next_run = now + job.interval_seconds

        self._running = True
        self._loop_task = asyncio.create_task(self._main_loop())
        logger.info(f"✓ Scheduler started with {len(self._jobs)} job(s)")

    async def stop(self) -> None:
        """Stop the scheduler loop and cancel runs still in flight."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        pending = [task for job in self._jobs.values() for task in job.in_flight]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("✓ Scheduler stopped")

    # ------------------------------------------------------------------
    # MAIN LOOP
    # ------------------------------------------------------------------

    async def _main_loop(self) -> None:
        """
        Sleep until the earliest job is due, launch every due job as a
        background task, advance its next run by one interval, repeat.
        """
        loop = asyncio.get_running_loop()
        logger.debug("Main loop started")

        while self._running:
            if not self._jobs:
                await asyncio.sleep(1.0)
                continue

            next_due = min(job.next_run for job in self._jobs.values())
            delay = next_due - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            now = loop.time()
            for job in self._jobs.values():
                if now >= job.next_run:
                    self._launch(job)
                    job.next_run += job.interval_seconds
                    # Skip slots missed while the loop was blocked
                    if job.next_run <= now:
                        missed = int((now - job.next_run) // job.interval_seconds) + 1
                        job.next_run += missed * job.interval_seconds

        logger.debug("Main loop exited")

    def _launch(self, job: ScheduledJob) -> None:
        task = asyncio.create_task(self._execute_job(job), name=f"job:{job.name}")
        job.in_flight.add(task)
        task.add_done_callback(job.in_flight.discard)

    # ------------------------------------------------------------------
    # JOB EXECUTION
    # ------------------------------------------------------------------

    async def _execute_job(self, job: ScheduledJob) -> None:
        """
        Run a single job, capture timing and errors.
        """
        start_time = time.time()
        try:
            await job.coroutine_factory()
            elapsed = time.time() - start_time

            job.run_count += 1
            job.last_run = time.time()
            logger.debug(
                f"Job '{job.name}' completed in {elapsed:.3f}s "
                f"(run #{job.run_count})"
            )

        except Exception as e:
            job.error_count += 1
            elapsed = time.time() - start_time
            logger.opt(exception=e).error(
                f"Job '{job.name}' FAILED after {elapsed:.3f}s: {e}"
            )

    # ------------------------------------------------------------------
    # DIAGNOSTICS
    # ------------------------------------------------------------------

    def get_job_stats(self) -> List[Dict[str, Any]]:
        """Return status of all registered jobs."""
        stats = []
        for job in self._jobs.values():
            stats.append({
                "name": job.name,
                "interval_ms": job.interval_ms,
                "run_count": job.run_count,
                "error_count": job.error_count,
                "in_flight": len(job.in_flight),
                "last_run": (
                    TimeHelper.to_iso(datetime.fromtimestamp(job.last_run, timezone.utc))
                    if job.last_run else None
                ),
            })
        return stats
