"""
============================================================================
DATABASE LIVENESS MONITOR - MONITORING PACKAGE
============================================================================
Runtime monitoring infrastructure:
    • with_timeout       — bounds an awaitable without cancelling it
    • ProbeExecutor      — connect + ping against the monitored database
    • StatusTracker      — the single status record and transition detection
    • AlertDispatcher    — Telegram delivery of status transitions
    • LivenessMonitor    — one probe → record → alert cycle
    • Scheduler          — fixed-period job runner
    • StatusServer       — aiohttp status endpoint

File layout
-----------
monitoring/
├── __init__.py          ← this file
├── timeout.py           ← with_timeout
├── probe.py             ← ProbeOutcome + ProbeExecutor
├── state.py             ← StatusRecord + StatusTracker
├── alerts.py            ← AlertDispatcher
├── monitor.py           ← LivenessMonitor
├── scheduler.py         ← Scheduler + ScheduledJob
└── status_server.py     ← StatusServer
============================================================================
"""

from monitoring.timeout import with_timeout
from monitoring.probe import ProbeExecutor, ProbeOutcome
from monitoring.state import StatusRecord, StatusTracker, TransitionInfo
from monitoring.alerts import AlertDispatcher, create_bot
from monitoring.monitor import LivenessMonitor
from monitoring.scheduler import Scheduler, ScheduledJob
from monitoring.status_server import StatusServer, build_status_payload

__all__ = [
    # Probing
    "with_timeout",
    "ProbeExecutor",
    "ProbeOutcome",

    # State
    "StatusRecord",
    "StatusTracker",
    "TransitionInfo",

    # Alerts
    "AlertDispatcher",
    "create_bot",

    # Cycle & scheduling
    "LivenessMonitor",
    "Scheduler",
    "ScheduledJob",

    # Status endpoint
    "StatusServer",
    "build_status_payload",
]
