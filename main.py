"""
============================================================================
DATABASE LIVENESS MONITOR - MAIN APPLICATION
============================================================================
Probes a database on a fixed period, serves the last known status over
HTTP and posts a Telegram alert whenever that status changes.

Startup Order
-------------
1.  Load settings & configure logging
2.  Create the database target (engine only, no connection yet)
3.  Create the alert dispatcher (aiogram Bot when a token is set)
4.  Wire up ProbeExecutor, StatusTracker, LivenessMonitor, Scheduler
5.  Start the status endpoint (a bind failure is fatal: exit code 1)
6.  Start the scheduler (first probe one interval later)
7.  Wait for SIGINT / SIGTERM

Shutdown Order (reverse)
-------------------------
    Stop scheduler → stop status endpoint → close bot session →
    dispose engine → exit
============================================================================
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Path setup: ensure the project root is importable regardless of CWD
# ---------------------------------------------------------------------------
sys.path.insert(0, str(Path(__file__).parent))

# ---------------------------------------------------------------------------
# Project imports
# ---------------------------------------------------------------------------
from config.constants import Defaults
from config.settings import Settings, get_settings
from database.connection import DatabaseTarget
from exceptions import ConfigurationError, ListenError, MonitorException
from monitoring.alerts import AlertDispatcher, create_bot
from monitoring.monitor import LivenessMonitor
from monitoring.probe import ProbeExecutor
from monitoring.scheduler import Scheduler
from monitoring.state import StatusTracker
from monitoring.status_server import StatusServer
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class LivenessMonitorApplication:
    """
    Top-level application orchestrator.

    Owns every subsystem and is the single place that knows the startup /
    shutdown order.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        # --- subsystems (populated during startup) ---
        self.target: Optional[DatabaseTarget] = None
        self.dispatcher: Optional[AlertDispatcher] = None
        self.tracker: Optional[StatusTracker] = None
        self.monitor: Optional[LivenessMonitor] = None
        self.scheduler: Optional[Scheduler] = None
        self.status_server: Optional[StatusServer] = None

        self._stop_event = asyncio.Event()

    # ==================================================================
    # WIRING
    # ==================================================================

    def build(self) -> None:
        """
        Create every component. Nothing touches the network yet.

        Raises:
            InitializationError: If the database engine cannot be created
            ConfigurationError: If the Telegram token is malformed
        """
        logger.info(
            f"{self.settings.app_name} v{self.settings.app_version} — "
            f"interval={self.settings.probe.interval}ms, "
            f"timeout={self.settings.probe.timeout}ms"
        )

        self.target = DatabaseTarget(self.settings.database)
        self.target.initialize()

        self.dispatcher = AlertDispatcher(
            bot=create_bot(self.settings.alert),
            chat_id=self.settings.alert.chat_id,
        )

        self.tracker = StatusTracker()
        self.monitor = LivenessMonitor(
            executor=ProbeExecutor(self.target, self.settings.probe),
            tracker=self.tracker,
            dispatcher=self.dispatcher,
        )

        self.scheduler = Scheduler()
        self.scheduler.register_job(
            Defaults.PROBE_JOB_NAME,
            interval_ms=self.settings.probe.interval,
            coroutine_factory=self.monitor.run_cycle,
        )

        self.status_server = StatusServer(
            self.tracker,
            host=self.settings.web_host,
            port=self.settings.web_port,
        )

    # ==================================================================
    # STARTUP
    # ==================================================================

    async def startup(self) -> None:
        """
        Start the status endpoint, then the probe schedule.

        Raises:
            ListenError: If the status endpoint cannot bind
        """
        await self.status_server.start()
        await self.scheduler.start()
        logger.info("✓ Monitor running")

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        Each step is wrapped in try/except so a failure in one subsystem
        doesn't prevent the others from cleaning up.
        """
        logger.info("Shutting down…")

        if self.scheduler:
            try:
                await self.scheduler.stop()
                for stats in self.scheduler.get_job_stats():
                    logger.info(f"  job stats: {stats}")
            except Exception as e:
                logger.error(f"  ✗ Scheduler stop error: {e}")

        if self.status_server:
            try:
                await self.status_server.stop()
            except Exception as e:
                logger.error(f"  ✗ Status endpoint stop error: {e}")

        if self.dispatcher:
            try:
                logger.info(f"  alert stats: {self.dispatcher.get_stats()}")
                await self.dispatcher.close()
            except Exception as e:
                logger.error(f"  ✗ Alert dispatcher close error: {e}")

        if self.target:
            try:
                await self.target.dispose()
            except Exception as e:
                logger.error(f"  ✗ Database dispose error: {e}")

        logger.info("✓ Shutdown complete")

    # ==================================================================
    # RUN
    # ==================================================================

    def request_stop(self) -> None:
        """Ask ``run()`` to return; safe to call from a signal handler."""
        self._stop_event.set()

    async def run(self) -> None:
        """Block until a stop is requested."""
        await self._stop_event.wait()


# ============================================================================
# SIGNAL HANDLER SETUP
# ============================================================================

def _install_signal_handlers(app: LivenessMonitorApplication) -> None:
    """
    Install SIGTERM / SIGINT handlers so the monitor shuts down gracefully
    when the orchestrator stops the container.
    """
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_stop)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works there
            pass


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

async def main(settings: Optional[Settings] = None) -> int:
    """
    Async main: builds the app, starts it and runs until shutdown.

    Returns:
        Process exit code
    """
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            setup_logging()
            error = ConfigurationError(f"Invalid configuration: {e}", cause=e)
            logger.error(error.log_format())
            return 1

    setup_logging(settings.logging)

    app = LivenessMonitorApplication(settings)
    try:
        app.build()
    except MonitorException as e:
        logger.error(f"✗ Startup failed — {e.log_format()}")
        await app.shutdown()
        return 1

    try:
        await app.startup()
    except ListenError as e:
        logger.opt(exception=e.cause).error(f"✗ {e.message}")
        await app.shutdown()
        return 1

    _install_signal_handlers(app)

    try:
        await app.run()
    finally:
        await app.shutdown()

    return 0


def run() -> None:
    """Console-script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


# ============================================================================
# SCRIPT ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    run()
