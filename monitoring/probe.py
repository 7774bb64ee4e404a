"""
============================================================================
DATABASE LIVENESS MONITOR - PROBE EXECUTOR
============================================================================
One probe = connect to the monitored database, then issue the liveness
statement. Each step is bounded by the timeout guard.

Outcome
-------
The executor never raises. Every failure, timeouts included, becomes a
``ProbeOutcome`` with ``success=False`` and a reason taken from the
underlying error's message ("" when the error has none).

Release
-------
The connection acquired by the connect step is closed before returning,
whatever happened afterwards. The close is bounded by the same budget. When the connect step itself timed out,
the connection may still arrive later; a callback on the abandoned
connect closes it then. Closing is best-effort and never turns a probe
into a failure.
============================================================================
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Set

from config.constants import StatusMessages
from config.settings import ProbeSettings
from database.connection import DatabaseTarget, TargetConnection
from exceptions import OperationTimeoutError, ProbeFailureError
from monitoring.timeout import with_timeout
from utils.helpers import ErrorHelper
from utils.logger import get_logger


logger = get_logger("Probe")


# ============================================================================
# PROBE OUTCOME
# ============================================================================

@dataclass(frozen=True)
class ProbeOutcome:
    """
    Result of a single probe: success, or failure with a reason.
    """
    success: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "ProbeOutcome":
        return cls(success=True)

    @classmethod
    def failure(cls, reason: str = "") -> "ProbeOutcome":
        return cls(success=False, reason=reason or "")

    @property
    def status_text(self) -> str:
        """The human-readable status this outcome is reported as."""
        if self.success:
            return StatusMessages.OK
        if self.reason:
            return StatusMessages.ERROR_WITH_REASON.format(reason=self.reason)
        return StatusMessages.ERROR


# ============================================================================
# PROBE EXECUTOR
# ============================================================================

class ProbeExecutor:
    """
    Runs connect + ping against a ``DatabaseTarget``.

    Parameters
    ----------
    target : DatabaseTarget
        The monitored database.
    probe_settings : ProbeSettings
        Supplies the per-step timeout and the verbose / show_errors switches.
    """

    def __init__(self, target: DatabaseTarget, probe_settings: ProbeSettings):
        self.target = target
        self._timeout_ms = probe_settings.timeout
        self._verbose = probe_settings.verbose
        self._show_errors = probe_settings.show_errors
        self._late_releases: Set[asyncio.Task] = set()

    async def run_probe(self) -> ProbeOutcome:
        """Perform one probe. Never raises."""
        connection: Optional[TargetConnection] = None
        try:
            connection = await self._connect()
            await self._ping(connection)
            outcome = ProbeOutcome.ok()
        except ProbeFailureError as e:
            outcome = ProbeOutcome.failure(e.reason)
            if self._show_errors:
                logger.opt(exception=e.cause).error(
                    f"Probe failed during {e.details.get('step', 'probe')}: {e.cause!r}"
                )
        finally:
            if connection is not None:
                await self._release(connection)

        if self._verbose:
            logger.info(outcome.status_text)

        return outcome

    # ------------------------------------------------------------------
    # STEPS
    # ------------------------------------------------------------------

    async def _connect(self) -> TargetConnection:
        try:
            return await with_timeout(self.target.connect(), self._timeout_ms)
        except OperationTimeoutError as e:
            if e.pending is not None:
                e.pending.add_done_callback(self._release_late_connection)
            raise self._as_failure(e, "connect") from e
        except Exception as e:
            raise self._as_failure(e, "connect") from e

    async def _ping(self, connection: TargetConnection) -> None:
        try:
            await with_timeout(connection.ping_admin(), self._timeout_ms)
        except Exception as e:
            raise self._as_failure(e, "ping") from e

    @staticmethod
    def _as_failure(exc: BaseException, step: str) -> ProbeFailureError:
        return ProbeFailureError(reason=ErrorHelper.reason(exc), step=step, cause=exc)

    # ------------------------------------------------------------------
    # RELEASE
    # ------------------------------------------------------------------

    async def _release(self, connection: TargetConnection) -> None:
        # An abandoned ping may still be running on this connection.
        try:
            await with_timeout(connection.close(), self._timeout_ms)
        except OperationTimeoutError:
            logger.debug("Gave up waiting for the probe connection to close")
        except Exception as e:
            logger.debug(f"Ignoring error while closing probe connection: {e!r}")

    def _release_late_connection(self, task: "asyncio.Future") -> None:
        """Close a connection that arrived after its connect step timed out."""
        if task.cancelled() or task.exception() is not None:
            return
        logger.debug("Closing connection that arrived after the connect timeout")
        release = asyncio.ensure_future(self._release(task.result()))
        self._late_releases.add(release)
        release.add_done_callback(self._late_releases.discard)
