"""
============================================================================
DATABASE LIVENESS MONITOR - PROBE CYCLE
============================================================================
One tick of the monitor:

    ProbeExecutor.run_probe()          → ProbeOutcome (never raises)
    StatusTracker.record_outcome()     → TransitionInfo
    AlertDispatcher.notify()           → only when the status changed

Alert delivery failures propagate out of ``run_cycle`` so the scheduler
logs them; the status record has already been updated by then.
============================================================================
"""

from monitoring.alerts import AlertDispatcher
from monitoring.probe import ProbeExecutor
from monitoring.state import StatusTracker, TransitionInfo
from utils.logger import get_logger


logger = get_logger("Monitor")


class LivenessMonitor:
    """
    Ties the probe, the state tracker and the alert dispatcher together.

    All state is accessed only from the single asyncio event loop; no
    threading primitives are needed.
    """

    def __init__(
        self,
        executor: ProbeExecutor,
        tracker: StatusTracker,
        dispatcher: AlertDispatcher,
    ):
        self.executor = executor
        self.tracker = tracker
        self.dispatcher = dispatcher

    async def run_cycle(self) -> TransitionInfo:
        """
        Probe once, record the outcome, alert on a transition.

        Raises:
            AlertDeliveryError: If the transition alert could not be sent
        """
        outcome = await self.executor.run_probe()
        transition = self.tracker.record_outcome(outcome)

        if transition.changed:
            logger.info(f"Status changed → {transition.new_status}")
            await self.dispatcher.notify(transition.new_status)

        return transition
