"""
============================================================================
DATABASE LIVENESS MONITOR - STATUS ENDPOINT
============================================================================
A small aiohttp server exposing the last known status:

    GET /   → 200 JSON { status, date, lastCheck, lastChange }

The handler reads the tracker's latest committed snapshot and never
waits for a probe in flight. It always answers 200, whatever the
probe's last outcome; before the first probe the fields hold the
"UNKNOWN - No ping yet" and "Never" placeholders.
============================================================================
"""

from typing import Any, Dict, Optional

from aiohttp import web

from config.constants import StatusMessages
from exceptions import ListenError
from monitoring.state import StatusTracker
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("StatusServer")


def build_status_payload(tracker: StatusTracker) -> Dict[str, Any]:
    """Render the tracker's current snapshot as the endpoint's JSON body."""
    record = tracker.snapshot()
    return {
        "status": record.status_text or StatusMessages.UNKNOWN,
        "date": TimeHelper.to_iso(TimeHelper.get_utc_now()),
        "lastCheck": TimeHelper.to_iso_or(record.last_check, StatusMessages.NEVER),
        "lastChange": TimeHelper.to_iso_or(record.last_change, StatusMessages.NEVER),
    }


class StatusServer:
    """
    aiohttp server serving the monitor's status.

    Attributes
    ----------
    app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    """

    def __init__(self, tracker: StatusTracker, host: str = "0.0.0.0", port: int = 8080):
        self.tracker = tracker
        self._host = host
        self._port = port
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

        self.app.router.add_get("/", self._handle_root)

    async def start(self) -> None:
        """
        Bind and start serving.

        Raises:
            ListenError: If the address cannot be bound
        """
        self._runner = web.AppRunner(self.app, access_log=None)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        try:
            await self._site.start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise ListenError(
                message=f"Unable to listen on {self._host}:{self._port}: {e}",
                host=self._host,
                port=self._port,
                cause=e
            ) from e
        logger.info(f"✓ Status endpoint listening on http://{self._host}:{self._port}/")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            logger.info("✓ Status endpoint stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_root(self, request: web.Request) -> web.Response:
        """GET / — current status of the monitored database."""
        return web.json_response(build_status_payload(self.tracker), status=200)
