"""
Constants Module for the Database Liveness Monitor

Contains the status texts, placeholders and error codes shared
by the probe loop, the alert dispatcher and the status endpoint.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class StatusMessages:
    """
    Status Texts

    The exact strings reported by the status endpoint and sent as
    alerts. Consumers may match on them, so they must not change.
    """

    OK: Final[str] = "OK - successful ping"
    ERROR: Final[str] = "ERROR - unable to perform the ping"
    ERROR_WITH_REASON: Final[str] = "ERROR - unable to perform the ping ({reason})"

    UNKNOWN: Final[str] = "UNKNOWN - No ping yet"
    NEVER: Final[str] = "Never"

    ALERT_LOG: Final[str] = "ALERT - sent alert on Telegram: {status}"


class Defaults:
    """
    Default Values
    """

    # Liveness command issued against the target
    PING_STATEMENT: Final[str] = "SELECT 1"

    # Name of the probe job in the scheduler
    PROBE_JOB_NAME: Final[str] = "liveness_probe"

    TIMEOUT_MESSAGE: Final[str] = "Timed out."


class ErrorCodes(IntEnum):
    """Numeric error codes used by the exception hierarchy."""

    GENERAL = 1001
    CONFIGURATION = 1100
    INITIALIZATION = 1200

    PROBE = 2000
    OPERATION_TIMEOUT = 2001
    PROBE_FAILURE = 2002

    ALERT = 3000
    ALERT_DELIVERY = 3001

    SERVER = 4000
    LISTEN = 4001
