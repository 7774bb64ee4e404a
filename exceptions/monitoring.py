"""
Monitoring Exception Classes for the Database Liveness Monitor

Errors raised along the probe cycle: bounded waits that expire,
probes that fail, alerts that cannot be delivered and a status
endpoint that cannot bind.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from config.constants import Defaults, ErrorCodes
from exceptions.base import MonitorException


class ProbeException(MonitorException):
    """
    Base Probe Exception

    Parent class for everything that can go wrong while probing.
    Never escapes the probe executor.
    """

    default_error_code = ErrorCodes.PROBE


class OperationTimeoutError(ProbeException):
    """
    Operation Timeout Error

    Raised when a bounded operation exceeds its budget. The operation
    itself is not cancelled; ``pending`` is the abandoned task, which
    may still complete later.
    """

    default_error_code = ErrorCodes.OPERATION_TIMEOUT

    def __init__(
        self,
        message: str = Defaults.TIMEOUT_MESSAGE,
        timeout_ms: Optional[float] = None,
        pending: Optional[asyncio.Future] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize timeout error.

        Args:
            message: Error message
            timeout_ms: The budget that was exceeded, in milliseconds
            pending: The task whose result is no longer awaited
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        self.timeout_ms = timeout_ms
        self.pending = pending

        if timeout_ms is not None:
            self.details["timeout_ms"] = timeout_ms


class ProbeFailureError(ProbeException):
    """
    Probe Failure Error

    A connect or ping step failed. ``reason`` is the underlying
    error's message, or an empty string when it had none.
    """

    default_error_code = ErrorCodes.PROBE_FAILURE

    def __init__(
        self,
        reason: str = "",
        step: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(reason or "Probe failed", **kwargs)

        self.reason = reason

        if step:
            self.details["step"] = step


class AlertDeliveryError(MonitorException):
    """
    Alert Delivery Error

    Raised when the messaging channel rejects or fails to receive an
    alert. The alert is not retried.
    """

    default_error_code = ErrorCodes.ALERT_DELIVERY

    def __init__(
        self,
        message: str = "Unable to deliver alert",
        chat_id: Optional[str] = None,
        status_text: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if chat_id:
            self.details["chat_id"] = chat_id

        if status_text:
            self.details["status_text"] = status_text


class ListenError(MonitorException):
    """
    Listen Error

    Raised when the status endpoint cannot bind its address.
    Fatal at startup.
    """

    default_error_code = ErrorCodes.LISTEN

    def __init__(
        self,
        message: str = "Unable to start the status endpoint",
        host: Optional[str] = None,
        port: Optional[int] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if host:
            self.details["host"] = host

        if port:
            self.details["port"] = port
