"""
Exceptions Package for the Database Liveness Monitor

Provides the exception hierarchy used for error handling
throughout the application.
"""

from exceptions.base import (
    MonitorException,
    ConfigurationError,
    InitializationError
)

from exceptions.monitoring import (
    ProbeException,
    OperationTimeoutError,
    ProbeFailureError,
    AlertDeliveryError,
    ListenError
)

__all__ = [
    # Base exceptions
    "MonitorException",
    "ConfigurationError",
    "InitializationError",

    # Monitoring exceptions
    "ProbeException",
    "OperationTimeoutError",
    "ProbeFailureError",
    "AlertDeliveryError",
    "ListenError"
]
