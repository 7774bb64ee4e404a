"""
Base Exception Classes for the Database Liveness Monitor

Provides the foundation exception hierarchy from which all
other exceptions inherit.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config.constants import ErrorCodes


class MonitorException(Exception):
    """
    Base Exception Class

    All custom exceptions of the monitor inherit from this class.
    Provides common functionality for error handling, logging,
    and serialization.

    Attributes:
        message: Human-readable error message
        error_code: Numeric error code for categorization
        details: Additional error details as dictionary
        cause: The underlying exception, if any
        timestamp: When the exception occurred
    """

    default_error_code: int = ErrorCodes.GENERAL

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Numeric error code
            details: Additional error details
            cause: The underlying exception that caused this one
        """
        super().__init__(message)

        self.message = message
        self.error_code = int(error_code or self.default_error_code)
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    @property
    def full_message(self) -> str:
        """Get full error message with code."""
        return f"[{self.error_code}] {self.message}"

    def log_format(self) -> str:
        """
        Format exception for logging.

        Returns:
            Formatted string for logging
        """
        parts = [
            f"Exception: {self.__class__.__name__}",
            f"Code: {self.error_code}",
            f"Message: {self.message}"
        ]

        if self.details:
            parts.append(f"Details: {self.details}")

        if self.cause:
            parts.append(f"Cause: {self.cause!r}")

        return " | ".join(parts)

    def __str__(self) -> str:
        return self.full_message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"details={self.details})"
        )


class ConfigurationError(MonitorException):
    """
    Configuration Error

    Raised when the environment holds values the monitor cannot use.
    """

    default_error_code = ErrorCodes.CONFIGURATION

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if config_key:
            self.details["config_key"] = config_key


class InitializationError(MonitorException):
    """
    Initialization Error

    Raised when a component cannot be built at startup.
    """

    default_error_code = ErrorCodes.INITIALIZATION

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if component:
            self.details["component"] = component

