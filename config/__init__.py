"""
Configuration Package for the Database Liveness Monitor

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Status texts and error codes used throughout the application
"""

from config.settings import (
    Settings,
    DatabaseSettings,
    ProbeSettings,
    AlertSettings,
    LoggingSettings,
    get_settings
)

from config.constants import (
    StatusMessages,
    Defaults,
    ErrorCodes
)

__all__ = [
    # Settings
    "Settings",
    "DatabaseSettings",
    "ProbeSettings",
    "AlertSettings",
    "LoggingSettings",
    "get_settings",

    # Constants
    "StatusMessages",
    "Defaults",
    "ErrorCodes"
]
