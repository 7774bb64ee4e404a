"""
============================================================================
DATABASE LIVENESS MONITOR - HELPERS UTILITY
============================================================================
Small time and error formatting helpers shared by the probe loop and
the status endpoint.
============================================================================
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import DBAPIError


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:
    """
    Time and date utilities.
    """

    @staticmethod
    def get_utc_now() -> datetime:
        """Get current timezone-aware UTC datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso(dt: datetime) -> str:
        """
        Format a datetime as ISO-8601 UTC with millisecond precision,
        e.g. ``2024-05-01T12:00:00.000Z``.

        Naive datetimes are taken to be UTC already.
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @staticmethod
    def to_iso_or(dt: Optional[datetime], placeholder: str) -> str:
        """Format ``dt`` with :meth:`to_iso`, or return ``placeholder`` if absent."""
        if dt is None:
            return placeholder
        return TimeHelper.to_iso(dt)


# ============================================================================
# ERROR UTILITIES
# ============================================================================

class ErrorHelper:
    """
    Error message extraction.
    """

    @staticmethod
    def reason(exc: BaseException) -> str:
        """
        Return the human-readable message of an error, or "" if it has none.

        Application exceptions expose ``message``; SQLAlchemy DBAPI
        errors wrap the driver error, whose own message is more useful
        than SQLAlchemy's multi-line rendering.
        """
        message = getattr(exc, "message", None)
        if isinstance(message, str):
            return message

        if isinstance(exc, DBAPIError) and exc.orig is not None:
            return ErrorHelper.reason(exc.orig)

        return str(exc)
