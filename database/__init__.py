"""
Database Package for the Liveness Monitor

Provides connectivity to the monitored database through
SQLAlchemy's async engine.
"""

from database.connection import (
    DatabaseTarget,
    TargetConnection
)

__all__ = [
    "DatabaseTarget",
    "TargetConnection"
]
