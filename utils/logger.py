"""
============================================================================
DATABASE LIVENESS MONITOR - LOGGING UTILITY
============================================================================
Console and file logging on top of loguru.

Every line carries a UTC timestamp, which is what the probe and alert
log lines rely on.
============================================================================
"""

import sys
from typing import Optional

from loguru import logger

from config.settings import LoggingSettings


CONSOLE_FORMAT = (
    "<green>{time:ddd, DD MMM YYYY HH:mm:ss!UTC} GMT</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS!UTC} | {level: <8} | "
    "{extra[name]}:{function}:{line} - {message}"
)


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

def setup_logging(log_settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure loguru sinks.

    Removes the default handler, installs a console sink and, when
    enabled, a rotating log file plus a separate error file.

    Args:
        log_settings: Logging section of the settings (read from the
            environment when omitted)
    """
    log_settings = log_settings or LoggingSettings()

    logger.remove()
    logger.configure(extra={"name": "-"})

    log_level = log_settings.level.value

    # Console Handler
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=log_settings.colorize,
        backtrace=True,
        diagnose=False,
    )

    # File Handlers
    if log_settings.to_file:
        log_settings.logs_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_settings.file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=log_settings.file_rotation,
            retention=log_settings.file_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

        logger.add(
            log_settings.logs_dir / "errors.log",
            format=FILE_FORMAT,
            level="ERROR",
            rotation="1 day",
            retention=log_settings.file_retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.bind(name="Logging").debug(
        f"Logging initialized — level={log_level}, file={log_settings.to_file}"
    )


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Component name shown in every line

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger
