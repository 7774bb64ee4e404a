"""
============================================================================
DATABASE LIVENESS MONITOR - ALERT DISPATCHER
============================================================================
Sends the new status text to a Telegram chat whenever the reported
status changes.

Design
------
No queue, no retry. ``notify()`` logs the alert, then awaits the
Telegram API directly. If the send fails, ``AlertDeliveryError`` is
raised to the caller (the scheduler's job runner), which logs it; the
alert is then lost, and the next transition produces a fresh one.

Without a configured token there is no bot: alerts are logged with a
warning and skipped, so the monitor can run with the status endpoint
alone.
============================================================================
"""

from typing import Any, Dict, Optional

from aiogram import Bot
from aiogram.utils.token import TokenValidationError

from config.constants import StatusMessages
from config.settings import AlertSettings
from exceptions import AlertDeliveryError, ConfigurationError
from utils.logger import get_logger


logger = get_logger("AlertDispatcher")


def create_bot(alert_settings: AlertSettings) -> Optional[Bot]:
    """
    Build the aiogram Bot used for alerts, or ``None`` when no token is set.

    Raises:
        ConfigurationError: If the token is malformed
    """
    if not alert_settings.enabled:
        return None
    try:
        return Bot(token=alert_settings.token.get_secret_value())
    except TokenValidationError as e:
        raise ConfigurationError(
            "ALERT_TOKEN is not a valid Telegram bot token",
            config_key="ALERT_TOKEN",
            cause=e
        ) from e


class AlertDispatcher:
    """
    Delivers status transitions to one Telegram chat.

    Parameters
    ----------
    bot : aiogram.Bot | None
        Bot used to send messages. If None, alerts are only logged.
    chat_id : str
        Numeric chat ID or ``@channel`` username.
    """

    def __init__(self, bot: Any, chat_id: str):
        self.bot = bot
        self.chat_id = chat_id

        self._sent_count = 0
        self._failed_count = 0

        if bot is None:
            logger.warning("AlertDispatcher created without a bot — alerts will only be logged")
        else:
            logger.info(f"AlertDispatcher created — chat={chat_id}")

    async def notify(self, status_text: str) -> None:
        """
        Send ``status_text`` to the configured chat.

        Raises:
            AlertDeliveryError: If Telegram did not accept the message
        """
        if self.bot is None:
            logger.warning(f"ALERT - no bot configured, not sent: {status_text}")
            return

        logger.info(StatusMessages.ALERT_LOG.format(status=status_text))

        try:
            await self.bot.send_message(chat_id=self.chat_id, text=status_text)
        except Exception as e:
            self._failed_count += 1
            raise AlertDeliveryError(
                message=f"Unable to deliver alert to {self.chat_id}: {e}",
                chat_id=self.chat_id,
                status_text=status_text,
                cause=e
            ) from e

        self._sent_count += 1

    async def close(self) -> None:
        """Close the bot's HTTP session."""
        if self.bot is not None:
            await self.bot.session.close()

    def get_stats(self) -> Dict[str, Any]:
        """Return delivery counters for diagnostics."""
        return {
            "chat_id": self.chat_id,
            "enabled": self.bot is not None,
            "sent_count": self._sent_count,
            "failed_count": self._failed_count,
        }
