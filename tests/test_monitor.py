"""
Tests for the full probe → record → alert cycle.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from exceptions import AlertDeliveryError
from monitoring.alerts import AlertDispatcher
from monitoring.monitor import LivenessMonitor
from monitoring.probe import ProbeExecutor
from monitoring.state import StatusTracker
from tests.conftest import FakeTarget


@pytest.fixture
def bot():
    mock = MagicMock()
    mock.send_message = AsyncMock()
    return mock


def _monitor(target, probe_settings, bot, clock):
    return LivenessMonitor(
        executor=ProbeExecutor(target, probe_settings),
        tracker=StatusTracker(clock=clock),
        dispatcher=AlertDispatcher(bot=bot, chat_id="@db_alerts"),
    )


def _sent_texts(bot):
    return [call.kwargs["text"] for call in bot.send_message.await_args_list]


@pytest.mark.asyncio
async def test_successful_probe_sets_status_and_alerts_once(probe_settings, bot, clock):
    monitor = _monitor(FakeTarget(), probe_settings, bot, clock)

    transition = await monitor.run_cycle()

    record = monitor.tracker.snapshot()
    assert transition.changed
    assert record.status_text == "OK - successful ping"
    assert record.last_change is not None
    assert _sent_texts(bot) == ["OK - successful ping"]


@pytest.mark.asyncio
async def test_failure_after_success_alerts_with_reason(probe_settings, bot, clock):
    target = FakeTarget()
    monitor = _monitor(target, probe_settings, bot, clock)
    await monitor.run_cycle()
    first_change = monitor.tracker.snapshot().last_change

    target.connect_error = ConnectionRefusedError("connection refused")
    await monitor.run_cycle()

    record = monitor.tracker.snapshot()
    assert record.status_text == "ERROR - unable to perform the ping (connection refused)"
    assert record.last_change > first_change
    assert _sent_texts(bot) == [
        "OK - successful ping",
        "ERROR - unable to perform the ping (connection refused)",
    ]


@pytest.mark.asyncio
async def test_identical_failures_alert_only_once(probe_settings, bot, clock):
    target = FakeTarget(connect_error=ConnectionRefusedError("connection refused"))
    monitor = _monitor(target, probe_settings, bot, clock)

    await monitor.run_cycle()
    first = monitor.tracker.snapshot()
    second_transition = await monitor.run_cycle()
    second = monitor.tracker.snapshot()

    assert not second_transition.changed
    assert bot.send_message.await_count == 1
    assert second.last_change == first.last_change
    assert second.last_check > first.last_check


@pytest.mark.asyncio
async def test_probe_timeout_is_reported_and_connection_released(probe_settings, bot, clock):
    target = FakeTarget(ping_delay=1.0)
    monitor = _monitor(target, probe_settings, bot, clock)

    await monitor.run_cycle()

    assert monitor.tracker.snapshot().status_text == (
        "ERROR - unable to perform the ping (Timed out.)"
    )
    assert target.connections[0].closed
    assert _sent_texts(bot) == ["ERROR - unable to perform the ping (Timed out.)"]


@pytest.mark.asyncio
async def test_alert_failure_propagates_after_state_update(probe_settings, bot, clock):
    bot.send_message.side_effect = RuntimeError("telegram unavailable")
    monitor = _monitor(FakeTarget(), probe_settings, bot, clock)

    with pytest.raises(AlertDeliveryError):
        await monitor.run_cycle()

    assert monitor.tracker.snapshot().status_text == "OK - successful ping"

    # the lost alert is not re-sent: the status did not change again
    bot.send_message.side_effect = None
    await monitor.run_cycle()
    assert bot.send_message.await_count == 1
