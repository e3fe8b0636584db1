"""Tests for wiring the bridge together."""

import pytest

from guildbridge.bridge import Bridge
from guildbridge.config.schema import Config


@pytest.mark.asyncio
async def test_bridge_shares_state_between_parts():
    config = Config()
    config.feedback.timeout = 3.0
    config.dispatch.cooldown_ticks = 4
    config.backoff.floor = 2.0

    bridge = Bridge(config)

    assert bridge.feedback.queue is bridge.queue
    assert bridge.feedback.bus is bridge.bus
    assert bridge.supervisor.session is bridge.session
    assert bridge.discord.session is bridge.session
    assert bridge.queue.transport is bridge.connection
    assert bridge.feedback.timeout == 3.0
    assert bridge.queue.cooldown_ticks == 4
    assert bridge.supervisor.backoff.delay == 2.0
    assert bridge.discord.send_status in bridge.supervisor._listeners
