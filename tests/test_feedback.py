"""Tests for correlating commands with their responses."""

import asyncio

import pytest

from guildbridge.bus.events import Join, Leave, Unknown
from guildbridge.bus.queue import EventBus
from guildbridge.minecraft.commands import Invite
from guildbridge.minecraft.dispatch import DispatchQueue
from guildbridge.minecraft.feedback import Failure, Feedback, Success, Timeout
from guildbridge.minecraft.session import BridgeSession


class ReplyingTransport:
    """Answers lines with chat events a moment after they are sent."""

    def __init__(self, bus, replies=None):
        self.bus = bus
        self.replies = replies or {}
        self.lines = []

    def send_line(self, text):
        self.lines.append(text)
        loop = asyncio.get_running_loop()
        for event in self.replies.get(text, []):
            loop.call_soon(self.bus.publish, event)


def joined(event):
    if event == Join("neyoa"):
        return Success("`neyoa` joined")
    return None


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def bus():
    return EventBus()


def make_feedback(bus, transport, timeout=1.0, **queue_args):
    queue = DispatchQueue(transport, **queue_args)
    return Feedback(queue, bus, BridgeSession("BridgeBot"), timeout=timeout)


@pytest.mark.asyncio
async def test_resolves_with_matching_event(bus):
    transport = ReplyingTransport(bus, {"/g invite neyoa": [Leave("other"), Join("neyoa")]})
    feedback = make_feedback(bus, transport, cooldown_ticks=1, tick_interval=0.001)
    feedback.queue.start()
    try:
        outcome = await feedback.execute(Invite("neyoa"), joined)
    finally:
        feedback.queue.stop()

    assert outcome == Success("`neyoa` joined")
    assert transport.lines == ["/g invite neyoa"]


@pytest.mark.asyncio
async def test_predicates_see_unknown_lines(bus):
    reply = Unknown("Your guild is full!")
    transport = ReplyingTransport(bus, {"/g invite neyoa": [reply]})
    feedback = make_feedback(bus, transport, cooldown_ticks=1, tick_interval=0.001)

    def full(event):
        if isinstance(event, Unknown) and event.raw == "Your guild is full!":
            return Failure("The guild is full")
        return None

    feedback.queue.start()
    try:
        outcome = await feedback.execute(Invite("neyoa"), full)
    finally:
        feedback.queue.stop()

    assert outcome == Failure("The guild is full")


@pytest.mark.asyncio
async def test_times_out_no_earlier_than_the_timeout(bus):
    transport = ReplyingTransport(bus)
    feedback = make_feedback(bus, transport, timeout=0.2, cooldown_ticks=1, tick_interval=0.001)
    loop = asyncio.get_running_loop()

    feedback.queue.start()
    try:
        started = loop.time()
        outcome = await feedback.execute(Invite("neyoa"), joined)
        elapsed = loop.time() - started
    finally:
        feedback.queue.stop()

    assert outcome == Timeout(0.2)
    assert elapsed >= 0.2 - 0.01
    assert elapsed < 2


@pytest.mark.asyncio
async def test_timeout_releases_subscription(bus):
    feedback = make_feedback(bus, ReplyingTransport(bus), timeout=0.05, cooldown_ticks=1, tick_interval=0.001)
    feedback.queue.start()
    try:
        for _ in range(3):
            assert isinstance(await feedback.execute(Invite("neyoa"), joined), Timeout)
    finally:
        feedback.queue.stop()

    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_events_before_send_are_not_seen(bus):
    transport = ReplyingTransport(bus)
    feedback = make_feedback(bus, transport, timeout=0.1, cooldown_ticks=3)
    seen = []

    def recording(event):
        seen.append(event)
        return joined(event)

    # Something already waiting ahead keeps our command in the queue
    blocker = asyncio.create_task(feedback.execute(Invite("Ventior"), lambda event: None))
    await settle()
    assert feedback.queue.drain_tick() == "/g invite Ventior"

    task = asyncio.create_task(feedback.execute(Invite("neyoa"), recording))
    await settle()
    assert bus.subscriber_count == 2

    # A matching event while the command is still queued
    bus.publish(Join("neyoa"))
    await settle()
    assert seen == []

    assert feedback.queue.drain_tick() is None
    assert feedback.queue.drain_tick() is None
    assert feedback.queue.drain_tick() == "/g invite neyoa"

    assert await task == Timeout(0.1)
    assert seen == []
    await blocker
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_events_after_send_are_seen(bus):
    feedback = make_feedback(bus, ReplyingTransport(bus), timeout=1.0, cooldown_ticks=1)

    task = asyncio.create_task(feedback.execute(Invite("neyoa"), joined))
    await settle()
    bus.publish(Join("neyoa"))
    feedback.queue.drain_tick()
    await settle()
    bus.publish(Join("neyoa"))

    assert await asyncio.wait_for(task, timeout=1) == Success("`neyoa` joined")


@pytest.mark.asyncio
async def test_concurrent_call_sites_get_their_own_answers(bus):
    transport = ReplyingTransport(bus, {
        "/g invite neyoa": [Join("neyoa")],
        "/g invite Ventior": [Join("Ventior")],
    })
    feedback = make_feedback(bus, transport, cooldown_ticks=1, tick_interval=0.001)

    def member_joined(name):
        return lambda event: Success(name) if event == Join(name) else None

    feedback.queue.start()
    try:
        first, second = await asyncio.gather(
            feedback.execute(Invite("neyoa"), member_joined("neyoa")),
            feedback.execute(Invite("Ventior"), member_joined("Ventior")),
        )
    finally:
        feedback.queue.stop()

    assert first == Success("neyoa")
    assert second == Success("Ventior")
    assert bus.subscriber_count == 0


@pytest.mark.asyncio
async def test_cancelled_call_releases_subscription(bus):
    feedback = make_feedback(bus, ReplyingTransport(bus), cooldown_ticks=1)

    task = asyncio.create_task(feedback.execute(Invite("neyoa"), joined))
    await settle()
    assert bus.subscriber_count == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert bus.subscriber_count == 0
    # The queued line still goes out, its signal is simply ignored
    assert feedback.queue.drain_tick() == "/g invite neyoa"

