"""Tests for the dispatch queue and completion signals."""

import asyncio

import pytest

from guildbridge.minecraft.dispatch import CompletionSignal, DispatchQueue


class RecordingTransport:
    def __init__(self):
        self.lines = []

    def send_line(self, text):
        self.lines.append(text)


class BrokenTransport:
    def send_line(self, text):
        raise ConnectionError("not connected")


def sent_ticks(queue, ticks):
    """Drive ``ticks`` ticks and return the tick index of every send."""
    sent = []
    for tick in range(ticks):
        if queue.drain_tick() is not None:
            sent.append(tick)
    return sent


@pytest.mark.asyncio
async def test_first_tick_sends_immediately():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=10)
    signal = CompletionSignal()

    queue.enqueue("/g invite neyoa", signal)

    assert queue.drain_tick() == "/g invite neyoa"
    assert transport.lines == ["/g invite neyoa"]
    assert signal.fired


@pytest.mark.asyncio
@pytest.mark.parametrize("cooldown", [1, 3, 10])
async def test_burst_is_spaced_by_the_cooldown(cooldown):
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=cooldown)
    for i in range(5):
        queue.enqueue(f"/gc line {i}", CompletionSignal())

    sent = sent_ticks(queue, 5 * cooldown + 5)

    assert len(sent) == 5
    gaps = [later - earlier for earlier, later in zip(sent, sent[1:])]
    assert all(gap >= cooldown for gap in gaps)
    assert transport.lines == [f"/gc line {i}" for i in range(5)]


@pytest.mark.asyncio
async def test_enqueue_during_cooldown_waits():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=4)
    queue.enqueue("first", CompletionSignal())
    assert queue.drain_tick() == "first"

    queue.enqueue("second", CompletionSignal())
    assert [queue.drain_tick() for _ in range(3)] == [None, None, None]
    assert queue.drain_tick() == "second"


@pytest.mark.asyncio
async def test_idle_ticks_do_not_delay_the_next_send():
    queue = DispatchQueue(RecordingTransport(), cooldown_ticks=4)
    for _ in range(10):
        assert queue.drain_tick() is None

    queue.enqueue("late", CompletionSignal())
    assert queue.drain_tick() == "late"


@pytest.mark.asyncio
async def test_fifo_under_concurrent_enqueue():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=1, tick_interval=0.001)

    async def caller(name):
        for i in range(5):
            signal = CompletionSignal()
            queue.enqueue(f"{name}-{i}", signal)
            await signal.wait()

    enqueued = []
    original = queue.enqueue

    def recording_enqueue(text, signal):
        enqueued.append(text)
        original(text, signal)

    queue.enqueue = recording_enqueue
    queue.start()
    try:
        await asyncio.wait_for(asyncio.gather(caller("a"), caller("b"), caller("c")), timeout=5)
    finally:
        queue.stop()

    assert transport.lines == enqueued
    assert len(transport.lines) == 15


@pytest.mark.asyncio
async def test_signal_fires_after_hand_off():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=1)
    signal = CompletionSignal()
    observed = []
    signal.on_fire(lambda: observed.append(list(transport.lines)))

    queue.enqueue("/g promote neyoa", signal)
    queue.drain_tick()

    assert observed == [["/g promote neyoa"]]
    await asyncio.wait_for(signal.wait(), timeout=1)


@pytest.mark.asyncio
async def test_transport_errors_are_swallowed_and_signal_still_fires():
    queue = DispatchQueue(BrokenTransport(), cooldown_ticks=1)
    signal = CompletionSignal()
    queue.enqueue("/g kick neyoa spam", signal)

    assert queue.drain_tick() == "/g kick neyoa spam"
    assert signal.fired
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_each_line_is_sent_once():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=1)
    queue.enqueue("once", CompletionSignal())
    sent_ticks(queue, 10)
    assert transport.lines == ["once"]


@pytest.mark.asyncio
async def test_signal_cannot_fire_twice():
    signal = CompletionSignal()
    signal.fire()
    with pytest.raises(RuntimeError):
        signal.fire()


@pytest.mark.asyncio
async def test_fire_after_cancel_is_a_no_op():
    signal = CompletionSignal()
    hook_calls = []
    signal.on_fire(lambda: hook_calls.append(True))

    signal.cancel()
    signal.fire()

    assert hook_calls == []


@pytest.mark.asyncio
async def test_driver_task_drains_queue():
    transport = RecordingTransport()
    queue = DispatchQueue(transport, cooldown_ticks=2, tick_interval=0.001)
    signal = CompletionSignal()
    queue.enqueue("/gc hi", signal)

    queue.start()
    await asyncio.wait_for(signal.wait(), timeout=1)
    queue.stop()

    assert transport.lines == ["/gc hi"]
