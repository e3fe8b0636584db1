"""Rate limited FIFO of outgoing command lines."""

import asyncio
from typing import Callable, Protocol

from loguru import logger

DEFAULT_COOLDOWN_TICKS = 10
DEFAULT_TICK_INTERVAL_S = 0.05


class LineSink(Protocol):
    def send_line(self, text: str) -> None: ...


class CompletionSignal:
    """One-shot notification that a queued line was handed to the connection.

    Hooks registered with :meth:`on_fire` run synchronously inside
    :meth:`fire`, before any waiter resumes. Firing twice is an error; firing
    after the waiter gave up is a no-op.
    """

    def __init__(self):
        self._future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._hooks: list[Callable[[], None]] = []
        self._fired = False

    def on_fire(self, hook: Callable[[], None]) -> None:
        self._hooks.append(hook)

    def fire(self) -> None:
        if self._fired:
            raise RuntimeError("Completion signal already fired")
        self._fired = True

        if self._future.done():
            return

        for hook in self._hooks:
            hook()
        self._future.set_result(None)

    def cancel(self) -> None:
        self._future.cancel()

    @property
    def fired(self) -> bool:
        return self._fired

    async def wait(self) -> None:
        await self._future


class DispatchQueue:
    """Sends queued lines one at a time, at least ``cooldown_ticks`` apart.

    A single driver task calls :meth:`drain_tick` every ``tick_interval``
    seconds. The first tick may send straight away; after a send, the next
    one happens no sooner than ``cooldown_ticks`` ticks later. Lines go out
    in the order they were enqueued and each one is sent once.
    """

    def __init__(
        self,
        transport: LineSink,
        cooldown_ticks: int = DEFAULT_COOLDOWN_TICKS,
        tick_interval: float = DEFAULT_TICK_INTERVAL_S,
    ):
        self.transport = transport
        self.cooldown_ticks = cooldown_ticks
        self.tick_interval = tick_interval
        self._queue: asyncio.Queue[tuple[str, CompletionSignal]] = asyncio.Queue()
        self._elapsed = cooldown_ticks
        self._running = False
        self._task: asyncio.Task | None = None

    def enqueue(self, text: str, signal: CompletionSignal) -> None:
        self._queue.put_nowait((text, signal))
        logger.debug(f"Queued command ({self._queue.qsize()} pending): {text}")

    def drain_tick(self) -> str | None:
        """Advance one tick and send the head of the queue if the cooldown allows.

        Returns the line that was sent, if any.
        """
        self._elapsed = min(self._elapsed + 1, self.cooldown_ticks)
        if self._elapsed < self.cooldown_ticks:
            return None

        try:
            text, signal = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

        try:
            self.transport.send_line(text)
        except Exception as e:
            logger.error(f"Failed to send command {text!r}: {e}")

        self._elapsed = 0
        try:
            signal.fire()
        except RuntimeError as e:
            logger.error(f"Completion signal for {text!r}: {e}")
        return text

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> None:
        self._running = True
        logger.debug(f"Dispatch driver started (every {self.tick_interval}s)")
        while self._running:
            try:
                self.drain_tick()
                await asyncio.sleep(self.tick_interval)
            except asyncio.CancelledError:
                break
        self._running = False

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self.run())

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
