"""Pairs an issued command with the chat event that answers it."""

import asyncio
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from guildbridge.bus.events import ChatEvent
from guildbridge.bus.queue import EventBus, Subscription
from guildbridge.minecraft.commands import Command
from guildbridge.minecraft.dispatch import CompletionSignal, DispatchQueue
from guildbridge.minecraft.session import BridgeSession

DEFAULT_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class Success:
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Failure:
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Timeout:
    after: float

    def __str__(self) -> str:
        return f"The bridge couldn't confirm the command within {self.after:g} seconds"


Outcome = Success | Failure | Timeout

# Must be side-effect free and return None for unrelated events
Predicate = Callable[[ChatEvent], Success | Failure | None]


class Feedback:
    """Runs commands through the dispatch queue and waits for their outcome.

    :meth:`execute` subscribes to the bus before the command is queued, but
    the subscription only starts observing events at the moment the dispatch
    queue hands the command to the connection. A predicate therefore never
    sees chat that happened while the command was still waiting its turn.
    """

    def __init__(
        self,
        queue: DispatchQueue,
        bus: EventBus,
        session: BridgeSession,
        timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.queue = queue
        self.bus = bus
        self.session = session
        self.timeout = timeout

    async def execute(self, command: Command, predicate: Predicate) -> Outcome:
        text = command.serialize()
        subscription = self.bus.subscribe(active=False)
        signal = CompletionSignal()
        signal.on_fire(subscription.activate)

        try:
            self.queue.enqueue(text, signal)
            await signal.wait()
            logger.debug(f"Sent {text!r}, waiting for a response")

            try:
                return await asyncio.wait_for(
                    self._first_match(subscription, predicate),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"No response to {text!r} after {self.timeout}s")
                return Timeout(self.timeout)
        finally:
            subscription.close()

    @staticmethod
    async def _first_match(subscription: Subscription, predicate: Predicate) -> Success | Failure:
        async for event in subscription:
            result = predicate(event)
            if result is not None:
                return result
