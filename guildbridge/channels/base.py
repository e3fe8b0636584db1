"""Base channel interface for chat platforms."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from guildbridge.bus.events import ChatEvent, StatusNotice
from guildbridge.bus.queue import EventBus, Subscription


class BaseChannel(ABC):
    """A chat platform the game chat is relayed to.

    The channel gets a passive subscription to the event bus when it starts
    and forwards every event it receives to :meth:`send`.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: EventBus):
        self.config = config
        self.bus = bus
        self._running = False
        self._subscription: Subscription | None = None

    @abstractmethod
    async def start(self) -> None:
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass

    @abstractmethod
    async def send(self, event: ChatEvent) -> None:
        """Relay one classified game event."""
        pass

    @abstractmethod
    async def send_status(self, notice: StatusNotice) -> None:
        pass

    async def _relay_loop(self) -> None:
        self._subscription = self.bus.subscribe()
        logger.debug(f"{self.name} relay started")
        try:
            async for event in self._subscription:
                try:
                    await self.send(event)
                except Exception as e:
                    logger.error(f"Error relaying {type(event).__name__} to {self.name}: {e}")
        finally:
            self._subscription.close()
            self._subscription = None

    @property
    def is_running(self) -> bool:
        return self._running
