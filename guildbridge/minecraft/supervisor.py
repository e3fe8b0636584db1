"""Keeps the game connection alive and feeds its chat into the event bus."""

import asyncio
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

from guildbridge.bus.events import Connected, Disconnected, StatusNotice
from guildbridge.bus.queue import EventBus
from guildbridge.errors import FatalConnectionError
from guildbridge.minecraft.classifier import parse
from guildbridge.minecraft.connection import EventKind, GameConnection
from guildbridge.minecraft.dispatch import DispatchQueue
from guildbridge.minecraft.session import BridgeSession

DEFAULT_BACKOFF_FLOOR_S = 5.0
DEFAULT_BACKOFF_CEILING_S = 300.0

StatusListener = Callable[[StatusNotice], Awaitable[None]]


class ConnectionState(Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FATAL = "fatal"


class Backoff:
    """Reconnect delay growing by ``floor`` per failed attempt, up to ``ceiling``."""

    def __init__(self, floor: float = DEFAULT_BACKOFF_FLOOR_S, ceiling: float = DEFAULT_BACKOFF_CEILING_S):
        self.floor = floor
        self.ceiling = ceiling
        self._delay = floor

    @property
    def delay(self) -> float:
        return self._delay

    def advance(self) -> float:
        """Return the delay to sleep now and grow the next one."""
        delay = self._delay
        self._delay = min(self._delay + self.floor, self.ceiling)
        return delay

    def reset(self) -> None:
        self._delay = self.floor


class ConnectionSupervisor:
    """Owns the game connection lifecycle.

    Every chat line is classified and published on the bus. The dispatch
    queue driver runs from :meth:`run` until :meth:`stop`, so lines sent
    while disconnected are dropped by the connection and their callers time
    out. On a disconnect one offline notice is sent to the status listeners
    and the supervisor sleeps for the current backoff delay before
    reconnecting. A
    :class:`FatalConnectionError` ends :meth:`run` with that error.
    """

    def __init__(
        self,
        connection: GameConnection,
        bus: EventBus,
        queue: DispatchQueue,
        session: BridgeSession,
        backoff: Backoff | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.connection = connection
        self.bus = bus
        self.queue = queue
        self.session = session
        self.backoff = backoff or Backoff()
        self.state = ConnectionState.DISCONNECTED
        self._sleep = sleep
        self._listeners: list[StatusListener] = []
        self._running = False
        # No offline notice until there has been a login to lose
        self._offline_notified = True

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    async def run(self) -> None:
        self._running = True
        self.queue.start()

        while self._running:
            self.state = ConnectionState.CONNECTING
            try:
                await self.connection.connect()
                reason = await self._pump()
            except FatalConnectionError as e:
                self.state = ConnectionState.FATAL
                self.queue.stop()
                logger.error(f"Fatal game connection error: {e}")
                raise
            except Exception as e:
                reason = str(e) or type(e).__name__

            await self._on_disconnect(reason)

            if not self._running:
                break

            delay = self.backoff.advance()
            logger.info(f"Reconnecting in {delay:g} seconds...")
            await self._sleep(delay)

    async def stop(self) -> None:
        self._running = False
        self.queue.stop()
        await self.connection.close()

    async def _pump(self) -> str:
        async for event in self.connection.events():
            if event.kind is EventKind.CHAT:
                self._feed(event.payload)
            elif event.kind is EventKind.LOGIN:
                await self._on_login(event.payload)
            elif event.kind is EventKind.DISCONNECT:
                return event.payload
        return "Connection closed"

    def _feed(self, line: str) -> None:
        chat_event = parse(line)
        if chat_event is None:
            return
        logger.debug(f"Game chat: {line}")
        self.bus.publish(chat_event)

    async def _on_login(self, username: str) -> None:
        self.backoff.reset()
        self.session.username = username
        self.state = ConnectionState.CONNECTED
        self._offline_notified = False
        logger.info(f"Logged in to the game as {username}")
        await self._emit(Connected(username))

    async def _on_disconnect(self, reason: str) -> None:
        self.state = ConnectionState.DISCONNECTED
        try:
            await self.connection.close()
        except Exception as e:
            logger.debug(f"Error closing game connection: {e}")

        logger.warning(f"Disconnected from the game: {reason}")
        if self._offline_notified:
            return
        self._offline_notified = True
        await self._emit(Disconnected(reason))

    async def _emit(self, notice: StatusNotice) -> None:
        for listener in self._listeners:
            try:
                await listener(notice)
            except Exception as e:
                logger.error(f"Status listener failed on {notice}: {e}")
