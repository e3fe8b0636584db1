"""Connection to the game through a line oriented websocket bridge.

The bridge is a headless Minecraft client that does the wire protocol and
authentication. It exchanges JSON frames with guildbridge:

inbound
    ``{"type": "login", "username": ...}``
    ``{"type": "chat", "content": ...}``
    ``{"type": "disconnect", "reason": ...}``
    ``{"type": "error", "fatal": bool, "error": ...}``
outbound
    ``{"type": "command", "command": ...}``
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator

import websockets
from loguru import logger

from guildbridge.errors import FatalConnectionError


class EventKind(Enum):
    LOGIN = "login"
    CHAT = "chat"
    DISCONNECT = "disconnect"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    payload: str


class GameConnection(ABC):
    """What the supervisor needs from a game connection."""

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    def events(self) -> AsyncIterator[GameEvent]:
        """Yield events until the connection ends with a ``DISCONNECT``."""
        pass

    @abstractmethod
    def send_line(self, text: str) -> None:
        """Send ``text`` without waiting. Dropped when not connected."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class WebSocketGameConnection(GameConnection):

    def __init__(self, bridge_url: str):
        self.bridge_url = bridge_url
        self._ws = None
        self._connected = False
        self._sends: set[asyncio.Task] = set()

    async def connect(self) -> None:
        logger.info(f"Connecting to game bridge at {self.bridge_url}...")
        self._ws = await websockets.connect(self.bridge_url)
        self._connected = True
        logger.info("Connected to game bridge")

    async def events(self) -> AsyncIterator[GameEvent]:
        if self._ws is None:
            yield GameEvent(EventKind.DISCONNECT, "Not connected")
            return

        try:
            async for raw in self._ws:
                event = self._handle_bridge_message(raw)
                if event is None:
                    continue
                yield event
                if event.kind is EventKind.DISCONNECT:
                    return
        except websockets.ConnectionClosed as e:
            self._connected = False
            yield GameEvent(EventKind.DISCONNECT, f"Bridge connection closed: {e}")
            return

        self._connected = False
        yield GameEvent(EventKind.DISCONNECT, "Bridge connection closed")

    def _handle_bridge_message(self, raw: str | bytes) -> GameEvent | None:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON from bridge: {raw[:100]!r}")
            return None

        msg_type = data.get("type")

        if msg_type == "chat":
            return GameEvent(EventKind.CHAT, data.get("content", ""))

        if msg_type == "login":
            return GameEvent(EventKind.LOGIN, data.get("username", ""))

        if msg_type == "disconnect":
            self._connected = False
            return GameEvent(EventKind.DISCONNECT, data.get("reason") or "Disconnected")

        if msg_type == "error":
            if data.get("fatal"):
                self._connected = False
                raise FatalConnectionError(data.get("error") or "Fatal bridge error")
            logger.error(f"Game bridge error: {data.get('error')}")
            return None

        logger.debug(f"Ignoring bridge frame of type {msg_type!r}")
        return None

    def send_line(self, text: str) -> None:
        if not self._ws or not self._connected:
            logger.debug(f"Game bridge not connected, dropping {text!r}")
            return

        task = asyncio.create_task(self._send(text))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)

    async def _send(self, text: str) -> None:
        try:
            await self._ws.send(json.dumps({"type": "command", "command": text}))
        except Exception as e:
            logger.error(f"Error sending to game bridge: {e}")

    async def close(self) -> None:
        self._connected = False
        if self._ws:
            await self._ws.close()
            self._ws = None
