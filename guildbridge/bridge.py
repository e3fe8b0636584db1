"""Wires the game connection, event bus and Discord channel together."""

import asyncio

from loguru import logger

from guildbridge.bus.queue import EventBus
from guildbridge.channels.discord import DiscordChannel
from guildbridge.config.schema import Config
from guildbridge.minecraft.connection import GameConnection, WebSocketGameConnection
from guildbridge.minecraft.dispatch import DispatchQueue
from guildbridge.minecraft.feedback import Feedback
from guildbridge.minecraft.session import BridgeSession
from guildbridge.minecraft.supervisor import Backoff, ConnectionSupervisor


class Bridge:
    """Owns every long-running part of the process."""

    def __init__(self, config: Config, connection: GameConnection | None = None):
        self.config = config
        self.bus = EventBus()
        self.session = BridgeSession()
        self.connection = connection or WebSocketGameConnection(config.minecraft.bridge_url)
        self.queue = DispatchQueue(
            self.connection,
            cooldown_ticks=config.dispatch.cooldown_ticks,
            tick_interval=config.dispatch.tick_interval,
        )
        self.feedback = Feedback(self.queue, self.bus, self.session, timeout=config.feedback.timeout)
        self.supervisor = ConnectionSupervisor(
            self.connection,
            self.bus,
            self.queue,
            self.session,
            backoff=Backoff(config.backoff.floor, config.backoff.ceiling),
        )
        self.discord = DiscordChannel(config.discord, self.bus, self.feedback)
        self.supervisor.add_status_listener(self.discord.send_status)

    async def run(self) -> None:
        """Run until the game connection fails fatally or a part stops."""
        supervisor = asyncio.create_task(self.supervisor.run(), name="supervisor")
        discord = asyncio.create_task(self.discord.start(), name="discord")

        try:
            done, _ = await asyncio.wait({supervisor, discord}, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                # Re-raises FatalConnectionError from the supervisor
                task.result()
                logger.warning(f"{task.get_name()} stopped")
        finally:
            await self.stop()
            for task in (supervisor, discord):
                task.cancel()
            await asyncio.gather(supervisor, discord, return_exceptions=True)

    async def stop(self) -> None:
        logger.info("Stopping bridge...")
        await self.supervisor.stop()
        await self.discord.stop()
