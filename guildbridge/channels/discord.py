"""Discord channel implementation using discord.py."""

import asyncio

import discord
from discord import app_commands
from loguru import logger

from guildbridge.bus import events
from guildbridge.bus.events import Chat, ChatEvent, MuteUnit, StatusNotice
from guildbridge.bus.queue import EventBus
from guildbridge.channels.base import BaseChannel
from guildbridge.commands import (
    ChatCommand,
    DemoteCommand,
    ExecuteCommand,
    InviteCommand,
    KickCommand,
    MuteCommand,
    PromoteCommand,
    RunCommand,
    SetRankCommand,
    UnmuteCommand,
)
from guildbridge.commands.chat import FAILED, TIMED_OUT, reaction_for
from guildbridge.config.schema import DiscordConfig
from guildbridge.errors import ConfigError
from guildbridge.minecraft.commands import DEFAULT_KICK_REASON
from guildbridge.minecraft.feedback import Failure, Feedback, Outcome, Timeout
from guildbridge.minecraft.session import BridgeSession

BOTH_CHATS = (Chat.GUILD, Chat.OFFICER)


def render_event(event: ChatEvent, session: BridgeSession | None = None) -> list[tuple[Chat, str]]:
    """Plain text rendering of a game event and the chats it belongs in.

    Returns an empty list for events that are not relayed: command
    responses, unrecognised lines and the bot's own chat messages.
    """
    if isinstance(event, events.Message):
        if session is not None and session.is_bot(event.author):
            return []
        return [(event.chat, f"**{event.author}**: {event.content}")]

    if isinstance(event, events.Toggle):
        return [(Chat.GUILD, f"`{event.member}` {'joined' if event.online else 'left'}.")]

    if isinstance(event, events.Join):
        text = f"`{event.member}` joined the guild"
    elif isinstance(event, events.Leave):
        text = f"`{event.member}` left the guild"
    elif isinstance(event, events.Kick):
        text = f"`{event.member}` was kicked by `{event.by}`"
    elif isinstance(event, events.Promotion):
        text = f"`{event.member}` has been promoted from `{event.old_rank}` to `{event.new_rank}`"
    elif isinstance(event, events.Demotion):
        text = f"`{event.member}` has been demoted from `{event.old_rank}` to `{event.new_rank}`"
    elif isinstance(event, events.Mute):
        length = f"{event.length} {event.unit}"
        if event.member is None:
            text = f"The guild chat has been muted by `{event.by}` for `{length}`"
        else:
            return [(Chat.OFFICER, f"`{event.member}` has been muted by `{event.by}` for `{length}`")]
    elif isinstance(event, events.Unmute):
        if event.member is None:
            text = f"The guild chat has been unmuted by `{event.by}`"
        else:
            return [(Chat.OFFICER, f"`{event.member}` has been unmuted by `{event.by}`")]
    else:
        return []

    return [(chat, text) for chat in BOTH_CHATS]


def render_status(notice: StatusNotice) -> str:
    if isinstance(notice, events.Connected):
        return f"**Minecraft bot is connected** as `{notice.username}`"
    return f"**Minecraft bot is disconnected**, attempting to reconnect\nReason: {notice.reason}"


def render_outcome(outcome: Outcome) -> str:
    if isinstance(outcome, Failure):
        return f"{FAILED.emoji} {outcome}"
    if isinstance(outcome, Timeout):
        return f"{TIMED_OUT.emoji} {outcome}"
    return str(outcome)


class DiscordChannel(BaseChannel):
    """
    Discord side of the bridge.

    Mirrors guild and officer chat into two Discord channels, relays messages
    posted in those channels into the game, and exposes the guild management
    commands as the ``/guild`` slash command group.
    """

    name = "discord"

    def __init__(self, config: DiscordConfig, bus: EventBus, feedback: Feedback):
        super().__init__(config, bus)
        self.config: DiscordConfig = config
        self.feedback = feedback
        self._relay_task: asyncio.Task | None = None
        self._synced = False

        intents = discord.Intents.default()
        intents.message_content = True
        self.client = discord.Client(intents=intents)
        self.tree = app_commands.CommandTree(self.client)

        self._setup_events()
        self._setup_commands()

    @property
    def session(self) -> BridgeSession:
        return self.feedback.session

    def chat_for_channel(self, channel_id: int) -> Chat | None:
        if channel_id == self.config.guild_channel:
            return Chat.GUILD
        if channel_id == self.config.officer_channel:
            return Chat.OFFICER
        return None

    def channel_for_chat(self, chat: Chat) -> int:
        return self.config.guild_channel if chat is Chat.GUILD else self.config.officer_channel

    def _setup_events(self):
        @self.client.event
        async def on_ready():
            logger.info(f"Discord logged in as {self.client.user}")
            if not self._synced:
                await self._sync_commands()

        @self.client.event
        async def on_message(message: discord.Message):
            if message.author.bot or message.webhook_id is not None:
                return

            chat = self.chat_for_channel(message.channel.id)
            if chat is None:
                return

            await self._handle_chat_message(message, chat)

    async def _handle_chat_message(self, message: discord.Message, chat: Chat) -> None:
        command = ChatCommand(message.author.display_name, message.content, chat)

        for reaction in command.reactions:
            await self._react(message, reaction.emoji)
        if command.message is None:
            return

        outcome = await command.run(self.feedback)

        if isinstance(outcome, Timeout):
            await self._react(message, TIMED_OUT.emoji)
        elif isinstance(outcome, Failure):
            await self._react(message, reaction_for(outcome).emoji)
            try:
                await message.reply(str(outcome), mention_author=False)
            except discord.HTTPException as e:
                logger.error(f"Error replying on Discord: {e}")

    async def _react(self, message: discord.Message, emoji: str) -> None:
        try:
            await message.add_reaction(emoji)
        except discord.HTTPException as e:
            logger.warning(f"Could not add reaction {emoji}: {e}")

    def _setup_commands(self):
        guild = app_commands.Group(
            name="guild",
            description="Manage the Minecraft guild",
            guild_only=True,
            default_permissions=discord.Permissions(moderate_members=True),
        )

        @guild.command(name="mute", description="Mutes a player for a specified duration")
        @app_commands.describe(
            player="The player to mute, or everyone to mute the guild chat",
            duration="The duration to mute the player for",
            unit="The unit of the duration",
        )
        async def mute(
            interaction: discord.Interaction,
            player: app_commands.Range[str, 1, 16],
            duration: app_commands.Range[int, 1, 30],
            unit: MuteUnit,
        ):
            await self._run_slash(interaction, MuteCommand(player, duration, unit))

        @guild.command(name="unmute", description="Unmutes a player")
        @app_commands.describe(player="The player to unmute, or everyone to unmute the guild chat")
        async def unmute(interaction: discord.Interaction, player: app_commands.Range[str, 1, 16]):
            await self._run_slash(interaction, UnmuteCommand(player))

        @guild.command(name="invite", description="Invites a player to the guild")
        @app_commands.describe(player="The player to invite")
        async def invite(interaction: discord.Interaction, player: app_commands.Range[str, 1, 16]):
            await self._run_slash(interaction, InviteCommand(player))

        @guild.command(name="kick", description="Kicks a player from the guild")
        @app_commands.describe(player="The player to kick", reason="Why the player is being kicked")
        async def kick(
            interaction: discord.Interaction,
            player: app_commands.Range[str, 1, 16],
            reason: app_commands.Range[str, 1, 200] = DEFAULT_KICK_REASON,
        ):
            await self._run_slash(interaction, KickCommand(player, reason))

        @guild.command(name="promote", description="Promotes a player by one rank")
        @app_commands.describe(player="The player to promote")
        async def promote(interaction: discord.Interaction, player: app_commands.Range[str, 1, 16]):
            await self._run_slash(interaction, PromoteCommand(player))

        @guild.command(name="demote", description="Demotes a player by one rank")
        @app_commands.describe(player="The player to demote")
        async def demote(interaction: discord.Interaction, player: app_commands.Range[str, 1, 16]):
            await self._run_slash(interaction, DemoteCommand(player))

        @guild.command(name="setrank", description="Sets a player's guild rank")
        @app_commands.describe(player="The player whose rank to set", rank="The rank to give them")
        async def setrank(
            interaction: discord.Interaction,
            player: app_commands.Range[str, 1, 16],
            rank: app_commands.Range[str, 1, 32],
        ):
            await self._run_slash(interaction, SetRankCommand(player, rank))

        @app_commands.command(name="execute", description="Executes a command as the Minecraft bot")
        @app_commands.describe(command="The command to execute")
        @app_commands.guild_only()
        @app_commands.default_permissions(administrator=True)
        async def execute(interaction: discord.Interaction, command: app_commands.Range[str, 1, 255]):
            await self._run_slash(interaction, ExecuteCommand(command))

        self.tree.add_command(guild)
        self.tree.add_command(execute)

    async def _run_slash(self, interaction: discord.Interaction, command: RunCommand) -> None:
        # Responses can take longer than the interaction deadline
        await interaction.response.defer()
        outcome = await command.run(self.feedback)
        await interaction.followup.send(render_outcome(outcome))

    async def _sync_commands(self) -> None:
        try:
            if self.config.guild_id:
                target = discord.Object(id=self.config.guild_id)
                self.tree.copy_global_to(guild=target)
                synced = await self.tree.sync(guild=target)
            else:
                synced = await self.tree.sync()
            self._synced = True
            logger.info(f"Synced {len(synced)} Discord command(s)")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync Discord commands: {e}")

    async def start(self) -> None:
        """Start the Discord client and the relay."""
        logger.info("Starting Discord channel...")
        self._running = True
        self._relay_task = asyncio.create_task(self._relay_loop())
        try:
            await self.client.start(self.config.token)
        except discord.LoginFailure as e:
            logger.error(f"Discord login failed: {e}")
            raise ConfigError("Invalid Discord token (discord.token)") from e

    async def stop(self) -> None:
        """Stop the relay and the Discord client."""
        self._running = False
        if self._relay_task:
            self._relay_task.cancel()
            self._relay_task = None
        await self.client.close()

    async def send(self, event: ChatEvent) -> None:
        for chat, text in render_event(event, self.session):
            await self._send_text(self.channel_for_chat(chat), text)

    async def send_status(self, notice: StatusNotice) -> None:
        text = render_status(notice)
        for chat in BOTH_CHATS:
            await self._send_text(self.channel_for_chat(chat), text)

    async def _send_text(self, channel_id: int, text: str) -> None:
        channel = self.client.get_channel(channel_id)
        if not channel:
            # Try fetching if not in cache
            try:
                channel = await self.client.fetch_channel(channel_id)
            except discord.DiscordException:
                logger.error(f"Discord channel {channel_id} not found")
                return

        try:
            await channel.send(text, allowed_mentions=discord.AllowedMentions(everyone=False, roles=False))
        except discord.HTTPException as e:
            logger.error(f"Error sending Discord message: {e}")
