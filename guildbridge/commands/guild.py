"""Guild management commands run through the bridge bot."""

import re
from dataclasses import dataclass

from guildbridge.bus import events
from guildbridge.bus.events import ChatEvent, MuteUnit, Unknown
from guildbridge.commands.base import RunCommand, check_response
from guildbridge.errors import CommandError
from guildbridge.minecraft import commands
from guildbridge.minecraft.feedback import Failure, Feedback, Outcome, Success, Timeout
from guildbridge.minecraft.session import BridgeSession
from guildbridge.sanitizer import clean, clean_rank

NO_PERMISSION = str(events.NoPermission())

HIGHEST_RANK = re.compile(r"(?:\[.+?\] )?(\w+) is already the highest rank you've created!")
LOWEST_RANK = re.compile(r"(?:\[.+?\] )?(\w+) is already the lowest rank you've created!")
GUILD_MASTER_PROMOTE = re.compile(r"(?:\[.+?\] )?(\w+) is the guild master so can't be promoted anymore!")
GUILD_MASTER_DEMOTE = re.compile(r"(?:\[.+?\] )?(\w+) is the guild master so can't be demoted!")
RANK_NOT_FOUND = re.compile(r"I couldn't find a rank by the name of '(.+)'!")

INVITED = re.compile(r"You invited (?:\[.+?\] )?(\w+) to your guild\. They have 5 minutes to accept\.")
OFFLINE_INVITE = re.compile(
    r"You sent an offline invite to (?:\[.+?\] )?(\w+)! "
    r"They will have 5 minutes to accept once they come online!"
)
IN_ANOTHER_GUILD = re.compile(r"(?:\[.+?\] )?(\w+) is already in another guild!")
ALREADY_INVITED = re.compile(r"You've already invited (?:\[.+?\] )?(\w+) to your guild\. Wait for them to accept!")
ALREADY_IN_GUILD = re.compile(r"(?:\[.+?\] )?(\w+) is already in your guild!")


def _same(name: str | None, player: str) -> bool:
    return name is not None and name.lower() == player.lower()


def _unknown(event: ChatEvent) -> str | None:
    return event.raw if isinstance(event, Unknown) else None


@dataclass
class MuteCommand(RunCommand):
    """Mute a member, or the whole guild chat when ``player`` is ``everyone``."""

    player: str
    duration: int
    unit: MuteUnit

    name = "mute"

    def get_command(self) -> commands.Mute:
        return commands.Mute(self.player, self.duration, self.unit)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Mute):
            member = event.member or commands.EVERYONE
            if session.is_bot(event.by) and _same(member, self.player):
                if event.member is None:
                    return Success(f"`Guild Chat` has been muted for {event.length}{event.unit.value}")
                return Success(f"`{event.member}` has been muted for {event.length}{event.unit.value}")
            return None

        message = _unknown(event)
        if message is not None:
            if message == "This player is already muted!":
                return Failure(f"`{self.player}` is already muted")
            if message in (
                "You cannot mute a guild member with a higher guild rank!",
                "You cannot mute yourself from the guild!",
            ):
                return Failure(NO_PERMISSION)
            if message in (
                "You cannot mute someone for more than one month",
                "You cannot mute someone for less than a minute",
            ):
                return Failure("Invalid duration")
            return None

        return check_response(event, self.player)


@dataclass
class UnmuteCommand(RunCommand):
    player: str

    name = "unmute"

    def get_command(self) -> commands.Unmute:
        return commands.Unmute(self.player)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Unmute):
            member = event.member or commands.EVERYONE
            if session.is_bot(event.by) and _same(member, self.player):
                if event.member is None:
                    return Success("`Guild Chat` has been unmuted")
                return Success(f"`{event.member}` has been unmuted")
            return None

        message = _unknown(event)
        if message is not None:
            if message == "This player is not muted!":
                return Failure(f"`{self.player}` is not muted")
            if message == "The guild is not muted!" and _same(commands.EVERYONE, self.player):
                return Failure("`Guild Chat` is not muted")
            return None

        return check_response(event, self.player)


@dataclass
class InviteCommand(RunCommand):
    player: str

    name = "invite"

    def get_command(self) -> commands.Invite:
        return commands.Invite(self.player)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        message = _unknown(event)
        if message is None:
            return check_response(event, self.player)

        if (match := INVITED.fullmatch(message)) and _same(match[1], self.player):
            return Success(f"`{match[1]}` has been invited to the guild")
        if (match := OFFLINE_INVITE.fullmatch(message)) and _same(match[1], self.player):
            return Success(f"`{match[1]}` has been sent an offline invite")
        if (match := IN_ANOTHER_GUILD.fullmatch(message)) and _same(match[1], self.player):
            return Failure(f"`{match[1]}` is already in another guild")
        if (match := ALREADY_INVITED.fullmatch(message)) and _same(match[1], self.player):
            return Failure(f"`{match[1]}` has already been invited")
        if (match := ALREADY_IN_GUILD.fullmatch(message)) and _same(match[1], self.player):
            return Failure(f"`{match[1]}` is already in the guild")
        if message == "Your guild is full!":
            return Failure("The guild is full")
        if message == "You cannot invite this player to your guild!":
            return Failure(f"`{self.player}` cannot be invited")
        return None


@dataclass
class KickCommand(RunCommand):
    player: str
    reason: str = commands.DEFAULT_KICK_REASON

    name = "kick"

    def get_command(self) -> commands.Kick:
        reason, _ = clean(self.reason)
        reason = reason[: commands.Kick.max_reason_length(self.player)].rstrip()
        return commands.Kick(self.player, reason or commands.DEFAULT_KICK_REASON)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Kick):
            if _same(event.member, self.player):
                return Success(f"`{event.member}` was kicked from the guild")
            return None

        message = _unknown(event)
        if message is not None:
            if message == "Invalid usage! '/guild kick <player> <reason>'":
                return Failure("Missing reason")
            return None

        return check_response(event, self.player)


@dataclass
class PromoteCommand(RunCommand):
    player: str

    name = "promote"

    def get_command(self) -> commands.Promote:
        return commands.Promote(self.player)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Promotion):
            if _same(event.member, self.player):
                return Success(
                    f"`{event.member}` has been promoted from `{event.old_rank}` to `{event.new_rank}`"
                )
            return None

        message = _unknown(event)
        if message is not None:
            if match := HIGHEST_RANK.fullmatch(message):
                return Failure(f"`{match[1]}` is already the highest rank")
            if message == "You can only promote up to your own rank!" or GUILD_MASTER_PROMOTE.fullmatch(message):
                return Failure(NO_PERMISSION)
            return None

        return check_response(event, self.player)


@dataclass
class DemoteCommand(RunCommand):
    player: str

    name = "demote"

    def get_command(self) -> commands.Demote:
        return commands.Demote(self.player)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Demotion):
            if _same(event.member, self.player):
                return Success(
                    f"`{event.member}` has been demoted from `{event.old_rank}` to `{event.new_rank}`"
                )
            return None

        message = _unknown(event)
        if message is not None:
            if match := LOWEST_RANK.fullmatch(message):
                return Failure(f"`{match[1]}` is already the lowest rank")
            if message == "You can only demote up to your own rank!" or GUILD_MASTER_DEMOTE.fullmatch(message):
                return Failure(NO_PERMISSION)
            return None

        return check_response(event, self.player)


@dataclass
class SetRankCommand(RunCommand):
    player: str
    rank: str

    name = "setrank"

    def get_command(self) -> commands.SetRank:
        rank = clean_rank(self.rank)
        if not rank:
            raise CommandError(f"`{self.rank}` is not a valid guild rank")
        return commands.SetRank(self.player, rank)

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.Promotion) and _same(event.member, self.player):
            return Success(f"`{event.member}` has been promoted from `{event.old_rank}` to `{event.new_rank}`")
        if isinstance(event, events.Demotion) and _same(event.member, self.player):
            return Success(f"`{event.member}` has been demoted from `{event.old_rank}` to `{event.new_rank}`")
        if isinstance(event, events.GuildUpdate):
            return None

        message = _unknown(event)
        if message is not None:
            if match := RANK_NOT_FOUND.fullmatch(message):
                return Failure(f"Couldn't find rank `{match[1]}`")
            if message == "They already have that rank!":
                return Failure(f"`{self.player}` already has rank `{clean_rank(self.rank)}`")
            if message == "You can only promote/demote up to your own rank!":
                return Failure(NO_PERMISSION)
            return None

        return check_response(event, self.player)


@dataclass
class ExecuteCommand(RunCommand):
    """Run an arbitrary command as the bot.

    Arbitrary commands have no known answer, so the first line after the
    send that is neither chat nor a guild notice is reported as the first
    line seen, which may be unrelated server output. When nothing answers,
    the command is still reported as sent.
    """

    command: str

    name = "execute"

    def get_command(self) -> commands.Execute:
        return commands.Execute(self.command.strip())

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, events.CommandResponse):
            return Failure(str(event))
        message = _unknown(event)
        if message is not None:
            return Success(f"`{self.get_command().serialize()}`, first line seen:\n```{message}```")
        return None

    async def run(self, feedback: Feedback) -> Outcome:
        outcome = await super().run(feedback)
        if isinstance(outcome, Timeout):
            return Success(f"Running `{self.get_command().serialize()}`")
        return outcome
