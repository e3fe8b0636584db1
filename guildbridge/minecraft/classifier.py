"""Turns raw in-game chat lines into typed chat events.

Classification is an ordered table of :class:`Rule` entries. Every rule
pattern must match the whole line and the first rule that matches wins, so
the order of :data:`RULES` is part of the module's contract: several patterns
overlap (a member mute and a guild chat mute, a guild message whose content
happens to look like a join notice) and moving a rule changes which event a
line produces.

Player names may carry a rank tag before them (``[MVP+] neyoa``) and, in chat
messages, a guild tag after them (``neyoa [STAFF]``). Tags are never part of
an extracted name.
"""

import re
from dataclasses import dataclass
from typing import Callable

from guildbridge.bus.events import (
    BotNotInGuild,
    Chat,
    ChatEvent,
    CommandDisabled,
    Demotion,
    Join,
    Kick,
    Leave,
    Message,
    Mute,
    MuteUnit,
    NoPermission,
    NotInGuild,
    PlayerNotFound,
    Promotion,
    Toggle,
    Unknown,
    Unmute,
)

# Optional rank tag before a name, and optional guild tag after one
TAG = r"(?:\[[\w+]+\] )?"
SUFFIX_TAG = r"(?: \[[\w+]+\])?"
NAME = r"(\w+)"

DIVIDER = "-"


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: re.Pattern
    extractor: Callable[[re.Match], ChatEvent]

    def apply(self, line: str) -> ChatEvent | None:
        match = self.pattern.fullmatch(line)
        if match is None:
            return None
        return self.extractor(match)


def _rule(name: str, pattern: str, extractor: Callable[[re.Match], ChatEvent]) -> Rule:
    return Rule(name, re.compile(pattern), extractor)


def _mute(member: str | None, by: str, length: str, unit: str) -> Mute:
    return Mute(member=member, by=by, length=int(length), unit=MuteUnit.from_char(unit))


RULES: tuple[Rule, ...] = (
    # Messages
    _rule(
        "guild_message",
        rf"Guild > {TAG}{NAME}{SUFFIX_TAG}: (.+)",
        lambda m: Message(author=m[1], content=m[2], chat=Chat.GUILD),
    ),
    _rule(
        "officer_message",
        rf"Officer > {TAG}{NAME}{SUFFIX_TAG}: (.+)",
        lambda m: Message(author=m[1], content=m[2], chat=Chat.OFFICER),
    ),
    # Moderation, member rules before the guild chat rules
    _rule(
        "member_mute",
        rf"{TAG}{NAME} has muted {TAG}{NAME} for (\d{{1,2}})([mhd])",
        lambda m: _mute(m[2], m[1], m[3], m[4]),
    ),
    _rule(
        "member_unmute",
        rf"{TAG}{NAME} has unmuted {TAG}{NAME}",
        lambda m: Unmute(member=m[2], by=m[1]),
    ),
    _rule(
        "guild_mute",
        rf"{TAG}{NAME} has muted the guild chat for (\d{{1,2}})([mhd])",
        lambda m: _mute(None, m[1], m[2], m[3]),
    ),
    _rule(
        "guild_unmute",
        rf"{TAG}{NAME} has unmuted the guild chat!",
        lambda m: Unmute(member=None, by=m[1]),
    ),
    # Toggles
    _rule(
        "member_online",
        rf"Guild > {NAME} joined\.",
        lambda m: Toggle(member=m[1], online=True),
    ),
    _rule(
        "member_offline",
        rf"Guild > {NAME} left\.",
        lambda m: Toggle(member=m[1], online=False),
    ),
    # Guild membership
    _rule(
        "join",
        rf"{TAG}{NAME} joined the guild!",
        lambda m: Join(member=m[1]),
    ),
    _rule(
        "leave",
        rf"{TAG}{NAME} left the guild!",
        lambda m: Leave(member=m[1]),
    ),
    _rule(
        "kick",
        rf"{TAG}{NAME} was kicked from the guild by {TAG}{NAME}!",
        lambda m: Kick(member=m[1], by=m[2]),
    ),
    _rule(
        "promotion",
        rf"{TAG}{NAME} was promoted from (.+) to (.+)",
        lambda m: Promotion(member=m[1], old_rank=m[2], new_rank=m[3]),
    ),
    _rule(
        "demotion",
        rf"{TAG}{NAME} was demoted from (.+) to (.+)",
        lambda m: Demotion(member=m[1], old_rank=m[2], new_rank=m[3]),
    ),
    # Command responses
    _rule(
        "not_in_guild",
        r"(?:\[.+?\] )?(\w+) is not in your guild!",
        lambda m: NotInGuild(user=m[1]),
    ),
    _rule(
        "no_permission",
        "|".join(re.escape(line) for line in (
            "You must be the Guild Master to use that command!",
            "Your guild rank does not have permission to use this!",
            "You do not have permission to use this command!",
            "I'm sorry, but you do not have permission to perform this command. "
            "Please contact the server administrators if you believe that this is in error.",
        )),
        lambda m: NoPermission(),
    ),
    _rule(
        "player_not_found",
        r"Can't find a player by the name of '(\w+)'",
        lambda m: PlayerNotFound(user=m[1]),
    ),
    _rule(
        "command_disabled",
        re.escape("This command is currently disabled."),
        lambda m: CommandDisabled(),
    ),
    _rule(
        "bot_not_in_guild",
        re.escape("You must be in a guild to use this command!"),
        lambda m: BotNotInGuild(),
    ),
)


def normalize(line: str) -> str | None:
    """Strip divider runs and whitespace from both ends of ``line``.

    Returns ``None`` when nothing is left, which is how divider lines such as
    ``-----------------------------------------------------`` are dropped.
    """
    stripped = line.strip().strip(DIVIDER).strip()
    return stripped or None


def classify(line: str) -> ChatEvent:
    for rule in RULES:
        event = rule.apply(line)
        if event is not None:
            return event
    return Unknown(raw=line)


def parse(raw: str) -> ChatEvent | None:
    """Normalize then classify ``raw``; ``None`` for divider lines."""
    line = normalize(raw)
    if line is None:
        return None
    return classify(line)
