"""Typed events produced from in-game chat lines.

Every variant is a frozen dataclass deriving from :class:`ChatEvent`. Only the
classifier constructs them; consumers pattern-match with ``isinstance`` or
``match`` statements.
"""

from dataclasses import dataclass
from enum import Enum


class Chat(Enum):
    """The two in-game chats the bridge mirrors."""

    GUILD = "guild"
    OFFICER = "officer"

    @property
    def prefix(self) -> str:
        return "gc" if self is Chat.GUILD else "oc"


class MuteUnit(Enum):
    MINUTE = "m"
    HOUR = "h"
    DAY = "d"

    @classmethod
    def from_char(cls, value: str) -> "MuteUnit":
        return cls(value.lower())

    def __str__(self) -> str:
        return {"m": "Minutes", "h": "Hours", "d": "Days"}[self.value]


class ChatEvent:
    """Base class of every classified chat line."""

    __slots__ = ()


# Chat messages

@dataclass(frozen=True)
class Message(ChatEvent):
    """A line posted in guild or officer chat, e.g. ``Guild > neyoa: hi``."""

    author: str
    content: str
    chat: Chat


@dataclass(frozen=True)
class Toggle(ChatEvent):
    """A guild member connected to (``online``) or left the server."""

    member: str
    online: bool


# Guild membership updates

class GuildUpdate(ChatEvent):
    __slots__ = ()


@dataclass(frozen=True)
class Join(GuildUpdate):
    member: str


@dataclass(frozen=True)
class Leave(GuildUpdate):
    member: str


@dataclass(frozen=True)
class Kick(GuildUpdate):
    member: str
    by: str


@dataclass(frozen=True)
class Promotion(GuildUpdate):
    member: str
    old_rank: str
    new_rank: str


@dataclass(frozen=True)
class Demotion(GuildUpdate):
    member: str
    old_rank: str
    new_rank: str


# Moderation. ``member is None`` targets the whole guild chat.

class Moderation(ChatEvent):
    __slots__ = ()


@dataclass(frozen=True)
class Mute(Moderation):
    member: str | None
    by: str
    length: int
    unit: MuteUnit


@dataclass(frozen=True)
class Unmute(Moderation):
    member: str | None
    by: str


# Known failure acknowledgements

class CommandResponse(ChatEvent):
    __slots__ = ()


@dataclass(frozen=True)
class NotInGuild(CommandResponse):
    user: str

    def __str__(self) -> str:
        return f"`{self.user}` is not in the guild"


@dataclass(frozen=True)
class NoPermission(CommandResponse):
    def __str__(self) -> str:
        return "I don't have permission to do that"


@dataclass(frozen=True)
class PlayerNotFound(CommandResponse):
    user: str

    def __str__(self) -> str:
        return f"`{self.user}` could not be found"


@dataclass(frozen=True)
class CommandDisabled(CommandResponse):
    def __str__(self) -> str:
        return "This command is currently disabled"


@dataclass(frozen=True)
class BotNotInGuild(CommandResponse):
    def __str__(self) -> str:
        return "I'm not in a guild"


@dataclass(frozen=True)
class Unknown(ChatEvent):
    """A line no rule recognised. ``raw`` is the normalized line."""

    raw: str


# Connection status notices. These are not chat events and never pass
# through the classifier or the event bus.

@dataclass(frozen=True)
class Connected:
    username: str


@dataclass(frozen=True)
class Disconnected:
    reason: str


StatusNotice = Connected | Disconnected
