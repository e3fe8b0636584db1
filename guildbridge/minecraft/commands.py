"""Commands the bridge issues in game.

Each command validates its arguments on construction and serializes to
exactly one chat line. Content is expected to be cleaned and trimmed
upstream; :meth:`Command.serialize` refuses to produce an over-long line
instead of truncating it.
"""

from dataclasses import dataclass

from guildbridge.bus.events import Chat, MuteUnit
from guildbridge.errors import CommandError
from guildbridge.sanitizer import clean, clean_rank, is_valid_ign

# Longest line the server accepts
MAX_COMMAND_LENGTH = 256

EVERYONE = "everyone"
DEFAULT_KICK_REASON = "No reason specified"


def _require_ign(player: str) -> None:
    if not is_valid_ign(player):
        raise CommandError(f"`{player}` is not a valid IGN")


class Command:
    """Base class of every in-game command."""

    __slots__ = ()

    def line(self) -> str:
        raise NotImplementedError

    def serialize(self) -> str:
        text = self.line()
        assert len(text) <= MAX_COMMAND_LENGTH, (
            f"Command is {len(text)} characters, limit is {MAX_COMMAND_LENGTH}"
        )
        return text


@dataclass(frozen=True)
class ChatMessage(Command):
    author: str
    content: str
    chat: Chat

    def __post_init__(self):
        if not self.author:
            raise CommandError("Author is empty")
        if not self.content:
            raise CommandError("Message is empty")

    def line(self) -> str:
        return f"/{self.chat.prefix} {self.author}: {self.content}"

    @staticmethod
    def max_content_length(author: str, chat: Chat) -> int:
        # "/" + prefix + " " + author + ": "
        return MAX_COMMAND_LENGTH - 1 - len(chat.prefix) - 1 - len(author) - 2

    @classmethod
    def build(cls, author: str, content: str, chat: Chat) -> tuple["ChatMessage | None", "MessageIssues"]:
        """Clean ``author`` and ``content`` and fit them into one line.

        Returns the command, or ``None`` when either part is empty after
        cleaning, along with what had to be changed.
        """
        author, author_issues = clean(author)
        content, content_issues = clean(content)
        issues = MessageIssues(illegal_characters=author_issues or content_issues)

        if not author or not content:
            issues.empty = True
            return None, issues

        limit = cls.max_content_length(author, chat)
        if limit <= 0:
            issues.too_long = True
            return None, issues
        if len(content) > limit:
            content = content[:limit].rstrip()
            issues.too_long = True

        return cls(author, content, chat), issues


@dataclass
class MessageIssues:
    illegal_characters: bool = False
    too_long: bool = False
    empty: bool = False

    def __bool__(self) -> bool:
        return self.illegal_characters or self.too_long or self.empty


@dataclass(frozen=True)
class Mute(Command):
    player: str
    duration: int
    unit: MuteUnit

    def __post_init__(self):
        _require_ign(self.player)
        if not 1 <= self.duration <= 30:
            raise CommandError(f"`{self.duration}` is not a valid mute duration")

    def line(self) -> str:
        return f"/g mute {self.player} {self.duration}{self.unit.value}"


@dataclass(frozen=True)
class Unmute(Command):
    player: str

    def __post_init__(self):
        _require_ign(self.player)

    def line(self) -> str:
        return f"/g unmute {self.player}"


@dataclass(frozen=True)
class Invite(Command):
    player: str

    def __post_init__(self):
        _require_ign(self.player)

    def line(self) -> str:
        return f"/g invite {self.player}"


@dataclass(frozen=True)
class Kick(Command):
    player: str
    reason: str = DEFAULT_KICK_REASON

    def __post_init__(self):
        _require_ign(self.player)
        if not self.reason:
            raise CommandError("Missing reason")

    def line(self) -> str:
        return f"/g kick {self.player} {self.reason}"

    @staticmethod
    def max_reason_length(player: str) -> int:
        # "/g kick " + player + " "
        return MAX_COMMAND_LENGTH - len("/g kick ") - len(player) - 1


@dataclass(frozen=True)
class Promote(Command):
    player: str

    def __post_init__(self):
        _require_ign(self.player)

    def line(self) -> str:
        return f"/g promote {self.player}"


@dataclass(frozen=True)
class Demote(Command):
    player: str

    def __post_init__(self):
        _require_ign(self.player)

    def line(self) -> str:
        return f"/g demote {self.player}"


@dataclass(frozen=True)
class SetRank(Command):
    player: str
    rank: str

    def __post_init__(self):
        _require_ign(self.player)
        if not clean_rank(self.rank) or clean_rank(self.rank) != self.rank:
            raise CommandError(f"`{self.rank}` is not a valid rank")

    def line(self) -> str:
        return f"/g setrank {self.player} {self.rank}"


@dataclass(frozen=True)
class Execute(Command):
    command: str

    def __post_init__(self):
        if not self.command.strip("/ "):
            raise CommandError("Command is empty")

    def line(self) -> str:
        if self.command.startswith("/"):
            return self.command
        return f"/{self.command}"
