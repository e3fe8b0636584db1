"""Relaying a Discord message into guild or officer chat."""

from dataclasses import dataclass

from guildbridge.bus.events import BotNotInGuild, Chat, ChatEvent, CommandDisabled, Message, Unknown
from guildbridge.commands.base import RunCommand
from guildbridge.errors import CommandError
from guildbridge.minecraft.commands import ChatMessage
from guildbridge.minecraft.feedback import Failure, Success
from guildbridge.minecraft.session import BridgeSession


@dataclass(frozen=True)
class Reaction:
    emoji: str
    description: str


ILLEGAL_CHARACTERS = Reaction("✂️", "The message or your nickname contains illegal characters")
TOO_LONG = Reaction("📏", "The message is longer than ~250 characters")
EMPTY_FIELD = Reaction("❌", "The message or your name had no content after cleaning")
TIMED_OUT = Reaction("⏱️", "Searching for a command response timed out")
FAILED = Reaction("⚠️", "The message could not be sent in game")
MUTED = Reaction("🔇", "The bridge bot is muted in guild chat")
NO_PERMISSION = Reaction("🔒", "The bridge bot has no access to this chat")
NOT_IN_GUILD = Reaction("🚷", "The bridge bot is not in a guild")

BOT_MUTED = "I'm muted in guild chat"
NO_OFFICER_ACCESS = "I don't have access to the officer chat"

_FAILURE_REACTIONS = {
    BOT_MUTED: MUTED,
    NO_OFFICER_ACCESS: NO_PERMISSION,
    str(BotNotInGuild()): NOT_IN_GUILD,
}


def reaction_for(failure: Failure) -> Reaction:
    return _FAILURE_REACTIONS.get(failure.message, FAILED)


@dataclass
class ChatCommand(RunCommand):
    """A Discord message to repeat in game as ``/gc author: content``.

    Succeeds when the game echoes the bot's own message back in the same
    chat.
    """

    author: str
    content: str
    chat: Chat

    name = "chat"

    def __post_init__(self):
        self.message, self.issues = ChatMessage.build(self.author, self.content, self.chat)

    @property
    def reactions(self) -> list[Reaction]:
        reactions = []
        if self.issues.illegal_characters:
            reactions.append(ILLEGAL_CHARACTERS)
        if self.issues.too_long:
            reactions.append(TOO_LONG)
        if self.issues.empty:
            reactions.append(EMPTY_FIELD)
        return reactions

    def get_command(self) -> ChatMessage:
        if self.message is None:
            raise CommandError("Message is empty after cleaning")
        return self.message

    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        if isinstance(event, Message):
            if (
                self.message is not None
                and event.chat is self.chat
                and session.is_bot(event.author)
                and event.content.startswith(self.message.author)
                and event.content.endswith(self.message.content)
            ):
                return Success(event.content)
            return None

        if isinstance(event, (BotNotInGuild, CommandDisabled)):
            return Failure(str(event))

        if isinstance(event, Unknown):
            message = event.raw
            if message.startswith("You're currently guild muted for") and message.endswith("!"):
                return Failure(BOT_MUTED)
            if self.chat is Chat.OFFICER and message == "You don't have access to the officer chat!":
                return Failure(NO_OFFICER_ACCESS)
            if message == "You must be in a guild to use this command!":
                return Failure(str(BotNotInGuild()))
        return None
