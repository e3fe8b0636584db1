"""Base class for commands issued from Discord and run in game."""

from abc import ABC, abstractmethod

from loguru import logger

from guildbridge.bus.events import (
    BotNotInGuild,
    ChatEvent,
    CommandDisabled,
    NoPermission,
    NotInGuild,
    PlayerNotFound,
)
from guildbridge.errors import CommandError
from guildbridge.minecraft.commands import Command
from guildbridge.minecraft.feedback import Failure, Feedback, Outcome, Success
from guildbridge.minecraft.session import BridgeSession


class RunCommand(ABC):
    """A Discord request that becomes one in-game command.

    Subclasses build the in-game :class:`Command` and decide which chat
    events answer it. ``check_event`` must not have side effects and returns
    ``None`` for anything that is not an answer.
    """

    name: str = "base"

    @abstractmethod
    def get_command(self) -> Command:
        """Build the in-game command. Raises :class:`CommandError` on bad input."""
        pass

    @abstractmethod
    def check_event(self, event: ChatEvent, session: BridgeSession) -> Success | Failure | None:
        pass

    async def run(self, feedback: Feedback) -> Outcome:
        try:
            command = self.get_command()
        except CommandError as e:
            return Failure(str(e))

        logger.info(f"Running {self.name}: {command.serialize()}")
        outcome = await feedback.execute(command, lambda event: self.check_event(event, feedback.session))
        logger.info(f"{self.name} finished: {outcome}")
        return outcome


def check_response(event: ChatEvent, player: str | None = None) -> Failure | None:
    """Failures every guild command shares.

    ``NotInGuild`` and ``PlayerNotFound`` only count when they name
    ``player``.
    """
    if isinstance(event, (NotInGuild, PlayerNotFound)):
        if player is not None and event.user.lower() == player.lower():
            return Failure(str(event))
        return None

    if isinstance(event, (NoPermission, BotNotInGuild, CommandDisabled)):
        return Failure(str(event))

    return None
