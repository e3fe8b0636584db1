"""Per-login state of the game session."""

from dataclasses import dataclass


@dataclass
class BridgeSession:
    """The bot's identity in game.

    Set by the supervisor on every successful login and read by command
    predicates to recognise the bot's own actions.
    """

    username: str | None = None

    def is_bot(self, name: str | None) -> bool:
        if not name or self.username is None:
            return False
        return name.lower() == self.username.lower()
