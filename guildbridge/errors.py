"""Exception hierarchy for the bridge."""


class BridgeError(Exception):
    """Base class of every error raised by guildbridge."""


class FatalConnectionError(BridgeError):
    """The game connection failed in a way that retrying cannot fix.

    Raised for protocol or authentication failures during login. The
    supervisor does not reconnect after one of these; the process exits.
    """


class CommandError(BridgeError):
    """A command could not be built from the user's input."""


class ConfigError(BridgeError):
    """The configuration is missing a required value."""
