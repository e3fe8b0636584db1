"""guildbridge - relays Hypixel guild chat to Discord and runs guild commands from Discord."""

__version__ = "0.1.0"
