"""Chat platform channels."""

from guildbridge.channels.base import BaseChannel

__all__ = ["BaseChannel"]
