"""Event bus and chat event types."""

from guildbridge.bus.events import ChatEvent
from guildbridge.bus.queue import EventBus, Subscription

__all__ = ["EventBus", "Subscription", "ChatEvent"]
