"""Broadcast bus fanning classified chat events out to subscribers."""

import asyncio

from loguru import logger

from guildbridge.bus.events import ChatEvent


class Subscription:
    """One subscriber's private view of the bus.

    An inert subscription is registered with the bus but discards everything
    published while it is inert; once activated it buffers events in
    publication order until they are received. Closing it unregisters it.
    """

    def __init__(self, bus: "EventBus", active: bool = True):
        self._bus = bus
        self._queue: asyncio.Queue[ChatEvent] = asyncio.Queue()
        self._active = active
        self._closed = False

    @property
    def active(self) -> bool:
        return self._active and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def activate(self) -> None:
        if self._closed:
            raise RuntimeError("Cannot activate a closed subscription")
        self._active = True

    def deliver(self, event: ChatEvent) -> bool:
        if not self.active:
            return False
        self._queue.put_nowait(event)
        return True

    async def recv(self) -> ChatEvent:
        return await self._queue.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._active = False
        self._bus.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChatEvent:
        return await self.recv()

    @property
    def pending(self) -> int:
        return self._queue.qsize()


class EventBus:
    """Delivers every published event to every active subscription.

    The bus keeps no history: a subscriber only sees events published while
    it is active. Only the classifier pipeline publishes.
    """

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def subscribe(self, active: bool = True) -> Subscription:
        subscription = Subscription(self, active=active)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass

    def publish(self, event: ChatEvent) -> int:
        """Fan ``event`` out and return how many subscriptions received it."""
        delivered = 0
        for subscription in list(self._subscriptions):
            if subscription.deliver(event):
                delivered += 1
        logger.debug(f"Published {type(event).__name__} to {delivered} subscriber(s)")
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
