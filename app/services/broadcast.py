"""
Live event fan-out to connected clients.

Each connected client owns a Subscription holding a bounded queue. Publishing
puts the event on every matching queue without awaiting, so a slow client
never holds up the publisher or the other clients; when a client's queue is
full the event is dropped for that client only.
"""

import asyncio
import itertools
from typing import Any, Dict, FrozenSet, Iterable, Optional
import logging

from app.models.chat import ChatEvent

logger = logging.getLogger(__name__)


class Subscription:
    """Handle for one connected client"""

    def __init__(self, subscription_id: int, maxsize: int, rooms: Optional[Iterable[str]] = None):
        self.id = subscription_id
        self.rooms: Optional[FrozenSet[str]] = frozenset(rooms) if rooms else None
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def wants(self, room_key: Optional[str]) -> bool:
        # Unscoped subscriptions and room-less events match everything
        return self.rooms is None or room_key is None or room_key in self.rooms

    async def receive(self) -> Dict[str, Any]:
        return await self.queue.get()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Dict[str, Any]:
        return await self.receive()


class BroadcastHub:
    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(self, rooms: Optional[Iterable[str]] = None) -> Subscription:
        """Register a new client; ``rooms`` limits delivery to those room keys"""
        subscription = Subscription(next(self._ids), self.queue_size, rooms)
        self._subscriptions[subscription.id] = subscription
        logger.info(f"Subscriber {subscription.id} connected ({len(self._subscriptions)} total)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.info(f"Subscriber {subscription.id} disconnected ({len(self._subscriptions)} total)")

    def publish(self, event: ChatEvent, payload: Any, room_key: Optional[str] = None) -> int:
        """
        Deliver an event to every current subscriber.

        Returns the number of subscribers the event was queued for.
        """
        envelope = {"event": ChatEvent(event).value, "data": payload}
        delivered = 0
        # Snapshot so subscribe/unsubscribe during delivery cannot affect this pass
        for subscription in list(self._subscriptions.values()):
            if not subscription.wants(room_key):
                continue
            try:
                subscription.queue.put_nowait(envelope)
                delivered += 1
            except asyncio.QueueFull:
                subscription.dropped += 1
                logger.warning(
                    f"Dropping {envelope['event']} for slow subscriber {subscription.id} "
                    f"({subscription.dropped} dropped)"
                )
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
