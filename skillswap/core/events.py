"""
Change Bus - notify-only publish/subscribe for row changes.

Subscribers register for a (collection, user_id) channel and receive a
ChangeEvent whenever a row in that collection involving the user is
created, updated or deleted. Events carry no row payload; subscribers
re-fetch the collection.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, Set, Tuple

logger = logging.getLogger(__name__)

SWAP_REQUESTS = "swap_requests"
RATINGS = "ratings"
PROFILES = "profiles"


@dataclass(frozen=True)
class ChangeEvent:
    """Notification that a collection changed for a user"""
    collection: str
    user_id: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_name(self) -> str:
        return f"{self.collection}_changed"

    def to_message(self) -> dict:
        return {
            "event": self.event_name,
            "collection": self.collection,
            "user_id": self.user_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


Callback = Callable[[ChangeEvent], Awaitable[None]]


@dataclass(eq=False)
class Subscription:
    subscription_id: str
    collection: str
    user_id: str
    callback: Callback

    @property
    def channel(self) -> Tuple[str, str]:
        return (self.collection, self.user_id)


class ChangeBus:
    """
    In-process change channel.

    Delivery awaits each subscriber callback in turn. A callback that raises
    is logged and its subscription removed.
    """

    def __init__(self):
        # (collection, user_id) -> subscriptions
        self._channels: Dict[Tuple[str, str], Set[Subscription]] = {}
        self._lock = asyncio.Lock()
        self._counter = 0

    async def subscribe(self, collection: str, user_id: str, callback: Callback) -> Subscription:
        async with self._lock:
            self._counter += 1
            subscription = Subscription(
                subscription_id=f"{collection}:{user_id}:{self._counter}",
                collection=collection,
                user_id=user_id,
                callback=callback,
            )
            self._channels.setdefault(subscription.channel, set()).add(subscription)

        logger.debug(f"Subscribed {subscription.subscription_id}")
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        async with self._lock:
            subscribers = self._channels.get(subscription.channel)
            if not subscribers:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._channels[subscription.channel]

        logger.debug(f"Unsubscribed {subscription.subscription_id}")

    def subscriber_count(self, collection: str, user_id: str) -> int:
        return len(self._channels.get((collection, user_id), ()))

    async def publish(self, collection: str, user_ids: Iterable[str]) -> int:
        """
        Notify every subscriber of ``collection`` for each of ``user_ids``.

        Returns:
            The number of callbacks that completed.
        """
        delivered = 0
        for user_id in dict.fromkeys(user_ids):
            async with self._lock:
                subscribers = list(self._channels.get((collection, user_id), ()))

            event = ChangeEvent(collection=collection, user_id=user_id)
            for subscription in subscribers:
                try:
                    await subscription.callback(event)
                    delivered += 1
                except Exception as e:
                    logger.warning(
                        f"Dropping subscriber {subscription.subscription_id}: {e}"
                    )
                    await self.unsubscribe(subscription)

        return delivered
