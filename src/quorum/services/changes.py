"""Topic-based "data changed" notifications.

Events carry no payload semantics beyond the topic and a short kind string;
subscribers are expected to re-fetch whatever they display.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

QUESTIONS_TOPIC = "questions"
ANNOUNCEMENTS_TOPIC = "announcements"


def answers_topic(question_id: int) -> str:
    return f"answers:{question_id}"


def notifications_topic(user_id: int) -> str:
    return f"notifications:{user_id}"


@dataclass(frozen=True)
class ChangeEvent:
    topic: str
    kind: str

    def as_dict(self) -> dict[str, str]:
        return {"topic": self.topic, "kind": self.kind}


class Subscription:
    """Queue of pending events for one subscriber."""

    def __init__(self, feed: ChangeFeed, topic: str, maxsize: int) -> None:
        self.topic = topic
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)
        self._feed = feed

    async def get(self) -> ChangeEvent:
        return await self.queue.get()

    def close(self) -> None:
        self._feed.unsubscribe(self)

    async def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        try:
            while True:
                yield await self.queue.get()
        finally:
            self.close()


class ChangeFeed:
    """Fans out change events to subscribers of a topic."""

    def __init__(self, max_pending: int = 100) -> None:
        self._max_pending = max_pending
        self._subscribers: dict[str, set[Subscription]] = defaultdict(set)

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic, self._max_pending)
        self._subscribers[topic].add(subscription)
        logger.debug("Subscribed to %s (%d listeners)", topic, len(self._subscribers[topic]))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        listeners = self._subscribers.get(subscription.topic)
        if not listeners:
            return
        listeners.discard(subscription)
        if not listeners:
            del self._subscribers[subscription.topic]

    def publish(self, topic: str, kind: str) -> int:
        """Queue an event for every subscriber of ``topic``.

        A subscriber whose queue is full misses the event; since events only
        mean "re-fetch", the next one it receives carries the same meaning.

        Returns:
            Number of subscribers the event was queued for.
        """
        event = ChangeEvent(topic=topic, kind=kind)
        delivered = 0
        for subscription in list(self._subscribers.get(topic, ())):
            try:
                subscription.queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.debug("Dropping %s event for a slow subscriber", topic)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))


# Singleton used across the application
change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """Return the shared change feed."""
    return change_feed
