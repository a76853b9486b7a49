"""Topic-keyed publish/subscribe for GraphQL subscriptions.

Bridges the store's callback-style change notifications to pull-based async
iterators. Every topic (one per watched document) moves through:

    Uninitialized -> Active (one store listener) -> Torn down

The first subscriber to a topic registers the store listener; later
subscribers share it. Each subscriber gets its own queue-backed iterator that
receives every notification published after it subscribed, in delivery order.
When the last subscriber closes its iterator the store listener is disposed
and the topic entry is dropped.

Usage:
    ```python
    bridge = TopicPubSub()

    async def watch(publish):
        return await store.watch_document("Person", "1", publish)

    subscription = await bridge.subscribe("personUpdated:1", watch)
    async for payload in subscription:
        ...
    await subscription.aclose()
    ```
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from docgraph.infra.store.protocol import Unsubscribe

    Publish = Callable[[Any], None]
    WatchFactory = Callable[[Publish], Awaitable[Unsubscribe]]

logger = logging.getLogger(__name__)

__all__ = ["TopicPubSub", "TopicSubscription", "topic_name"]

# Queue marker that ends an iterator; payloads themselves may be None
_CLOSED = object()


def topic_name(subscription_field: str, document_id: str) -> str:
    """Topic key for one document, e.g. ``personUpdated:1``."""
    return f"{subscription_field}:{document_id}"


@dataclass(eq=False)
class _Topic:
    name: str
    subscribers: set[asyncio.Queue[Any]] = field(default_factory=set)
    disposer: Unsubscribe | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class TopicSubscription:
    """One subscriber's view of a topic.

    An async iterator that never completes on its own; it ends when closed
    with ``aclose()`` or when the owning TopicPubSub shuts down.
    """

    def __init__(
        self,
        topic: _Topic,
        queue: asyncio.Queue[Any],
        release: Callable[[], Awaitable[None]],
    ) -> None:
        self._topic = topic
        self._queue = queue
        self._release = release
        self._closed = False

    @property
    def topic(self) -> str:
        return self._topic.name

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> TopicSubscription:
        return self

    async def __anext__(self) -> Any:
        if self._closed:
            raise StopAsyncIteration
        payload = await self._queue.get()
        if payload is _CLOSED:
            self._closed = True
            raise StopAsyncIteration
        return payload

    async def aclose(self) -> None:
        """Stop receiving notifications and release the topic reference."""
        if self._closed and self._queue not in self._topic.subscribers:
            return
        self._closed = True
        # Wake a consumer blocked in __anext__
        self._queue.put_nowait(_CLOSED)
        await self._release()


class TopicPubSub:
    """Reference-counted topic table owned by one schema.

    Subscribe and unsubscribe on a topic are serialized by a per-topic lock,
    so listener registration never races teardown.
    """

    def __init__(self) -> None:
        self._topics: dict[str, _Topic] = {}

    @property
    def active_topics(self) -> list[str]:
        return [name for name, entry in self._topics.items() if entry.disposer is not None]

    def subscriber_count(self, topic: str) -> int:
        entry = self._topics.get(topic)
        return len(entry.subscribers) if entry is not None else 0

    def is_active(self, topic: str) -> bool:
        entry = self._topics.get(topic)
        return entry is not None and entry.disposer is not None

    async def subscribe(self, topic: str, watch: WatchFactory) -> TopicSubscription:
        """Attach a new subscriber to ``topic``.

        Args:
            topic: Topic key.
            watch: Called with a publish callback when the topic has no store
                listener yet; must register the listener and return its disposer.

        Returns:
            A fresh iterator, registered before this call returns.

        Raises:
            Exception: Whatever ``watch`` raises; the topic stays uninitialized.
        """
        queue: asyncio.Queue[Any] = asyncio.Queue()
        while True:
            entry = self._topics.get(topic)
            if entry is None:
                entry = self._topics[topic] = _Topic(topic)
            async with entry.lock:
                if self._topics.get(topic) is not entry:
                    # Torn down while we waited for the lock
                    continue
                entry.subscribers.add(queue)
                if entry.disposer is None:
                    try:
                        entry.disposer = await watch(self._publisher(topic))
                    except BaseException:
                        entry.subscribers.discard(queue)
                        if not entry.subscribers:
                            self._topics.pop(topic, None)
                        raise
                    logger.info("Topic activated", extra={"topic": topic})
                break

        logger.debug(
            "Subscriber attached",
            extra={"topic": topic, "subscribers": len(entry.subscribers)},
        )
        return TopicSubscription(entry, queue, partial(self._detach, entry, queue))

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver ``payload`` to every current subscriber of ``topic``.

        Returns:
            Number of subscribers the payload was queued for.
        """
        entry = self._topics.get(topic)
        if entry is None:
            return 0
        for queue in entry.subscribers:
            queue.put_nowait(payload)
        return len(entry.subscribers)

    async def close(self) -> None:
        """End every subscription and dispose every store listener."""
        for entry in list(self._topics.values()):
            async with entry.lock:
                for queue in entry.subscribers:
                    queue.put_nowait(_CLOSED)
                entry.subscribers.clear()
                if self._topics.get(entry.name) is entry:
                    del self._topics[entry.name]
                await self._dispose(entry)

    async def _detach(self, entry: _Topic, queue: asyncio.Queue[Any]) -> None:
        async with entry.lock:
            entry.subscribers.discard(queue)
            if entry.subscribers:
                return
            if self._topics.get(entry.name) is entry:
                del self._topics[entry.name]
            await self._dispose(entry)

    async def _dispose(self, entry: _Topic) -> None:
        disposer, entry.disposer = entry.disposer, None
        if disposer is None:
            return
        try:
            await disposer()
        except Exception:
            logger.exception("Failed to dispose store listener", extra={"topic": entry.name})
            return
        logger.info("Topic torn down", extra={"topic": entry.name})

    def _publisher(self, topic: str) -> Publish:
        loop = asyncio.get_running_loop()

        def publish(payload: Any) -> None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                self.publish(topic, payload)
            else:
                # Store drivers may call back from their own threads
                loop.call_soon_threadsafe(self.publish, topic, payload)

        return publish
