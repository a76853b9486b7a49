"""Redis-backed document store.

Documents are stored as JSON strings under ``{key_prefix}{collection}:{id}``.
Every write publishes the document's new state on
``{channel_prefix}{collection}:{id}`` so watchers on any instance see it.

Each watch gets a dedicated PubSub connection and a listener task, since
PubSub blocks and cannot share pooled connections.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from docgraph.infra.store.protocol import (
    Attributes,
    ChangeCallback,
    DocumentNotFoundError,
    Unsubscribe,
    apply_patch,
)

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.client import PubSub

    from docgraph.core.settings.store import StoreSettings

logger = logging.getLogger(__name__)


class RedisDocumentStore:
    """DocumentStore implementation on top of redis.asyncio.

    Example:
        redis = Redis.from_url("redis://localhost:6379/0", decode_responses=True)
        store = RedisDocumentStore(redis)
        person_id = await store.add_document("Person", {"name": "Bob"})
    """

    def __init__(
        self,
        redis_client: Redis,
        key_prefix: str = "docgraph:doc:",
        channel_prefix: str = "docgraph:changes:",
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Redis client created with ``decode_responses=True``.
            key_prefix: Prefix for document keys.
            channel_prefix: Prefix for change-notification channels.
        """
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._channel_prefix = channel_prefix

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> RedisDocumentStore:
        """Create a store with its own client from StoreSettings."""
        from redis.asyncio import Redis

        client = Redis.from_url(
            str(settings.redis_url),
            decode_responses=True,
            socket_timeout=settings.socket_timeout,
        )
        return cls(
            client,
            key_prefix=settings.key_prefix,
            channel_prefix=settings.channel_prefix,
        )

    def document_key(self, collection: str, document_id: str) -> str:
        return f"{self._key_prefix}{collection}:{document_id}"

    def channel(self, collection: str, document_id: str) -> str:
        return f"{self._channel_prefix}{collection}:{document_id}"

    async def get_document(self, collection: str, document_id: str) -> Attributes | None:
        raw = await self._redis.get(self.document_key(collection, document_id))
        if raw is None:
            return None
        return json.loads(raw)

    async def add_document(self, collection: str, attributes: Mapping[str, Any]) -> str:
        document_id = uuid4().hex
        await self._write(collection, document_id, dict(attributes))
        return document_id

    async def update_document(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
    ) -> None:
        # Read-modify-write; concurrent patches to one document are last-writer-wins
        current = await self.get_document(collection, document_id)
        if current is None:
            raise DocumentNotFoundError(f"{collection}/{document_id}")
        await self._write(collection, document_id, apply_patch(current, patch))

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Remove a document; watchers receive a not-found notification."""
        removed = await self._redis.delete(self.document_key(collection, document_id))
        if removed:
            await self._publish(collection, document_id, None)

    async def watch_document(
        self,
        collection: str,
        document_id: str,
        on_change: ChangeCallback,
    ) -> Unsubscribe:
        channel = self.channel(collection, document_id)
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(channel)
        task = asyncio.create_task(self._listen(pubsub, channel, on_change))
        task.add_done_callback(partial(_report_listener_exit, channel))
        logger.info("Subscribed to channel", extra={"channel": channel})

        async def unsubscribe() -> None:
            task.cancel()
            try:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            except Exception:
                # Already reported by the done callback
                logger.debug("Listener had failed before unsubscribe", extra={"channel": channel})
            finally:
                try:
                    await pubsub.unsubscribe(channel)
                finally:
                    await pubsub.aclose()
            logger.info("Unsubscribed from channel", extra={"channel": channel})

        return unsubscribe

    async def aclose(self) -> None:
        """Close the underlying Redis client."""
        await self._redis.aclose()

    async def _write(self, collection: str, document_id: str, document: Attributes) -> None:
        await self._redis.set(self.document_key(collection, document_id), json.dumps(document))
        await self._publish(collection, document_id, document)

    async def _publish(
        self,
        collection: str,
        document_id: str,
        document: Attributes | None,
    ) -> None:
        await self._redis.publish(
            self.channel(collection, document_id),
            json.dumps({"document": document}),
        )

    async def _listen(self, pubsub: PubSub, channel: str, on_change: ChangeCallback) -> None:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                payload = json.loads(message["data"])
            except json.JSONDecodeError as e:
                logger.warning(
                    "Invalid JSON in change notification",
                    extra={"channel": channel, "error": str(e)},
                )
                continue
            on_change(payload.get("document"))


def _report_listener_exit(channel: str, task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Change listener stopped",
            exc_info=error,
            extra={"channel": channel, "error": str(error)},
        )
