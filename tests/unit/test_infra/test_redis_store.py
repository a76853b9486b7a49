"""Tests for the Redis document store against a mocked client."""

from __future__ import annotations

import asyncio
import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from docgraph.core.settings import StoreSettings
from docgraph.infra.store.protocol import DocumentNotFoundError
from docgraph.infra.store.redis import RedisDocumentStore


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock()
    client.delete = AsyncMock(return_value=1)
    client.publish = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def redis_store(redis_client):
    return RedisDocumentStore(redis_client, key_prefix="t:doc:", channel_prefix="t:chg:")


def _pubsub(messages):
    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()

    async def listen():
        for message in messages:
            yield message

    pubsub.listen = listen
    return pubsub


def test_key_and_channel_naming(redis_store):
    assert redis_store.document_key("Person", "1") == "t:doc:Person:1"
    assert redis_store.channel("Person", "1") == "t:chg:Person:1"


@pytest.mark.asyncio
async def test_get_decodes_json(redis_store, redis_client):
    redis_client.get.return_value = json.dumps({"name": "Bob"})

    assert await redis_store.get_document("Person", "1") == {"name": "Bob"}
    redis_client.get.assert_awaited_once_with("t:doc:Person:1")


@pytest.mark.asyncio
async def test_get_missing(redis_store):
    assert await redis_store.get_document("Person", "1") is None


@pytest.mark.asyncio
async def test_add_writes_and_publishes(redis_store, redis_client):
    document_id = await redis_store.add_document("Person", {"name": "Bob"})

    redis_client.set.assert_awaited_once_with(
        f"t:doc:Person:{document_id}", json.dumps({"name": "Bob"})
    )
    redis_client.publish.assert_awaited_once_with(
        f"t:chg:Person:{document_id}", json.dumps({"document": {"name": "Bob"}})
    )


@pytest.mark.asyncio
async def test_update_applies_patch(redis_store, redis_client):
    redis_client.get.return_value = json.dumps({"name": "Acme"})

    await redis_store.update_document("Company", "c1", {"__relations.Person.employer": "p1"})

    expected = {"name": "Acme", "__relations": {"Person": {"employer": "p1"}}}
    redis_client.set.assert_awaited_once_with("t:doc:Company:c1", json.dumps(expected))
    redis_client.publish.assert_awaited_once_with(
        "t:chg:Company:c1", json.dumps({"document": expected})
    )


@pytest.mark.asyncio
async def test_update_missing_raises(redis_store, redis_client):
    with pytest.raises(DocumentNotFoundError):
        await redis_store.update_document("Person", "nope", {"a": 1})

    redis_client.set.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_publishes_null(redis_store, redis_client):
    await redis_store.delete_document("Person", "1")

    redis_client.publish.assert_awaited_once_with(
        "t:chg:Person:1", json.dumps({"document": None})
    )


@pytest.mark.asyncio
async def test_delete_missing_is_silent(redis_store, redis_client):
    redis_client.delete.return_value = 0

    await redis_store.delete_document("Person", "1")

    redis_client.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_watch_delivers_messages(redis_store, redis_client):
    pubsub = _pubsub(
        [
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": json.dumps({"document": {"name": "Bob"}})},
            {"type": "message", "data": "not json"},
            {"type": "message", "data": json.dumps({"document": None})},
        ]
    )
    redis_client.pubsub.return_value = pubsub
    received = []

    unsubscribe = await redis_store.watch_document("Person", "1", received.append)
    await asyncio.sleep(0.01)
    await unsubscribe()

    pubsub.subscribe.assert_awaited_once_with("t:chg:Person:1")
    assert received == [{"name": "Bob"}, None]
    pubsub.unsubscribe.assert_awaited_once_with("t:chg:Person:1")
    pubsub.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_lost_connection_is_logged_and_cleaned_up(redis_store, redis_client, caplog):
    pubsub = _pubsub([])

    async def listen():
        raise ConnectionError("connection lost")
        yield  # pragma: no cover

    pubsub.listen = listen
    redis_client.pubsub.return_value = pubsub
    received = []

    with caplog.at_level(logging.ERROR, logger="docgraph.infra.store.redis"):
        unsubscribe = await redis_store.watch_document("Person", "1", received.append)
        await asyncio.sleep(0.01)

    assert "Change listener stopped" in caplog.messages

    await unsubscribe()

    assert received == []
    pubsub.unsubscribe.assert_awaited_once_with("t:chg:Person:1")
    pubsub.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_unsubscribe_still_closes_connection(redis_store, redis_client):
    pubsub = _pubsub([])
    pubsub.unsubscribe.side_effect = ConnectionError("connection lost")
    redis_client.pubsub.return_value = pubsub

    unsubscribe = await redis_store.watch_document("Person", "1", lambda document: None)

    with pytest.raises(ConnectionError):
        await unsubscribe()

    pubsub.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_aclose_closes_client(redis_store, redis_client):
    await redis_store.aclose()

    redis_client.aclose.assert_awaited_once()


def test_from_settings_uses_prefixes():
    settings = StoreSettings(
        backend="redis",
        redis_url="redis://localhost:6379/0",
        key_prefix="x:",
        channel_prefix="y:",
    )

    store = RedisDocumentStore.from_settings(settings)

    assert store.document_key("Person", "1") == "x:Person:1"
    assert store.channel("Person", "1") == "y:Person:1"
