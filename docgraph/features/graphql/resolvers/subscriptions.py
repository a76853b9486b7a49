"""Subscription resolvers for real-time document updates.

Provides one subscription per entity:
- {entity}Updated(id): Stream the document's state after every change

Each topic holds a single store listener no matter how many clients are
subscribed; the listener is released when the last subscriber goes away.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docgraph.core.exceptions import OperationValidationError
from docgraph.features.graphql.context import get_store
from docgraph.features.graphql.events import topic_name
from docgraph.features.graphql.utils import merge_id, store_errors

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from graphql import GraphQLResolveInfo

    from docgraph.features.graphql.events import Publish, TopicPubSub, TopicSubscription
    from docgraph.infra.store.protocol import Attributes, Unsubscribe

logger = logging.getLogger(__name__)


def make_subscribe(
    collection: str,
    field_name: str,
    pubsub: TopicPubSub,
) -> Callable[..., Awaitable[TopicSubscription]]:
    """Build the source-stream resolver of one ``{entity}Updated`` field.

    Args:
        collection: Entity name, used as the store collection.
        field_name: Subscription field name, the topic prefix.
        pubsub: Topic table owned by the schema.
    """

    async def subscribe(
        _root: Any,
        info: GraphQLResolveInfo,
        id: str | None = None,
    ) -> TopicSubscription:
        if id is None:
            raise OperationValidationError(
                detail="Argument 'id' is required",
                extra={"argument": "id"},
            )
        store = get_store(info)

        async def watch(publish: Publish) -> Unsubscribe:
            def on_change(attributes: Attributes | None) -> None:
                publish(None if attributes is None else merge_id(id, attributes))

            with store_errors("watch_document", collection, id):
                return await store.watch_document(collection, id, on_change)

        return await pubsub.subscribe(topic_name(field_name, id), watch)

    subscribe.__name__ = f"subscribe_{field_name}"
    return subscribe


def resolve_payload(
    payload: dict[str, Any] | None,
    _info: GraphQLResolveInfo,
    **_arguments: Any,
) -> Any:
    """Return each published record as the field's value."""
    return payload


__all__ = ["make_subscribe", "resolve_payload"]
