"""Document store adapters.

Resolvers depend only on the DocumentStore protocol; backends:
- InMemoryDocumentStore: in-process, used for tests and local runs
- RedisDocumentStore: Redis keys for documents, PubSub for change notifications
"""

from docgraph.infra.store.factory import close_store, create_store
from docgraph.infra.store.memory import InMemoryDocumentStore
from docgraph.infra.store.protocol import (
    Attributes,
    ChangeCallback,
    DocumentNotFoundError,
    DocumentStore,
    Unsubscribe,
    apply_patch,
)
from docgraph.infra.store.redis import RedisDocumentStore

__all__ = [
    "Attributes",
    "ChangeCallback",
    "DocumentNotFoundError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "RedisDocumentStore",
    "Unsubscribe",
    "apply_patch",
    "close_store",
    "create_store",
]
