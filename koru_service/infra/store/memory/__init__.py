from koru_service.infra.store.memory.repositories import InMemoryTransaction
from koru_service.infra.store.memory.store import InMemoryStore

__all__ = ["InMemoryStore", "InMemoryTransaction"]
