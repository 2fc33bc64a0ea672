from koru_service.infra.store.sql.models import Base
from koru_service.infra.store.sql.repositories import SqlTransaction
from koru_service.infra.store.sql.store import SqlStore, create_engine

__all__ = ["Base", "SqlStore", "SqlTransaction", "create_engine"]
