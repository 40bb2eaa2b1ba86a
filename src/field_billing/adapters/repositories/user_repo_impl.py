from __future__ import annotations

from field_billing.adapters.repositories._mapping import map_rows
from field_billing.core.domain.entities.user_entity import CollectorStoreEntity, UserEntity
from field_billing.core.domain.mappers.record_mapper import RecordMapper
from field_billing.core.domain.repositories.record_store import RecordStore
from field_billing.core.domain.repositories.user_repository import (
    CollectorStoreRepository,
    UserRepository,
)


class UserRepoImpl(UserRepository):
    def __init__(self, store: RecordStore, table: str = "users"):
        self.store = store
        self.table = table

    def list_all(self) -> list[UserEntity]:
        return map_rows(self.store.fetch_all(self.table, order_by="name.asc"), RecordMapper.map_user, self.table)


class CollectorStoreRepoImpl(CollectorStoreRepository):
    def __init__(self, store: RecordStore, table: str = "collector_stores"):
        self.store = store
        self.table = table

    def list_all(self) -> list[CollectorStoreEntity]:
        rows = self.store.fetch_all(self.table, order_by="created_at.asc")
        return map_rows(rows, RecordMapper.map_collector_store, self.table)

    def add(self, collector_id: str, store_name: str) -> CollectorStoreEntity:
        row = self.store.insert(self.table, {"collector_id": collector_id, "store_name": store_name})
        return RecordMapper.map_collector_store(row)

    def remove(self, collector_id: str, store_name: str) -> None:
        self.store.delete(self.table, {"collector_id": collector_id, "store_name": store_name})
