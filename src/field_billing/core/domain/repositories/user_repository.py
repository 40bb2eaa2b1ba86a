from abc import ABC, abstractmethod

from field_billing.core.domain.entities.user_entity import CollectorStoreEntity, UserEntity


class UserRepository(ABC):
    @abstractmethod
    def list_all(self) -> list[UserEntity]:
        ...


class CollectorStoreRepository(ABC):
    @abstractmethod
    def list_all(self) -> list[CollectorStoreEntity]:
        ...

    @abstractmethod
    def add(self, collector_id: str, store_name: str) -> CollectorStoreEntity:
        ...

    @abstractmethod
    def remove(self, collector_id: str, store_name: str) -> None:
        ...
