from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from field_billing.core.domain.entities._base import EntityMixin


class UserType(str, Enum):
    MANAGER = "manager"
    COLLECTOR = "collector"


@dataclass(slots=True)
class UserEntity(EntityMixin):
    id: str
    name: str
    login: str
    type: UserType
    created_at: datetime | None = None

    @property
    def is_collector(self) -> bool:
        return self.type is UserType.COLLECTOR


@dataclass(slots=True)
class CollectorStoreEntity(EntityMixin):
    id: str | None
    collector_id: str
    store_name: str
    created_at: datetime | None = None
