from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from field_billing.adapters.repositories.installment_repo_impl import InstallmentRepoImpl
from field_billing.adapters.repositories.scheduled_visit_repo_impl import ScheduledVisitRepoImpl
from field_billing.adapters.repositories.user_repo_impl import CollectorStoreRepoImpl, UserRepoImpl
from field_billing.core.application.services.collection_state import CollectionState
from tests.helpers.in_memory_store import InMemoryRecordStore


@dataclass
class Wiring:
    store: InMemoryRecordStore
    state: CollectionState
    installment_repo: InstallmentRepoImpl
    visit_repo: ScheduledVisitRepoImpl
    user_repo: UserRepoImpl
    store_repo: CollectorStoreRepoImpl


def seeded_store(
    installments: list[dict[str, Any]] = (),
    visits: list[dict[str, Any]] = (),
    users: list[dict[str, Any]] = (),
    collector_stores: list[dict[str, Any]] = (),
) -> InMemoryRecordStore:
    return InMemoryRecordStore({
        "BANCO_DADOS": list(installments),
        "scheduled_visits": list(visits),
        "users": list(users),
        "collector_stores": list(collector_stores),
    })


def wire(store: InMemoryRecordStore) -> Wiring:
    """Repositórios reais sobre o banco em memória, com o estado já carregado."""
    installment_repo = InstallmentRepoImpl(store)
    visit_repo = ScheduledVisitRepoImpl(store)
    user_repo = UserRepoImpl(store)
    store_repo = CollectorStoreRepoImpl(store)
    state = CollectionState(installment_repo, visit_repo, user_repo, store_repo)
    state.load()
    return Wiring(store, state, installment_repo, visit_repo, user_repo, store_repo)
