from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import structlog

from field_billing.core.domain.entities.installment_entity import InstallmentEntity
from field_billing.core.domain.entities.payment_distribution_entity import SalePaymentRecord
from field_billing.core.domain.entities.scheduled_visit_entity import ScheduledVisitEntity
from field_billing.core.domain.entities.user_entity import CollectorStoreEntity, UserEntity
from field_billing.core.domain.events.exceptions import NotFoundError
from field_billing.core.domain.repositories.installment_repository import InstallmentRepository
from field_billing.core.domain.repositories.scheduled_visit_repository import ScheduledVisitRepository
from field_billing.core.domain.repositories.user_repository import (
    CollectorStoreRepository,
    UserRepository,
)
from field_billing.core.domain.services.balance_aggregator import RENEGOTIATED_SALE_NUMBER

logger = structlog.get_logger(__name__)


class CollectionState:
    """
    Dono explícito do estado em memória: parcelas, visitas, usuários,
    lojas por cobrador e o histórico de pagamentos da sessão.

    As operações de escrita atualizam este estado de forma otimista, mesmo
    quando a gravação no banco externo falha.
    """

    def __init__(
        self,
        installment_repo: InstallmentRepository,
        visit_repo: ScheduledVisitRepository,
        user_repo: UserRepository,
        store_repo: CollectorStoreRepository,
    ):
        self.installment_repo = installment_repo
        self.visit_repo = visit_repo
        self.user_repo = user_repo
        self.store_repo = store_repo
        self._installments: dict[int, InstallmentEntity] = {}
        self._visits: dict[str, ScheduledVisitEntity] = {}
        self._users: list[UserEntity] = []
        self._stores: list[CollectorStoreEntity] = []
        self._payments: list[SalePaymentRecord] = []
        self.loaded_at: datetime | None = None

    # ───────────────────────── carga ─────────────────────────
    def load(self) -> None:
        self._installments = {i.id: i for i in self.installment_repo.list_all()}
        self._visits = {v.id: v for v in self.visit_repo.list_all()}
        self._users = self.user_repo.list_all()
        self._stores = self.store_repo.list_all()
        self.loaded_at = datetime.now()
        logger.info(
            "state.loaded",
            installments=len(self._installments),
            visits=len(self._visits),
            users=len(self._users),
            collector_stores=len(self._stores),
        )

    # ───────────────────────── parcelas ─────────────────────────
    @property
    def installments(self) -> list[InstallmentEntity]:
        return list(self._installments.values())

    def get_installment(self, installment_id: int) -> InstallmentEntity:
        try:
            return self._installments[installment_id]
        except KeyError:
            raise NotFoundError(f"Parcela {installment_id} não encontrada") from None

    def merge_installments(self, updated: Iterable[InstallmentEntity]) -> None:
        for inst in updated:
            self._installments[inst.id] = inst

    def collector_installments(self, collector_id: str) -> list[InstallmentEntity]:
        """Parcelas atribuídas diretamente ao cobrador ou de uma loja atribuída a ele."""
        stores = set(self.collector_store_names(collector_id))
        return [
            i for i in self._installments.values()
            if i.collector_id == collector_id or (i.store_name and i.store_name in stores)
        ]

    def client_installments(self, identifier: str) -> list[InstallmentEntity]:
        key = (identifier or "").strip()
        return [i for i in self._installments.values() if key and i.client_key == key]

    def sale_installments(self, sale_number: int, identifier: str) -> list[InstallmentEntity]:
        """Venda 0 seleciona as parcelas renegociadas (sem número de venda)."""
        if sale_number == RENEGOTIATED_SALE_NUMBER:
            return [i for i in self.client_installments(identifier) if not i.sale_number]
        return [i for i in self.client_installments(identifier) if i.sale_number == sale_number]

    # ───────────────────────── visitas ─────────────────────────
    @property
    def visits(self) -> list[ScheduledVisitEntity]:
        return list(self._visits.values())

    def get_visit(self, visit_id: str) -> ScheduledVisitEntity:
        try:
            return self._visits[visit_id]
        except KeyError:
            raise NotFoundError(f"Visita {visit_id} não encontrada") from None

    def merge_visit(self, visit: ScheduledVisitEntity) -> None:
        self._visits[visit.id] = visit

    add_visit = merge_visit

    # ───────────────────────── pagamentos ─────────────────────────
    def record_payment(self, record: SalePaymentRecord) -> None:
        self._payments.append(record)

    def sale_payments(self, sale_number: int, identifier: str) -> list[SalePaymentRecord]:
        key = (identifier or "").strip()
        return [p for p in self._payments if p.sale_number == sale_number and p.client_document == key]

    def client_payments(self, identifier: str) -> list[SalePaymentRecord]:
        key = (identifier or "").strip()
        return [p for p in self._payments if p.client_document == key]

    @property
    def payments(self) -> list[SalePaymentRecord]:
        return list(self._payments)

    # ───────────────────────── usuários / lojas ─────────────────────────
    @property
    def users(self) -> list[UserEntity]:
        return list(self._users)

    def collectors(self) -> list[UserEntity]:
        return [u for u in self._users if u.is_collector]

    def user_name(self, user_id: str | None) -> str:
        for u in self._users:
            if u.id == user_id:
                return u.name
        return ""

    @property
    def collector_stores(self) -> list[CollectorStoreEntity]:
        return list(self._stores)

    def collector_store_names(self, collector_id: str) -> list[str]:
        return [s.store_name for s in self._stores if s.collector_id == collector_id]

    def available_stores(self) -> list[str]:
        return sorted({i.store_name for i in self._installments.values() if i.store_name})

    def add_collector_store(self, store: CollectorStoreEntity) -> None:
        self._stores.append(store)

    def remove_collector_store(self, collector_id: str, store_name: str) -> None:
        self._stores = [
            s for s in self._stores
            if not (s.collector_id == collector_id and s.store_name == store_name)
        ]
