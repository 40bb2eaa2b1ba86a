from __future__ import annotations

from collections.abc import Sequence

import structlog

from field_billing.adapters.observability.metrics import PERSISTENCE_FAILURES
from field_billing.core.application.dtos.result_dto import BatchResult
from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.application.services.persistence import COLLECTOR_STORES, INSTALLMENTS
from field_billing.core.domain.entities.user_entity import CollectorStoreEntity
from field_billing.core.domain.events.events import CollectorAssignmentChangedEvent
from field_billing.core.domain.events.exceptions import (
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from field_billing.core.domain.repositories.installment_repository import InstallmentRepository
from field_billing.core.domain.repositories.user_repository import CollectorStoreRepository

logger = structlog.get_logger(__name__)


def _chunks(items: Sequence[str], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class AssignmentService:
    """
    Atribuição de cobradores a clientes (parcela a parcela) e a lojas.

    Clientes são identificados pelo documento ou, sem documento, pelo nome.
    O lote é processado sequencialmente; uma parcela que falha é contada e o
    processamento continua.
    """

    def __init__(
        self,
        state: CollectionState,
        installment_repo: InstallmentRepository,
        store_repo: CollectorStoreRepository,
        batch_size: int = 200,
    ):
        self.state = state
        self.installment_repo = installment_repo
        self.store_repo = store_repo
        self.batch_size = max(1, batch_size)

    # ───────────────────────── clientes ─────────────────────────
    def assign_collector_to_clients(self, collector_id: str, identifiers: Sequence[str]) -> BatchResult:
        if not collector_id:
            raise ValidationError("Cobrador é obrigatório")
        return self._set_collector(collector_id, identifiers)

    def remove_collector_from_clients(self, identifiers: Sequence[str]) -> BatchResult:
        return self._set_collector(None, identifiers)

    def _set_collector(self, collector_id: str | None, identifiers: Sequence[str]) -> BatchResult:
        keys = list(dict.fromkeys(i.strip() for i in identifiers if i and i.strip()))
        result = BatchResult()
        logger.info("assignment.started", collector_id=collector_id, clients=len(keys))

        for batch_no, batch in enumerate(_chunks(keys, self.batch_size), start=1):
            for key in batch:
                installments = self.state.client_installments(key)
                if not installments:
                    result.fail(f"Cliente {key} não encontrado")
                    continue
                for inst in installments:
                    try:
                        self.installment_repo.set_collector(inst.id, collector_id)
                        result.ok()
                    except RecordStoreError as exc:
                        PERSISTENCE_FAILURES.labels(INSTALLMENTS).inc()
                        logger.error("assignment.update_failed", installment_id=inst.id, error=str(exc), exc_info=True)
                        result.fail(f"Parcela {inst.id}: {exc}")
                self.state.merge_installments(i.evolve(collector_id=collector_id) for i in installments)
            logger.debug("assignment.batch_done", batch=batch_no, size=len(batch))

        result.events.append(
            CollectorAssignmentChangedEvent(
                collector_id=collector_id,
                clients=len(keys),
                installments_updated=result.succeeded,
                failed=result.failed,
            )
        )
        logger.info("assignment.finished", collector_id=collector_id, summary=result.summary)
        return result

    # ───────────────────────── lojas ─────────────────────────
    def assign_collector_to_store(self, collector_id: str, store_name: str) -> CollectorStoreEntity:
        store_name = (store_name or "").strip()
        if not collector_id or not store_name:
            raise ValidationError("Cobrador e loja são obrigatórios")
        if store_name in self.state.collector_store_names(collector_id):
            raise ValidationError(f"Loja {store_name} já atribuída a este cobrador")
        try:
            store = self.store_repo.add(collector_id, store_name)
        except RecordStoreError:
            PERSISTENCE_FAILURES.labels(COLLECTOR_STORES).inc()
            logger.error("assignment.store_add_failed", collector_id=collector_id, store=store_name, exc_info=True)
            raise
        self.state.add_collector_store(store)
        logger.info("assignment.store_added", collector_id=collector_id, store=store_name)
        return store

    def remove_collector_from_store(self, collector_id: str, store_name: str) -> None:
        if store_name not in self.state.collector_store_names(collector_id):
            raise NotFoundError(f"Loja {store_name} não está atribuída a este cobrador")
        try:
            self.store_repo.remove(collector_id, store_name)
        except RecordStoreError:
            PERSISTENCE_FAILURES.labels(COLLECTOR_STORES).inc()
            logger.error("assignment.store_remove_failed", collector_id=collector_id, store=store_name, exc_info=True)
            raise
        self.state.remove_collector_store(collector_id, store_name)
        logger.info("assignment.store_removed", collector_id=collector_id, store=store_name)
