from __future__ import annotations

from field_billing.adapters.repositories._mapping import map_rows
from field_billing.core.domain.entities.installment_entity import InstallmentEntity
from field_billing.core.domain.mappers.record_mapper import RecordMapper
from field_billing.core.domain.repositories.installment_repository import InstallmentRepository
from field_billing.core.domain.repositories.record_store import RecordStore

ID_COLUMN = "id_parcela"


class InstallmentRepoImpl(InstallmentRepository):
    """Parcelas na tabela legada BANCO_DADOS, chave `id_parcela`."""

    def __init__(self, store: RecordStore, table: str = "BANCO_DADOS"):
        self.store = store
        self.table = table

    def list_all(self) -> list[InstallmentEntity]:
        rows = self.store.fetch_all(self.table, order_by=ID_COLUMN)
        return map_rows(rows, RecordMapper.map_installment, self.table)

    def save_payment(self, installment: InstallmentEntity) -> None:
        self.store.update(
            self.table,
            installment.id,
            RecordMapper.installment_payment_fields(installment),
            id_column=ID_COLUMN,
        )

    def set_collector(self, installment_id: int, collector_id: str | None) -> None:
        self.store.update(self.table, installment_id, {"user_id": collector_id}, id_column=ID_COLUMN)
