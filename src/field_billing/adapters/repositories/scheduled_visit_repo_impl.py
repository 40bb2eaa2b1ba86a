from __future__ import annotations

from field_billing.adapters.repositories._mapping import map_rows
from field_billing.core.domain.entities.scheduled_visit_entity import ScheduledVisitEntity
from field_billing.core.domain.mappers.record_mapper import RecordMapper
from field_billing.core.domain.repositories.record_store import RecordStore
from field_billing.core.domain.repositories.scheduled_visit_repository import ScheduledVisitRepository


class ScheduledVisitRepoImpl(ScheduledVisitRepository):
    def __init__(self, store: RecordStore, table: str = "scheduled_visits"):
        self.store = store
        self.table = table

    def list_all(self) -> list[ScheduledVisitEntity]:
        rows = self.store.fetch_all(self.table, order_by="scheduled_date.asc,id.asc")
        return map_rows(rows, RecordMapper.map_visit, self.table)

    def create(self, visit: ScheduledVisitEntity) -> ScheduledVisitEntity:
        row = self.store.insert(self.table, RecordMapper.visit_insert_record(visit))
        created = RecordMapper.map_visit(row)
        # a trilha local é mais rica que o texto devolvido pelo banco
        return created.evolve(audit_trail=visit.audit_trail)

    def save(self, visit: ScheduledVisitEntity) -> None:
        self.store.update(self.table, visit.id, RecordMapper.visit_update_fields(visit))
