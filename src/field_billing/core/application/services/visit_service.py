from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import structlog

from field_billing.adapters.observability.metrics import PERSISTENCE_FAILURES, VISIT_TRANSITIONS
from field_billing.core.application.dtos.result_dto import (
    PersistResult,
    ScheduleBatchResult,
    VisitOperationResult,
)
from field_billing.core.application.dtos.visit_dtos import VisitProposalInput
from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.application.services.persistence import VISITS, attempt
from field_billing.core.domain.entities.scheduled_visit_entity import (
    ScheduledVisitEntity,
    VisitStatus,
)
from field_billing.core.domain.events.events import (
    DomainEvent,
    PaymentProcessedEvent,
    VisitRescheduledEvent,
    VisitScheduledEvent,
    VisitStatusChangedEvent,
)
from field_billing.core.domain.events.exceptions import (
    NotFoundError,
    RecordStoreError,
    ScheduleValidationError,
)
from field_billing.core.domain.repositories.scheduled_visit_repository import ScheduledVisitRepository
from field_billing.core.domain.services.money import MONEY_EPSILON, money_sum
from field_billing.core.domain.services.visit_lifecycle import VisitLifecycle
from field_billing.core.domain.services.visit_schedule_validator import (
    ScheduleValidation,
    VisitProposal,
    validate_visit_batch,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClientVisitData:
    """Retrato do cliente gravado na visita no momento do agendamento."""
    client_document: str
    client_name: str
    address: str | None
    neighborhood: str | None
    city: str | None
    total_pending_value: float
    overdue_count: int


class VisitService:
    def __init__(
        self,
        state: CollectionState,
        visit_repo: ScheduledVisitRepository,
        lifecycle: VisitLifecycle | None = None,
        clock: Callable[[], datetime] = datetime.now,
        cancellation_history_days: int = 30,
    ):
        self.state = state
        self.visit_repo = visit_repo
        self.clock = clock
        self.lifecycle = lifecycle or VisitLifecycle(clock)
        self.cancellation_history_days = cancellation_history_days

    def _today(self) -> date:
        return self.clock().date()

    # ───────────────────────── dados do cliente ─────────────────────────
    def client_visit_data(self, client_document: str) -> ClientVisitData:
        installments = self.state.client_installments(client_document)
        if not installments:
            raise NotFoundError(f"Cliente {client_document} não encontrado")
        today = self._today()
        outstanding = [i for i in installments if i.is_outstanding]
        first = installments[0]
        address = ", ".join(p for p in (first.address, first.address_number) if p) or None
        return ClientVisitData(
            client_document=client_document.strip(),
            client_name=(first.client_name or "").strip(),
            address=address,
            neighborhood=first.neighborhood,
            city=first.city,
            total_pending_value=money_sum(i.pending_amount for i in outstanding),
            overdue_count=sum(1 for i in outstanding if i.is_overdue(today)),
        )

    def has_active_visit(self, client_document: str) -> bool:
        key = client_document.strip()
        return any(v.is_active and v.client_document == key for v in self.state.visits)

    # ───────────────────────── agendamento em lote ─────────────────────────
    def validate_schedules(self, proposals: Sequence[VisitProposalInput]) -> ScheduleValidation:
        return validate_visit_batch(
            (
                VisitProposal(
                    client_document=p.client_document,
                    client_name=p.client_name,
                    scheduled_date=p.scheduled_date,
                    scheduled_time=p.scheduled_time,
                )
                for p in proposals
            ),
            self._today(),
        )

    def schedule_visits(
        self,
        collector_id: str,
        proposals: Sequence[VisitProposalInput],
        notes: str = "",
        *,
        confirm_conflicts: bool = False,
    ) -> ScheduleBatchResult:
        """
        Valida o lote inteiro antes de criar qualquer visita. Datas passadas ou
        ausentes bloqueiam; conflitos de horário exigem `confirm_conflicts`.
        Cada visita é criada individualmente: falhas são contadas e o laço segue.
        """
        self.validate_schedules(proposals).raise_for_outcome(confirm_conflicts=confirm_conflicts)

        result = ScheduleBatchResult()
        logger.info("visits.bulk_scheduling_started", collector_id=collector_id, total=len(proposals))
        for proposal in proposals:
            name = proposal.client_name
            try:
                data = self.client_visit_data(proposal.client_document)
            except NotFoundError as exc:
                result.fail(f"{name}: {exc}")
                continue
            if data.total_pending_value <= MONEY_EPSILON:
                result.skipped.append(f"{name}: sem saldo pendente")
                continue
            if self.has_active_visit(proposal.client_document):
                result.skipped.append(f"{name}: já possui visita agendada")
                continue

            draft = self.lifecycle.created(
                ScheduledVisitEntity(
                    id=None,
                    collector_id=collector_id,
                    client_document=data.client_document,
                    client_name=data.client_name or name,
                    scheduled_date=proposal.scheduled_date,
                    scheduled_time=proposal.scheduled_time,
                    client_address=data.address,
                    client_neighborhood=data.neighborhood,
                    client_city=data.city,
                    total_pending_value=data.total_pending_value,
                    overdue_count=data.overdue_count,
                    created_at=self.clock(),
                ),
                notes,
            )
            try:
                visit = self.visit_repo.create(draft)
            except RecordStoreError as exc:
                PERSISTENCE_FAILURES.labels(VISITS).inc()
                logger.error("visits.create_failed", client=data.client_document, error=str(exc), exc_info=True)
                result.fail(f"{name}: {exc}")
                continue

            self.state.add_visit(visit)
            result.visits.append(visit)
            result.events.append(
                VisitScheduledEvent(
                    visit_id=visit.id,
                    collector_id=collector_id,
                    client_document=visit.client_document,
                    scheduled_date=visit.scheduled_date,
                    scheduled_time=visit.scheduled_time,
                )
            )
            result.ok()

        logger.info(
            "visits.bulk_scheduling_finished",
            collector_id=collector_id,
            succeeded=result.succeeded,
            failed=result.failed,
            skipped=len(result.skipped),
        )
        return result

    # ───────────────────────── transições ─────────────────────────
    def _commit(
        self,
        before: ScheduledVisitEntity,
        after: ScheduledVisitEntity,
    ) -> VisitOperationResult:
        persist = attempt(VISITS, after.id, lambda: self.visit_repo.save(after))
        self.state.merge_visit(after)
        events: list[DomainEvent] = []
        if before.status is not after.status:
            VISIT_TRANSITIONS.labels(after.status.value).inc()
            events.append(
                VisitStatusChangedEvent(
                    visit_id=after.id,
                    from_status=before.status.value,
                    to_status=after.status.value,
                    persisted=persist.ok,
                )
            )
        return VisitOperationResult(visit=after, persist=persist, events=events)

    def update_status(self, visit_id: str, status: VisitStatus, note: str | None = None) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        result = self._commit(visit, self.lifecycle.mark_status(visit, status, note))
        logger.info("visit.status_updated", visit_id=visit_id, status=status.value, persisted=result.persist.ok)
        return result

    def reschedule(
        self,
        visit_id: str,
        new_date: date,
        new_time: str | None,
        reason: str | None = None,
    ) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        if new_date < self._today():
            raise ScheduleValidationError([f"{visit.client_name}: Data não pode ser anterior a hoje"])

        updated = self.lifecycle.reschedule(visit, new_date, new_time, reason)
        result = self._commit(visit, updated)
        result.events.append(
            VisitRescheduledEvent(
                visit_id=visit.id,
                old_date=visit.scheduled_date,
                old_time=visit.scheduled_time,
                new_date=new_date,
                new_time=new_time,
                persisted=result.persist.ok,
            )
        )
        logger.info(
            "visit.rescheduled",
            visit_id=visit_id,
            old=f"{visit.scheduled_date} {visit.scheduled_time or ''}".strip(),
            new=f"{new_date} {new_time or ''}".strip(),
        )
        return result

    def request_cancellation(self, visit_id: str, reason: str) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        return self._commit(visit, self.lifecycle.request_cancellation(visit, reason))

    def approve_cancellation(self, visit_id: str, manager_id: str) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        return self._commit(visit, self.lifecycle.approve_cancellation(visit, manager_id))

    def reject_cancellation(self, visit_id: str, manager_id: str, reason: str) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        return self._commit(visit, self.lifecycle.reject_cancellation(visit, manager_id, reason))

    def add_note(self, visit_id: str, text: str) -> VisitOperationResult:
        visit = self.state.get_visit(visit_id)
        return self._commit(visit, self.lifecycle.add_note(visit, text))

    # ───────────────────────── retrato do cliente ─────────────────────────
    def refresh_client_snapshots(self, client_document: str) -> list[PersistResult]:
        """Atualiza saldo pendente e atrasos gravados nas visitas ativas do cliente."""
        key = (client_document or "").strip()
        active = [v for v in self.state.visits if v.is_active and v.client_document == key]
        if not active:
            return []
        data = self.client_visit_data(key)
        results = []
        for visit in active:
            if (visit.total_pending_value, visit.overdue_count) == (data.total_pending_value, data.overdue_count):
                continue
            updated = visit.evolve(
                total_pending_value=data.total_pending_value,
                overdue_count=data.overdue_count,
                updated_at=self.clock(),
            )
            results.append(attempt(VISITS, updated.id, lambda v=updated: self.visit_repo.save(v)))
            self.state.merge_visit(updated)
        logger.debug("visit.snapshots_refreshed", client=key, visits=len(results))
        return results

    def on_payment_processed(self, event: PaymentProcessedEvent) -> None:
        if event.client_document:
            self.refresh_client_snapshots(event.client_document)

    # ───────────────────────── consultas ─────────────────────────
    def pending_cancellation_requests(self) -> list[ScheduledVisitEntity]:
        pending = [v for v in self.state.visits if v.status is VisitStatus.CANCELLATION_REQUESTED]
        return sorted(pending, key=lambda v: v.cancellation_request_date or datetime.min)

    def cancellation_history(self, days: int | None = None) -> list[ScheduledVisitEntity]:
        """Pedidos de cancelamento aprovados ou rejeitados nos últimos `days` dias."""
        since = self.clock() - timedelta(days=days if days is not None else self.cancellation_history_days)

        def decided_at(v: ScheduledVisitEntity) -> datetime | None:
            return v.cancellation_approved_at or v.cancellation_rejected_at

        decided = [
            v for v in self.state.visits
            if (at := decided_at(v)) is not None and _naive(at) >= _naive(since)
        ]
        return sorted(decided, key=lambda v: _naive(decided_at(v)), reverse=True)

    def visits_by_date(self, day: date, collector_id: str | None = None) -> list[ScheduledVisitEntity]:
        visits = [
            v for v in self.state.visits
            if v.scheduled_date == day and (collector_id is None or v.collector_id == collector_id)
        ]
        return sorted(visits, key=lambda v: v.scheduled_time or "99:99")

    def visits_by_collector(self, collector_id: str) -> list[ScheduledVisitEntity]:
        visits = [v for v in self.state.visits if v.collector_id == collector_id]
        return sorted(visits, key=lambda v: (v.scheduled_date, v.scheduled_time or "99:99"))


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value
