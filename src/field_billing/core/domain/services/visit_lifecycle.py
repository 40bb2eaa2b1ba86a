"""
Máquina de estados da visita agendada.

    agendada ──► realizada | nao_encontrado | cancelamento_solicitado | cancelada
    cancelamento_solicitado ──► cancelada (aprovação) | agendada (rejeição)

`realizada`, `nao_encontrado` e `cancelada` são terminais. Reagendamento só é
permitido em `agendada` e não muda o status. Toda operação devolve uma nova
entidade com um evento a mais na trilha de auditoria.
"""
from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

from field_billing.core.domain.entities.scheduled_visit_entity import (
    AuditKind,
    ScheduledVisitEntity,
    VisitAuditEvent,
    VisitStatus,
)
from field_billing.core.domain.events.exceptions import (
    InvalidVisitTransitionError,
    ValidationError,
)

ALLOWED_TRANSITIONS: dict[VisitStatus, frozenset[VisitStatus]] = {
    VisitStatus.SCHEDULED: frozenset({
        VisitStatus.COMPLETED,
        VisitStatus.NOT_FOUND,
        VisitStatus.CANCELLATION_REQUESTED,
        VisitStatus.CANCELLED,
    }),
    VisitStatus.CANCELLATION_REQUESTED: frozenset({
        VisitStatus.CANCELLED,
        VisitStatus.SCHEDULED,
    }),
    VisitStatus.COMPLETED: frozenset(),
    VisitStatus.NOT_FOUND: frozenset(),
    VisitStatus.CANCELLED: frozenset(),
}


def can_transition(current: VisitStatus, target: VisitStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _required(reason: str | None, what: str) -> str:
    text = (reason or "").strip()
    if not text:
        raise ValidationError(f"{what} é obrigatório")
    return text


class VisitLifecycle:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def _event(self, kind: AuditKind, **payload) -> VisitAuditEvent:
        return VisitAuditEvent(occurred_at=self._clock(), kind=kind, payload=payload)

    def _guard(self, visit: ScheduledVisitEntity, target: VisitStatus) -> None:
        if not can_transition(visit.status, target):
            raise InvalidVisitTransitionError(visit.status.value, target.value)

    # ───────────────────────── operações ───────────────────────── #
    def mark_status(
        self,
        visit: ScheduledVisitEntity,
        target: VisitStatus,
        note: str | None = None,
    ) -> ScheduledVisitEntity:
        self._guard(visit, target)
        now = self._clock()
        changes: dict = {"status": target, "updated_at": now}
        if target is VisitStatus.COMPLETED:
            changes["completed_date"] = now.date()
        event = self._event(
            AuditKind.STATUS_CHANGED,
            **{"from": visit.status.value, "to": target.value, "note": (note or "").strip() or None},
        )
        return visit.with_event(event, **changes)

    def reschedule(
        self,
        visit: ScheduledVisitEntity,
        new_date: date,
        new_time: str | None,
        reason: str | None = None,
    ) -> ScheduledVisitEntity:
        if visit.status is not VisitStatus.SCHEDULED:
            raise InvalidVisitTransitionError(visit.status.value, "reagendamento")
        event = self._event(
            AuditKind.RESCHEDULED,
            old_date=visit.scheduled_date.isoformat(),
            old_time=visit.scheduled_time,
            new_date=new_date.isoformat(),
            new_time=new_time,
            reason=(reason or "").strip() or None,
        )
        return visit.with_event(
            event,
            scheduled_date=new_date,
            scheduled_time=new_time,
            updated_at=self._clock(),
        )

    def request_cancellation(self, visit: ScheduledVisitEntity, reason: str) -> ScheduledVisitEntity:
        text = _required(reason, "Motivo do cancelamento")
        self._guard(visit, VisitStatus.CANCELLATION_REQUESTED)
        now = self._clock()
        return visit.with_event(
            self._event(AuditKind.CANCELLATION_REQUESTED, reason=text),
            status=VisitStatus.CANCELLATION_REQUESTED,
            cancellation_request_date=now,
            cancellation_request_reason=text,
            updated_at=now,
        )

    def approve_cancellation(self, visit: ScheduledVisitEntity, manager_id: str) -> ScheduledVisitEntity:
        if visit.status is not VisitStatus.CANCELLATION_REQUESTED:
            raise InvalidVisitTransitionError(visit.status.value, VisitStatus.CANCELLED.value)
        now = self._clock()
        return visit.with_event(
            self._event(AuditKind.CANCELLATION_APPROVED, manager_id=manager_id),
            status=VisitStatus.CANCELLED,
            cancellation_approved_by=manager_id,
            cancellation_approved_at=now,
            updated_at=now,
        )

    def reject_cancellation(
        self,
        visit: ScheduledVisitEntity,
        manager_id: str,
        reason: str,
    ) -> ScheduledVisitEntity:
        text = _required(reason, "Motivo da rejeição")
        if visit.status is not VisitStatus.CANCELLATION_REQUESTED:
            raise InvalidVisitTransitionError(visit.status.value, VisitStatus.SCHEDULED.value)
        now = self._clock()
        return visit.with_event(
            self._event(AuditKind.CANCELLATION_REJECTED, manager_id=manager_id, reason=text),
            status=VisitStatus.SCHEDULED,
            cancellation_rejected_by=manager_id,
            cancellation_rejected_at=now,
            cancellation_rejection_reason=text,
            updated_at=now,
        )

    def add_note(self, visit: ScheduledVisitEntity, text: str) -> ScheduledVisitEntity:
        return visit.with_event(
            self._event(AuditKind.NOTE, text=_required(text, "Observação")),
            updated_at=self._clock(),
        )

    def created(self, visit: ScheduledVisitEntity, notes: str | None = None) -> ScheduledVisitEntity:
        """Trilha inicial de uma visita nova: observações livres do agendamento."""
        text = (notes or "").strip()
        if not text:
            return visit
        return visit.with_event(self._event(AuditKind.NOTE, text=text))
