from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from field_billing.core.domain.entities._base import EntityMixin


class VisitStatus(str, Enum):
    SCHEDULED = "agendada"
    COMPLETED = "realizada"
    NOT_FOUND = "nao_encontrado"
    CANCELLATION_REQUESTED = "cancelamento_solicitado"
    CANCELLED = "cancelada"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    VisitStatus.SCHEDULED: "Agendada",
    VisitStatus.COMPLETED: "Realizada",
    VisitStatus.NOT_FOUND: "Cliente não encontrado",
    VisitStatus.CANCELLATION_REQUESTED: "Cancelamento solicitado",
    VisitStatus.CANCELLED: "Cancelada",
}

# Visitas que impedem um novo agendamento para o mesmo cliente
ACTIVE_VISIT_STATUSES = frozenset({VisitStatus.SCHEDULED, VisitStatus.CANCELLATION_REQUESTED})


class AuditKind(str, Enum):
    NOTE = "note"
    STATUS_CHANGED = "status_changed"
    RESCHEDULED = "rescheduled"
    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLATION_APPROVED = "cancellation_approved"
    CANCELLATION_REJECTED = "cancellation_rejected"


@dataclass(frozen=True, slots=True)
class VisitAuditEvent:
    occurred_at: datetime | None
    kind: AuditKind
    payload: dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        p = self.payload
        match self.kind:
            case AuditKind.RESCHEDULED:
                line = (
                    f"Reagendado de {_slot(p.get('old_date'), p.get('old_time'))} "
                    f"para {_slot(p.get('new_date'), p.get('new_time'))}"
                )
                return f"{line}. Motivo: {p['reason']}" if p.get("reason") else line
            case AuditKind.STATUS_CHANGED:
                line = f"Status alterado de {p.get('from')} para {p.get('to')}"
                return f"{line}. {p['note']}" if p.get("note") else line
            case AuditKind.CANCELLATION_REQUESTED:
                return f"Cancelamento solicitado. Motivo: {p.get('reason', '')}"
            case AuditKind.CANCELLATION_APPROVED:
                return f"Cancelamento aprovado por {p.get('manager_id')}"
            case AuditKind.CANCELLATION_REJECTED:
                return f"Cancelamento rejeitado por {p.get('manager_id')}. Motivo: {p.get('reason', '')}"
            case _:
                return str(p.get("text", ""))

    def line(self) -> str:
        """Linha gravada em notes: eventos estruturados levam carimbo de horário."""
        text = self.render()
        if self.kind is AuditKind.NOTE or self.occurred_at is None or not text:
            return text
        return f"[{self.occurred_at.strftime(STAMP_FORMAT)}] {text}"


def _slot(day: Any, time: Any) -> str:
    return f"{day} {time}" if time else f"{day}"


# ───────────────────────────────────────────────
# Leitura da trilha gravada na coluna notes
# ───────────────────────────────────────────────
STAMP_FORMAT = "%Y-%m-%d %H:%M"
_STAMPED = re.compile(r"^\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2})\] (.*)$")
_SLOT = r"(\d{4}-\d{2}-\d{2})(?: (\d{2}:\d{2}))?"
_PATTERNS: tuple[tuple[AuditKind, re.Pattern, tuple[str, ...]], ...] = (
    (
        AuditKind.RESCHEDULED,
        re.compile(rf"^Reagendado de {_SLOT} para {_SLOT}(?:\. Motivo: (.*))?$"),
        ("old_date", "old_time", "new_date", "new_time", "reason"),
    ),
    (
        AuditKind.STATUS_CHANGED,
        re.compile(r"^Status alterado de (\S+) para (\S+?)(?:\. (.*))?$"),
        ("from", "to", "note"),
    ),
    (
        AuditKind.CANCELLATION_REQUESTED,
        re.compile(r"^Cancelamento solicitado\. Motivo: (.*)$"),
        ("reason",),
    ),
    (
        AuditKind.CANCELLATION_REJECTED,
        re.compile(r"^Cancelamento rejeitado por (.+?)\. Motivo: (.*)$"),
        ("manager_id", "reason"),
    ),
    (
        AuditKind.CANCELLATION_APPROVED,
        re.compile(r"^Cancelamento aprovado por (.+)$"),
        ("manager_id",),
    ),
)


def parse_audit_line(line: str, default_at: datetime | None = None) -> VisitAuditEvent:
    """
    Inverso de `VisitAuditEvent.line`. Linhas com carimbo `[AAAA-MM-DD HH:MM]`
    recuperam o horário; textos que não seguem nenhum formato viram observação.
    """
    text = line.strip()
    occurred_at = default_at
    stamped = _STAMPED.match(text)
    if stamped:
        occurred_at = datetime.strptime(stamped.group(1), STAMP_FORMAT)
        text = stamped.group(2)
    for kind, pattern, keys in _PATTERNS:
        m = pattern.match(text)
        if m:
            return VisitAuditEvent(occurred_at=occurred_at, kind=kind, payload=dict(zip(keys, m.groups())))
    return VisitAuditEvent(occurred_at=occurred_at, kind=AuditKind.NOTE, payload={"text": text})


def parse_audit_trail(notes: str | None, default_at: datetime | None = None) -> tuple[VisitAuditEvent, ...]:
    if not notes:
        return ()
    return tuple(parse_audit_line(line, default_at) for line in notes.splitlines() if line.strip())


@dataclass(slots=True)
class ScheduledVisitEntity(EntityMixin):
    id: str | None
    collector_id: str
    client_document: str
    client_name: str
    scheduled_date: date
    scheduled_time: str | None = None
    status: VisitStatus = VisitStatus.SCHEDULED
    audit_trail: tuple[VisitAuditEvent, ...] = ()
    client_address: str | None = None
    client_neighborhood: str | None = None
    client_city: str | None = None
    total_pending_value: float | None = None
    overdue_count: int | None = None
    completed_date: date | None = None
    cancellation_request_date: datetime | None = None
    cancellation_request_reason: str | None = None
    cancellation_approved_by: str | None = None
    cancellation_approved_at: datetime | None = None
    cancellation_rejected_by: str | None = None
    cancellation_rejected_at: datetime | None = None
    cancellation_rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def notes(self) -> str:
        """Trilha de auditoria renderizada como texto, uma linha por evento."""
        return "\n".join(line for line in (e.line() for e in self.audit_trail) if line)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_VISIT_STATUSES

    def with_event(self, event: VisitAuditEvent, **changes: Any) -> ScheduledVisitEntity:
        return self.evolve(audit_trail=(*self.audit_trail, event), **changes)
