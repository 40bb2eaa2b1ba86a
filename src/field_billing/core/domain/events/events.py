from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime


# ───────────────────────────────────────────────
# Event Base e Domain Events
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)

# ╭──────────────────────────────────────────────╮
# │ 1. Pagamentos                                │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class PaymentProcessedEvent(DomainEvent):
    client_document: str
    mode: str
    payment_amount: float
    applied_amount: float
    undistributed: float
    sale_numbers: tuple[int, ...]
    collector_id: str | None

# ╭──────────────────────────────────────────────╮
# │ 2. Visitas                                   │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class VisitScheduledEvent(DomainEvent):
    visit_id: str | None
    collector_id: str
    client_document: str
    scheduled_date: date
    scheduled_time: str | None

@dataclass(frozen=True)
class VisitStatusChangedEvent(DomainEvent):
    visit_id: str
    from_status: str
    to_status: str
    persisted: bool

@dataclass(frozen=True)
class VisitRescheduledEvent(DomainEvent):
    visit_id: str
    old_date: date
    old_time: str | None
    new_date: date
    new_time: str | None
    persisted: bool

# ╭──────────────────────────────────────────────╮
# │ 3. Atribuição de cobradores                  │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class CollectorAssignmentChangedEvent(DomainEvent):
    collector_id: str | None
    clients: int
    installments_updated: int
    failed: int
