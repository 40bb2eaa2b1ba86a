from __future__ import annotations

from dataclasses import dataclass, field

from field_billing.core.domain.entities.payment_distribution_entity import (
    PaymentDistribution,
    SalePaymentRecord,
)
from field_billing.core.domain.entities.scheduled_visit_entity import ScheduledVisitEntity
from field_billing.core.domain.events.events import DomainEvent
from field_billing.core.domain.services.money import money_sum


@dataclass(frozen=True)
class PersistResult:
    """Resultado explícito de uma gravação otimista no banco externo."""
    table: str
    record_id: str | int | None
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls, table: str, record_id) -> PersistResult:
        return cls(table=table, record_id=record_id, ok=True)

    @classmethod
    def failure(cls, table: str, record_id, error: Exception | str) -> PersistResult:
        return cls(table=table, record_id=record_id, ok=False, error=str(error))


@dataclass
class BatchResult:
    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    events: list[DomainEvent] = field(default_factory=list)

    def ok(self) -> None:
        self.succeeded += 1

    def fail(self, message: str) -> None:
        self.failed += 1
        self.errors.append(message)

    @property
    def summary(self) -> str:
        return f"{self.succeeded} concluído(s), {self.failed} com falha"


@dataclass
class PaymentOutcome:
    ledger: list[PaymentDistribution]
    undistributed: float
    persist_results: list[PersistResult] = field(default_factory=list)
    records: list[SalePaymentRecord] = field(default_factory=list)
    events: list[DomainEvent] = field(default_factory=list)

    @property
    def applied_total(self) -> float:
        return money_sum(d.applied_amount for d in self.ledger)

    @property
    def fully_persisted(self) -> bool:
        return all(r.ok for r in self.persist_results)

    @property
    def failed_writes(self) -> list[PersistResult]:
        return [r for r in self.persist_results if not r.ok]


@dataclass
class VisitOperationResult:
    visit: ScheduledVisitEntity
    persist: PersistResult
    events: list[DomainEvent] = field(default_factory=list)


@dataclass
class ScheduleBatchResult(BatchResult):
    visits: list[ScheduledVisitEntity] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
