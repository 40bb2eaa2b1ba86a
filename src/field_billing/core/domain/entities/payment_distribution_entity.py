from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from field_billing.core.domain.entities._base import EntityMixin
from field_billing.core.domain.entities.installment_entity import InstallmentStatus


@dataclass(frozen=True, slots=True)
class PaymentDistribution(EntityMixin):
    """Linha do razão: quanto de um pagamento foi aplicado em qual parcela."""
    installment_id: int
    sale_number: int | None
    installment_number: int | None
    pending_before: float
    applied_amount: float
    resulting_status: InstallmentStatus


@dataclass(slots=True)
class SalePaymentRecord(EntityMixin):
    """
    Histórico de um pagamento registrado por um cobrador.
    Mantido apenas em memória junto ao estado da aplicação.
    """
    sale_number: int
    client_document: str
    client_name: str
    payment_amount: float
    payment_date: date
    payment_method: str
    collector_id: str
    collector_name: str
    distribution: list[PaymentDistribution] = field(default_factory=list)
    notes: str = ""
    store_name: str | None = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.now)
