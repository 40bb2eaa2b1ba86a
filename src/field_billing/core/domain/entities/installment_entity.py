from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import date
from enum import Enum

from field_billing.core.domain.entities._base import EntityMixin
from field_billing.core.domain.services.money import MONEY_EPSILON, round2


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"

    @property
    def storage_label(self) -> str:
        """Rótulo gravado na coluna `status` da base legada."""
        return _STORAGE_LABELS[self]

    @property
    def rank(self) -> int:
        return _RANK[self]


_STORAGE_LABELS = {
    InstallmentStatus.PENDING: "pendente",
    InstallmentStatus.PARTIAL: "parcial",
    InstallmentStatus.PAID: "pago",
}

_RANK = {
    InstallmentStatus.PENDING: 0,
    InstallmentStatus.PARTIAL: 1,
    InstallmentStatus.PAID: 2,
}

# Sinônimos encontrados nos dados legados (já sem acento e em minúsculas)
_SYNONYMS = {
    "pendente": InstallmentStatus.PENDING,
    "pending": InstallmentStatus.PENDING,
    "em aberto": InstallmentStatus.PENDING,
    "aberto": InstallmentStatus.PENDING,
    "parcial": InstallmentStatus.PARTIAL,
    "parcialmente pago": InstallmentStatus.PARTIAL,
    "parcialmente_pago": InstallmentStatus.PARTIAL,
    "partial": InstallmentStatus.PARTIAL,
    "partially_paid": InstallmentStatus.PARTIAL,
    "pago": InstallmentStatus.PAID,
    "paga": InstallmentStatus.PAID,
    "recebido": InstallmentStatus.PAID,
    "recebida": InstallmentStatus.PAID,
    "quitado": InstallmentStatus.PAID,
    "paid": InstallmentStatus.PAID,
    "fully_paid": InstallmentStatus.PAID,
}


def _norm(txt: str) -> str:
    return unicodedata.normalize("NFKD", txt).encode("ascii", "ignore").decode().lower().strip()


def normalize_status(raw: str | None) -> InstallmentStatus | None:
    """Converte o texto livre da base para o enum; None se vazio ou desconhecido."""
    if raw is None:
        return None
    if isinstance(raw, InstallmentStatus):
        return raw
    return _SYNONYMS.get(_norm(str(raw)))


def derive_status(original_amount: float, received_amount: float) -> InstallmentStatus:
    """
    - recebido == 0                   -> pending
    - restante <= 1 centavo           -> paid
    - caso contrário                  -> partial
    """
    if received_amount <= 0:
        return InstallmentStatus.PENDING
    if round2(original_amount - received_amount) <= MONEY_EPSILON:
        return InstallmentStatus.PAID
    return InstallmentStatus.PARTIAL


@dataclass(slots=True)
class InstallmentEntity(EntityMixin):
    id: int
    sale_number: int | None
    client_document: str | None
    client_name: str | None
    original_amount: float
    received_amount: float
    due_date: date | None
    received_date: date | None = None
    status: InstallmentStatus = InstallmentStatus.PENDING
    installment_number: int | None = None
    title_number: int | None = None
    description: str | None = None
    store_name: str | None = None
    collector_id: str | None = None
    days_overdue: int | None = None
    address: str | None = None
    address_number: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    phone: str | None = None
    mobile: str | None = None
    notes: str | None = None

    @property
    def pending_amount(self) -> float:
        return round2(self.original_amount - self.received_amount)

    @property
    def is_outstanding(self) -> bool:
        return self.received_amount < self.original_amount

    @property
    def client_key(self) -> str | None:
        """Identidade do cliente: documento aparado, ou o nome quando não há documento."""
        doc = (self.client_document or "").strip()
        if doc:
            return doc
        name = (self.client_name or "").strip()
        return name or None

    def is_overdue(self, today: date | None = None) -> bool:
        if self.due_date is None:
            return False
        return self.due_date < (today or date.today())

    def overdue_days(self, today: date | None = None) -> int:
        if self.due_date is None:
            return 0
        return max(0, ((today or date.today()) - self.due_date).days)
