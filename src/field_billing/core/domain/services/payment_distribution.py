"""
Motor de distribuição de pagamentos.

Um único valor informado pelo cobrador é aplicado de forma gulosa sobre as
parcelas em aberto, na ordem de `installment_ordering`. As entidades de
entrada nunca são alteradas: o resultado traz cópias atualizadas e o razão
(`PaymentDistribution`) de cada aplicação.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

import structlog

from field_billing.core.domain.entities.installment_entity import (
    InstallmentEntity,
    InstallmentStatus,
    derive_status,
)
from field_billing.core.domain.entities.payment_distribution_entity import PaymentDistribution
from field_billing.core.domain.services.installment_ordering import outstanding_in_priority
from field_billing.core.domain.services.money import MONEY_EPSILON, money_sum, round2

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DistributionResult:
    updated: list[InstallmentEntity]
    ledger: list[PaymentDistribution] = field(default_factory=list)
    undistributed: float = 0.0
    changed_ids: frozenset[int] = frozenset()

    @property
    def applied_total(self) -> float:
        return money_sum(d.applied_amount for d in self.ledger)

    @property
    def changed(self) -> list[InstallmentEntity]:
        """Apenas as parcelas alteradas (uma atualização por parcela no banco)."""
        return [i for i in self.updated if i.id in self.changed_ids]


def distribute(
    installments: Sequence[InstallmentEntity],
    payment_amount: float,
    today: date | None = None,
) -> DistributionResult:
    today = today or date.today()
    if payment_amount is None or payment_amount <= 0:
        return DistributionResult(updated=list(installments), undistributed=0.0)

    remaining = round2(payment_amount)
    replaced: dict[int, InstallmentEntity] = {}
    ledger: list[PaymentDistribution] = []

    for inst in outstanding_in_priority(installments, today):
        if remaining <= MONEY_EPSILON:
            break

        pending = round2(inst.original_amount - inst.received_amount)
        applied = round2(min(remaining, pending))
        if applied <= MONEY_EPSILON:
            continue

        received = round2(inst.received_amount + applied)
        status = derive_status(inst.original_amount, received)
        changes: dict = {"received_amount": received, "status": status}
        if status is InstallmentStatus.PAID:
            changes["received_date"] = today
        replaced[inst.id] = inst.evolve(**changes)

        ledger.append(
            PaymentDistribution(
                installment_id=inst.id,
                sale_number=inst.sale_number,
                installment_number=inst.installment_number,
                pending_before=pending,
                applied_amount=applied,
                resulting_status=status,
            )
        )
        remaining = round2(remaining - applied)

    logger.debug(
        "payment.distributed",
        payment_amount=payment_amount,
        installments=len(ledger),
        undistributed=remaining,
    )
    return DistributionResult(
        updated=[replaced.get(i.id, i) for i in installments],
        ledger=ledger,
        undistributed=max(0.0, remaining),
        changed_ids=frozenset(replaced),
    )


# ─────────────────────────  Correções manuais  ────────────────────────── #

def apply_received_amount(
    installment: InstallmentEntity,
    new_received: float,
    today: date | None = None,
) -> InstallmentEntity:
    """
    Define o valor recebido de uma parcela diretamente (correção manual).
    Valores negativos e acima do original são validados por quem chama.
    """
    received = round2(new_received)
    return installment.evolve(
        received_amount=received,
        status=derive_status(installment.original_amount, received),
        received_date=(today or date.today()) if received > 0 else None,
    )


def redistribute_sale_total(
    installments: Sequence[InstallmentEntity],
    new_total: float,
    today: date | None = None,
) -> DistributionResult:
    """
    Zera as parcelas da venda e redistribui `new_total` pela ordem do número
    da parcela; o que exceder a soma dos valores originais não é aplicado.
    """
    today = today or date.today()
    ordered = sorted(installments, key=lambda i: (i.installment_number is None, i.installment_number or 0))
    remaining = round2(max(0.0, new_total))
    replaced: dict[int, InstallmentEntity] = {}
    ledger: list[PaymentDistribution] = []

    for inst in ordered:
        applied = round2(min(remaining, inst.original_amount)) if remaining > 0 else 0.0
        updated = apply_received_amount(inst, applied, today)
        if (updated.received_amount, updated.status) != (inst.received_amount, inst.status):
            replaced[inst.id] = updated
        if applied > 0:
            ledger.append(
                PaymentDistribution(
                    installment_id=inst.id,
                    sale_number=inst.sale_number,
                    installment_number=inst.installment_number,
                    pending_before=inst.original_amount,
                    applied_amount=applied,
                    resulting_status=updated.status,
                )
            )
        remaining = round2(remaining - applied)

    return DistributionResult(
        updated=[replaced.get(i.id, i) for i in installments],
        ledger=ledger,
        undistributed=max(0.0, remaining),
        changed_ids=frozenset(replaced),
    )
