"""
Prioridade de cobrança das parcelas em aberto.

1. Vencidas (vencimento estritamente antes de hoje) antes das não vencidas.
2. Dentro do mesmo grupo, vencimento mais antigo primeiro.
3. Parcelas sem vencimento válido não contam como vencidas e vão para o fim.

A ordenação é estável: empates preservam a ordem de entrada.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from field_billing.core.domain.entities.installment_entity import InstallmentEntity


def collection_priority(installment: InstallmentEntity, today: date) -> tuple[int, int, date]:
    due = installment.due_date
    if due is None:
        return (1, 1, date.max)
    return (0 if due < today else 1, 0, due)


def order_for_collection(
    installments: Iterable[InstallmentEntity],
    today: date | None = None,
) -> list[InstallmentEntity]:
    today = today or date.today()
    return sorted(installments, key=lambda inst: collection_priority(inst, today))


def outstanding_in_priority(
    installments: Iterable[InstallmentEntity],
    today: date | None = None,
) -> list[InstallmentEntity]:
    """Filtra as parcelas com saldo (recebido < original) e ordena por prioridade."""
    return order_for_collection((i for i in installments if i.is_outstanding), today)
