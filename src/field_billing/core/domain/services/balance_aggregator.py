"""
Agregação de saldos de venda e de cliente.

Tudo aqui é função pura das parcelas atuais: os saldos são recalculados a cada
leitura e nunca guardados como fonte da verdade.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import structlog

from field_billing.core.domain.entities.installment_entity import (
    InstallmentEntity,
    InstallmentStatus,
)
from field_billing.core.domain.services.money import MONEY_EPSILON, money_sum, round2

logger = structlog.get_logger(__name__)

RENEGOTIATED_SALE_NUMBER = 0


class SaleStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    FULLY_PAID = "fully_paid"


@dataclass(frozen=True, slots=True)
class InstallmentBreakdown:
    installment_id: int
    installment_number: int | None
    original_amount: float
    paid_amount: float
    remaining_amount: float
    status: InstallmentStatus


@dataclass(frozen=True, slots=True)
class BalanceSummary:
    total_value: float
    total_paid: float
    remaining_balance: float
    status: SaleStatus
    breakdown: tuple[InstallmentBreakdown, ...] = ()
    overpaid_amount: float = 0.0


def aggregate(installments: Iterable[InstallmentEntity]) -> BalanceSummary:
    items = list(installments)
    total_value = money_sum(i.original_amount for i in items)
    total_received = money_sum(i.received_amount for i in items)
    total_paid = round2(min(total_value, total_received))
    remaining = round2(total_value - total_paid)

    if total_paid == 0:
        status = SaleStatus.PENDING
    elif remaining <= MONEY_EPSILON:
        status = SaleStatus.FULLY_PAID
    else:
        status = SaleStatus.PARTIALLY_PAID

    breakdown = tuple(
        InstallmentBreakdown(
            installment_id=i.id,
            installment_number=i.installment_number,
            original_amount=round2(i.original_amount),
            paid_amount=round2(min(i.original_amount, i.received_amount)),
            remaining_amount=round2(max(0.0, i.original_amount - i.received_amount)),
            status=i.status,
        )
        for i in items
    )
    return BalanceSummary(
        total_value=total_value,
        total_paid=total_paid,
        remaining_balance=remaining,
        status=status,
        breakdown=breakdown,
        overpaid_amount=round2(max(0.0, total_received - total_value)),
    )


# ╭──────────────────────────────────────────────╮
# │ Agrupamentos derivados                       │
# ╰──────────────────────────────────────────────╯
@dataclass(slots=True)
class SaleGroup:
    sale_number: int
    client_document: str
    client_name: str
    installments: list[InstallmentEntity] = field(default_factory=list)
    store_name: str | None = None
    description: str | None = None

    @property
    def balance(self) -> BalanceSummary:
        return aggregate(self.installments)

    @property
    def is_renegotiated(self) -> bool:
        return self.sale_number == RENEGOTIATED_SALE_NUMBER


@dataclass(slots=True)
class ClientGroup:
    client_key: str
    client_document: str
    client_name: str
    sales: list[SaleGroup] = field(default_factory=list)
    address: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    phone: str | None = None

    @property
    def installments(self) -> list[InstallmentEntity]:
        return [i for s in self.sales for i in s.installments]

    @property
    def balance(self) -> BalanceSummary:
        return aggregate(self.installments)


def _renegotiated_description(count: int) -> str:
    return f"Renegociada ({count} parcela{'s' if count != 1 else ''})"


def group_sales(installments: Iterable[InstallmentEntity]) -> list[SaleGroup]:
    """
    Agrupa por (número da venda, documento). Parcelas sem número de venda
    formam a venda renegociada do cliente (número 0).
    """
    groups: dict[tuple[int, str], SaleGroup] = {}
    for inst in installments:
        key_doc = inst.client_key
        if key_doc is None:
            continue
        number = inst.sale_number or RENEGOTIATED_SALE_NUMBER
        group = groups.get((number, key_doc))
        if group is None:
            group = groups[(number, key_doc)] = SaleGroup(
                sale_number=number,
                client_document=(inst.client_document or "").strip(),
                client_name=(inst.client_name or "").strip(),
                store_name=inst.store_name,
                description=inst.description,
            )
        group.installments.append(inst)

    for group in groups.values():
        if group.is_renegotiated:
            group.description = _renegotiated_description(len(group.installments))
    return list(groups.values())


def group_clients(installments: Iterable[InstallmentEntity]) -> list[ClientGroup]:
    items = list(installments)
    skipped = sum(1 for i in items if i.client_key is None)
    if skipped:
        logger.warning("balance.rows_without_client", skipped=skipped)

    clients: dict[str, ClientGroup] = {}
    for sale in group_sales(items):
        first = sale.installments[0]
        key = first.client_key
        client = clients.get(key)
        if client is None:
            client = clients[key] = ClientGroup(
                client_key=key,
                client_document=sale.client_document,
                client_name=sale.client_name,
                address=first.address,
                neighborhood=first.neighborhood,
                city=first.city,
                phone=first.mobile or first.phone,
            )
        client.sales.append(sale)

    return sorted(clients.values(), key=lambda c: c.client_name.casefold())
