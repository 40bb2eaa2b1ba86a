from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

import structlog

from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.domain.entities.installment_entity import InstallmentEntity, InstallmentStatus
from field_billing.core.domain.events.exceptions import ValidationError
from field_billing.core.domain.services.balance_aggregator import RENEGOTIATED_SALE_NUMBER, SaleStatus, group_sales
from field_billing.core.domain.services.money import money_sum, round2

logger = structlog.get_logger(__name__)

UNASSIGNED = "Não atribuído"
UNKNOWN_CLIENT = "Cliente não informado"


@dataclass(frozen=True)
class DashboardStats:
    total_pending: int
    total_overdue: int
    total_received: int
    total_amount: float
    received_amount: float
    pending_amount: float
    conversion_rate: float
    collectors_count: int


@dataclass(frozen=True)
class CollectorPerformance:
    collector_id: str
    collector_name: str
    total_assigned: int
    total_received: int
    total_amount: float
    received_amount: float
    conversion_rate: float
    client_count: int


@dataclass(frozen=True)
class CashSaleEntry:
    """Recebimentos de uma venda no período, por cobrador."""
    sale_number: int
    client_document: str
    client_name: str
    store_name: str
    collector_id: str | None
    collector_name: str
    received_date: date
    total_original: float
    total_received: float
    total_pending: float
    installment_ids: tuple[int, ...]


@dataclass(frozen=True)
class CollectorCashSummary:
    collector_id: str | None
    collector_name: str
    received_amount: float
    transaction_count: int
    clients: tuple[str, ...]
    sale_numbers: tuple[int, ...]


@dataclass(frozen=True)
class DailyCashReport:
    start: date
    end: date
    total_received: float
    total_transactions: int
    collectors: tuple[CollectorCashSummary, ...]
    sales: tuple[CashSaleEntry, ...]


def _rate(part: int, whole: int) -> float:
    return round2(part / whole * 100) if whole else 0.0


class DashboardService:
    """Indicadores do gerente. Contagens de parcelas e de vendas, sem cache."""

    def __init__(self, state: CollectionState, clock: Callable[[], date] = date.today):
        self.state = state
        self.clock = clock

    def dashboard_stats(self) -> DashboardStats:
        items = self.state.installments
        today = self.clock()
        received = sum(1 for i in items if i.status is not InstallmentStatus.PENDING or i.received_amount > 0)
        total_amount = money_sum(i.original_amount for i in items)
        received_amount = money_sum(i.received_amount for i in items)
        return DashboardStats(
            total_pending=sum(1 for i in items if i.status is InstallmentStatus.PENDING),
            total_overdue=sum(1 for i in items if i.is_outstanding and i.is_overdue(today)),
            total_received=received,
            total_amount=total_amount,
            received_amount=received_amount,
            pending_amount=round2(total_amount - received_amount),
            conversion_rate=_rate(received, len(items)),
            collectors_count=len(self.state.collectors()),
        )

    def collector_performance(self) -> list[CollectorPerformance]:
        """Por cobrador: vendas atribuídas (diretamente ou pela loja) e vendas quitadas."""
        report = []
        for collector in self.state.collectors():
            items = self.state.collector_installments(collector.id)
            sales = group_sales(items)
            balances = [s.balance for s in sales]
            paid = sum(1 for b in balances if b.status is SaleStatus.FULLY_PAID)
            report.append(
                CollectorPerformance(
                    collector_id=collector.id,
                    collector_name=collector.name,
                    total_assigned=len(sales),
                    total_received=paid,
                    total_amount=money_sum(b.total_value for b in balances),
                    received_amount=money_sum(i.received_amount for i in items),
                    conversion_rate=_rate(paid, len(sales)),
                    client_count=len({i.client_document.strip() for i in items if i.client_document and i.client_document.strip()}),
                )
            )
        return report

    # ───────────────────────── caixa do dia ─────────────────────────
    def daily_cash_report(
        self,
        start: date,
        end: date | None = None,
        collector_id: str | None = None,
        store: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
    ) -> DailyCashReport:
        """
        Recebimentos com data entre `start` e `end` (inclusive; sem `end`, só o dia).
        Cada venda de um cliente recebida por um cobrador conta como uma transação.
        Os filtros de valor comparam o recebido de cada parcela.
        """
        end = end or start
        if end < start:
            raise ValidationError("Data final anterior à data inicial")

        def wanted(i: InstallmentEntity) -> bool:
            if i.received_date is None or i.received_amount <= 0 or not start <= i.received_date <= end:
                return False
            if collector_id is not None and i.collector_id != collector_id:
                return False
            if store is not None and i.store_name != store:
                return False
            if min_amount is not None and i.received_amount < min_amount:
                return False
            return max_amount is None or i.received_amount <= max_amount

        grouped: dict[tuple[int, str, str | None], list[InstallmentEntity]] = {}
        for inst in filter(wanted, self.state.installments):
            key = (inst.sale_number or RENEGOTIATED_SALE_NUMBER, inst.client_key or "", inst.collector_id)
            grouped.setdefault(key, []).append(inst)

        sales = sorted(
            (self._cash_entry(number, collector, items) for (number, _, collector), items in grouped.items()),
            key=lambda s: (s.received_date, s.collector_name, s.client_name, s.sale_number),
        )

        by_collector: dict[str | None, list[CashSaleEntry]] = {}
        for sale in sales:
            by_collector.setdefault(sale.collector_id, []).append(sale)
        collectors = tuple(
            CollectorCashSummary(
                collector_id=cid,
                collector_name=entries[0].collector_name,
                received_amount=money_sum(e.total_received for e in entries),
                transaction_count=len(entries),
                clients=tuple(dict.fromkeys(e.client_name for e in entries)),
                sale_numbers=tuple(sorted({e.sale_number for e in entries if e.sale_number})),
            )
            for cid, entries in by_collector.items()
        )

        report = DailyCashReport(
            start=start,
            end=end,
            total_received=money_sum(s.total_received for s in sales),
            total_transactions=len(sales),
            collectors=collectors,
            sales=tuple(sales),
        )
        logger.info(
            "daily_cash_report",
            start=start.isoformat(),
            end=end.isoformat(),
            transactions=report.total_transactions,
            total_received=report.total_received,
        )
        return report

    def _cash_entry(self, number: int, collector_id: str | None, items: list[InstallmentEntity]) -> CashSaleEntry:
        first = items[0]
        total_original = money_sum(i.original_amount for i in items)
        total_received = money_sum(i.received_amount for i in items)
        return CashSaleEntry(
            sale_number=number,
            client_document=(first.client_document or "").strip(),
            client_name=(first.client_name or "").strip() or UNKNOWN_CLIENT,
            store_name=first.store_name or "",
            collector_id=collector_id,
            collector_name=self.state.user_name(collector_id) or UNASSIGNED,
            received_date=max(i.received_date for i in items),
            total_original=total_original,
            total_received=total_received,
            total_pending=round2(total_original - total_received),
            installment_ids=tuple(i.id for i in items),
        )
