from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

import structlog

from field_billing.core.application.commands.assignment_commands import (
    AssignCollectorToClientsCommand,
    AssignCollectorToStoreCommand,
    RefreshCollectionDataCommand,
    RemoveCollectorFromClientsCommand,
    RemoveCollectorFromStoreCommand,
)
from field_billing.core.application.commands.payment_commands import (
    CorrectInstallmentCommand,
    EditSaleReceivedTotalCommand,
    ProcessGeneralPaymentCommand,
    ProcessSalePaymentCommand,
)
from field_billing.core.application.commands.visit_commands import (
    AddVisitNoteCommand,
    ApproveVisitCancellationCommand,
    RejectVisitCancellationCommand,
    RequestVisitCancellationCommand,
    RescheduleVisitCommand,
    ScheduleVisitsCommand,
    UpdateVisitStatusCommand,
)
from field_billing.core.application.cqrs import CommandBus, QueryBus
from field_billing.core.application.dtos.payment_dtos import GeneralPaymentInput, SalePaymentInput
from field_billing.core.application.dtos.result_dto import (
    BatchResult,
    PaymentOutcome,
    ScheduleBatchResult,
    VisitOperationResult,
)
from field_billing.core.application.dtos.visit_dtos import VisitProposalInput
from field_billing.core.application.queries.balance_queries import (
    ClientGroupsQuery,
    ClientSalesQuery,
    SaleBalanceQuery,
    SalePaymentsQuery,
)
from field_billing.core.application.queries.dashboard_queries import (
    CollectorInstallmentsQuery,
    CollectorPerformanceQuery,
    DailyCashReportQuery,
    DashboardStatsQuery,
    StoresQuery,
)
from field_billing.core.application.queries.visit_queries import (
    CancellationHistoryQuery,
    ClientVisitDataQuery,
    PendingCancellationsQuery,
    ValidateVisitScheduleQuery,
    VisitsByCollectorQuery,
    VisitsByDateQuery,
)
from field_billing.core.domain.entities.scheduled_visit_entity import VisitStatus

logger = structlog.get_logger(__name__)


def _proposals(items: Iterable[VisitProposalInput | dict[str, Any]]) -> tuple[VisitProposalInput, ...]:
    return tuple(p if isinstance(p, VisitProposalInput) else VisitProposalInput.model_validate(p) for p in items)


class FieldBillingFacade:
    """
    Ponto de entrada único para a interface (telas do gerente e do cobrador).
    Tudo passa pelos buses: comandos publicam seus eventos ao terminar.
    """

    def __init__(self, command_bus: CommandBus, query_bus: QueryBus) -> None:
        self.commands = command_bus
        self.queries = query_bus

    # ------------------------------------------------ dados
    def refresh(self) -> None:
        self.commands.dispatch(RefreshCollectionDataCommand())

    # ------------------------------------------------ pagamentos
    def pay_sale(self, payload: SalePaymentInput | dict[str, Any], collector_id: str) -> PaymentOutcome:
        if isinstance(payload, dict):
            payload = SalePaymentInput.model_validate(payload)
        return self.commands.dispatch(ProcessSalePaymentCommand(payload=payload, collector_id=collector_id))

    def pay_general(self, payload: GeneralPaymentInput | dict[str, Any], collector_id: str) -> PaymentOutcome:
        if isinstance(payload, dict):
            payload = GeneralPaymentInput.model_validate(payload)
        return self.commands.dispatch(ProcessGeneralPaymentCommand(payload=payload, collector_id=collector_id))

    def correct_installment(self, installment_id: int, new_received: float, *, confirm_overpayment: bool = False) -> PaymentOutcome:
        return self.commands.dispatch(
            CorrectInstallmentCommand(installment_id, new_received, confirm_overpayment)
        )

    def edit_sale_total(
        self,
        sale_number: int,
        client_document: str,
        new_total: float,
        *,
        confirm_overpayment: bool = False,
    ) -> PaymentOutcome:
        return self.commands.dispatch(
            EditSaleReceivedTotalCommand(sale_number, client_document, new_total, confirm_overpayment)
        )

    # ------------------------------------------------ saldos
    def sale_balance(self, sale_number: int, client_document: str):
        return self.queries.dispatch(
            SaleBalanceQuery(filtros={"sale_number": sale_number, "client_document": client_document})
        )

    def client_sales(self, client_document: str):
        return self.queries.dispatch(ClientSalesQuery(filtros={"client_document": client_document}))

    def client_groups(self, collector_id: str | None = None):
        return self.queries.dispatch(ClientGroupsQuery(filtros={"collector_id": collector_id}))

    def sale_payments(self, sale_number: int, client_document: str):
        return self.queries.dispatch(
            SalePaymentsQuery(filtros={"sale_number": sale_number, "client_document": client_document})
        )

    # ------------------------------------------------ visitas
    def validate_schedule(self, proposals: Sequence[VisitProposalInput | dict[str, Any]]):
        return self.queries.dispatch(ValidateVisitScheduleQuery(filtros={"proposals": _proposals(proposals)}))

    def schedule_visits(
        self,
        collector_id: str,
        proposals: Sequence[VisitProposalInput | dict[str, Any]],
        notes: str = "",
        *,
        confirm_conflicts: bool = False,
    ) -> ScheduleBatchResult:
        result = self.commands.dispatch(
            ScheduleVisitsCommand(collector_id, _proposals(proposals), notes, confirm_conflicts)
        )
        logger.info("facade.visits_scheduled", collector_id=collector_id, summary=result.summary)
        return result

    def update_visit_status(self, visit_id: str, status: VisitStatus | str, note: str | None = None) -> VisitOperationResult:
        return self.commands.dispatch(UpdateVisitStatusCommand(visit_id, VisitStatus(status), note))

    def reschedule_visit(self, visit_id: str, new_date: date, new_time: str | None = None, reason: str | None = None) -> VisitOperationResult:
        return self.commands.dispatch(RescheduleVisitCommand(visit_id, new_date, new_time, reason))

    def request_cancellation(self, visit_id: str, reason: str) -> VisitOperationResult:
        return self.commands.dispatch(RequestVisitCancellationCommand(visit_id, reason))

    def approve_cancellation(self, visit_id: str, manager_id: str) -> VisitOperationResult:
        return self.commands.dispatch(ApproveVisitCancellationCommand(visit_id, manager_id))

    def reject_cancellation(self, visit_id: str, manager_id: str, reason: str) -> VisitOperationResult:
        return self.commands.dispatch(RejectVisitCancellationCommand(visit_id, manager_id, reason))

    def add_visit_note(self, visit_id: str, text: str) -> VisitOperationResult:
        return self.commands.dispatch(AddVisitNoteCommand(visit_id, text))

    def client_visit_data(self, client_document: str):
        return self.queries.dispatch(ClientVisitDataQuery(filtros={"client_document": client_document}))

    def pending_cancellations(self):
        return self.queries.dispatch(PendingCancellationsQuery())

    def cancellation_history(self, days: int | None = None):
        return self.queries.dispatch(CancellationHistoryQuery(filtros={"days": days}))

    def visits_by_date(self, day: date, collector_id: str | None = None):
        return self.queries.dispatch(VisitsByDateQuery(filtros={"day": day, "collector_id": collector_id}))

    def visits_by_collector(self, collector_id: str):
        return self.queries.dispatch(VisitsByCollectorQuery(filtros={"collector_id": collector_id}))

    # ------------------------------------------------ atribuições
    def assign_clients(self, collector_id: str, identifiers: Iterable[str]) -> BatchResult:
        return self.commands.dispatch(AssignCollectorToClientsCommand(collector_id, tuple(identifiers)))

    def unassign_clients(self, identifiers: Iterable[str]) -> BatchResult:
        return self.commands.dispatch(RemoveCollectorFromClientsCommand(tuple(identifiers)))

    def assign_store(self, collector_id: str, store_name: str):
        return self.commands.dispatch(AssignCollectorToStoreCommand(collector_id, store_name))

    def unassign_store(self, collector_id: str, store_name: str) -> None:
        self.commands.dispatch(RemoveCollectorFromStoreCommand(collector_id, store_name))

    # ------------------------------------------------ painel
    def dashboard_stats(self):
        return self.queries.dispatch(DashboardStatsQuery())

    def collector_performance(self):
        return self.queries.dispatch(CollectorPerformanceQuery())

    def daily_cash_report(
        self,
        start: date,
        end: date | None = None,
        collector_id: str | None = None,
        store: str | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
    ):
        return self.queries.dispatch(
            DailyCashReportQuery(
                filtros={
                    "start": start,
                    "end": end,
                    "collector_id": collector_id,
                    "store": store,
                    "min_amount": min_amount,
                    "max_amount": max_amount,
                }
            )
        )

    def collector_installments(self, collector_id: str):
        return self.queries.dispatch(CollectorInstallmentsQuery(filtros={"collector_id": collector_id}))

    def stores(self, collector_id: str | None = None) -> list[str]:
        return self.queries.dispatch(StoresQuery(filtros={"collector_id": collector_id}))
