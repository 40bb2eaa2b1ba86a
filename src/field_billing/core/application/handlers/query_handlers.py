from __future__ import annotations

from typing import Any

from field_billing.core.application.cqrs import QueryHandler
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
from field_billing.core.application.services.balance_queries import BalanceQueries
from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.application.services.dashboard_service import DashboardService
from field_billing.core.application.services.visit_service import VisitService

# ───────────────────────────────────────────────
# Saldos
# ───────────────────────────────────────────────
class SaleBalanceHandler(QueryHandler[SaleBalanceQuery, Any]):
    def __init__(self, balances: BalanceQueries):
        self.balances = balances

    def handle(self, query: SaleBalanceQuery):
        f = query.filtros
        return self.balances.calculate_sale_balance(f["sale_number"], f["client_document"])


class ClientSalesHandler(QueryHandler[ClientSalesQuery, Any]):
    def __init__(self, balances: BalanceQueries):
        self.balances = balances

    def handle(self, query: ClientSalesQuery):
        return self.balances.sales_by_client(query.filtros["client_document"])


class ClientGroupsHandler(QueryHandler[ClientGroupsQuery, Any]):
    def __init__(self, balances: BalanceQueries):
        self.balances = balances

    def handle(self, query: ClientGroupsQuery):
        return self.balances.client_groups(query.filtros.get("collector_id"))


class SalePaymentsHandler(QueryHandler[SalePaymentsQuery, Any]):
    def __init__(self, balances: BalanceQueries):
        self.balances = balances

    def handle(self, query: SalePaymentsQuery):
        f = query.filtros
        return self.balances.sale_payments(f["sale_number"], f["client_document"])

# ───────────────────────────────────────────────
# Visitas
# ───────────────────────────────────────────────
class ValidateVisitScheduleHandler(QueryHandler[ValidateVisitScheduleQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: ValidateVisitScheduleQuery):
        return self.visits.validate_schedules(query.filtros["proposals"])


class ClientVisitDataHandler(QueryHandler[ClientVisitDataQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: ClientVisitDataQuery):
        return self.visits.client_visit_data(query.filtros["client_document"])


class PendingCancellationsHandler(QueryHandler[PendingCancellationsQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: PendingCancellationsQuery):
        return self.visits.pending_cancellation_requests()


class CancellationHistoryHandler(QueryHandler[CancellationHistoryQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: CancellationHistoryQuery):
        return self.visits.cancellation_history(query.filtros.get("days"))


class VisitsByDateHandler(QueryHandler[VisitsByDateQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: VisitsByDateQuery):
        return self.visits.visits_by_date(query.filtros["day"], query.filtros.get("collector_id"))


class VisitsByCollectorHandler(QueryHandler[VisitsByCollectorQuery, Any]):
    def __init__(self, visits: VisitService):
        self.visits = visits

    def handle(self, query: VisitsByCollectorQuery):
        return self.visits.visits_by_collector(query.filtros["collector_id"])

# ───────────────────────────────────────────────
# Painel do gerente
# ───────────────────────────────────────────────
class DashboardStatsHandler(QueryHandler[DashboardStatsQuery, Any]):
    def __init__(self, dashboard: DashboardService):
        self.dashboard = dashboard

    def handle(self, query: DashboardStatsQuery):
        return self.dashboard.dashboard_stats()


class CollectorPerformanceHandler(QueryHandler[CollectorPerformanceQuery, Any]):
    def __init__(self, dashboard: DashboardService):
        self.dashboard = dashboard

    def handle(self, query: CollectorPerformanceQuery):
        return self.dashboard.collector_performance()


class DailyCashReportHandler(QueryHandler[DailyCashReportQuery, Any]):
    def __init__(self, dashboard: DashboardService):
        self.dashboard = dashboard

    def handle(self, query: DailyCashReportQuery):
        return self.dashboard.daily_cash_report(**query.filtros)


class CollectorInstallmentsHandler(QueryHandler[CollectorInstallmentsQuery, Any]):
    def __init__(self, state: CollectionState):
        self.state = state

    def handle(self, query: CollectorInstallmentsQuery):
        return self.state.collector_installments(query.filtros["collector_id"])


class StoresHandler(QueryHandler[StoresQuery, Any]):
    def __init__(self, state: CollectionState):
        self.state = state

    def handle(self, query: StoresQuery):
        collector_id = query.filtros.get("collector_id")
        if collector_id:
            return self.state.collector_store_names(collector_id)
        return self.state.available_stores()
