from dependency_injector import containers, providers

container = None


def build_container():  # noqa: PLR0915
    """Declara o Container. Separado de `setup_di_container_from_settings` para testes."""
    from field_billing.adapters.api_clients.record_store_client import RecordStoreClient
    from field_billing.adapters.repositories.installment_repo_impl import InstallmentRepoImpl
    from field_billing.adapters.repositories.scheduled_visit_repo_impl import ScheduledVisitRepoImpl
    from field_billing.adapters.repositories.user_repo_impl import CollectorStoreRepoImpl, UserRepoImpl

    # Commands
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
    from field_billing.core.application.cqrs import CommandBusImpl, QueryBus

    # Handlers
    from field_billing.core.application.handlers.assignment_handlers import (
        AssignCollectorToClientsHandler,
        AssignCollectorToStoreHandler,
        RefreshCollectionDataHandler,
        RemoveCollectorFromClientsHandler,
        RemoveCollectorFromStoreHandler,
    )
    from field_billing.core.application.handlers.payment_handlers import (
        CorrectInstallmentHandler,
        EditSaleReceivedTotalHandler,
        ProcessGeneralPaymentHandler,
        ProcessSalePaymentHandler,
    )
    from field_billing.core.application.handlers.query_handlers import (
        CancellationHistoryHandler,
        ClientGroupsHandler,
        ClientSalesHandler,
        ClientVisitDataHandler,
        CollectorInstallmentsHandler,
        CollectorPerformanceHandler,
        DailyCashReportHandler,
        DashboardStatsHandler,
        PendingCancellationsHandler,
        SaleBalanceHandler,
        SalePaymentsHandler,
        StoresHandler,
        ValidateVisitScheduleHandler,
        VisitsByCollectorHandler,
        VisitsByDateHandler,
    )
    from field_billing.core.application.handlers.visit_handlers import (
        AddVisitNoteHandler,
        ApproveVisitCancellationHandler,
        RejectVisitCancellationHandler,
        RequestVisitCancellationHandler,
        RescheduleVisitHandler,
        ScheduleVisitsHandler,
        UpdateVisitStatusHandler,
    )

    # Queries
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

    # Serviços
    from field_billing.core.application.services.assignment_service import AssignmentService
    from field_billing.core.application.services.balance_queries import BalanceQueries
    from field_billing.core.application.services.collection_state import CollectionState
    from field_billing.core.application.services.dashboard_service import DashboardService
    from field_billing.core.application.services.facade import FieldBillingFacade
    from field_billing.core.application.services.payment_service import PaymentService
    from field_billing.core.application.services.visit_service import VisitService
    from field_billing.core.domain.events.events import PaymentProcessedEvent
    from field_billing.core.domain.services.event_dispatcher import EventDispatcher
    from field_billing.core.domain.services.visit_lifecycle import VisitLifecycle

    class Container(containers.DeclarativeContainer):
        config = providers.Configuration()

        # Infra
        event_dispatcher = providers.Singleton(EventDispatcher)
        command_bus = providers.Singleton(CommandBusImpl, dispatcher=event_dispatcher)
        query_bus = providers.Singleton(QueryBus)

        record_store = providers.Singleton(
            RecordStoreClient,
            base_url=config.record_store.url,
            api_key=config.record_store.key,
            timeout=config.record_store.timeout,
            retries=config.record_store.retries,
            page_size=config.record_store.page_size,
        )

        # Repositórios (Ports → Adapters)
        installment_repo = providers.Singleton(
            InstallmentRepoImpl, store=record_store, table=config.tables.installments
        )
        visit_repo = providers.Singleton(
            ScheduledVisitRepoImpl, store=record_store, table=config.tables.visits
        )
        user_repo = providers.Singleton(UserRepoImpl, store=record_store, table=config.tables.users)
        collector_store_repo = providers.Singleton(
            CollectorStoreRepoImpl, store=record_store, table=config.tables.collector_stores
        )

        # Estado e serviços de negócio
        state = providers.Singleton(
            CollectionState,
            installment_repo=installment_repo,
            visit_repo=visit_repo,
            user_repo=user_repo,
            store_repo=collector_store_repo,
        )
        visit_lifecycle = providers.Singleton(VisitLifecycle)
        payment_service = providers.Singleton(PaymentService, state=state, installment_repo=installment_repo)
        visit_service = providers.Singleton(
            VisitService,
            state=state,
            visit_repo=visit_repo,
            lifecycle=visit_lifecycle,
            cancellation_history_days=config.cancellation_history_days,
        )
        assignment_service = providers.Singleton(
            AssignmentService,
            state=state,
            installment_repo=installment_repo,
            store_repo=collector_store_repo,
            batch_size=config.assignment_batch_size,
        )
        balance_queries = providers.Singleton(BalanceQueries, state=state)
        dashboard_service = providers.Singleton(DashboardService, state=state)

        # Facade exposta à interface
        facade = providers.Singleton(FieldBillingFacade, command_bus=command_bus, query_bus=query_bus)

        # Handlers de comandos
        process_sale_payment_handler = providers.Factory(ProcessSalePaymentHandler, service=payment_service)
        process_general_payment_handler = providers.Factory(ProcessGeneralPaymentHandler, service=payment_service)
        correct_installment_handler = providers.Factory(CorrectInstallmentHandler, service=payment_service)
        edit_sale_total_handler = providers.Factory(EditSaleReceivedTotalHandler, service=payment_service)
        schedule_visits_handler = providers.Factory(ScheduleVisitsHandler, service=visit_service)
        update_visit_status_handler = providers.Factory(UpdateVisitStatusHandler, service=visit_service)
        reschedule_visit_handler = providers.Factory(RescheduleVisitHandler, service=visit_service)
        request_cancellation_handler = providers.Factory(RequestVisitCancellationHandler, service=visit_service)
        approve_cancellation_handler = providers.Factory(ApproveVisitCancellationHandler, service=visit_service)
        reject_cancellation_handler = providers.Factory(RejectVisitCancellationHandler, service=visit_service)
        add_visit_note_handler = providers.Factory(AddVisitNoteHandler, service=visit_service)
        assign_clients_handler = providers.Factory(AssignCollectorToClientsHandler, service=assignment_service)
        remove_clients_handler = providers.Factory(RemoveCollectorFromClientsHandler, service=assignment_service)
        assign_store_handler = providers.Factory(AssignCollectorToStoreHandler, service=assignment_service)
        remove_store_handler = providers.Factory(RemoveCollectorFromStoreHandler, service=assignment_service)
        refresh_data_handler = providers.Factory(RefreshCollectionDataHandler, state=state)

        # Handlers de queries
        sale_balance_handler = providers.Factory(SaleBalanceHandler, balances=balance_queries)
        client_sales_handler = providers.Factory(ClientSalesHandler, balances=balance_queries)
        client_groups_handler = providers.Factory(ClientGroupsHandler, balances=balance_queries)
        sale_payments_handler = providers.Factory(SalePaymentsHandler, balances=balance_queries)
        validate_schedule_handler = providers.Factory(ValidateVisitScheduleHandler, visits=visit_service)
        client_visit_data_handler = providers.Factory(ClientVisitDataHandler, visits=visit_service)
        pending_cancellations_handler = providers.Factory(PendingCancellationsHandler, visits=visit_service)
        cancellation_history_handler = providers.Factory(CancellationHistoryHandler, visits=visit_service)
        visits_by_date_handler = providers.Factory(VisitsByDateHandler, visits=visit_service)
        visits_by_collector_handler = providers.Factory(VisitsByCollectorHandler, visits=visit_service)
        dashboard_stats_handler = providers.Factory(DashboardStatsHandler, dashboard=dashboard_service)
        collector_performance_handler = providers.Factory(CollectorPerformanceHandler, dashboard=dashboard_service)
        daily_cash_report_handler = providers.Factory(DailyCashReportHandler, dashboard=dashboard_service)
        collector_installments_handler = providers.Factory(CollectorInstallmentsHandler, state=state)
        stores_handler = providers.Factory(StoresHandler, state=state)

        def init(self):
            # Registrar comandos no CommandBus
            bus = self.command_bus()
            bus.register(ProcessSalePaymentCommand, self.process_sale_payment_handler())
            bus.register(ProcessGeneralPaymentCommand, self.process_general_payment_handler())
            bus.register(CorrectInstallmentCommand, self.correct_installment_handler())
            bus.register(EditSaleReceivedTotalCommand, self.edit_sale_total_handler())
            bus.register(ScheduleVisitsCommand, self.schedule_visits_handler())
            bus.register(UpdateVisitStatusCommand, self.update_visit_status_handler())
            bus.register(RescheduleVisitCommand, self.reschedule_visit_handler())
            bus.register(RequestVisitCancellationCommand, self.request_cancellation_handler())
            bus.register(ApproveVisitCancellationCommand, self.approve_cancellation_handler())
            bus.register(RejectVisitCancellationCommand, self.reject_cancellation_handler())
            bus.register(AddVisitNoteCommand, self.add_visit_note_handler())
            bus.register(AssignCollectorToClientsCommand, self.assign_clients_handler())
            bus.register(RemoveCollectorFromClientsCommand, self.remove_clients_handler())
            bus.register(AssignCollectorToStoreCommand, self.assign_store_handler())
            bus.register(RemoveCollectorFromStoreCommand, self.remove_store_handler())
            bus.register(RefreshCollectionDataCommand, self.refresh_data_handler())

            # Registrar queries no QueryBus
            qb = self.query_bus()
            qb.register(SaleBalanceQuery, self.sale_balance_handler())
            qb.register(ClientSalesQuery, self.client_sales_handler())
            qb.register(ClientGroupsQuery, self.client_groups_handler())
            qb.register(SalePaymentsQuery, self.sale_payments_handler())
            qb.register(ValidateVisitScheduleQuery, self.validate_schedule_handler())
            qb.register(ClientVisitDataQuery, self.client_visit_data_handler())
            qb.register(PendingCancellationsQuery, self.pending_cancellations_handler())
            qb.register(CancellationHistoryQuery, self.cancellation_history_handler())
            qb.register(VisitsByDateQuery, self.visits_by_date_handler())
            qb.register(VisitsByCollectorQuery, self.visits_by_collector_handler())
            qb.register(DashboardStatsQuery, self.dashboard_stats_handler())
            qb.register(CollectorPerformanceQuery, self.collector_performance_handler())
            qb.register(DailyCashReportQuery, self.daily_cash_report_handler())
            qb.register(CollectorInstallmentsQuery, self.collector_installments_handler())
            qb.register(StoresQuery, self.stores_handler())

            # Eventos: pagamentos atualizam o retrato das visitas ativas do cliente
            self.event_dispatcher().subscribe(PaymentProcessedEvent, self.visit_service().on_payment_processed)

    return Container


def configure_container(container, settings) -> None:
    container.config.record_store.url.from_value(settings.RECORD_STORE_URL)
    container.config.record_store.key.from_value(settings.RECORD_STORE_KEY)
    container.config.record_store.timeout.from_value(settings.RECORD_STORE_TIMEOUT)
    container.config.record_store.retries.from_value(settings.RECORD_STORE_RETRIES)
    container.config.record_store.page_size.from_value(settings.RECORD_STORE_PAGE_SIZE)
    container.config.tables.installments.from_value(settings.INSTALLMENTS_TABLE)
    container.config.tables.visits.from_value(settings.VISITS_TABLE)
    container.config.tables.users.from_value(settings.USERS_TABLE)
    container.config.tables.collector_stores.from_value(settings.COLLECTOR_STORES_TABLE)
    container.config.assignment_batch_size.from_value(settings.ASSIGNMENT_BATCH_SIZE)
    container.config.cancellation_history_days.from_value(settings.CANCELLATION_HISTORY_DAYS)


def setup_di_container_from_settings(settings, *, record_store=None):
    """
    Inicializa o DI container uma única vez a partir do módulo de settings.
    `record_store` substitui o cliente HTTP (ex.: banco em memória nos testes).
    """
    global container  # noqa: PLW0603
    if container is not None:
        import structlog
        structlog.get_logger().debug("DI container já inicializado.")
        return container

    Container = build_container()
    new = Container()
    configure_container(new, settings)
    if record_store is not None:
        new.record_store.override(providers.Object(record_store))
    Container.init(new)
    container = new
    return container


def reset_container() -> None:
    global container  # noqa: PLW0603
    container = None
