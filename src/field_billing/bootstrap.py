"""Ponto de entrada da aplicação: logging, container de DI e carga inicial."""
from field_billing.adapters.config import settings as default_settings
from field_billing.adapters.config.composition_root import setup_di_container_from_settings
from field_billing.adapters.config.structlog_config import configure_logging
from field_billing.core.application.services.facade import FieldBillingFacade


def bootstrap(settings=default_settings, *, record_store=None, load: bool = True) -> FieldBillingFacade:
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
    container = setup_di_container_from_settings(settings, record_store=record_store)
    facade = container.facade()
    if load:
        facade.refresh()
    return facade
