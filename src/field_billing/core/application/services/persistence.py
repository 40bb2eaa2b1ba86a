from collections.abc import Callable
from typing import Any

import structlog

from field_billing.adapters.observability.metrics import PERSISTENCE_FAILURES
from field_billing.core.application.dtos.result_dto import PersistResult
from field_billing.core.domain.events.exceptions import RecordStoreError

logger = structlog.get_logger(__name__)

INSTALLMENTS = "installments"
VISITS = "scheduled_visits"
COLLECTOR_STORES = "collector_stores"


def attempt(table: str, record_id: Any, write: Callable[[], Any]) -> PersistResult:
    """
    Executa uma gravação otimista. Falhas do banco externo viram
    `PersistResult(ok=False)`; o estado local é atualizado pelo chamador
    de qualquer forma.
    """
    try:
        write()
    except RecordStoreError as exc:
        PERSISTENCE_FAILURES.labels(table).inc()
        logger.error(
            "persist.failed",
            table=table,
            record_id=record_id,
            status_code=exc.status_code,
            error=str(exc),
            exc_info=True,
        )
        return PersistResult.failure(table, record_id, exc)
    return PersistResult.success(table, record_id)
