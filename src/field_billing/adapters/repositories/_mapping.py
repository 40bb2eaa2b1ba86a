from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import structlog

from field_billing.core.domain.mappers.record_mapper import MappingError

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def map_rows(rows: Iterable[dict[str, Any]], mapper: Callable[[dict[str, Any]], T], table: str) -> list[T]:
    """Mapeia as linhas descartando (e contando no log) as que não validam."""
    items: list[T] = []
    skipped = 0
    for row in rows:
        try:
            items.append(mapper(row))
        except MappingError:
            skipped += 1
    if skipped:
        logger.warning("records.skipped_invalid", table=table, skipped=skipped)
    return items
