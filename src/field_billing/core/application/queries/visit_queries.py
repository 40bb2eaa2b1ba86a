from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from field_billing.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class ValidateVisitScheduleQuery(QueryDTO):
    """filtros: proposals (lista de VisitProposalInput)"""
    filtros: dict[str, Any]

@dataclass(frozen=True)
class ClientVisitDataQuery(QueryDTO):
    filtros: dict[str, Any]

@dataclass(frozen=True)
class PendingCancellationsQuery(QueryDTO):
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class CancellationHistoryQuery(QueryDTO):
    """filtros: days (opcional)"""
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class VisitsByDateQuery(QueryDTO):
    """filtros: day, collector_id (opcional)"""
    filtros: dict[str, Any]

@dataclass(frozen=True)
class VisitsByCollectorQuery(QueryDTO):
    filtros: dict[str, Any]
