from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from field_billing.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class DashboardStatsQuery(QueryDTO):
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class CollectorPerformanceQuery(QueryDTO):
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class CollectorInstallmentsQuery(QueryDTO):
    """filtros: collector_id"""
    filtros: dict[str, Any]

@dataclass(frozen=True)
class StoresQuery(QueryDTO):
    """filtros: collector_id (opcional). Sem cobrador, lista todas as lojas da base."""
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class DailyCashReportQuery(QueryDTO):
    """filtros: start, end, collector_id, store, min_amount, max_amount (só start é obrigatório)"""
    filtros: dict[str, Any]
