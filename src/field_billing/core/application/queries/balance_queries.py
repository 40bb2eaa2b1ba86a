from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from field_billing.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class SaleBalanceQuery(QueryDTO):
    """filtros: sale_number, client_document"""
    filtros: dict[str, Any]

@dataclass(frozen=True)
class ClientSalesQuery(QueryDTO):
    """filtros: client_document"""
    filtros: dict[str, Any]

@dataclass(frozen=True)
class ClientGroupsQuery(QueryDTO):
    """filtros: collector_id (opcional)"""
    filtros: dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class SalePaymentsQuery(QueryDTO):
    """filtros: sale_number, client_document"""
    filtros: dict[str, Any]
