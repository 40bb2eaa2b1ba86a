from __future__ import annotations

from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.domain.entities.payment_distribution_entity import SalePaymentRecord
from field_billing.core.domain.events.exceptions import NotFoundError
from field_billing.core.domain.services.balance_aggregator import (
    BalanceSummary,
    ClientGroup,
    SaleGroup,
    aggregate,
    group_clients,
    group_sales,
)


class BalanceQueries:
    """Leituras de saldo: sempre recalculadas a partir das parcelas atuais."""

    def __init__(self, state: CollectionState):
        self.state = state

    def calculate_sale_balance(self, sale_number: int, client_document: str) -> BalanceSummary:
        installments = self.state.sale_installments(sale_number, client_document)
        if not installments:
            raise NotFoundError(f"Venda {sale_number} não encontrada para o cliente {client_document}")
        return aggregate(installments)

    def sales_by_client(self, client_document: str) -> list[SaleGroup]:
        sales = group_sales(self.state.client_installments(client_document))
        return sorted(sales, key=lambda s: s.sale_number)

    def client_groups(self, collector_id: str | None = None) -> list[ClientGroup]:
        source = (
            self.state.collector_installments(collector_id)
            if collector_id
            else self.state.installments
        )
        return group_clients(source)

    def sale_payments(self, sale_number: int, client_document: str) -> list[SalePaymentRecord]:
        return self.state.sale_payments(sale_number, client_document)
