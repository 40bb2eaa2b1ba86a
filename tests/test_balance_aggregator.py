from unittest import TestCase

from field_billing.core.domain.entities.installment_entity import InstallmentStatus
from field_billing.core.domain.services.balance_aggregator import (
    RENEGOTIATED_SALE_NUMBER,
    SaleStatus,
    aggregate,
    group_clients,
    group_sales,
)
from tests.helpers.factories import make_installment


class AggregateTests(TestCase):
    def test_status_da_venda(self):
        self.assertIs(aggregate([make_installment(1)]).status, SaleStatus.PENDING)
        self.assertIs(aggregate([make_installment(1, received=30.0)]).status, SaleStatus.PARTIALLY_PAID)
        self.assertIs(aggregate([make_installment(1, received=99.99)]).status, SaleStatus.FULLY_PAID)

    def test_totais_e_detalhamento(self):
        summary = aggregate([
            make_installment(1, original=150.0, received=150.0),
            make_installment(2, original=150.0, received=25.5),
        ])
        self.assertEqual(summary.total_value, 300.0)
        self.assertEqual(summary.total_paid, 175.5)
        self.assertEqual(summary.remaining_balance, 124.5)
        self.assertEqual([b.remaining_amount for b in summary.breakdown], [0.0, 124.5])
        self.assertEqual([b.status for b in summary.breakdown], [InstallmentStatus.PAID, InstallmentStatus.PARTIAL])

    def test_recebido_acima_do_original_limita_o_pago(self):
        summary = aggregate([make_installment(1, original=100.0, received=120.0)])
        self.assertEqual(summary.total_paid, 100.0)
        self.assertEqual(summary.remaining_balance, 0.0)
        self.assertEqual(summary.overpaid_amount, 20.0)
        self.assertIs(summary.status, SaleStatus.FULLY_PAID)

    def test_sem_parcelas(self):
        summary = aggregate([])
        self.assertEqual((summary.total_value, summary.total_paid, summary.remaining_balance), (0.0, 0.0, 0.0))
        self.assertIs(summary.status, SaleStatus.PENDING)

    def test_recalculo_e_idempotente(self):
        items = [make_installment(1, received=10.0), make_installment(2)]
        self.assertEqual(aggregate(items), aggregate(items))


class GroupingTests(TestCase):
    def test_parcelas_sem_numero_de_venda_formam_venda_renegociada(self):
        items = [
            make_installment(1, sale=10),
            make_installment(2, sale=None),
            make_installment(3, sale=None),
            make_installment(4, sale=10),
            make_installment(5, sale=10, document="999", name="Outro"),
        ]
        sales = {(s.sale_number, s.client_document): s for s in group_sales(items)}

        self.assertEqual(len(sales), 3)
        reneg = sales[(RENEGOTIATED_SALE_NUMBER, "111.222.333-44")]
        self.assertTrue(reneg.is_renegotiated)
        self.assertEqual(reneg.description, "Renegociada (2 parcelas)")
        self.assertEqual([i.id for i in sales[(10, "111.222.333-44")].installments], [1, 4])

    def test_clientes_por_documento_ou_nome_ordenados_pelo_nome(self):
        items = [
            make_installment(1, document="222", name="bruno Lima"),
            make_installment(2, document=None, name="Ana Paula"),
            make_installment(3, document="  ", name=None),
            make_installment(4, document="222", name="bruno Lima", sale=2),
        ]
        clients = group_clients(items)

        self.assertEqual([c.client_key for c in clients], ["Ana Paula", "222"])
        self.assertEqual(len(clients[1].sales), 2)
        self.assertEqual(clients[1].balance.total_value, 200.0)
