from datetime import date
from unittest import TestCase

from field_billing.core.application.services.dashboard_service import DashboardService
from field_billing.core.domain.events.exceptions import ValidationError
from tests.helpers.factories import TODAY, installment_row, user_row
from tests.helpers.state import seeded_store, wire


class DashboardServiceTests(TestCase):
    def setUp(self):
        store = seeded_store(
            installments=[
                installment_row(1, venda_n=10, documento="111", valor_original=100, user_id="c1"),
                installment_row(2, venda_n=10, documento="111", valor_original=100, valor_recebido=40,
                                status="parcial", user_id="c1", data_vencimento="2025-02-01"),
                installment_row(3, venda_n=20, documento="222", valor_original=50, valor_recebido=50,
                                status="pago", nome_da_loja="Loja Norte"),
            ],
            users=[user_row("c1", "João Cobrador"), user_row("g1", "Gerente Geral", type="manager")],
            collector_stores=[{"id": "s1", "collector_id": "c1", "store_name": "Loja Norte"}],
        )
        self.w = wire(store)
        self.service = DashboardService(self.w.state, clock=lambda: TODAY)

    def test_indicadores_gerais(self):
        stats = self.service.dashboard_stats()
        self.assertEqual((stats.total_pending, stats.total_received, stats.total_overdue), (1, 2, 1))
        self.assertEqual(stats.total_amount, 250.0)
        self.assertEqual(stats.received_amount, 90.0)
        self.assertEqual(stats.pending_amount, 160.0)
        self.assertEqual(stats.conversion_rate, 66.67)
        self.assertEqual(stats.collectors_count, 1)

    def test_desempenho_por_cobrador_conta_vendas_diretas_e_da_loja(self):
        [perf] = self.service.collector_performance()
        self.assertEqual(perf.collector_name, "João Cobrador")
        self.assertEqual((perf.total_assigned, perf.total_received), (2, 1))
        self.assertEqual(perf.conversion_rate, 50.0)
        self.assertEqual(perf.total_amount, 250.0)
        self.assertEqual(perf.client_count, 2)


class DailyCashReportTests(TestCase):
    def setUp(self):
        store = seeded_store(
            installments=[
                installment_row(1, venda_n=10, documento="111", cliente="Ana", valor_original=100, valor_recebido=100,
                                status="pago", data_de_recebimento="2025-01-10", user_id="c1"),
                installment_row(2, venda_n=10, documento="111", cliente="Ana", valor_original=100, valor_recebido=40,
                                status="parcial", data_de_recebimento="2025-01-10", user_id="c1"),
                installment_row(3, venda_n=20, documento="222", cliente="Bruno", valor_original=50, valor_recebido=50,
                                status="pago", data_de_recebimento="09/01/2025", user_id="c1",
                                nome_da_loja="Loja Norte"),
                installment_row(4, venda_n=None, documento="333", cliente=None, valor_original=30, valor_recebido=30,
                                status="pago", data_de_recebimento="2025-01-10"),
                installment_row(5, venda_n=30, documento="444", valor_original=70),
                installment_row(6, venda_n=40, documento="555", cliente="Eva", valor_original=60, valor_recebido=60,
                                status="pago", data_de_recebimento="2025-01-05", user_id="c1"),
            ],
            users=[user_row("c1", "João Cobrador")],
        )
        self.service = DashboardService(wire(store).state, clock=lambda: TODAY)

    def test_um_dia_agrupa_por_venda_e_cobrador(self):
        report = self.service.daily_cash_report(TODAY)
        self.assertEqual((report.start, report.end), (TODAY, TODAY))
        self.assertEqual((report.total_received, report.total_transactions), (170.0, 2))

        ana, reneg = report.sales
        self.assertEqual((ana.sale_number, ana.installment_ids), (10, (1, 2)))
        self.assertEqual((ana.total_original, ana.total_received, ana.total_pending), (200.0, 140.0, 60.0))
        self.assertEqual((reneg.sale_number, reneg.client_name, reneg.collector_name),
                         (0, "Cliente não informado", "Não atribuído"))

        joao, unassigned = report.collectors
        self.assertEqual((joao.collector_name, joao.received_amount, joao.transaction_count), ("João Cobrador", 140.0, 1))
        self.assertEqual((joao.clients, joao.sale_numbers), (("Ana",), (10,)))
        self.assertIsNone(unassigned.collector_id)
        self.assertEqual(unassigned.sale_numbers, ())

    def test_periodo_com_filtro_de_cobrador(self):
        report = self.service.daily_cash_report(date(2025, 1, 9), TODAY, collector_id="c1")
        [joao] = report.collectors
        self.assertEqual((joao.received_amount, joao.transaction_count), (190.0, 2))
        self.assertEqual(joao.clients, ("Bruno", "Ana"))
        self.assertEqual(joao.sale_numbers, (10, 20))

    def test_filtros_de_loja_e_valor(self):
        by_store = self.service.daily_cash_report(date(2025, 1, 1), TODAY, store="Loja Norte")
        self.assertEqual([s.sale_number for s in by_store.sales], [20])

        by_amount = self.service.daily_cash_report(TODAY, min_amount=50)
        self.assertEqual([(s.sale_number, s.total_received) for s in by_amount.sales], [(10, 100.0)])
        self.assertEqual(self.service.daily_cash_report(TODAY, max_amount=35).total_received, 30.0)

    def test_periodo_invertido(self):
        with self.assertRaises(ValidationError):
            self.service.daily_cash_report(TODAY, date(2025, 1, 1))
