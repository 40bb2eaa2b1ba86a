from unittest import TestCase

import pydantic

from field_billing.core.application.dtos.payment_dtos import GeneralPaymentInput, SalePaymentInput
from field_billing.core.application.services.balance_queries import BalanceQueries
from field_billing.core.application.services.payment_service import PaymentService
from field_billing.core.domain.entities.installment_entity import InstallmentStatus
from field_billing.core.domain.events.events import PaymentProcessedEvent
from field_billing.core.domain.events.exceptions import (
    ExcessPaymentError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)
from field_billing.core.domain.services.balance_aggregator import SaleStatus, aggregate
from tests.helpers.factories import TODAY, installment_row, user_row
from tests.helpers.state import seeded_store, wire

DOC = "111.222.333-44"


class PaymentServiceTests(TestCase):
    def setUp(self):
        self.store = seeded_store(
            installments=[
                installment_row(1, venda_n=10, valor_original="300,00", data_vencimento="2025-01-09", parcela=1),
                installment_row(2, venda_n=10, valor_original="200,00", data_vencimento="2025-02-10", parcela=2),
                installment_row(3, venda_n=None, valor_original="50,00", data_vencimento="2025-01-01"),
                installment_row(
                    4, documento="999", cliente="Quitado", valor_original=80, valor_recebido=80, status="pago"
                ),
            ],
            users=[user_row("c1", "João Cobrador")],
        )
        self.w = wire(self.store)
        self.service = PaymentService(self.w.state, self.w.installment_repo, clock=lambda: TODAY)

    def _sale_payment(self, amount, **kw):
        return SalePaymentInput(client_document=DOC, sale_number=10, payment_amount=amount, **kw)

    # ------------------------------------------------------------------ venda
    def test_pagamento_de_venda_grava_e_atualiza_estado(self):
        outcome = self.service.process_sale_payment(self._sale_payment(120), "c1")

        self.assertTrue(outcome.fully_persisted)
        self.assertEqual([(d.installment_id, d.applied_amount) for d in outcome.ledger], [(1, 120.0)])
        self.assertEqual(self.w.state.get_installment(1).received_amount, 120.0)
        row = self.store.row("BANCO_DADOS", 1, "id_parcela")
        self.assertEqual((row["valor_recebido"], row["status"]), (120.0, "parcial"))

        record = outcome.records[0]
        self.assertEqual((record.sale_number, record.payment_amount), (10, 120.0))
        self.assertEqual(record.collector_name, "João Cobrador")
        self.assertEqual(self.w.state.sale_payments(10, DOC), [record])
        self.assertIsInstance(outcome.events[0], PaymentProcessedEvent)

    def test_falha_de_gravacao_nao_impede_atualizacao_local(self):
        self.store.fail_record("BANCO_DADOS", 1)
        outcome = self.service.process_sale_payment(self._sale_payment(300), "c1")

        self.assertFalse(outcome.fully_persisted)
        self.assertEqual([r.record_id for r in outcome.failed_writes], [1])
        self.assertIs(self.w.state.get_installment(1).status, InstallmentStatus.PAID)
        self.assertEqual(self.store.row("BANCO_DADOS", 1, "id_parcela")["valor_recebido"], "0")

    def test_valor_acima_do_saldo_exige_confirmacao(self):
        with self.assertRaises(ExcessPaymentError):
            self.service.process_sale_payment(self._sale_payment(600), "c1")
        self.assertEqual(self.w.state.get_installment(1).received_amount, 0.0)

        outcome = self.service.process_sale_payment(self._sale_payment(600, confirm_excess=True), "c1")
        self.assertEqual(outcome.undistributed, 100.0)
        self.assertIs(aggregate(self.w.state.sale_installments(10, DOC)).status, SaleStatus.FULLY_PAID)

    def test_venda_inexistente(self):
        with self.assertRaises(NotFoundError):
            self.service.process_sale_payment(
                SalePaymentInput(client_document=DOC, sale_number=77, payment_amount=10), "c1"
            )

    def test_valor_zero_e_recusado_na_entrada(self):
        with self.assertRaises(pydantic.ValidationError):
            self._sale_payment(0)

    # ------------------------------------------------------------------ geral
    def test_pagamento_geral_cobre_vendas_por_prioridade(self):
        outcome = self.service.process_general_payment(
            GeneralPaymentInput(client_document=DOC, payment_amount="400,00"), "c1"
        )

        self.assertEqual([d.installment_id for d in outcome.ledger], [3, 1, 2])
        self.assertEqual(self.w.state.get_installment(2).received_amount, 50.0)
        self.assertEqual([(r.sale_number, r.payment_amount) for r in outcome.records], [(0, 50.0), (10, 350.0)])
        self.assertEqual(outcome.events[0].sale_numbers, (0, 10))

    def test_pagamento_geral_sem_parcelas_em_aberto(self):
        with self.assertRaises(ValidationError):
            self.service.process_general_payment(
                GeneralPaymentInput(client_document="999", payment_amount=10), "c1"
            )

    # ------------------------------------------------------------------ correções
    def test_correcao_de_parcela(self):
        with self.assertRaises(OverpaymentError):
            self.service.correct_installment(1, 350.0)
        with self.assertRaises(ValidationError):
            self.service.correct_installment(1, -1.0)

        outcome = self.service.correct_installment(1, 300.0)
        self.assertTrue(outcome.fully_persisted)
        inst = self.w.state.get_installment(1)
        self.assertIs(inst.status, InstallmentStatus.PAID)
        self.assertEqual(inst.received_date, TODAY)
        self.assertEqual(self.store.row("BANCO_DADOS", 1, "id_parcela")["data_de_recebimento"], "2025-01-10")

    def test_correcao_acima_do_original_com_confirmacao(self):
        self.service.correct_installment(1, 350.0, confirm_overpayment=True)
        self.assertEqual(self.w.state.get_installment(1).received_amount, 350.0)

    def test_edicao_do_total_recebido_da_venda(self):
        with self.assertRaises(OverpaymentError):
            self.service.edit_sale_received_total(10, DOC, 600.0)

        outcome = self.service.edit_sale_received_total(10, DOC, 350.0)
        self.assertEqual(self.w.state.get_installment(1).received_amount, 300.0)
        self.assertEqual(self.w.state.get_installment(2).received_amount, 50.0)
        self.assertEqual(outcome.applied_total, 350.0)
        self.assertEqual(outcome.events[0].mode, "edit")


class RenegotiatedSaleTests(TestCase):
    """Linhas com venda_n nulo, 0 ou "0" formam a mesma venda renegociada."""

    def setUp(self):
        store = seeded_store(
            installments=[
                installment_row(1, venda_n=None, valor_original=50, data_vencimento="2025-01-01"),
                installment_row(2, venda_n=0, valor_original=40, data_vencimento="2025-01-03"),
                installment_row(3, venda_n="0", valor_original=30, data_vencimento="2025-01-20"),
            ],
        )
        self.w = wire(store)
        self.service = PaymentService(self.w.state, self.w.installment_repo, clock=lambda: TODAY)
        self.balances = BalanceQueries(self.w.state)

    def test_venda_zero_listada_pode_ser_consultada(self):
        [sale] = self.balances.sales_by_client(DOC)
        self.assertEqual(sale.sale_number, 0)
        self.assertEqual(len(sale.installments), 3)
        self.assertEqual(self.balances.calculate_sale_balance(0, DOC).total_value, 120.0)

    def test_venda_zero_pode_ser_paga(self):
        outcome = self.service.process_sale_payment(
            SalePaymentInput(client_document=DOC, sale_number=0, payment_amount=60), "c1"
        )
        self.assertEqual([(d.installment_id, d.applied_amount) for d in outcome.ledger], [(1, 50.0), (2, 10.0)])
        self.assertEqual(self.balances.calculate_sale_balance(0, DOC).total_paid, 60.0)
