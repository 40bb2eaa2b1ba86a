from datetime import date, datetime
from unittest import TestCase

from field_billing.core.application.dtos.visit_dtos import VisitProposalInput
from field_billing.core.application.services.visit_service import VisitService
from field_billing.core.domain.entities.scheduled_visit_entity import VisitStatus
from field_billing.core.domain.events.events import (
    PaymentProcessedEvent,
    VisitRescheduledEvent,
    VisitScheduledEvent,
    VisitStatusChangedEvent,
)
from field_billing.core.domain.events.exceptions import (
    ScheduleConflictError,
    ScheduleValidationError,
)
from field_billing.core.domain.services.visit_lifecycle import VisitLifecycle
from tests.helpers.factories import NOW, installment_row, user_row, visit_row
from tests.helpers.state import seeded_store, wire

ANA = "111.222.333-44"


def proposal(document, name, day="2025-01-11", time="10:00"):
    return VisitProposalInput(client_document=document, client_name=name, scheduled_date=day, scheduled_time=time)


class VisitServiceTests(TestCase):
    def setUp(self):
        self.store = seeded_store(
            installments=[
                installment_row(1, documento=ANA, cliente="Ana", valor_original=100),
                installment_row(2, documento=ANA, cliente="Ana", valor_original=50, data_vencimento="2025-03-01"),
                installment_row(3, documento="222", cliente="Bruno", valor_original=80, valor_recebido=80),
                installment_row(4, documento="333", cliente="Carla", valor_original=90),
                installment_row(5, documento="555", cliente="Eva", valor_original=40),
            ],
            visits=[visit_row("v1", client_document="333", client_name="Carla")],
            users=[user_row("c1")],
        )
        self.w = wire(self.store)
        self.service = VisitService(
            self.w.state,
            self.w.visit_repo,
            lifecycle=VisitLifecycle(clock=lambda: NOW),
            clock=lambda: NOW,
        )

    # ------------------------------------------------------------------ retrato
    def test_dados_do_cliente_para_visita(self):
        data = self.service.client_visit_data(ANA)
        self.assertEqual(data.total_pending_value, 150.0)
        self.assertEqual(data.overdue_count, 1)
        self.assertEqual(data.address, "Rua das Flores, 12")

    # ------------------------------------------------------------------ agendamento
    def test_agendamento_em_lote_cria_pula_e_falha(self):
        result = self.service.schedule_visits(
            "c1",
            [
                proposal(ANA, "Ana"),
                proposal("222", "Bruno", time="11:00"),
                proposal("333", "Carla", time="12:00"),
                proposal("444", "Desconhecido", time="13:00"),
            ],
            notes="levar carnê",
        )

        self.assertEqual((result.succeeded, result.failed, len(result.skipped)), (1, 1, 2))
        visit = result.visits[0]
        self.assertEqual((visit.client_document, visit.total_pending_value), (ANA, 150.0))
        self.assertIs(self.w.state.get_visit(visit.id), visit)
        self.assertEqual(self.store.row("scheduled_visits", visit.id)["notes"], "levar carnê")
        self.assertIsInstance(result.events[0], VisitScheduledEvent)
        self.assertEqual(result.summary, "1 concluído(s), 1 com falha")

    def test_data_passada_bloqueia_o_lote_inteiro(self):
        with self.assertRaises(ScheduleValidationError):
            self.service.schedule_visits("c1", [proposal(ANA, "Ana"), proposal("555", "Eva", day="2025-01-09")])
        self.assertEqual(len(self.store.tables["scheduled_visits"]), 1)

    def test_conflito_exige_confirmacao(self):
        batch = [proposal(ANA, "Ana"), proposal("555", "Eva")]
        with self.assertRaises(ScheduleConflictError):
            self.service.schedule_visits("c1", batch)

        result = self.service.schedule_visits("c1", batch, confirm_conflicts=True)
        self.assertEqual(result.succeeded, 2)

    def test_falha_na_insercao_nao_cria_visita_local(self):
        self.store.fail_table("scheduled_visits")
        result = self.service.schedule_visits("c1", [proposal(ANA, "Ana")])
        self.assertEqual((result.succeeded, result.failed), (0, 1))
        self.assertFalse(self.service.has_active_visit(ANA))

    # ------------------------------------------------------------------ transições
    def test_status_com_falha_de_gravacao_atualiza_estado_local(self):
        self.store.fail_record("scheduled_visits", "v1")
        result = self.service.update_status("v1", VisitStatus.COMPLETED)

        self.assertFalse(result.persist.ok)
        self.assertIs(self.w.state.get_visit("v1").status, VisitStatus.COMPLETED)
        event = result.events[0]
        self.assertIsInstance(event, VisitStatusChangedEvent)
        self.assertFalse(event.persisted)
        self.assertEqual(self.store.row("scheduled_visits", "v1")["status"], "agendada")

    def test_reagendamento(self):
        with self.assertRaises(ScheduleValidationError):
            self.service.reschedule("v1", date(2025, 1, 9), "10:00")

        result = self.service.reschedule("v1", date(2025, 1, 12), "15:00", "cliente pediu")
        self.assertTrue(result.persist.ok)
        self.assertIsInstance(result.events[-1], VisitRescheduledEvent)
        row = self.store.row("scheduled_visits", "v1")
        self.assertEqual((row["scheduled_date"], row["scheduled_time"]), ("2025-01-12", "15:00"))
        self.assertIn("Reagendado de 2025-01-10 09:00 para 2025-01-12 15:00", row["notes"])

    def test_trilha_estruturada_sobrevive_a_recarga(self):
        self.service.reschedule("v1", date(2025, 1, 12), "15:00", "cliente pediu")
        self.service.request_cancellation("v1", "mudou de endereço")
        self.service.reject_cancellation("v1", "g1", "visita necessária")
        before = self.w.state.get_visit("v1").audit_trail

        reloaded = wire(self.store).state.get_visit("v1")
        self.assertEqual(reloaded.audit_trail, before)
        self.assertEqual(reloaded.audit_trail[0].payload["reason"], "cliente pediu")
        self.assertEqual(reloaded.audit_trail[0].occurred_at, NOW)

    def test_fluxo_de_cancelamento_e_historico(self):
        self.service.request_cancellation("v1", "cliente faleceu")
        self.assertEqual([v.id for v in self.service.pending_cancellation_requests()], ["v1"])

        self.service.approve_cancellation("v1", "g1")
        self.assertEqual(self.service.pending_cancellation_requests(), [])
        self.assertEqual([v.id for v in self.service.cancellation_history()], ["v1"])
        self.assertFalse(self.service.has_active_visit("333"))

    def test_observacao_avulsa(self):
        result = self.service.add_note("v1", "portão azul")
        self.assertEqual(result.events, [])
        self.assertEqual(self.store.row("scheduled_visits", "v1")["notes"], "portão azul")

    # ------------------------------------------------------------------ eventos
    def test_pagamento_atualiza_retrato_da_visita_ativa(self):
        paid = self.w.state.get_installment(4).evolve(received_amount=60.0)
        self.w.state.merge_installments([paid])

        self.service.on_payment_processed(
            PaymentProcessedEvent(
                client_document="333",
                mode="general",
                payment_amount=60.0,
                applied_amount=60.0,
                undistributed=0.0,
                sale_numbers=(1,),
                collector_id="c1",
            )
        )
        self.assertEqual(self.w.state.get_visit("v1").total_pending_value, 30.0)
        self.assertEqual(self.store.row("scheduled_visits", "v1")["total_pending_value"], 30.0)

    # ------------------------------------------------------------------ consultas
    def test_visitas_por_data_e_por_cobrador(self):
        self.service.schedule_visits("c1", [proposal(ANA, "Ana", time="08:00")])
        by_date = self.service.visits_by_date(date(2025, 1, 11))
        self.assertEqual([v.client_name for v in by_date], ["Ana"])
        self.assertEqual(
            [v.scheduled_date for v in self.service.visits_by_collector("c1")],
            [date(2025, 1, 10), date(2025, 1, 11)],
        )

    def test_historico_respeita_janela_de_dias(self):
        old = self.w.state.get_visit("v1").evolve(
            status=VisitStatus.CANCELLED,
            cancellation_approved_at=datetime(2024, 11, 1, 12, 0),
        )
        self.w.state.merge_visit(old)
        self.assertEqual(self.service.cancellation_history(), [])
        self.assertEqual(len(self.service.cancellation_history(days=90)), 1)
