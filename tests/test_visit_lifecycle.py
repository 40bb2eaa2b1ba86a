from datetime import date
from unittest import TestCase

from field_billing.core.domain.entities.scheduled_visit_entity import AuditKind, VisitStatus
from field_billing.core.domain.events.exceptions import (
    InvalidVisitTransitionError,
    ValidationError,
)
from field_billing.core.domain.services.visit_lifecycle import VisitLifecycle, can_transition
from tests.helpers.factories import NOW, make_visit


class VisitLifecycleTests(TestCase):
    def setUp(self):
        self.lifecycle = VisitLifecycle(clock=lambda: NOW)

    def test_reagendamento_registra_nota_e_mantem_status(self):
        visit = make_visit(day=date(2025, 1, 5), time="09:00")
        updated = self.lifecycle.reschedule(visit, date(2025, 1, 6), "10:00", "cliente viajou")

        self.assertIs(updated.status, VisitStatus.SCHEDULED)
        self.assertEqual((updated.scheduled_date, updated.scheduled_time), (date(2025, 1, 6), "10:00"))
        self.assertIn("Reagendado de 2025-01-05 09:00 para 2025-01-06 10:00", updated.notes)
        self.assertIn("Motivo: cliente viajou", updated.notes)
        self.assertEqual(visit.audit_trail, ())

    def test_realizada_grava_data_e_e_terminal(self):
        done = self.lifecycle.mark_status(make_visit(), VisitStatus.COMPLETED, "recebeu o cobrador")
        self.assertEqual(done.completed_date, NOW.date())
        self.assertEqual(done.audit_trail[-1].kind, AuditKind.STATUS_CHANGED)

        for target in VisitStatus:
            with self.assertRaises(InvalidVisitTransitionError):
                self.lifecycle.mark_status(done, target)
        with self.assertRaises(InvalidVisitTransitionError):
            self.lifecycle.reschedule(done, date(2025, 2, 1), None)

    def test_fluxo_de_cancelamento_aprovado(self):
        requested = self.lifecycle.request_cancellation(make_visit(), "cliente mudou de cidade")
        self.assertIs(requested.status, VisitStatus.CANCELLATION_REQUESTED)
        self.assertEqual(requested.cancellation_request_date, NOW)

        approved = self.lifecycle.approve_cancellation(requested, "g1")
        self.assertIs(approved.status, VisitStatus.CANCELLED)
        self.assertEqual(approved.cancellation_approved_by, "g1")
        self.assertEqual(approved.notes.splitlines()[-1], "[2025-01-10 09:30] Cancelamento aprovado por g1")

    def test_rejeicao_volta_para_agendada(self):
        requested = self.lifecycle.request_cancellation(make_visit(), "motivo")
        rejected = self.lifecycle.reject_cancellation(requested, "g1", "visita necessária")
        self.assertIs(rejected.status, VisitStatus.SCHEDULED)
        self.assertEqual(rejected.cancellation_rejection_reason, "visita necessária")
        self.assertEqual(len(rejected.audit_trail), 2)

    def test_motivo_vazio_e_rejeitado(self):
        with self.assertRaises(ValidationError):
            self.lifecycle.request_cancellation(make_visit(), "   ")
        requested = self.lifecycle.request_cancellation(make_visit(), "motivo")
        with self.assertRaises(ValidationError):
            self.lifecycle.reject_cancellation(requested, "g1", "")

    def test_aprovacao_exige_pedido_pendente(self):
        with self.assertRaises(InvalidVisitTransitionError):
            self.lifecycle.approve_cancellation(make_visit(), "g1")

    def test_observacoes_iniciais_viram_nota(self):
        created = self.lifecycle.created(make_visit(), "  levar boleto  ")
        self.assertEqual(created.notes, "levar boleto")
        visit = make_visit()
        self.assertIs(self.lifecycle.created(visit, ""), visit)

    def test_tabela_de_transicoes(self):
        self.assertTrue(can_transition(VisitStatus.SCHEDULED, VisitStatus.NOT_FOUND))
        self.assertTrue(can_transition(VisitStatus.CANCELLATION_REQUESTED, VisitStatus.SCHEDULED))
        self.assertFalse(can_transition(VisitStatus.CANCELLED, VisitStatus.SCHEDULED))
        self.assertFalse(can_transition(VisitStatus.SCHEDULED, VisitStatus.SCHEDULED))
