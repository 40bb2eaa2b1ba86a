from datetime import timedelta
from unittest import TestCase

from field_billing.core.domain.events.exceptions import (
    ScheduleConflictError,
    ScheduleValidationError,
)
from field_billing.core.domain.services.visit_schedule_validator import (
    VisitProposal,
    validate_visit_batch,
)
from tests.helpers.factories import TODAY


class ValidateVisitBatchTests(TestCase):
    def test_data_passada_bloqueia(self):
        result = validate_visit_batch(
            [VisitProposal("1", "Cliente X", TODAY - timedelta(days=1), "10:00")], TODAY
        )
        self.assertTrue(result.blocked)
        self.assertEqual(result.errors, ["Cliente X: Data não pode ser anterior a hoje"])
        with self.assertRaises(ScheduleValidationError):
            result.raise_for_outcome(confirm_conflicts=True)

    def test_data_ausente_bloqueia(self):
        result = validate_visit_batch([VisitProposal("1", "Cliente Y", None)], TODAY)
        self.assertEqual(result.errors, ["Cliente Y: Data e horário não configurados"])

    def test_mesmo_horario_gera_um_conflito_com_os_dois_nomes(self):
        result = validate_visit_batch(
            [
                VisitProposal("1", "Ana", TODAY, "14:00"),
                VisitProposal("2", "Bruno", TODAY, "14:00"),
                VisitProposal("3", "Carla", TODAY, "15:00"),
            ],
            TODAY,
        )
        self.assertFalse(result.blocked)
        self.assertTrue(result.needs_confirmation)
        self.assertEqual(result.conflicts, ["10/01/2025 às 14:00: Ana, Bruno"])

        with self.assertRaises(ScheduleConflictError):
            result.raise_for_outcome()
        result.raise_for_outcome(confirm_conflicts=True)

    def test_sem_horario_nao_conflita(self):
        result = validate_visit_batch(
            [VisitProposal("1", "Ana", TODAY), VisitProposal("2", "Bruno", TODAY)], TODAY
        )
        self.assertEqual(result.conflicts, [])
        self.assertFalse(result.needs_confirmation)
