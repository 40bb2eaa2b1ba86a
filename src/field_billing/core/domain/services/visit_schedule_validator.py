from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from field_billing.core.domain.events.exceptions import (
    ScheduleConflictError,
    ScheduleValidationError,
)


@dataclass(frozen=True, slots=True)
class VisitProposal:
    client_document: str
    client_name: str
    scheduled_date: date | None
    scheduled_time: str | None = None


@dataclass(frozen=True, slots=True)
class ScheduleValidation:
    errors: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return bool(self.errors)

    @property
    def needs_confirmation(self) -> bool:
        return not self.errors and bool(self.conflicts)

    def raise_for_outcome(self, *, confirm_conflicts: bool = False) -> None:
        """Erros sempre bloqueiam; conflitos só bloqueiam sem confirmação."""
        if self.errors:
            raise ScheduleValidationError(self.errors)
        if self.conflicts and not confirm_conflicts:
            raise ScheduleConflictError(self.conflicts)


def validate_visit_batch(
    proposals: Iterable[VisitProposal],
    today: date | None = None,
) -> ScheduleValidation:
    today = today or date.today()
    errors: list[str] = []
    slots: dict[tuple[date, str], list[str]] = {}

    for p in proposals:
        if p.scheduled_date is None:
            errors.append(f"{p.client_name}: Data e horário não configurados")
            continue
        if p.scheduled_date < today:
            errors.append(f"{p.client_name}: Data não pode ser anterior a hoje")
            continue
        if p.scheduled_time:
            slots.setdefault((p.scheduled_date, p.scheduled_time), []).append(p.client_name)

    conflicts = [
        f"{day.strftime('%d/%m/%Y')} às {time}: {', '.join(names)}"
        for (day, time), names in slots.items()
        if len(names) > 1
    ]
    return ScheduleValidation(errors=errors, conflicts=conflicts)
