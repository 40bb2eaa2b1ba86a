from dataclasses import dataclass
from datetime import date

from field_billing.core.application.cqrs import CommandDTO
from field_billing.core.application.dtos.visit_dtos import VisitProposalInput
from field_billing.core.domain.entities.scheduled_visit_entity import VisitStatus


@dataclass(frozen=True)
class ScheduleVisitsCommand(CommandDTO):
    collector_id: str
    proposals: tuple[VisitProposalInput, ...]
    notes: str = ""
    confirm_conflicts: bool = False

@dataclass(frozen=True)
class UpdateVisitStatusCommand(CommandDTO):
    visit_id: str
    status: VisitStatus
    note: str | None = None

@dataclass(frozen=True)
class RescheduleVisitCommand(CommandDTO):
    visit_id: str
    new_date: date
    new_time: str | None = None
    reason: str | None = None

@dataclass(frozen=True)
class RequestVisitCancellationCommand(CommandDTO):
    visit_id: str
    reason: str

@dataclass(frozen=True)
class ApproveVisitCancellationCommand(CommandDTO):
    visit_id: str
    manager_id: str

@dataclass(frozen=True)
class RejectVisitCancellationCommand(CommandDTO):
    visit_id: str
    manager_id: str
    reason: str

@dataclass(frozen=True)
class AddVisitNoteCommand(CommandDTO):
    visit_id: str
    text: str
