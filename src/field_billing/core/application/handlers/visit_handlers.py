from field_billing.core.application.commands.visit_commands import (
    AddVisitNoteCommand,
    ApproveVisitCancellationCommand,
    RejectVisitCancellationCommand,
    RequestVisitCancellationCommand,
    RescheduleVisitCommand,
    ScheduleVisitsCommand,
    UpdateVisitStatusCommand,
)
from field_billing.core.application.cqrs import CommandHandler
from field_billing.core.application.dtos.result_dto import ScheduleBatchResult, VisitOperationResult
from field_billing.core.application.services.visit_service import VisitService


class ScheduleVisitsHandler(CommandHandler[ScheduleVisitsCommand]):
    """
    Agendamento em lote: valida o lote inteiro e cria as visitas uma a uma,
    acumulando falhas individuais.
    """

    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: ScheduleVisitsCommand) -> ScheduleBatchResult:
        return self.service.schedule_visits(
            cmd.collector_id,
            list(cmd.proposals),
            cmd.notes,
            confirm_conflicts=cmd.confirm_conflicts,
        )


class UpdateVisitStatusHandler(CommandHandler[UpdateVisitStatusCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: UpdateVisitStatusCommand) -> VisitOperationResult:
        return self.service.update_status(cmd.visit_id, cmd.status, cmd.note)


class RescheduleVisitHandler(CommandHandler[RescheduleVisitCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: RescheduleVisitCommand) -> VisitOperationResult:
        return self.service.reschedule(cmd.visit_id, cmd.new_date, cmd.new_time, cmd.reason)


class RequestVisitCancellationHandler(CommandHandler[RequestVisitCancellationCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: RequestVisitCancellationCommand) -> VisitOperationResult:
        return self.service.request_cancellation(cmd.visit_id, cmd.reason)


class ApproveVisitCancellationHandler(CommandHandler[ApproveVisitCancellationCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: ApproveVisitCancellationCommand) -> VisitOperationResult:
        return self.service.approve_cancellation(cmd.visit_id, cmd.manager_id)


class RejectVisitCancellationHandler(CommandHandler[RejectVisitCancellationCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: RejectVisitCancellationCommand) -> VisitOperationResult:
        return self.service.reject_cancellation(cmd.visit_id, cmd.manager_id, cmd.reason)


class AddVisitNoteHandler(CommandHandler[AddVisitNoteCommand]):
    def __init__(self, service: VisitService):
        self.service = service

    def handle(self, cmd: AddVisitNoteCommand) -> VisitOperationResult:
        return self.service.add_note(cmd.visit_id, cmd.text)
