from field_billing.core.application.commands.assignment_commands import (
    AssignCollectorToClientsCommand,
    AssignCollectorToStoreCommand,
    RefreshCollectionDataCommand,
    RemoveCollectorFromClientsCommand,
    RemoveCollectorFromStoreCommand,
)
from field_billing.core.application.cqrs import CommandHandler
from field_billing.core.application.dtos.result_dto import BatchResult
from field_billing.core.application.services.assignment_service import AssignmentService
from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.domain.entities.user_entity import CollectorStoreEntity


class AssignCollectorToClientsHandler(CommandHandler[AssignCollectorToClientsCommand]):
    def __init__(self, service: AssignmentService):
        self.service = service

    def handle(self, cmd: AssignCollectorToClientsCommand) -> BatchResult:
        return self.service.assign_collector_to_clients(cmd.collector_id, list(cmd.identifiers))


class RemoveCollectorFromClientsHandler(CommandHandler[RemoveCollectorFromClientsCommand]):
    def __init__(self, service: AssignmentService):
        self.service = service

    def handle(self, cmd: RemoveCollectorFromClientsCommand) -> BatchResult:
        return self.service.remove_collector_from_clients(list(cmd.identifiers))


class AssignCollectorToStoreHandler(CommandHandler[AssignCollectorToStoreCommand]):
    def __init__(self, service: AssignmentService):
        self.service = service

    def handle(self, cmd: AssignCollectorToStoreCommand) -> CollectorStoreEntity:
        return self.service.assign_collector_to_store(cmd.collector_id, cmd.store_name)


class RemoveCollectorFromStoreHandler(CommandHandler[RemoveCollectorFromStoreCommand]):
    def __init__(self, service: AssignmentService):
        self.service = service

    def handle(self, cmd: RemoveCollectorFromStoreCommand) -> None:
        self.service.remove_collector_from_store(cmd.collector_id, cmd.store_name)


class RefreshCollectionDataHandler(CommandHandler[RefreshCollectionDataCommand]):
    def __init__(self, state: CollectionState):
        self.state = state

    def handle(self, cmd: RefreshCollectionDataCommand) -> None:
        self.state.load()
