from dataclasses import dataclass

from field_billing.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class AssignCollectorToClientsCommand(CommandDTO):
    collector_id: str
    identifiers: tuple[str, ...]

@dataclass(frozen=True)
class RemoveCollectorFromClientsCommand(CommandDTO):
    identifiers: tuple[str, ...]

@dataclass(frozen=True)
class AssignCollectorToStoreCommand(CommandDTO):
    collector_id: str
    store_name: str

@dataclass(frozen=True)
class RemoveCollectorFromStoreCommand(CommandDTO):
    collector_id: str
    store_name: str

@dataclass(frozen=True)
class RefreshCollectionDataCommand(CommandDTO):
    """Recarrega parcelas, visitas, usuários e lojas do banco externo."""
    pass
