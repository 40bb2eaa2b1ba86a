from abc import ABC, abstractmethod

from field_billing.core.domain.entities.scheduled_visit_entity import ScheduledVisitEntity


class ScheduledVisitRepository(ABC):
    @abstractmethod
    def list_all(self) -> list[ScheduledVisitEntity]:
        ...

    @abstractmethod
    def create(self, visit: ScheduledVisitEntity) -> ScheduledVisitEntity:
        """Insere a visita e devolve a entidade com o id gerado pelo banco."""
        ...

    @abstractmethod
    def save(self, visit: ScheduledVisitEntity) -> None:
        """Persiste status, data/horário, observações e campos de cancelamento."""
        ...
