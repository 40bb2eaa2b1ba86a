from abc import ABC, abstractmethod

from field_billing.core.domain.entities.installment_entity import InstallmentEntity


class InstallmentRepository(ABC):
    @abstractmethod
    def list_all(self) -> list[InstallmentEntity]:
        """Carrega todas as parcelas (tabela BANCO_DADOS)."""
        ...

    @abstractmethod
    def save_payment(self, installment: InstallmentEntity) -> None:
        """Grava valor recebido, status e data de recebimento de uma parcela."""
        ...

    @abstractmethod
    def set_collector(self, installment_id: int, collector_id: str | None) -> None:
        """Atribui (ou remove, com None) o cobrador de uma parcela."""
        ...
