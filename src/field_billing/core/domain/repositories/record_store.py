from abc import ABC, abstractmethod
from typing import Any

Record = dict[str, Any]


class RecordStore(ABC):
    """
    Banco relacional externo visto pelo núcleo: quatro operações por tabela.
    Qualquer falha deve ser levantada como `RecordStoreError`.
    """

    @abstractmethod
    def fetch_all(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[Record]:
        """Varredura completa; a paginação fica a cargo da implementação."""
        ...

    @abstractmethod
    def update(self, table: str, record_id: Any, fields: Record, *, id_column: str = "id") -> None:
        """Atualização parcial pela chave primária."""
        ...

    @abstractmethod
    def insert(self, table: str, record: Record) -> Record:
        """Cria o registro e devolve a linha com o id atribuído pelo servidor."""
        ...

    @abstractmethod
    def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Remove por igualdade de colunas. Usado apenas para atribuições."""
        ...
