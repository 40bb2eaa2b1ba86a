from __future__ import annotations

from datetime import date, datetime
from typing import Any

from field_billing.core.domain.entities.installment_entity import (
    InstallmentEntity,
    InstallmentStatus,
    derive_status,
)
from field_billing.core.domain.entities.scheduled_visit_entity import (
    ScheduledVisitEntity,
    VisitStatus,
)
from field_billing.core.domain.entities.user_entity import UserEntity, UserType

TODAY = date(2025, 1, 10)
NOW = datetime(2025, 1, 10, 9, 30)


def make_installment(
    id: int,
    *,
    original: float = 100.0,
    received: float = 0.0,
    due: date | None = TODAY,
    sale: int | None = 1,
    number: int | None = None,
    document: str | None = "111.222.333-44",
    name: str | None = "Maria Souza",
    status: InstallmentStatus | None = None,
    **extra: Any,
) -> InstallmentEntity:
    return InstallmentEntity(
        id=id,
        sale_number=sale,
        client_document=document,
        client_name=name,
        original_amount=original,
        received_amount=received,
        due_date=due,
        status=status or derive_status(original, received),
        installment_number=number if number is not None else id,
        **extra,
    )


def make_visit(
    id: str = "v1",
    *,
    status: VisitStatus = VisitStatus.SCHEDULED,
    day: date = TODAY,
    time: str | None = "09:00",
    document: str = "111.222.333-44",
    name: str = "Maria Souza",
    collector_id: str = "c1",
    **extra: Any,
) -> ScheduledVisitEntity:
    return ScheduledVisitEntity(
        id=id,
        collector_id=collector_id,
        client_document=document,
        client_name=name,
        scheduled_date=day,
        scheduled_time=time,
        status=status,
        **extra,
    )


def make_user(id: str = "c1", name: str = "João Cobrador", type: UserType = UserType.COLLECTOR) -> UserEntity:
    return UserEntity(id=id, name=name, login=name.split()[0].lower(), type=type)


# ───────────────────────── linhas da base legada ─────────────────────────
def installment_row(
    id_parcela: int,
    *,
    venda_n: int | None = 1,
    documento: str | None = "111.222.333-44",
    cliente: str | None = "Maria Souza",
    valor_original: Any = "100,00",
    valor_recebido: Any = "0",
    data_vencimento: Any = "2025-01-05",
    status: str | None = "pendente",
    parcela: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    row = {
        "id_parcela": id_parcela,
        "venda_n": venda_n,
        "documento": documento,
        "cliente": cliente,
        "valor_original": valor_original,
        "valor_recebido": valor_recebido,
        "data_vencimento": data_vencimento,
        "data_de_recebimento": None,
        "status": status,
        "parcela": parcela if parcela is not None else id_parcela,
        "numero_titulo": None,
        "descricao": "Compra loja",
        "nome_da_loja": "Loja Centro",
        "user_id": None,
        "dias_em_atraso": None,
        "endereco": "Rua das Flores",
        "numero": "12",
        "bairro": "Centro",
        "cidade": "Bauru",
        "estado": "SP",
        "telefone": None,
        "celular": "14999990000",
        "obs": None,
    }
    row.update(extra)
    return row


def visit_row(id: str = "v1", **extra: Any) -> dict[str, Any]:
    row = {
        "id": id,
        "collector_id": "c1",
        "client_document": "111.222.333-44",
        "client_name": "Maria Souza",
        "scheduled_date": "2025-01-10",
        "scheduled_time": "09:00:00",
        "status": "agendada",
        "notes": None,
        "client_address": "Rua das Flores, 12",
        "client_neighborhood": "Centro",
        "client_city": "Bauru",
        "total_pending_value": "100.00",
        "overdue_count": 1,
        "created_at": "2025-01-02T10:00:00+00:00",
        "updated_at": None,
    }
    row.update(extra)
    return row


def user_row(id: str = "c1", name: str = "João Cobrador", type: str = "collector") -> dict[str, Any]:
    return {"id": id, "name": name, "login": name.split()[0].lower(), "type": type, "created_at": None}
