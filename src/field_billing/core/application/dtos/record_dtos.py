from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, field_validator

# ───────────────────────────────────────────────
# DTOs das linhas lidas do banco externo
# ───────────────────────────────────────────────
_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")
# "1.234" e "12.345.678": pontos só como separador de milhar
_THOUSANDS_ONLY = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def parse_money(v) -> float:
    """
    Aceita número, '1234.56', '1.234,56', '1234,56' ou '1.234' (milhar).
    Vazio vira 0.
    """
    if v is None:
        return 0.0
    if isinstance(v, (int, float)):
        return float(v)
    s = str(v).strip().replace("R$", "").replace(" ", "")
    if not s:
        return 0.0
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    elif _THOUSANDS_ONLY.match(s):
        s = s.replace(".", "")
    return float(s)


def parse_date(v) -> date | None:
    """
    Normaliza as datas da base (YYYY-MM-DD, DD/MM/YYYY, ISO com horário).
    Placeholders e textos não reconhecidos viram None.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    s = str(v).strip()
    if not s or s.startswith("-") or s.startswith("0000"):
        return None
    head = s.replace("Z", "+00:00").split("T")[0].split(" ")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(head, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(v) -> datetime | None:
    if v is None or isinstance(v, datetime):
        return v
    s = str(v).strip()
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        day = parse_date(s)
        return datetime.combine(day, datetime.min.time()) if day else None


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class InstallmentRecordDTO(BaseModel):
    """Linha da tabela BANCO_DADOS (colunas legadas em português)."""
    id_parcela: int
    venda_n: int | None = None
    documento: str | None = None
    cliente: str | None = None
    valor_original: float = 0.0
    valor_recebido: float = 0.0
    data_vencimento: date | None = None
    data_de_recebimento: date | None = None
    status: str | None = None
    parcela: int | None = None
    numero_titulo: int | None = None
    descricao: str | None = None
    nome_da_loja: str | None = None
    user_id: str | None = None
    dias_em_atraso: int | None = None
    endereco: str | None = None
    numero: str | None = None
    bairro: str | None = None
    cidade: str | None = None
    estado: str | None = None
    telefone: str | None = None
    celular: str | None = None
    obs: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("valor_original", "valor_recebido", mode="before")
    @classmethod
    def _money(cls, v):
        return parse_money(v)

    @field_validator("data_vencimento", "data_de_recebimento", mode="before")
    @classmethod
    def _date(cls, v):
        return parse_date(v)

    @field_validator("venda_n", "parcela", "numero_titulo", "dias_em_atraso", mode="before")
    @classmethod
    def _int(cls, v):
        v = _blank_to_none(v)
        if isinstance(v, str):
            return int(float(v.replace(",", ".")))
        return v

    @field_validator("venda_n")
    @classmethod
    def _sale_number(cls, v):
        # venda 0 na base é a mesma venda renegociada das linhas sem número
        return v or None

    @field_validator("documento", "cliente", "numero", "telefone", "celular", "user_id", mode="before")
    @classmethod
    def _text(cls, v):
        v = _blank_to_none(v)
        return str(v).strip() if v is not None else None


class ScheduledVisitRecordDTO(BaseModel):
    id: str
    collector_id: str
    client_document: str
    client_name: str = ""
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    status: str = "agendada"
    notes: str | None = None
    client_address: str | None = None
    client_neighborhood: str | None = None
    client_city: str | None = None
    total_pending_value: float | None = None
    overdue_count: int | None = None
    data_visita_realizada: date | None = None
    cancellation_request_date: datetime | None = None
    cancellation_request_reason: str | None = None
    cancellation_approved_by: str | None = None
    cancellation_approved_at: datetime | None = None
    cancellation_rejected_by: str | None = None
    cancellation_rejected_at: datetime | None = None
    cancellation_rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}

    @field_validator("id", "collector_id", mode="before")
    @classmethod
    def _id(cls, v):
        return str(v) if v is not None else v

    @field_validator("scheduled_date", "data_visita_realizada", mode="before")
    @classmethod
    def _date(cls, v):
        return parse_date(v)

    @field_validator("scheduled_time", mode="before")
    @classmethod
    def _time(cls, v):
        v = _blank_to_none(v)
        # "14:00:00" (coluna time) -> "14:00"
        return str(v)[:5] if v is not None else None

    @field_validator("total_pending_value", mode="before")
    @classmethod
    def _money(cls, v):
        return None if _blank_to_none(v) is None else parse_money(v)

    @field_validator(
        "cancellation_request_date",
        "cancellation_approved_at",
        "cancellation_rejected_at",
        "created_at",
        "updated_at",
        mode="before",
    )
    @classmethod
    def _datetime(cls, v):
        return parse_datetime(_blank_to_none(v))


class UserRecordDTO(BaseModel):
    id: str
    name: str
    login: str
    type: str
    created_at: datetime | None = None

    model_config = {"extra": "ignore"}

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, v):
        return str(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _datetime(cls, v):
        return parse_datetime(_blank_to_none(v))


class CollectorStoreRecordDTO(BaseModel):
    id: str | None = None
    collector_id: str
    store_name: str
    created_at: datetime | None = None

    model_config = {"extra": "ignore"}

    @field_validator("id", "collector_id", mode="before")
    @classmethod
    def _id(cls, v):
        return str(v) if v is not None else v

    @field_validator("created_at", mode="before")
    @classmethod
    def _datetime(cls, v):
        return parse_datetime(_blank_to_none(v))
