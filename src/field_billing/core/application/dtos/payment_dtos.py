from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator

from field_billing.core.application.dtos.record_dtos import parse_date, parse_money


class PaymentInputBase(BaseModel):
    client_document: str
    payment_amount: float = Field(gt=0)
    payment_method: str = "dinheiro"
    payment_date: date = Field(default_factory=date.today)
    notes: str = ""
    confirm_excess: bool = False

    @field_validator("payment_amount", mode="before")
    @classmethod
    def _money(cls, v):
        return parse_money(v)

    @field_validator("payment_date", mode="before")
    @classmethod
    def _date(cls, v):
        return parse_date(v) or date.today()

    @field_validator("client_document")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class SalePaymentInput(PaymentInputBase):
    """Pagamento contra uma venda. Venda 0 = parcelas renegociadas (sem número)."""
    sale_number: int


class GeneralPaymentInput(PaymentInputBase):
    """Pagamento geral do cliente, distribuído por todas as vendas em aberto."""
    pass
