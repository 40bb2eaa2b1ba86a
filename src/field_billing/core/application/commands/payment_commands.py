from dataclasses import dataclass

from field_billing.core.application.cqrs import CommandDTO
from field_billing.core.application.dtos.payment_dtos import GeneralPaymentInput, SalePaymentInput


@dataclass(frozen=True)
class ProcessSalePaymentCommand(CommandDTO):
    payload: SalePaymentInput
    collector_id: str

@dataclass(frozen=True)
class ProcessGeneralPaymentCommand(CommandDTO):
    payload: GeneralPaymentInput
    collector_id: str

@dataclass(frozen=True)
class CorrectInstallmentCommand(CommandDTO):
    installment_id: int
    new_received: float
    confirm_overpayment: bool = False

@dataclass(frozen=True)
class EditSaleReceivedTotalCommand(CommandDTO):
    sale_number: int
    client_document: str
    new_total: float
    confirm_overpayment: bool = False
