from field_billing.core.application.commands.payment_commands import (
    CorrectInstallmentCommand,
    EditSaleReceivedTotalCommand,
    ProcessGeneralPaymentCommand,
    ProcessSalePaymentCommand,
)
from field_billing.core.application.cqrs import CommandHandler
from field_billing.core.application.dtos.result_dto import PaymentOutcome
from field_billing.core.application.services.payment_service import PaymentService


class ProcessSalePaymentHandler(CommandHandler[ProcessSalePaymentCommand]):
    def __init__(self, service: PaymentService):
        self.service = service

    def handle(self, cmd: ProcessSalePaymentCommand) -> PaymentOutcome:
        return self.service.process_sale_payment(cmd.payload, cmd.collector_id)


class ProcessGeneralPaymentHandler(CommandHandler[ProcessGeneralPaymentCommand]):
    def __init__(self, service: PaymentService):
        self.service = service

    def handle(self, cmd: ProcessGeneralPaymentCommand) -> PaymentOutcome:
        return self.service.process_general_payment(cmd.payload, cmd.collector_id)


class CorrectInstallmentHandler(CommandHandler[CorrectInstallmentCommand]):
    def __init__(self, service: PaymentService):
        self.service = service

    def handle(self, cmd: CorrectInstallmentCommand) -> PaymentOutcome:
        return self.service.correct_installment(
            cmd.installment_id,
            cmd.new_received,
            confirm_overpayment=cmd.confirm_overpayment,
        )


class EditSaleReceivedTotalHandler(CommandHandler[EditSaleReceivedTotalCommand]):
    """Redistribui o novo total recebido da venda pela ordem das parcelas."""

    def __init__(self, service: PaymentService):
        self.service = service

    def handle(self, cmd: EditSaleReceivedTotalCommand) -> PaymentOutcome:
        return self.service.edit_sale_received_total(
            cmd.sale_number,
            cmd.client_document,
            cmd.new_total,
            confirm_overpayment=cmd.confirm_overpayment,
        )
