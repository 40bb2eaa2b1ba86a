from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date
from itertools import groupby

import structlog

from field_billing.adapters.observability.metrics import (
    AMOUNT_DISTRIBUTED,
    DISTRIBUTION_DURATION,
    PAYMENTS_COUNT,
)
from field_billing.core.application.dtos.payment_dtos import (
    GeneralPaymentInput,
    PaymentInputBase,
    SalePaymentInput,
)
from field_billing.core.application.dtos.result_dto import PaymentOutcome, PersistResult
from field_billing.core.application.services.collection_state import CollectionState
from field_billing.core.application.services.persistence import INSTALLMENTS, attempt
from field_billing.core.domain.entities.installment_entity import InstallmentEntity
from field_billing.core.domain.entities.payment_distribution_entity import (
    PaymentDistribution,
    SalePaymentRecord,
)
from field_billing.core.domain.events.events import PaymentProcessedEvent
from field_billing.core.domain.events.exceptions import (
    ExcessPaymentError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)
from field_billing.core.domain.repositories.installment_repository import InstallmentRepository
from field_billing.core.domain.services.balance_aggregator import RENEGOTIATED_SALE_NUMBER, aggregate
from field_billing.core.domain.services.money import MONEY_EPSILON, round2
from field_billing.core.domain.services.payment_distribution import (
    DistributionResult,
    apply_received_amount,
    distribute,
    redistribute_sale_total,
)

logger = structlog.get_logger(__name__)


class PaymentService:
    """
    Registro de pagamentos feitos em campo.

    Fluxo de cada operação: calcula o novo estado com o motor de distribuição,
    tenta gravar uma atualização por parcela alterada e mescla o resultado no
    estado local independentemente do resultado da gravação.
    """

    def __init__(
        self,
        state: CollectionState,
        installment_repo: InstallmentRepository,
        clock: Callable[[], date] = date.today,
    ):
        self.state = state
        self.installment_repo = installment_repo
        self.clock = clock

    # ───────────────────────── pagamentos ─────────────────────────
    def process_sale_payment(self, payload: SalePaymentInput, collector_id: str) -> PaymentOutcome:
        installments = self.state.sale_installments(payload.sale_number, payload.client_document)
        if not installments:
            raise NotFoundError(
                f"Venda {payload.sale_number} não encontrada para o cliente {payload.client_document}"
            )
        self._check_amount(payload, aggregate(installments).remaining_balance)
        return self._distribute(installments, payload, collector_id, mode="sale")

    def process_general_payment(self, payload: GeneralPaymentInput, collector_id: str) -> PaymentOutcome:
        installments = self.state.client_installments(payload.client_document)
        if not installments:
            raise NotFoundError(f"Cliente {payload.client_document} não encontrado")
        if not any(i.is_outstanding for i in installments):
            raise ValidationError("Cliente não possui parcelas em aberto")
        self._check_amount(payload, aggregate(installments).remaining_balance)
        return self._distribute(installments, payload, collector_id, mode="general")

    def _check_amount(self, payload: PaymentInputBase, remaining_balance: float) -> None:
        if payload.payment_amount <= 0:
            raise ValidationError("O valor do pagamento deve ser maior que zero")
        if round2(payload.payment_amount - remaining_balance) > MONEY_EPSILON:
            if not payload.confirm_excess:
                raise ExcessPaymentError(payload.payment_amount, remaining_balance)
            logger.warning(
                "payment.excess_confirmed",
                client=payload.client_document,
                amount=payload.payment_amount,
                remaining_balance=remaining_balance,
            )

    def _distribute(
        self,
        installments: Sequence[InstallmentEntity],
        payload: PaymentInputBase,
        collector_id: str,
        *,
        mode: str,
    ) -> PaymentOutcome:
        with DISTRIBUTION_DURATION.labels(mode).time():
            result = distribute(installments, payload.payment_amount, self.clock())

        persist_results = self._persist(result)
        self.state.merge_installments(result.changed)
        records = self._payment_records(installments, result.ledger, payload, collector_id, mode)
        for record in records:
            self.state.record_payment(record)

        outcome = PaymentOutcome(
            ledger=result.ledger,
            undistributed=result.undistributed,
            persist_results=persist_results,
            records=records,
        )
        outcome.events.append(self._event(payload.client_document, mode, payload.payment_amount, outcome, collector_id))
        self._observe(mode, outcome)
        logger.info(
            "payment.processed",
            mode=mode,
            client=payload.client_document,
            amount=payload.payment_amount,
            applied=outcome.applied_total,
            undistributed=outcome.undistributed,
            installments=len(result.ledger),
            failed_writes=len(outcome.failed_writes),
        )
        return outcome

    # ───────────────────────── correções manuais ─────────────────────────
    def correct_installment(
        self,
        installment_id: int,
        new_received: float,
        *,
        confirm_overpayment: bool = False,
    ) -> PaymentOutcome:
        inst = self.state.get_installment(installment_id)
        if new_received < 0:
            raise ValidationError("O valor recebido não pode ser negativo")
        if round2(new_received - inst.original_amount) > MONEY_EPSILON:
            if not confirm_overpayment:
                raise OverpaymentError(new_received, inst.original_amount)
            logger.warning(
                "payment.overpayment_confirmed",
                installment_id=installment_id,
                amount=new_received,
                original=inst.original_amount,
            )

        updated = apply_received_amount(inst, new_received, self.clock())
        result = DistributionResult(updated=[updated], changed_ids=frozenset({updated.id}))
        persist_results = self._persist(result)
        self.state.merge_installments([updated])

        delta = round2(updated.received_amount - inst.received_amount)
        outcome = PaymentOutcome(ledger=[], undistributed=0.0, persist_results=persist_results)
        outcome.events.append(
            PaymentProcessedEvent(
                client_document=inst.client_key or "",
                mode="correction",
                payment_amount=updated.received_amount,
                applied_amount=delta,
                undistributed=0.0,
                sale_numbers=(inst.sale_number or RENEGOTIATED_SALE_NUMBER,),
                collector_id=inst.collector_id,
            )
        )
        self._observe("correction", outcome)
        logger.info("payment.installment_corrected", installment_id=installment_id, old=inst.received_amount, new=updated.received_amount)
        return outcome

    def edit_sale_received_total(
        self,
        sale_number: int,
        client_document: str,
        new_total: float,
        *,
        confirm_overpayment: bool = False,
    ) -> PaymentOutcome:
        installments = self.state.sale_installments(sale_number, client_document)
        if not installments:
            raise NotFoundError(f"Venda {sale_number} não encontrada para o cliente {client_document}")
        if new_total < 0:
            raise ValidationError("O valor recebido não pode ser negativo")
        total_value = aggregate(installments).total_value
        if round2(new_total - total_value) > MONEY_EPSILON:
            if not confirm_overpayment:
                raise OverpaymentError(new_total, total_value)
            logger.warning("payment.sale_overpayment_confirmed", sale_number=sale_number, amount=new_total, total=total_value)

        result = redistribute_sale_total(installments, new_total, self.clock())
        persist_results = self._persist(result)
        self.state.merge_installments(result.changed)

        outcome = PaymentOutcome(
            ledger=result.ledger,
            undistributed=result.undistributed,
            persist_results=persist_results,
        )
        outcome.events.append(self._event(client_document.strip(), "edit", new_total, outcome, installments[0].collector_id))
        self._observe("edit", outcome)
        logger.info(
            "payment.sale_total_edited",
            sale_number=sale_number,
            client=client_document,
            new_total=new_total,
            changed=len(result.changed_ids),
        )
        return outcome

    # ───────────────────────── helpers ─────────────────────────
    def _persist(self, result: DistributionResult) -> list[PersistResult]:
        return [
            attempt(INSTALLMENTS, inst.id, lambda inst=inst: self.installment_repo.save_payment(inst))
            for inst in result.changed
        ]

    def _payment_records(
        self,
        installments: Sequence[InstallmentEntity],
        ledger: list[PaymentDistribution],
        payload: PaymentInputBase,
        collector_id: str,
        mode: str,
    ) -> list[SalePaymentRecord]:
        """Um registro por venda tocada pelo pagamento (histórico em memória)."""
        if not ledger:
            return []
        first = installments[0]

        def sale_of(entry: PaymentDistribution) -> int:
            return entry.sale_number or RENEGOTIATED_SALE_NUMBER

        records = []
        for sale_number, entries in groupby(sorted(ledger, key=sale_of), key=sale_of):
            entries = list(entries)
            amount = payload.payment_amount if mode == "sale" else round2(sum(e.applied_amount for e in entries))
            records.append(
                SalePaymentRecord(
                    sale_number=sale_number,
                    client_document=payload.client_document,
                    client_name=(first.client_name or "").strip(),
                    payment_amount=amount,
                    payment_date=payload.payment_date,
                    payment_method=payload.payment_method,
                    collector_id=collector_id,
                    collector_name=self.state.user_name(collector_id),
                    distribution=entries,
                    notes=payload.notes,
                    store_name=first.store_name,
                )
            )
        return records

    @staticmethod
    def _event(
        client_document: str,
        mode: str,
        amount: float,
        outcome: PaymentOutcome,
        collector_id: str | None,
    ) -> PaymentProcessedEvent:
        sales = sorted({d.sale_number or RENEGOTIATED_SALE_NUMBER for d in outcome.ledger})
        return PaymentProcessedEvent(
            client_document=client_document,
            mode=mode,
            payment_amount=amount,
            applied_amount=outcome.applied_total,
            undistributed=outcome.undistributed,
            sale_numbers=tuple(sales),
            collector_id=collector_id,
        )

    @staticmethod
    def _observe(mode: str, outcome: PaymentOutcome) -> None:
        PAYMENTS_COUNT.labels(mode, str(outcome.fully_persisted).lower()).inc()
        if outcome.applied_total > 0:
            AMOUNT_DISTRIBUTED.labels(mode).inc(outcome.applied_total)
