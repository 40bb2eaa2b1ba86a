from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from field_billing.core.application.dtos.record_dtos import (
    CollectorStoreRecordDTO,
    InstallmentRecordDTO,
    ScheduledVisitRecordDTO,
    UserRecordDTO,
)
from field_billing.core.domain.entities.installment_entity import (
    InstallmentEntity,
    derive_status,
    normalize_status,
)
from field_billing.core.domain.entities.scheduled_visit_entity import (
    ScheduledVisitEntity,
    VisitStatus,
    parse_audit_trail,
)
from field_billing.core.domain.entities.user_entity import (
    CollectorStoreEntity,
    UserEntity,
    UserType,
)

logger = structlog.get_logger(__name__)


class MappingError(Exception):
    """Erro no mapeamento registro ➜ Entity."""


class RecordMapper:
    # ───────────────────────── parcelas ─────────────────────────
    @classmethod
    def map_installment(cls, row: dict[str, Any]) -> InstallmentEntity:
        try:
            dto = InstallmentRecordDTO.model_validate(row)
        except PydanticValidationError as exc:
            logger.error("map_installment", error=str(exc), id_parcela=row.get("id_parcela"))
            raise MappingError(exc) from exc

        # status da base é só uma dica; sem sinônimo conhecido, deriva pelos valores
        status = normalize_status(dto.status) or derive_status(dto.valor_original, dto.valor_recebido)
        return InstallmentEntity(
            id=dto.id_parcela,
            sale_number=dto.venda_n,
            client_document=dto.documento,
            client_name=dto.cliente,
            original_amount=dto.valor_original,
            received_amount=dto.valor_recebido,
            due_date=dto.data_vencimento,
            received_date=dto.data_de_recebimento,
            status=status,
            installment_number=dto.parcela,
            title_number=dto.numero_titulo,
            description=dto.descricao,
            store_name=dto.nome_da_loja,
            collector_id=dto.user_id,
            days_overdue=dto.dias_em_atraso,
            address=dto.endereco,
            address_number=dto.numero,
            neighborhood=dto.bairro,
            city=dto.cidade,
            state=dto.estado,
            phone=dto.telefone,
            mobile=dto.celular,
            notes=dto.obs,
        )

    @staticmethod
    def installment_payment_fields(inst: InstallmentEntity) -> dict[str, Any]:
        return {
            "valor_recebido": inst.received_amount,
            "status": inst.status.storage_label,
            "data_de_recebimento": inst.received_date.isoformat() if inst.received_date else None,
        }

    # ───────────────────────── visitas ──────────────────────────
    @classmethod
    def map_visit(cls, row: dict[str, Any]) -> ScheduledVisitEntity:
        try:
            dto = ScheduledVisitRecordDTO.model_validate(row)
            if dto.scheduled_date is None:
                raise ValueError("scheduled_date ausente ou inválida")
            status = VisitStatus(dto.status.strip().lower())
        except (PydanticValidationError, ValueError) as exc:
            logger.error("map_visit", error=str(exc), visit_id=row.get("id"))
            raise MappingError(exc) from exc

        return ScheduledVisitEntity(
            id=dto.id,
            collector_id=dto.collector_id,
            client_document=dto.client_document,
            client_name=dto.client_name,
            scheduled_date=dto.scheduled_date,
            scheduled_time=dto.scheduled_time,
            status=status,
            audit_trail=parse_audit_trail(dto.notes, dto.created_at),
            client_address=dto.client_address,
            client_neighborhood=dto.client_neighborhood,
            client_city=dto.client_city,
            total_pending_value=dto.total_pending_value,
            overdue_count=dto.overdue_count,
            completed_date=dto.data_visita_realizada,
            cancellation_request_date=dto.cancellation_request_date,
            cancellation_request_reason=dto.cancellation_request_reason,
            cancellation_approved_by=dto.cancellation_approved_by,
            cancellation_approved_at=dto.cancellation_approved_at,
            cancellation_rejected_by=dto.cancellation_rejected_by,
            cancellation_rejected_at=dto.cancellation_rejected_at,
            cancellation_rejection_reason=dto.cancellation_rejection_reason,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    @staticmethod
    def visit_insert_record(visit: ScheduledVisitEntity) -> dict[str, Any]:
        return {
            "collector_id": visit.collector_id,
            "client_document": visit.client_document,
            "client_name": visit.client_name,
            "scheduled_date": visit.scheduled_date.isoformat(),
            "scheduled_time": visit.scheduled_time,
            "status": visit.status.value,
            "notes": visit.notes or None,
            "client_address": visit.client_address,
            "client_neighborhood": visit.client_neighborhood,
            "client_city": visit.client_city,
            "total_pending_value": visit.total_pending_value,
            "overdue_count": visit.overdue_count,
        }

    @staticmethod
    def visit_update_fields(visit: ScheduledVisitEntity) -> dict[str, Any]:
        def iso(v):
            return v.isoformat() if v is not None else None

        return {
            "status": visit.status.value,
            "scheduled_date": visit.scheduled_date.isoformat(),
            "scheduled_time": visit.scheduled_time,
            "notes": visit.notes or None,
            "data_visita_realizada": iso(visit.completed_date),
            "client_address": visit.client_address,
            "client_neighborhood": visit.client_neighborhood,
            "client_city": visit.client_city,
            "total_pending_value": visit.total_pending_value,
            "overdue_count": visit.overdue_count,
            "cancellation_request_date": iso(visit.cancellation_request_date),
            "cancellation_request_reason": visit.cancellation_request_reason,
            "cancellation_approved_by": visit.cancellation_approved_by,
            "cancellation_approved_at": iso(visit.cancellation_approved_at),
            "cancellation_rejected_by": visit.cancellation_rejected_by,
            "cancellation_rejected_at": iso(visit.cancellation_rejected_at),
            "cancellation_rejection_reason": visit.cancellation_rejection_reason,
            "updated_at": iso(visit.updated_at),
        }

    # ───────────────────────── usuários / lojas ─────────────────
    @classmethod
    def map_user(cls, row: dict[str, Any]) -> UserEntity:
        try:
            dto = UserRecordDTO.model_validate(row)
            user_type = UserType(dto.type.strip().lower())
        except (PydanticValidationError, ValueError) as exc:
            logger.error("map_user", error=str(exc), user_id=row.get("id"))
            raise MappingError(exc) from exc
        return UserEntity(id=dto.id, name=dto.name, login=dto.login, type=user_type, created_at=dto.created_at)

    @classmethod
    def map_collector_store(cls, row: dict[str, Any]) -> CollectorStoreEntity:
        try:
            dto = CollectorStoreRecordDTO.model_validate(row)
        except PydanticValidationError as exc:
            logger.error("map_collector_store", error=str(exc), row_id=row.get("id"))
            raise MappingError(exc) from exc
        return CollectorStoreEntity(
            id=dto.id,
            collector_id=dto.collector_id,
            store_name=dto.store_name,
            created_at=dto.created_at,
        )
