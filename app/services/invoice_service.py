"""인보이스 서비스 — 완료된 근무의 청구서 생성 및 결제 흐름.

Invoice Service — Derives a billing record from a completed shift and drives
the approval → payment proof → verification → paid workflow.

Invoicing modes (settings.INVOICING_MODE):
    prepaid: 자동 완료 시 즉시 paid 상태로 생성 (created already paid by the sweep)
    approval: draft → approved → pending_verification → paid
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.invoice import (
    INVOICE_APPROVED, INVOICE_DRAFT, INVOICE_PAID, INVOICE_PENDING_VERIFICATION, Invoice,
)
from app.models.shift import SHIFT_COMPLETED, Shift
from app.models.user import ROLE_ADMIN, ROLE_CAFE, User
from app.repositories.invoice_repository import invoice_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.user_repository import user_repository
from app.schemas.invoice import InvoiceAdminUpdate, InvoiceGenerateRequest, InvoiceResponse
from app.services.notification_service import notification_service
from app.services.storage_service import storage_service
from app.utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.utils.pdf import render_invoice_pdf
from app.utils.pricing import base_amount, round2, shift_hours
from app.utils.shift_time import utcnow

logger = logging.getLogger(__name__)


def generate_invoice_number(shift_id: UUID, now: datetime) -> str:
    """인보이스 번호 생성 — "INV-<epoch ms>-<shift id 마지막 6자>"."""
    return f"INV-{int(now.timestamp() * 1000)}-{str(shift_id)[-6:]}"


class InvoiceService:
    """인보이스 관련 비즈니스 로직을 처리하는 서비스.

    Service handling invoice business logic.
    """

    def to_response(self, invoice: Invoice, cafe_name: str | None = None) -> InvoiceResponse:
        return InvoiceResponse(
            id=str(invoice.id),
            invoice_number=invoice.invoice_number,
            cafe_id=str(invoice.cafe_id),
            cafe_name=cafe_name,
            shift_id=str(invoice.shift_id),
            shift_date=invoice.shift_date,
            start_time=invoice.start_time,
            end_time=invoice.end_time,
            hours=round2(invoice.hours),
            employees_count=invoice.employees_count,
            hourly_rate=round2(invoice.hourly_rate),
            base_amount=round2(invoice.base_amount),
            platform_fee=round2(invoice.platform_fee),
            penalty_amount=round2(invoice.penalty_amount),
            total_amount=round2(invoice.total_amount),
            status=invoice.status,
            approved_at=invoice.approved_at,
            paid_at=invoice.paid_at,
            payment_proof=invoice.payment_proof,
            payment_proof_submitted_at=invoice.payment_proof_submitted_at,
            payment_proof_notes=invoice.payment_proof_notes,
            payment_proof_rejection_reason=invoice.payment_proof_rejection_reason,
            payment_proof_rejected_at=invoice.payment_proof_rejected_at,
            created_at=invoice.created_at,
        )

    async def build_responses(self, db: AsyncSession, invoices: list[Invoice]) -> list[InvoiceResponse]:
        """카페 이름을 포함한 응답 목록 — Responses with café names resolved in one query."""
        cafes: dict[UUID, User] = await user_repository.get_by_ids(db, [i.cafe_id for i in invoices])
        return [
            self.to_response(i, cafes[i.cafe_id].display_name if i.cafe_id in cafes else None)
            for i in invoices
        ]

    async def _get_invoice(self, db: AsyncSession, invoice_id: UUID) -> Invoice:
        invoice: Invoice | None = await invoice_repository.get_by_id(db, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    async def _get_visible_invoice(self, db: AsyncSession, user: User, invoice_id: UUID) -> Invoice:
        """사용자가 볼 수 있는 인보이스 — 카페는 자신의 비-초안 인보이스만.

        Load an invoice the user may see: admins see all, cafés see their own
        non-draft invoices.
        """
        invoice: Invoice = await self._get_invoice(db, invoice_id)
        if user.role == ROLE_ADMIN:
            return invoice
        if user.role != ROLE_CAFE or invoice.cafe_id != user.id:
            raise AuthorizationError("Not authorized")
        if invoice.status == INVOICE_DRAFT:
            raise NotFoundError("Invoice not found")
        return invoice

    async def create_for_shift(
        self,
        db: AsyncSession,
        shift: Shift,
        status: str,
        now: datetime | None = None,
    ) -> Invoice:
        """근무 스냅샷으로 인보이스를 생성합니다.

        Create the invoice of a shift from a snapshot of its current details.
        base = base rate x hours x accepted headcount; fee and penalty are
        carried from the shift; total = base + fee + penalty.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            shift: 완료된 근무 (Completed shift)
            status: 초기 상태 (Initial invoice status)
            now: 기준 시각, 테스트용 (Reference time)

        Returns:
            Invoice: 생성된 인보이스 (Created invoice)

        Raises:
            ConflictError: 이미 인보이스가 있을 때 (Invoice already exists)
        """
        now = now or utcnow()
        if await invoice_repository.get_by_shift(db, shift.id) is not None:
            raise ConflictError("Invoice already exists for this shift")

        hours: Decimal = shift_hours(shift.start_time, shift.end_time)
        base: Decimal = base_amount(hours, shift.base_hourly_rate, shift.accepted_count)
        fee: Decimal = round2(shift.platform_fee)
        penalty_amount: Decimal = round2(shift.penalty_amount)

        data: dict[str, Any] = {
            "invoice_number": generate_invoice_number(shift.id, now),
            "cafe_id": shift.cafe_id,
            "shift_id": shift.id,
            "shift_date": shift.date,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "hours": round2(hours),
            "employees_count": shift.accepted_count,
            "hourly_rate": round2(shift.base_hourly_rate),
            "base_amount": base,
            "platform_fee": fee,
            "penalty_amount": penalty_amount,
            "total_amount": base + fee + penalty_amount,
            "status": status,
            "paid_at": now if status == INVOICE_PAID else None,
        }
        try:
            invoice: Invoice = await invoice_repository.create(db, data)
        except IntegrityError:
            # 동시 생성 — unique shift_id / invoice_number
            await db.rollback()
            raise ConflictError("Invoice already exists for this shift")

        logger.info(
            "Invoice %s created for shift %s (status=%s, total=%s)",
            invoice.invoice_number, shift.id, status, invoice.total_amount,
        )
        return invoice

    async def list_invoices(
        self,
        db: AsyncSession,
        user: User,
        status: str | None = None,
        cafe_id: UUID | None = None,
    ) -> list[InvoiceResponse]:
        """인보이스 목록 — 카페는 자신의 것(초안 제외), 관리자는 전체.

        List invoices: a café sees its own non-draft invoices, admins see all
        with optional filters.
        """
        if user.role == ROLE_ADMIN:
            invoices: list[Invoice] = await invoice_repository.get_filtered(db, status, cafe_id)
        else:
            invoices = await invoice_repository.get_for_cafe(db, user.id)
            if status:
                invoices = [i for i in invoices if i.status == status]
        return await self.build_responses(db, invoices)

    async def get_invoice(self, db: AsyncSession, user: User, invoice_id: UUID) -> InvoiceResponse:
        invoice: Invoice = await self._get_visible_invoice(db, user, invoice_id)
        return (await self.build_responses(db, [invoice]))[0]

    async def generate(
        self,
        db: AsyncSession,
        user: User,
        data: InvoiceGenerateRequest,
        now: datetime | None = None,
    ) -> InvoiceResponse:
        """완료된 근무의 인보이스를 요청 시 생성합니다.

        Generate the invoice of a completed shift on demand (owning café or
        admin). The initial status follows the invoicing mode.

        Raises:
            NotFoundError: 근무 없음 (Shift not found)
            AuthorizationError: 소유 카페가 아님 (Not the owning café)
            ConflictError: 완료되지 않음 또는 중복 (Not completed, or duplicate)
        """
        try:
            shift_id: UUID = UUID(data.shift_id)
        except ValueError:
            raise ValidationError("Invalid shift id", field="shift_id")
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
        if shift is None:
            raise NotFoundError("Shift not found")
        if user.role != ROLE_ADMIN and shift.cafe_id != user.id:
            raise AuthorizationError("Not authorized")
        if shift.status != SHIFT_COMPLETED:
            raise ConflictError("Invoices can only be generated for completed shifts")

        status: str = INVOICE_PAID if settings.INVOICING_MODE == "prepaid" else INVOICE_DRAFT
        invoice: Invoice = await self.create_for_shift(db, shift, status, now)
        return (await self.build_responses(db, [invoice]))[0]

    async def admin_update(
        self,
        db: AsyncSession,
        invoice_id: UUID,
        data: InvoiceAdminUpdate,
    ) -> InvoiceResponse:
        """관리자 금액 조정 — 합계 재계산.

        Adjust platform fee or penalty; the total is recomputed.

        Raises:
            ConflictError: 결제 완료된 인보이스 (Invoice already paid)
        """
        invoice: Invoice = await self._get_invoice(db, invoice_id)
        if invoice.status == INVOICE_PAID:
            raise ConflictError("Paid invoices cannot be edited")

        update_data: dict[str, Any] = {
            k: round2(v) for k, v in data.model_dump(exclude_unset=True).items() if v is not None
        }
        fee: Decimal = update_data.get("platform_fee", invoice.platform_fee)
        penalty_amount: Decimal = update_data.get("penalty_amount", invoice.penalty_amount)
        update_data["total_amount"] = round2(invoice.base_amount + fee + penalty_amount)
        invoice = await invoice_repository.update(db, invoice, update_data)
        return (await self.build_responses(db, [invoice]))[0]

    async def approve(
        self,
        db: AsyncSession,
        admin: User,
        invoice_id: UUID,
        now: datetime | None = None,
    ) -> InvoiceResponse:
        """초안 인보이스를 승인합니다 — draft → approved, café notified."""
        invoice: Invoice = await self._get_invoice(db, invoice_id)
        if invoice.status != INVOICE_DRAFT:
            raise ConflictError("Only draft invoices can be approved")

        invoice = await invoice_repository.update(db, invoice, {
            "status": INVOICE_APPROVED,
            "approved_at": now or utcnow(),
            "approved_by": admin.id,
        })
        response: InvoiceResponse = (await self.build_responses(db, [invoice]))[0]

        cafe: User | None = await user_repository.get_by_id(db, invoice.cafe_id)
        notification_service.send_after_commit(
            db,
            cafe.email if cafe else None,
            "invoice_approved",
            {"invoice_number": invoice.invoice_number, "total_amount": f"£{response.total_amount:,.2f}"},
        )
        return response

    async def submit_proof(
        self,
        db: AsyncSession,
        cafe: User,
        invoice_id: UUID,
        upload: UploadFile,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> InvoiceResponse:
        """결제 증빙을 제출합니다 — approved → pending_verification.

        Attach the café's payment proof to an approved invoice.

        Raises:
            ConflictError: 승인 대기 중인 인보이스가 아님 (Invoice not awaiting payment)
        """
        invoice: Invoice = await self._get_visible_invoice(db, cafe, invoice_id)
        if invoice.status != INVOICE_APPROVED:
            raise ConflictError(
                "Payment proof can only be submitted for invoices that are approved and awaiting payment"
            )

        key: str = await storage_service.save_upload(upload, "invoice-payment-proofs")
        invoice = await invoice_repository.update(db, invoice, {
            "status": INVOICE_PENDING_VERIFICATION,
            "payment_proof": key,
            "payment_proof_submitted_at": now or utcnow(),
            "payment_proof_notes": notes,
            "payment_proof_rejection_reason": None,
            "payment_proof_rejected_at": None,
        })
        return (await self.build_responses(db, [invoice]))[0]

    async def mark_paid(
        self,
        db: AsyncSession,
        invoice_id: UUID,
        now: datetime | None = None,
    ) -> InvoiceResponse:
        """증빙 확인 후 결제 완료 처리 — pending_verification → paid."""
        invoice: Invoice = await self._get_invoice(db, invoice_id)
        if invoice.status != INVOICE_PENDING_VERIFICATION:
            raise ConflictError("Only invoices with submitted payment proof can be marked paid")
        invoice = await invoice_repository.update(db, invoice, {"status": INVOICE_PAID, "paid_at": now or utcnow()})
        logger.info("Invoice %s marked paid", invoice.invoice_number)
        return (await self.build_responses(db, [invoice]))[0]

    async def reject_proof(
        self,
        db: AsyncSession,
        invoice_id: UUID,
        reason: str,
        now: datetime | None = None,
    ) -> InvoiceResponse:
        """결제 증빙 반려 — pending_verification → approved, 재제출 가능.

        Reject a submitted proof; the café may resubmit.
        """
        invoice: Invoice = await self._get_invoice(db, invoice_id)
        if invoice.status != INVOICE_PENDING_VERIFICATION:
            raise ConflictError("Only invoices with submitted proof can be rejected")
        invoice = await invoice_repository.update(db, invoice, {
            "status": INVOICE_APPROVED,
            "payment_proof_rejection_reason": reason,
            "payment_proof_rejected_at": now or utcnow(),
        })
        return (await self.build_responses(db, [invoice]))[0]

    async def render_pdf(self, db: AsyncSession, user: User, invoice_id: UUID) -> tuple[str, bytes]:
        """인보이스 PDF — Returns (filename, pdf bytes)."""
        response: InvoiceResponse = await self.get_invoice(db, user, invoice_id)
        content: bytes = render_invoice_pdf(response, settings.APP_NAME)
        return f"{response.invoice_number}.pdf", content


# 싱글턴 인스턴스 — Singleton instance
invoice_service: InvoiceService = InvoiceService()
