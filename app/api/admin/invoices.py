"""관리자 인보이스 라우터 — 조회, 조정, 승인, 결제 확인, 증빙 반려.

Admin Invoice Router — List, adjust, approve, verify payment and reject
payment proofs.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.invoice import InvoiceAdminUpdate, InvoiceResponse, RejectProofRequest
from app.services.invoice_service import invoice_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    status: Annotated[str | None, Query()] = None,
    cafe_id: Annotated[UUID | None, Query()] = None,
) -> list[InvoiceResponse]:
    """인보이스 목록 (필터: 상태, 카페) — All invoices, optionally filtered."""
    return await invoice_service.list_invoices(db, current_user, status, cafe_id)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: UUID,
    data: InvoiceAdminUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> InvoiceResponse:
    """플랫폼 수수료/위약금 조정 — Adjust platform fee or penalty."""
    result: InvoiceResponse = await invoice_service.admin_update(db, invoice_id, data)
    await db.commit()
    return result


@router.post("/{invoice_id}/approve", response_model=InvoiceResponse)
async def approve_invoice(
    invoice_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> InvoiceResponse:
    """초안 인보이스 승인 — draft → approved."""
    result: InvoiceResponse = await invoice_service.approve(db, current_user, invoice_id)
    await db.commit()
    return result


@router.post("/{invoice_id}/mark-paid", response_model=InvoiceResponse)
async def mark_invoice_paid(
    invoice_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> InvoiceResponse:
    """결제 확인 — pending_verification → paid."""
    result: InvoiceResponse = await invoice_service.mark_paid(db, invoice_id)
    await db.commit()
    return result


@router.put("/{invoice_id}/reject-proof", response_model=InvoiceResponse)
async def reject_payment_proof(
    invoice_id: UUID,
    data: RejectProofRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> InvoiceResponse:
    """결제 증빙 반려 — pending_verification → approved, reason required."""
    result: InvoiceResponse = await invoice_service.reject_proof(db, invoice_id, data.reason)
    await db.commit()
    return result
