"""앱 인보이스 라우터 — 카페 인보이스 조회, PDF, 생성, 결제 증빙 제출.

App Invoice Router — Café invoice listing, PDF download, on-demand
generation and payment-proof submission.
"""

from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_cafe, require_cafe_or_admin
from app.database import get_db
from app.models.user import User
from app.schemas.invoice import InvoiceGenerateRequest, InvoiceResponse
from app.services.invoice_service import invoice_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[InvoiceResponse])
async def list_my_invoices(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> list[InvoiceResponse]:
    """내 인보이스 목록 (초안 제외) — My invoices, drafts excluded."""
    return await invoice_service.list_invoices(db, current_user)


@router.post("/generate", response_model=InvoiceResponse, status_code=201)
async def generate_invoice(
    data: InvoiceGenerateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe_or_admin)],
) -> InvoiceResponse:
    """완료된 근무의 인보이스를 생성합니다.

    Generate the invoice of a completed shift. At most one per shift.
    """
    result: InvoiceResponse = await invoice_service.generate(db, current_user, data)
    await db.commit()
    return result


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe_or_admin)],
) -> InvoiceResponse:
    return await invoice_service.get_invoice(db, current_user, invoice_id)


@router.get("/{invoice_id}/pdf")
async def download_invoice_pdf(
    invoice_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe_or_admin)],
) -> StreamingResponse:
    """인보이스 PDF 다운로드 — Download the invoice as PDF."""
    filename, content = await invoice_service.render_pdf(db, current_user, invoice_id)
    return StreamingResponse(
        BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/{invoice_id}/submit-proof", response_model=InvoiceResponse)
async def submit_payment_proof(
    invoice_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
    payment_proof: UploadFile = File(...),
    notes: str | None = Form(None),
) -> InvoiceResponse:
    """결제 증빙을 제출합니다 — approved → pending_verification."""
    result: InvoiceResponse = await invoice_service.submit_proof(
        db, current_user, invoice_id, payment_proof, notes
    )
    await db.commit()
    return result
