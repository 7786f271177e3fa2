"""관리자 직원 지급 라우터 — 주간 지급 현황 및 지급 완료 처리.

Admin Employee Payment Router — Weekly payment periods and marking a
week paid with a transfer proof.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.payment import WeekPaymentPeriod, WeekPaymentResponse
from app.services.payment_service import payment_service
from app.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


def _parse_employee_ids(raw: list[str]) -> list[UUID]:
    """폼 직원 ID 파싱 — 반복 필드 또는 쉼표 구분 모두 허용.

    Accept repeated form fields as well as a single comma-separated value.
    """
    ids: list[UUID] = []
    for chunk in raw:
        for value in chunk.split(","):
            value = value.strip()
            if not value:
                continue
            try:
                ids.append(UUID(value))
            except ValueError:
                raise ValidationError(f"Invalid employee id: {value}", field="employee_ids")
    return ids


@router.get("", response_model=list[WeekPaymentPeriod])
async def list_week_payments(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
) -> list[WeekPaymentPeriod]:
    """주간 지급 현황 — Completed shifts grouped by week and employee."""
    return await payment_service.list_week_payments(db, date_from, date_to)


@router.post("/mark-week-paid", response_model=list[WeekPaymentResponse])
async def mark_week_paid(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    week_start: date = Form(...),
    employee_ids: list[str] = Form(...),
    payment_proof: UploadFile | None = File(None),
) -> list[WeekPaymentResponse]:
    """주간 지급 완료 처리 — 금액은 완료된 근무에서 재계산.

    Mark the week paid for the selected employees; amounts are recomputed
    from that week's completed shifts.
    """
    result: list[WeekPaymentResponse] = await payment_service.mark_week_paid(
        db, current_user, week_start, _parse_employee_ids(employee_ids), payment_proof
    )
    await db.commit()
    return result
