"""관리자 근무 라우터 — 전체 근무 조회, 수정, 승인.

Admin Shift Router — List every shift (with blocked employees), edit
rates/visibility/times, and approve pending postings.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.shift import AdminShiftUpdate, ShiftApproveRequest, ShiftResponse
from app.services.shift_service import shift_service

router: APIRouter = APIRouter()


@router.get("/shifts", response_model=list[ShiftResponse])
async def list_all_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    status: Annotated[str | None, Query()] = None,
    cafe_id: Annotated[UUID | None, Query()] = None,
) -> list[ShiftResponse]:
    """전체 근무 목록 — All shifts, including blocked employees and reasons."""
    return await shift_service.list_all_shifts(db, status, cafe_id)


@router.put("/shifts/{shift_id}", response_model=ShiftResponse)
async def update_shift(
    shift_id: UUID,
    data: AdminShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> ShiftResponse:
    """근무를 수정합니다 — 비용 재계산.

    Edit a shift's rates, visibility, times, headcount or description.
    """
    result: ShiftResponse = await shift_service.admin_update_shift(db, shift_id, data)
    await db.commit()
    return result


@router.put("/shifts/{shift_id}/approve", response_model=ShiftResponse)
async def approve_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    data: Annotated[ShiftApproveRequest | None, Body()] = None,
) -> ShiftResponse:
    """근무를 승인합니다 — pending_approval → open.

    Approve a pending shift, optionally setting the employee-facing rate.
    """
    result: ShiftResponse = await shift_service.approve_shift(db, shift_id, data or ShiftApproveRequest())
    await db.commit()
    return result
