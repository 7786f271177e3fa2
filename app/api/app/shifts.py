"""앱 근무 라우터 — 카페/직원용 근무 API.

App Shift Router — Shift endpoints for cafés (post, edit, cancel, pause,
complete, manage staff) and employees (browse, accept, withdraw).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_cafe, require_employee, require_member
from app.database import get_db
from app.models.user import User
from app.schemas.shift import (
    EmployeeShiftResponse,
    RejectEmployeeRequest,
    RemoveEmployeeRequest,
    ShiftActionResponse,
    ShiftCreate,
    ShiftResponse,
    ShiftUpdate,
)
from app.services.shift_service import shift_service

router: APIRouter = APIRouter()


@router.post("", response_model=ShiftResponse, status_code=201)
async def create_shift(
    data: ShiftCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftResponse:
    """새 근무를 게시합니다 (관리자 승인 대기).

    Post a new shift; it waits for admin approval before employees see it.
    """
    result: ShiftResponse = await shift_service.create_shift(db, current_user, data)
    await db.commit()
    return result


@router.get("", response_model=list[ShiftResponse | EmployeeShiftResponse])
async def list_shifts(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
    scope: Annotated[str, Query(description="active | completed | all (cafés only)")] = "active",
) -> list[ShiftResponse] | list[EmployeeShiftResponse]:
    """근무 목록을 조회합니다.

    List shifts: cafés see their own, employees see open shifts available to them.
    """
    return await shift_service.list_shifts(db, current_user, scope)


@router.get("/{shift_id}", response_model=ShiftResponse | EmployeeShiftResponse)
async def get_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ShiftResponse | EmployeeShiftResponse:
    """근무 상세를 조회합니다 — Get a shift."""
    return await shift_service.get_shift(db, current_user, shift_id)


@router.put("/{shift_id}", response_model=ShiftResponse)
async def update_shift(
    shift_id: UUID,
    data: ShiftUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftResponse:
    """근무를 수정합니다 — 비용은 자동 재계산.

    Update a shift; cost fields are recomputed.
    """
    result: ShiftResponse = await shift_service.update_shift(db, current_user, shift_id, data)
    await db.commit()
    return result


@router.post("/{shift_id}/payment-proof", response_model=ShiftResponse)
async def upload_payment_proof(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
    payment_proof: UploadFile = File(...),
) -> ShiftResponse:
    """결제 증빙을 첨부합니다 — Attach a payment proof to the shift."""
    result: ShiftResponse = await shift_service.upload_payment_proof(db, current_user, shift_id, payment_proof)
    await db.commit()
    return result


@router.post("/{shift_id}/accept", response_model=EmployeeShiftResponse)
async def accept_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> EmployeeShiftResponse:
    """근무를 선착순으로 수락합니다.

    Claim a slot on an open shift (first come, first served).
    """
    result: EmployeeShiftResponse = await shift_service.accept_shift(db, current_user, shift_id)
    await db.commit()
    return result


@router.post("/{shift_id}/cancel", response_model=ShiftActionResponse)
async def cancel_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_member)],
) -> ShiftActionResponse:
    """근무 취소 — 직원은 개인 철회, 카페는 전체 취소.

    Employees withdraw themselves; cafés cancel the whole shift.
    """
    result: ShiftActionResponse = await shift_service.cancel_shift(db, current_user, shift_id)
    await db.commit()
    return result


@router.post("/{shift_id}/pause", response_model=ShiftActionResponse)
async def pause_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftActionResponse:
    """근무를 일시중지합니다 — Pause a shift."""
    result: ShiftActionResponse = await shift_service.pause_shift(db, current_user, shift_id)
    await db.commit()
    return result


@router.post("/{shift_id}/complete", response_model=ShiftResponse)
async def complete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
    payment_proof: UploadFile | None = File(None),
) -> ShiftResponse:
    """근무를 수동 완료합니다 (승인형 청구 방식).

    Manually complete an ended shift with a payment proof.
    """
    result: ShiftResponse = await shift_service.complete_shift(db, current_user, shift_id, payment_proof)
    await db.commit()
    return result


@router.post("/{shift_id}/reject/{employee_id}", response_model=ShiftResponse)
async def reject_employee(
    shift_id: UUID,
    employee_id: UUID,
    data: RejectEmployeeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftResponse:
    """확정 직원을 거절하고 차단합니다.

    Reject an accepted employee and block them from this shift.
    """
    result: ShiftResponse = await shift_service.reject_employee(
        db, current_user, shift_id, employee_id, data.rejection_reason
    )
    await db.commit()
    return result


@router.post("/{shift_id}/remove-employee/{employee_id}", response_model=ShiftResponse)
async def remove_employee(
    shift_id: UUID,
    employee_id: UUID,
    data: RemoveEmployeeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftResponse:
    """확정 직원을 제외합니다 — Remove an accepted employee, optionally blocking them."""
    result: ShiftResponse = await shift_service.remove_employee(db, current_user, shift_id, employee_id, data)
    await db.commit()
    return result


@router.delete("/{shift_id}", response_model=ShiftActionResponse)
async def delete_shift(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ShiftActionResponse:
    """근무를 삭제합니다 — Delete a shift."""
    result: ShiftActionResponse = await shift_service.delete_shift(db, current_user, shift_id)
    await db.commit()
    return result
