"""앱 지원서 라우터 — 직원 지원 및 카페 검토 API.

App Application Router — Employees apply to open shifts; the owning café
accepts or rejects; applicants may withdraw while pending.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_cafe, require_employee
from app.database import get_db
from app.models.user import User
from app.schemas.application import ApplicationCreate, ApplicationReject, ApplicationResponse
from app.services.application_service import application_service

router: APIRouter = APIRouter()


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply_for_shift(
    data: ApplicationCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> ApplicationResponse:
    """근무에 지원합니다 — Apply for an open shift."""
    result: ApplicationResponse = await application_service.apply(db, current_user, data)
    await db.commit()
    return result


@router.get("/mine", response_model=list[ApplicationResponse])
async def list_my_applications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> list[ApplicationResponse]:
    """내 지원서 목록 — My applications."""
    return await application_service.list_mine(db, current_user)


@router.get("/shift/{shift_id}", response_model=list[ApplicationResponse])
async def list_shift_applications(
    shift_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> list[ApplicationResponse]:
    """근무별 지원서 목록 (소유 카페) — Applications for one of my shifts."""
    return await application_service.list_for_shift(db, current_user, shift_id)


@router.put("/{application_id}/accept", response_model=ApplicationResponse)
async def accept_application(
    application_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
) -> ApplicationResponse:
    """지원서를 수락합니다.

    Accept a pending application; the applicant claims a slot through the
    same path as a direct accept.
    """
    result: ApplicationResponse = await application_service.accept(db, current_user, application_id)
    await db.commit()
    return result


@router.put("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_cafe)],
    data: Annotated[ApplicationReject | None, Body()] = None,
) -> ApplicationResponse:
    """지원서를 거절합니다 — Reject a pending application."""
    reason: str | None = data.reason if data else None
    result: ApplicationResponse = await application_service.reject(db, current_user, application_id, reason)
    await db.commit()
    return result


@router.put("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(
    application_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> ApplicationResponse:
    """지원을 철회합니다 — Withdraw my pending application."""
    result: ApplicationResponse = await application_service.withdraw(db, current_user, application_id)
    await db.commit()
    return result
