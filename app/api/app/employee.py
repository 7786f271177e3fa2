"""직원 셀프서비스 라우터 — 일정, 이력, 수입.

Employee self-service router — schedule, history and earnings.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_employee
from app.database import get_db
from app.models.user import User
from app.schemas.employee import EarningsSummary, EmployeeHistoryItem
from app.schemas.shift import EmployeeShiftResponse
from app.services.employee_service import employee_service

router: APIRouter = APIRouter()


@router.get("/schedule", response_model=list[EmployeeShiftResponse])
async def get_my_schedule(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> list[EmployeeShiftResponse]:
    """오늘 이후 내 근무 일정 — My upcoming shifts."""
    return await employee_service.get_schedule(db, current_user)


@router.get("/history", response_model=list[EmployeeHistoryItem])
async def get_my_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> list[EmployeeHistoryItem]:
    return await employee_service.get_history(db, current_user)


@router.get("/earnings", response_model=EarningsSummary)
async def get_my_earnings(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_employee)],
) -> EarningsSummary:
    """내 수입 요약 — Earnings over completed shifts."""
    return await employee_service.get_earnings(db, current_user)
