"""관리자 작업 라우터 — 자동 완료 sweep 수동 실행.

Admin Jobs Router — Run one auto-completion sweep on demand, through the
same code path as the background scheduler.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.job import SweepResult
from app.services.auto_complete_service import auto_complete_service

router: APIRouter = APIRouter()


@router.post("/jobs/auto-complete", response_model=SweepResult)
async def run_auto_complete(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> SweepResult:
    """자동 완료 1회 실행 — Run one sweep synchronously.

    Each shift gets its own session bound to the request's engine.
    """
    session_factory = async_sessionmaker(db.bind, class_=AsyncSession, expire_on_commit=False)
    return await auto_complete_service.run_sweep(session_factory)
