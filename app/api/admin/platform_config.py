"""관리자 플랫폼 설정 라우터 — 수수료, 가격 하한, 위약금, 입금 계좌.

Admin Platform Config Router — Fee schedule, tier floors, penalties and
platform bank details.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.platform import BankDetails, PlatformConfigResponse, PlatformConfigUpdate
from app.services.platform_service import platform_service

router: APIRouter = APIRouter()


@router.get("/platform-config", response_model=PlatformConfigResponse)
async def get_platform_config(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> PlatformConfigResponse:
    """유효 플랫폼 설정 — Effective configuration (stored values over defaults)."""
    return await platform_service.get_config(db)


@router.put("/platform-config", response_model=PlatformConfigResponse)
async def update_platform_config(
    data: PlatformConfigUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> PlatformConfigResponse:
    result: PlatformConfigResponse = await platform_service.update_config(db, current_user.id, data)
    await db.commit()
    return result


@router.put("/platform-bank-details", response_model=BankDetails)
async def update_bank_details(
    data: BankDetails,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> BankDetails:
    """입금 계좌 수정 — Update the platform bank details."""
    result: BankDetails = await platform_service.update_bank_details(db, current_user.id, data)
    await db.commit()
    return result
