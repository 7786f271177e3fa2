"""플랫폼 설정 레포지토리.

Platform Config Repository — Access to the singleton configuration row.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.platform import PLATFORM_CONFIG_KEY, PlatformConfig
from app.repositories.base import BaseRepository


class PlatformConfigRepository(BaseRepository[PlatformConfig]):
    """플랫폼 설정 레포지토리 — Repository for platform_configs."""

    def __init__(self) -> None:
        super().__init__(PlatformConfig)

    async def get_current(self, db: AsyncSession) -> PlatformConfig | None:
        result = await db.execute(select(PlatformConfig).where(PlatformConfig.key == PLATFORM_CONFIG_KEY))
        return result.scalar_one_or_none()

    async def get_or_create(self, db: AsyncSession) -> PlatformConfig:
        """설정 행을 조회하고 없으면 생성합니다 — Fetch the row, creating it on first use."""
        config: PlatformConfig | None = await self.get_current(db)
        if config is None:
            config = await self.create(db, {"key": PLATFORM_CONFIG_KEY})
        return config


# 싱글턴 인스턴스 — Singleton instance
platform_config_repository: PlatformConfigRepository = PlatformConfigRepository()
