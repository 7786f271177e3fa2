"""사용자 레포지토리 — 사용자 조회 쿼리.

User Repository — Lookup queries for user accounts.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_ids(self, db: AsyncSession, user_ids: Sequence[UUID]) -> dict[UUID, User]:
        """ID 목록으로 사용자를 한 번에 조회합니다.

        Retrieve several users at once, keyed by id.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_ids: 사용자 ID 목록 (User UUIDs)

        Returns:
            dict[UUID, User]: ID → 사용자 (Users keyed by id)
        """
        if not user_ids:
            return {}
        query: Select = select(User).where(User.id.in_(set(user_ids)))
        result = await db.execute(query)
        return {user.id: user for user in result.scalars().all()}


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
