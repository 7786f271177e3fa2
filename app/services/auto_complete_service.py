"""자동 완료 서비스 — 종료된 확정 근무를 완료 처리하고 인보이스 생성.

Auto-Completion Service — Periodic sweep promoting `accepted` shifts to
`completed` once their end time has passed, creating a paid invoice for
every staffed shift (prepaid invoicing mode).

Re-entrancy:
    - 프로세스 내 asyncio.Lock으로 겹치는 실행을 건너뜀
      (An in-process lock skips overlapping ticks)
    - 상태 전이는 조건부 UPDATE (WHERE status = 'accepted')
      (Each transition is a conditional update)
    - 근무당 인보이스 unique 제약이 인스턴스 간 최종 보호
      (The unique invoice-per-shift constraint backstops multiple instances)
"""

import asyncio
import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.models.invoice import INVOICE_PAID
from app.models.shift import SHIFT_ACCEPTED, SHIFT_COMPLETED, Shift
from app.repositories.invoice_repository import invoice_repository
from app.repositories.shift_repository import shift_repository
from app.schemas.job import SweepResult
from app.services.invoice_service import invoice_service
from app.utils.shift_time import as_utc, local_datetime, local_today, utcnow

logger = logging.getLogger(__name__)


class AutoCompleteService:
    """자동 완료 처리 서비스.

    Service running the auto-completion sweep. Each shift is processed in its
    own session and transaction so one failure never aborts the others.
    """

    def __init__(self) -> None:
        self._lock: asyncio.Lock = asyncio.Lock()

    @property
    def is_sweeping(self) -> bool:
        return self._lock.locked()

    async def run_sweep(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        now: datetime | None = None,
    ) -> SweepResult:
        """자동 완료를 한 번 실행합니다.

        Run one sweep. Skipped when invoicing mode is "approval" or when a
        previous sweep is still running.

        Args:
            session_factory: 세션 팩토리 (Session factory; one session per shift)
            now: 기준 시각, 테스트용 (Reference time)

        Returns:
            SweepResult: 처리 결과 (Counts of checked, completed, invoiced, failed)
        """
        if settings.INVOICING_MODE != "prepaid":
            return SweepResult(skipped=True, reason="Auto-completion is disabled in approval invoicing mode")
        if self._lock.locked():
            logger.warning("Auto-complete sweep still running; skipping this tick")
            return SweepResult(skipped=True, reason="A sweep is already running")

        async with self._lock:
            return await self._sweep(session_factory, as_utc(now or utcnow()))

    async def _sweep(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        now: datetime,
    ) -> SweepResult:
        async with session_factory() as db:
            candidate_ids: list[UUID] = await shift_repository.get_auto_complete_candidate_ids(
                db, local_today(now)
            )

        result = SweepResult(checked=len(candidate_ids))
        for shift_id in candidate_ids:
            async with session_factory() as db:
                try:
                    completed, invoiced = await self.complete_shift(db, shift_id, now)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    logger.exception("Auto-complete failed for shift %s", shift_id)
                    result.failed += 1
                    continue
            result.completed += int(completed)
            result.invoiced += int(invoiced)

        if result.completed or result.failed:
            logger.info(
                "Auto-complete sweep: checked=%d completed=%d invoiced=%d failed=%d",
                result.checked, result.completed, result.invoiced, result.failed,
            )
        return result

    async def complete_shift(self, db: AsyncSession, shift_id: UUID, now: datetime) -> tuple[bool, bool]:
        """종료된 단일 근무를 완료 처리합니다.

        Complete one ended shift: conditional accepted → completed transition,
        then a paid invoice when the shift had accepted employees and none
        exists yet. The caller commits.

        Returns:
            tuple[bool, bool]: (완료 여부, 인보이스 생성 여부) (completed, invoiced)
        """
        shift: Shift | None = await shift_repository.get_by_id(db, shift_id)
        if shift is None or shift.status != SHIFT_ACCEPTED:
            return False, False
        if local_datetime(shift.date, shift.end_time) > now:
            return False, False

        if not await shift_repository.transition_status(db, shift.id, (SHIFT_ACCEPTED,), SHIFT_COMPLETED):
            # 다른 실행이 먼저 처리함 — already completed elsewhere
            return False, False
        await db.refresh(shift)

        invoiced: bool = False
        if shift.accepted_count > 0 and await invoice_repository.get_by_shift(db, shift.id) is None:
            await invoice_service.create_for_shift(db, shift, INVOICE_PAID, now)
            invoiced = True
        logger.info("Shift %s auto-completed (invoiced=%s)", shift.id, invoiced)
        return True, invoiced


class AutoCompleteScheduler:
    """자동 완료 스케줄러 — 고정 주기로 sweep 실행.

    Runs the sweep on a fixed interval in a background task started from the
    application lifespan.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: int = 60,
        service: AutoCompleteService | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.interval_seconds: int = interval_seconds
        self.service: AutoCompleteService = service or auto_complete_service
        self.is_running: bool = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """스케줄러 시작 — Start the background loop."""
        if self.is_running:
            logger.warning("AutoCompleteScheduler is already running")
            return
        self.is_running = True
        self._task = asyncio.create_task(self._run())
        logger.info("AutoCompleteScheduler started (interval=%ss)", self.interval_seconds)

    async def stop(self) -> None:
        """스케줄러 중지 — Stop the loop and wait for the task to finish."""
        self.is_running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("AutoCompleteScheduler stopped")

    async def _run(self) -> None:
        while self.is_running:
            try:
                await self.service.run_sweep(self.session_factory)
            except Exception:
                logger.exception("Auto-complete sweep crashed")
            await asyncio.sleep(self.interval_seconds)


# 싱글턴 인스턴스 — Singleton instance
auto_complete_service: AutoCompleteService = AutoCompleteService()
