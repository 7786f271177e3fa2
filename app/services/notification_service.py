"""알림 서비스 — 비동기 이메일 알림 (fire-and-forget).

Notification Service — Fire-and-forget email notifications.
send() returns immediately; delivery runs in a background task and any
failure is logged, never raised into the operation that triggered it.
send_after_commit() holds a notification on the database session until its
transaction commits, and drops it when the transaction rolls back.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from app.models.shift import Shift
from app.utils.email import render_template, send_email, smtp_configured

logger = logging.getLogger(__name__)

# 세션 info 키 — Session.info key holding notifications awaiting commit
PENDING_KEY: str = "pending_notifications"


def shift_params(shift: Shift) -> dict[str, Any]:
    """근무 템플릿 공통 값 — Common template values for a shift."""
    return {
        "date": shift.date.isoformat(),
        "start_time": shift.start_time,
        "end_time": shift.end_time,
        "required_employees": shift.required_employees,
    }


class NotificationService:
    """알림 서비스.

    Notification service. Keeps references to in-flight delivery tasks so
    they are not garbage-collected before completion.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task] = set()

    def send(self, to: str | None, template_id: str, params: dict[str, Any]) -> None:
        """알림을 예약합니다 — Schedule delivery of a templated email.

        Args:
            to: 수신자 이메일, 없으면 생략 (Recipient; skipped when empty)
            template_id: 템플릿 ID (Template id)
            params: 템플릿 값 (Template values)
        """
        if not to:
            return
        if not smtp_configured():
            logger.debug("SMTP not configured; skipping %s notification to %s", template_id, to)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; dropping %s notification to %s", template_id, to)
            return
        task: asyncio.Task = loop.create_task(self._deliver(to, template_id, params))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def send_after_commit(
        self,
        db: AsyncSession,
        to: str | None,
        template_id: str,
        params: dict[str, Any],
    ) -> None:
        """커밋 후 발송 — Queue a notification until the session commits."""
        if not to:
            return
        db.info.setdefault(PENDING_KEY, []).append((to, template_id, params))

    async def _deliver(self, to: str, template_id: str, params: dict[str, Any]) -> None:
        try:
            subject, html, text = render_template(template_id, params)
            await send_email(to, subject, html, text)
            logger.info("Sent %s notification to %s", template_id, to)
        except Exception:
            logger.exception("Failed to send %s notification to %s", template_id, to)


# 싱글턴 인스턴스 — Singleton instance
notification_service: NotificationService = NotificationService()


@event.listens_for(Session, "after_commit")
def _send_committed(session: Session) -> None:
    """커밋된 트랜잭션의 알림 발송 — Deliver notifications queued on the session."""
    for to, template_id, params in session.info.pop(PENDING_KEY, []):
        notification_service.send(to, template_id, params)


@event.listens_for(Session, "after_transaction_end")
def _drop_uncommitted(session: Session, transaction: SessionTransaction) -> None:
    # 최상위 트랜잭션 종료 시 남은 알림은 롤백된 것 — leftovers belong to a rolled-back transaction
    if transaction.parent is None and session.info.pop(PENDING_KEY, None):
        logger.info("Dropped notifications of a rolled-back transaction")
