"""직원 주간 지급 서비스 — 플랫폼 → 직원 정산.

Employee Payment Service — Weekly platform → employee settlement, separate
from café invoicing. Completed shifts are grouped by (ISO week, employee);
marking a week paid recomputes the amount from the current shift set.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payment import PAYMENT_PAID, PAYMENT_PENDING, EmployeeWeekPayment
from app.models.shift import Shift
from app.models.user import User
from app.repositories.payment_repository import week_payment_repository
from app.repositories.shift_repository import shift_repository
from app.repositories.user_repository import user_repository
from app.schemas.payment import EmployeeWeekSummary, WeekPaymentPeriod, WeekPaymentResponse
from app.services.storage_service import storage_service
from app.utils.exceptions import ConflictError, ValidationError
from app.utils.pricing import round2, shift_hours
from app.utils.shift_time import utcnow, week_start

logger = logging.getLogger(__name__)


def summarize_shifts(shifts: Sequence[Shift]) -> tuple[Decimal, Decimal]:
    """직원 근무 합계 — (total hours, amount) where amount = Σ hours x effective rate."""
    total_hours: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")
    for shift in shifts:
        hours: Decimal = shift_hours(shift.start_time, shift.end_time)
        total_hours += hours
        amount += hours * shift.effective_employee_rate
    return round2(total_hours), round2(amount)


class PaymentService:
    """직원 주간 지급 서비스 — Weekly employee payment service."""

    async def list_week_payments(
        self,
        db: AsyncSession,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[WeekPaymentPeriod]:
        """주간 지급 현황을 집계합니다.

        Group completed shifts by (week, employee), most recent week first,
        and annotate each group as paid or pending from the stored records.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            date_from: 시작일 (First shift date to include)
            date_to: 종료일 (Last shift date to include)

        Returns:
            list[WeekPaymentPeriod]: 주간 목록 (Weekly periods)
        """
        pairs: list[tuple[Shift, UUID]] = await shift_repository.get_completed_with_employees(
            db, date_from, date_to
        )
        weeks: dict[date, dict[UUID, list[Shift]]] = defaultdict(lambda: defaultdict(list))
        for shift, employee_id in pairs:
            weeks[week_start(shift.date)][employee_id].append(shift)

        records: dict[tuple[date, UUID], EmployeeWeekPayment] = await week_payment_repository.get_by_weeks(
            db, list(weeks)
        )
        users: dict[UUID, User] = await user_repository.get_by_ids(
            db, list({employee_id for _, employee_id in pairs})
        )

        periods: list[WeekPaymentPeriod] = []
        for monday in sorted(weeks, reverse=True):
            employees: list[EmployeeWeekSummary] = []
            for employee_id, shifts in weeks[monday].items():
                total_hours, amount = summarize_shifts(shifts)
                record: EmployeeWeekPayment | None = records.get((monday, employee_id))
                paid: bool = record is not None and record.status == PAYMENT_PAID
                user: User | None = users.get(employee_id)
                employees.append(EmployeeWeekSummary(
                    employee_id=str(employee_id),
                    employee_name=user.full_name if user else None,
                    employee_email=user.email if user else None,
                    shift_count=len(shifts),
                    total_hours=total_hours,
                    amount=amount,
                    shift_ids=[str(s.id) for s in shifts],
                    status=PAYMENT_PAID if paid else PAYMENT_PENDING,
                    paid_at=record.paid_at if paid else None,
                    payment_proof=record.payment_proof if paid else None,
                ))
            employees.sort(key=lambda e: (e.employee_name or "").lower())
            periods.append(WeekPaymentPeriod(
                week_start=monday,
                week_end=monday + timedelta(days=6),
                total_amount=round2(sum((e.amount for e in employees), Decimal("0"))),
                employees=employees,
            ))
        return periods

    def _to_response(self, record: EmployeeWeekPayment) -> WeekPaymentResponse:
        return WeekPaymentResponse(
            id=str(record.id),
            employee_id=str(record.employee_id),
            week_start=record.week_start,
            amount=round2(record.amount),
            shift_ids=[str(s) for s in (record.shift_ids or [])],
            status=record.status,
            payment_proof=record.payment_proof,
            paid_at=record.paid_at,
            paid_by=str(record.paid_by) if record.paid_by else None,
        )

    async def mark_week_paid(
        self,
        db: AsyncSession,
        admin: User,
        week_of: date,
        employee_ids: list[UUID],
        upload: UploadFile | None,
        now: datetime | None = None,
    ) -> list[WeekPaymentResponse]:
        """주간 지급 완료 처리.

        Mark a week paid for the given employees. The date is normalized to
        its Monday, each amount is recomputed from the completed shifts of
        that week, and one record per employee is upserted with the proof.
        Employees without completed shifts that week are skipped.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            admin: 처리한 관리자 (Admin marking the payment)
            week_of: 주 안의 임의 날짜 (Any date inside the week)
            employee_ids: 직원 ID 목록 (Employees being paid)
            upload: 지급 증빙 파일 (Proof of transfer)
            now: 기준 시각, 테스트용 (Reference time)

        Returns:
            list[WeekPaymentResponse]: 저장된 지급 기록 (Upserted records)

        Raises:
            ValidationError: 직원 미선택 또는 증빙 없음 (No employees or no proof)
            ConflictError: 해당 주에 완료된 근무 없음 (No completed shifts that week)
        """
        if not employee_ids:
            raise ValidationError("Select at least one employee", field="employee_ids")
        if upload is None:
            raise ValidationError("Payment proof is required to mark a week paid", field="payment_proof")

        monday: date = week_start(week_of)
        pairs: list[tuple[Shift, UUID]] = await shift_repository.get_completed_with_employees(
            db, monday, monday + timedelta(days=6), employee_ids
        )
        by_employee: dict[UUID, list[Shift]] = defaultdict(list)
        for shift, employee_id in pairs:
            by_employee[employee_id].append(shift)
        if not by_employee:
            raise ConflictError("No completed shifts for the selected employees in this week")

        proof_key: str = await storage_service.save_upload(upload, "employee-payment-proofs")
        paid_at: datetime = now or utcnow()

        records: list[EmployeeWeekPayment] = []
        try:
            for employee_id, shifts in by_employee.items():
                _hours, amount = summarize_shifts(shifts)
                data = {
                    "amount": amount,
                    "shift_ids": [str(s.id) for s in shifts],
                    "status": PAYMENT_PAID,
                    "payment_proof": proof_key,
                    "paid_at": paid_at,
                    "paid_by": admin.id,
                }
                existing: EmployeeWeekPayment | None = await week_payment_repository.get_for_employee_week(
                    db, employee_id, monday
                )
                if existing is None:
                    record = await week_payment_repository.create(
                        db, {"employee_id": employee_id, "week_start": monday, **data}
                    )
                else:
                    record = await week_payment_repository.update(db, existing, data)
                records.append(record)
        except IntegrityError:
            await db.rollback()
            raise ConflictError("This week is already being marked paid; please retry")

        skipped: set[UUID] = set(employee_ids) - set(by_employee)
        logger.info(
            "Week %s marked paid by %s for %d employees (skipped without shifts: %d)",
            monday, admin.id, len(records), len(skipped),
        )
        return [self._to_response(r) for r in records]


# 싱글턴 인스턴스 — Singleton instance
payment_service: PaymentService = PaymentService()
