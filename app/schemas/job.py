"""백그라운드 작업 Pydantic 스키마 정의.

Background job schema definitions.
"""

from pydantic import BaseModel


class SweepResult(BaseModel):
    """자동 완료 실행 결과 — Outcome of one auto-completion sweep.

    Attributes:
        checked: 확인한 근무 수 (Candidate shifts examined)
        completed: 완료 처리된 근무 수 (Shifts moved to completed)
        invoiced: 생성된 인보이스 수 (Invoices created)
        failed: 실패한 근무 수 (Shifts whose processing failed; retried next tick)
        skipped: 실행 생략 여부 (Sweep skipped entirely)
        reason: 생략 사유 (Why it was skipped)
    """

    checked: int = 0
    completed: int = 0
    invoiced: int = 0
    failed: int = 0
    skipped: bool = False
    reason: str | None = None
