"""앱 API 라우터 패키지 — 카페/직원용 엔드포인트 통합.

App API Router package — Aggregates all marketplace-facing (café and
employee) endpoints into a single router for inclusion in the FastAPI
application.

Included routers (Phase 1 — Shifts):
    - shifts: 근무 게시/수락/취소/완료 (Post, claim, cancel, complete shifts)
    - applications: 근무 지원 및 검토 (Applications and review)

Included routers (Phase 2 — Employee):
    - employee: 내 일정/이력/수입 (My schedule, history, earnings)

Included routers (Phase 3 — Billing):
    - invoices: 카페 인보이스 (Café invoices)
    - platform: 가격 정책/입금 계좌 (Pricing policy, bank details)
"""

from fastapi import APIRouter

# Phase 1 — Shifts 라우터 임포트
from app.api.app.shifts import router as shifts_router
from app.api.app.applications import router as applications_router

# Phase 2 — Employee 라우터 임포트
from app.api.app.employee import router as employee_router

# Phase 3 — Billing 라우터 임포트
from app.api.app.invoices import router as invoices_router
from app.api.app.platform import router as platform_router

app_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# Phase 1 라우터 등록 — Register Phase 1 (Shifts) routers
# ---------------------------------------------------------------------------
app_router.include_router(shifts_router, prefix="/shifts", tags=["Shifts"])
app_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

# ---------------------------------------------------------------------------
# Phase 2 라우터 등록 — Register Phase 2 (Employee) routers
# ---------------------------------------------------------------------------
# 직원 셀프서비스: /employee 하위 (Employee self-service)
app_router.include_router(employee_router, prefix="/employee", tags=["Employee"])

# ---------------------------------------------------------------------------
# Phase 3 라우터 등록 — Register Phase 3 (Billing) routers
# ---------------------------------------------------------------------------
app_router.include_router(invoices_router, prefix="/invoices", tags=["Invoices"])
app_router.include_router(platform_router, prefix="/platform", tags=["Platform"])
