"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers (Phase 1 — Shifts):
    - shifts: 근무 조회/수정/승인 (Shift listing, edits, approval)

Included routers (Phase 2 — Billing):
    - invoices: 인보이스 승인/결제 확인 (Invoice approval and verification)
    - employee_payments: 직원 주간 지급 (Weekly employee payments)

Included routers (Phase 3 — Platform):
    - platform_config: 플랫폼 설정/입금 계좌 (Platform config, bank details)
    - jobs: 자동 완료 수동 실행 (On-demand auto-completion sweep)
"""

from fastapi import APIRouter

# Phase 1 — Shifts 라우터 임포트
from app.api.admin.shifts import router as shifts_router

# Phase 2 — Billing 라우터 임포트
from app.api.admin.invoices import router as invoices_router
from app.api.admin.employee_payments import router as employee_payments_router

# Phase 3 — Platform 라우터 임포트
from app.api.admin.platform_config import router as platform_config_router
from app.api.admin.jobs import router as jobs_router

admin_router: APIRouter = APIRouter()

# ---------------------------------------------------------------------------
# Phase 1 라우터 등록 — Register Phase 1 (Shifts) routers
# ---------------------------------------------------------------------------
# 근무: /shifts 하위 (paths declared in the router)
admin_router.include_router(shifts_router, tags=["Admin Shifts"])

# ---------------------------------------------------------------------------
# Phase 2 라우터 등록 — Register Phase 2 (Billing) routers
# ---------------------------------------------------------------------------
admin_router.include_router(invoices_router, prefix="/invoices", tags=["Admin Invoices"])
admin_router.include_router(employee_payments_router, prefix="/employee-payments", tags=["Employee Payments"])

# ---------------------------------------------------------------------------
# Phase 3 라우터 등록 — Register Phase 3 (Platform) routers
# ---------------------------------------------------------------------------
admin_router.include_router(platform_config_router, tags=["Platform Config"])
admin_router.include_router(jobs_router, tags=["Jobs"])
