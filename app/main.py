"""FastAPI 애플리케이션 엔트리포인트 — 로깅, 미들웨어, 라우터, 스케줄러.

FastAPI application entry point — Logging setup, middleware and router
registration, and the auto-completion scheduler lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import async_session
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.auto_complete_service import AutoCompleteScheduler

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """앱 수명주기 — 자동 완료 스케줄러 시작/중지.

    Start the auto-completion scheduler on startup (when enabled) and stop
    it on shutdown.
    """
    scheduler: AutoCompleteScheduler | None = None
    if settings.AUTO_COMPLETE_ENABLED:
        scheduler = AutoCompleteScheduler(async_session, settings.AUTO_COMPLETE_INTERVAL_SECONDS)
        await scheduler.start()
    else:
        logger.info("Auto-complete scheduler disabled")
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# admin_router: 근무 승인, 인보이스, 직원 지급, 플랫폼 설정, 작업
# app_router: 근무, 지원서, 직원 셀프서비스, 인보이스, 플랫폼
from app.api.admin import admin_router  # noqa: E402
from app.api.app import app_router  # noqa: E402

app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(app_router, prefix="/api/v1/app")
