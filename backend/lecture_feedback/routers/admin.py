"""관리자 전용 운영 API 라우터입니다. 설문 마감/분석 배치를 수동으로 실행합니다."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from lecture_feedback.database import SessionLocal
from lecture_feedback.middleware.auth_middleware import require_admin
from lecture_feedback.models.user import User
from lecture_feedback.schemas.analysis import ClosureSweepOut, ProcessingStatsOut
from lecture_feedback.services.closure_service import run_closure_sweep

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/closure-sweep", response_model=ClosureSweepOut)
async def trigger_closure_sweep(
    now: Optional[datetime] = None,
    current_user: User = Depends(require_admin),
):
    result = await run_closure_sweep(SessionLocal, now=now)
    closure = result.metrics.closure
    analysis = result.metrics.analysis
    return ClosureSweepOut(
        closed_count=result.closed_count,
        analyzed_count=result.analyzed_count,
        processing_time_ms=result.processing_time_ms,
        closure=ProcessingStatsOut(
            success_count=closure.success_count,
            failure_count=closure.failure_count,
            failed_ids=closure.failed_ids,
            errors=closure.errors,
        ),
        analysis=ProcessingStatsOut(
            success_count=analysis.success_count,
            failure_count=analysis.failure_count,
            failed_ids=analysis.failed_ids,
            errors=analysis.errors,
        ),
        summary=result.summary,
    )
