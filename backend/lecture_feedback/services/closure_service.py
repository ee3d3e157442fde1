"""설문 마감/분석 배치 오케스트레이터입니다.

cron 등 외부 스케줄러가 ``run_closure_sweep``을 호출하면 두 단계를 실행합니다.

1. 마감 시각이 지난 active 강의를 closed로 전환
2. closed 상태의 모든 강의에 대해 응답 조회 -> 집계 -> 결과 저장 -> analyzed 전환

각 단계는 강의별 작업을 동시에 실행하고, 한 강의의 실패가 다른 강의 처리에
영향을 주지 않도록 강의 단위로 결과(성공/실패)를 수집합니다. 이전 배치에서
분석이 실패해 closed로 남은 강의도 2단계에서 다시 처리됩니다.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session, sessionmaker

from lecture_feedback.database import SessionLocal
from lecture_feedback.models.lecture import SURVEY_CLOSED
from lecture_feedback.services import analysis_engine, lifecycle_service, response_service, result_service
from lecture_feedback.utils.errors import InvalidLectureStateError
from lecture_feedback.utils.timeutils import as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    lecture_id: int
    success: bool
    error: Optional[str] = None


@dataclass
class AggregatedStats:
    success_count: int = 0
    failure_count: int = 0
    failed_ids: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count


@dataclass
class ProcessingMetrics:
    closure: AggregatedStats
    analysis: AggregatedStats
    processing_time_ms: int


@dataclass
class AnalysisExecutionResult:
    lecture_id: int
    result_set_id: int
    total_responses: int
    results_count: Dict[str, int]
    execution_time_ms: int


@dataclass
class ClosureSweepSummary:
    closed_count: int
    analyzed_count: int
    processing_time_ms: int
    metrics: ProcessingMetrics
    summary: str


def format_error_info(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


def aggregate_results(results: Sequence[ProcessResult]) -> AggregatedStats:
    failures = [r for r in results if not r.success]
    return AggregatedStats(
        success_count=len(results) - len(failures),
        failure_count=len(failures),
        failed_ids=[r.lecture_id for r in failures],
        errors=[r.error for r in failures if r.error],
    )


def calculate_metrics(
    closure_results: Sequence[ProcessResult],
    analysis_results: Sequence[ProcessResult],
    started_at: float,
) -> ProcessingMetrics:
    """started_at은 time.perf_counter() 값."""
    return ProcessingMetrics(
        closure=aggregate_results(closure_results),
        analysis=aggregate_results(analysis_results),
        processing_time_ms=int((time.perf_counter() - started_at) * 1000),
    )


def format_summary_log(metrics: ProcessingMetrics) -> str:
    return (
        "[closure] sweep finished - "
        f"closed: {metrics.closure.success_count}/{metrics.closure.total}, "
        f"analyzed: {metrics.analysis.success_count}/{metrics.analysis.total}, "
        f"elapsed: {metrics.processing_time_ms}ms"
    )


def run_lecture_analysis(
    db: Session,
    lecture_id: int,
    analyzed_at: Optional[datetime] = None,
    *,
    trigger_type: str = "auto",
    now: Optional[datetime] = None,
) -> AnalysisExecutionResult:
    """강의 하나의 응답을 집계해 결과 세트/팩트를 저장하고 analyzed로 전환한다.

    결과 세트와 팩트는 한 트랜잭션으로 커밋한다. 상태 전환이 실패하면 강의는
    closed로 남아 다음 배치에서 다시 분석된다.
    """
    started_at = time.perf_counter()
    analyzed_at = as_utc(analyzed_at) if analyzed_at is not None else utc_now()
    logger.info("[analysis] start lecture_id=%s trigger=%s", lecture_id, trigger_type)

    lecture = lifecycle_service.get_lecture(db, lecture_id)
    if not lifecycle_service.is_analyzable(lecture):
        raise InvalidLectureStateError(
            f"분석할 수 없는 설문 상태입니다. (survey_status={lecture.survey_status})"
        )

    responses = response_service.get_responses_by_lecture(db, lecture_id)
    if not responses:
        logger.info("[analysis] lecture_id=%s has no responses", lecture_id)

    computed = analysis_engine.compute_result_facts(lecture.lecture_id, responses, analyzed_at)
    try:
        result_set = result_service.create_result_set(
            db,
            lecture.lecture_id,
            analyzed_at,
            computed.total_responses,
            now=now,
            commit=False,
        )
        result_service.save_result_facts(db, result_set, computed.facts, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(result_set)

    if lecture.survey_status == SURVEY_CLOSED:
        lifecycle_service.mark_lecture_analyzed(db, lecture.lecture_id, analyzed_at)

    execution_time_ms = int((time.perf_counter() - started_at) * 1000)
    logger.info(
        "[analysis] done lecture_id=%s result_set_id=%s responses=%s facts=%s elapsed=%sms",
        lecture_id,
        result_set.result_set_id,
        computed.total_responses,
        computed.counts(),
        execution_time_ms,
    )
    return AnalysisExecutionResult(
        lecture_id=lecture.lecture_id,
        result_set_id=result_set.result_set_id,
        total_responses=computed.total_responses,
        results_count=computed.counts(),
        execution_time_ms=execution_time_ms,
    )


def _close_one(session_factory: sessionmaker, lecture_id: int, closed_at: datetime) -> ProcessResult:
    with session_factory() as db:
        try:
            lifecycle_service.close_lecture(db, lecture_id, closed_at)
        except Exception as exc:
            db.rollback()
            logger.warning("[closure] close failed lecture_id=%s: %s", lecture_id, format_error_info(exc))
            return ProcessResult(lecture_id=lecture_id, success=False, error=format_error_info(exc))
    logger.info("[closure] closed lecture_id=%s", lecture_id)
    return ProcessResult(lecture_id=lecture_id, success=True)


def _analyze_one(session_factory: sessionmaker, lecture_id: int, analyzed_at: datetime) -> ProcessResult:
    with session_factory() as db:
        try:
            run_lecture_analysis(db, lecture_id, analyzed_at, trigger_type="auto", now=analyzed_at)
        except Exception as exc:
            db.rollback()
            logger.warning("[closure] analysis failed lecture_id=%s: %s", lecture_id, format_error_info(exc))
            return ProcessResult(lecture_id=lecture_id, success=False, error=format_error_info(exc))
    return ProcessResult(lecture_id=lecture_id, success=True)


async def process_in_parallel(
    lecture_ids: Sequence[int],
    worker: Callable[[int], ProcessResult],
) -> List[ProcessResult]:
    """강의별 worker를 스레드에서 동시에 실행하고 모두 끝날 때까지 기다린다."""
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(worker, lecture_id) for lecture_id in lecture_ids),
        return_exceptions=True,
    )
    results: List[ProcessResult] = []
    for lecture_id, outcome in zip(lecture_ids, outcomes):
        if isinstance(outcome, BaseException):
            results.append(
                ProcessResult(lecture_id=lecture_id, success=False, error=format_error_info(outcome))
            )
        else:
            results.append(outcome)
    return results


async def run_closure_sweep(
    session_factory: sessionmaker = SessionLocal,
    now: Optional[datetime] = None,
) -> ClosureSweepSummary:
    started_at = time.perf_counter()
    now = as_utc(now) if now is not None else utc_now()
    logger.info("[closure] sweep started at %s", now.isoformat())

    with session_factory() as db:
        closable_ids = [row.lecture_id for row in lifecycle_service.find_closable_lectures(db, now)]
    closure_results = await process_in_parallel(
        closable_ids,
        lambda lecture_id: _close_one(session_factory, lecture_id, now),
    )

    with session_factory() as db:
        pending_ids = [row.lecture_id for row in lifecycle_service.find_lectures_awaiting_analysis(db)]
    logger.info("[closure] lectures awaiting analysis=%s", len(pending_ids))
    analysis_results = await process_in_parallel(
        pending_ids,
        lambda lecture_id: _analyze_one(session_factory, lecture_id, now),
    )

    metrics = calculate_metrics(closure_results, analysis_results, started_at)
    summary = format_summary_log(metrics)
    logger.info(summary)
    return ClosureSweepSummary(
        closed_count=metrics.closure.success_count,
        analyzed_count=metrics.analysis.success_count,
        processing_time_ms=metrics.processing_time_ms,
        metrics=metrics,
        summary=summary,
    )
