"""분석 결과 조회 API 라우터입니다. 분석 전인 강의는 null을, 없는 강의는 404를 반환합니다."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from lecture_feedback.database import get_db
from lecture_feedback.middleware.auth_middleware import get_current_user, get_managed_lecture
from lecture_feedback.models.lecture import Lecture
from lecture_feedback.models.user import User
from lecture_feedback.schemas.analysis import (
    AllLecturesAverageOut,
    AnalysisRunOut,
    BasicStatisticsOut,
    CrossAnalysisOut,
    CrossFactOut,
    LatestAnalysisOut,
    ResultSetOut,
    SimpleFactOut,
    SummaryFactOut,
    fact_to_out,
)
from lecture_feedback.services import closure_service, result_service
from lecture_feedback.utils import questions

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.get("/lectures/{lecture_id}/latest", response_model=Optional[LatestAnalysisOut])
def get_latest(
    lecture_id: int,
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    payload = result_service.get_latest_analysis(db, lecture_id)
    if payload is None:
        return None
    return LatestAnalysisOut(
        result_set=ResultSetOut.model_validate(payload["result_set"]),
        facts=[fact_to_out(row) for row in payload["facts"]],
    )


@router.get("/lectures/{lecture_id}/basic", response_model=Optional[BasicStatisticsOut])
def get_basic(
    lecture_id: int,
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    payload = result_service.get_basic_statistics(db, lecture_id)
    if payload is None:
        return None
    distributions = payload["distributions"]
    return BasicStatisticsOut(
        lecture_id=payload["lecture_id"],
        result_set_id=payload["result_set_id"],
        closed_at=payload["closed_at"],
        total_responses=payload["total_responses"],
        distributions={
            "gender": [fact_to_out(row) for row in distributions[questions.GENDER]],
            "age_group": [fact_to_out(row) for row in distributions[questions.AGE_GROUP]],
            "understanding": [fact_to_out(row) for row in distributions[questions.UNDERSTANDING]],
            "satisfaction": [fact_to_out(row) for row in distributions[questions.SATISFACTION]],
        },
        averages=payload["averages"],
    )


@router.get("/lectures/{lecture_id}/cross", response_model=Optional[CrossAnalysisOut])
def get_cross(
    lecture_id: int,
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    payload = result_service.get_cross_analysis(db, lecture_id)
    if payload is None:
        return None
    for key in result_service.CROSS_VIEW_KEYS.values():
        payload[key] = [fact_to_out(row) for row in payload[key]]
    return CrossAnalysisOut(**payload)


@router.get("/lectures/{lecture_id}/simple", response_model=Optional[List[SimpleFactOut]])
def get_simple(
    lecture_id: int,
    question_code: str = Query(...),
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    if not questions.is_valid_question_code(question_code):
        raise HTTPException(status_code=400, detail="지원하지 않는 질문 코드입니다.")
    rows = result_service.get_simple_distribution(db, lecture_id, question_code)
    if rows is None:
        return None
    return [fact_to_out(row) for row in rows]


@router.get("/lectures/{lecture_id}/cross-tab", response_model=Optional[List[CrossFactOut]])
def get_cross_tab(
    lecture_id: int,
    row_question: str = Query(...),
    col_question: str = Query(...),
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    if not questions.is_valid_cross_pair(row_question, col_question):
        raise HTTPException(status_code=400, detail="지원하지 않는 교차 분석 조합입니다.")
    rows = result_service.get_cross_tabulation(db, lecture_id, row_question, col_question)
    if rows is None:
        return None
    return [fact_to_out(row) for row in rows]


@router.get("/lectures/{lecture_id}/summary", response_model=Optional[List[SummaryFactOut]])
def get_summary(
    lecture_id: int,
    target_question: str = Query(...),
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    if target_question not in questions.RATING_QUESTIONS:
        raise HTTPException(status_code=400, detail="평균을 계산할 수 없는 질문입니다.")
    rows = result_service.get_summary_averages(db, lecture_id, target_question)
    if rows is None:
        return None
    return [fact_to_out(row) for row in rows]


@router.post("/lectures/{lecture_id}/run", response_model=AnalysisRunOut)
def run_analysis(
    lecture_id: int,
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    result = closure_service.run_lecture_analysis(db, lecture_id, trigger_type="manual")
    return AnalysisRunOut(
        lecture_id=result.lecture_id,
        result_set_id=result.result_set_id,
        total_responses=result.total_responses,
        results_count=result.results_count,
        execution_time_ms=result.execution_time_ms,
    )


@router.get("/average", response_model=AllLecturesAverageOut)
def get_all_lectures_average(
    target_question: str = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return result_service.get_all_lectures_average(db, current_user.user_id, target_question)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="평균을 계산할 수 없는 질문입니다.") from exc
