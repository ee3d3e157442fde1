"""분석 결과 세트/팩트 저장 및 대시보드 조회 서비스입니다.

조회 함수는 저장된 팩트를 필터링만 하고 원본 응답으로 다시 집계하지 않습니다.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lecture_feedback.config import settings
from lecture_feedback.models.analysis import (
    STAT_CROSS,
    STAT_SIMPLE,
    STAT_SUMMARY,
    ResultFact,
    ResultSet,
)
from lecture_feedback.models.lecture import SURVEY_ANALYZED, Lecture
from lecture_feedback.services.analysis_engine import CrossFact, Fact, SimpleFact, SummaryFact
from lecture_feedback.services.lifecycle_service import get_lecture, is_analyzable
from lecture_feedback.utils import questions
from lecture_feedback.utils.errors import (
    DuplicateResultSetError,
    InvalidLectureStateError,
    InvalidResultSetArgsError,
)
from lecture_feedback.utils.statistics import round_half_up
from lecture_feedback.utils.timeutils import as_utc, utc_now

logger = logging.getLogger(__name__)


def validate_create_result_set_args(
    closed_at: datetime,
    total_responses: int,
    now: Optional[datetime] = None,
) -> List[str]:
    errors: List[str] = []
    current = as_utc(now) if now is not None else utc_now()
    min_closed_at = as_utc(settings.RESULT_SET_MIN_CLOSED_AT)
    max_closed_at = current + timedelta(days=settings.RESULT_SET_MAX_FUTURE_DAYS)

    if not isinstance(closed_at, datetime):
        errors.append(f"invalid closed_at: {closed_at!r}")
    else:
        closed_at_utc = as_utc(closed_at)
        if closed_at_utc < min_closed_at or closed_at_utc > max_closed_at:
            errors.append(f"closed_at out of range: {closed_at_utc.isoformat()}")

    if (
        isinstance(total_responses, bool)
        or not isinstance(total_responses, int)
        or total_responses < 0
        or total_responses > settings.MAX_TOTAL_RESPONSES
    ):
        errors.append(f"invalid total_responses: {total_responses!r}")
    return errors


def find_result_set(db: Session, lecture_id: int, closed_at: datetime) -> Optional[ResultSet]:
    return (
        db.query(ResultSet)
        .filter(
            ResultSet.lecture_id == int(lecture_id),
            ResultSet.closed_at == as_utc(closed_at),
        )
        .first()
    )


def create_result_set(
    db: Session,
    lecture_id: int,
    closed_at: datetime,
    total_responses: int,
    *,
    now: Optional[datetime] = None,
    commit: bool = True,
) -> ResultSet:
    errors = validate_create_result_set_args(closed_at, total_responses, now=now)
    if errors:
        raise InvalidResultSetArgsError("결과 세트 인자가 올바르지 않습니다: " + ", ".join(errors))

    lecture = get_lecture(db, lecture_id)
    if not is_analyzable(lecture):
        raise InvalidLectureStateError(
            f"분석할 수 없는 설문 상태입니다. (survey_status={lecture.survey_status})"
        )

    closed_at = as_utc(closed_at)
    existing = find_result_set(db, lecture_id, closed_at)
    if existing:
        raise DuplicateResultSetError(
            f"같은 마감 시각의 결과 세트가 이미 있습니다. "
            f"(result_set_id={existing.result_set_id}, closed_at={closed_at.isoformat()})"
        )

    row = ResultSet(
        lecture_id=lecture.lecture_id,
        closed_at=closed_at,
        total_responses=total_responses,
        created_at=closed_at,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        # 동시 실행된 다른 배치가 먼저 기록한 경우
        db.rollback()
        raise DuplicateResultSetError(
            f"같은 마감 시각의 결과 세트가 이미 있습니다. (closed_at={closed_at.isoformat()})"
        ) from exc
    logger.info(
        "[analysis] result set created lecture_id=%s result_set_id=%s closed_at=%s",
        lecture.lecture_id,
        row.result_set_id,
        closed_at.isoformat(),
    )
    if commit:
        db.commit()
        db.refresh(row)
    return row


def _fact_row(result_set: ResultSet, fact: Fact) -> ResultFact:
    row = ResultFact(
        result_set_id=result_set.result_set_id,
        lecture_id=result_set.lecture_id,
        stat_type=fact.stat_type,
        dim1_question_code=fact.dim1_question_code,
        dim1_option_code=fact.dim1_option_code,
        created_at=result_set.closed_at,
    )
    if isinstance(fact, SimpleFact):
        row.n = fact.n
        row.base_n = fact.base_n
        row.pct = fact.pct
    elif isinstance(fact, CrossFact):
        row.dim2_question_code = fact.dim2_question_code
        row.dim2_option_code = fact.dim2_option_code
        row.n = fact.n
        row.row_pct = fact.row_pct
        row.row_base_n = fact.row_base_n
        row.col_pct = fact.col_pct
        row.col_base_n = fact.col_base_n
        row.total_pct = fact.total_pct
        row.total_base_n = fact.total_base_n
    elif isinstance(fact, SummaryFact):
        row.target_question_code = fact.target_question_code
        row.avg_score = fact.avg_score
        row.base_n = fact.base_n
    else:
        raise TypeError(f"unsupported fact type: {type(fact).__name__}")
    return row


def save_result_facts(
    db: Session,
    result_set: ResultSet,
    facts: Sequence[Fact],
    *,
    commit: bool = True,
) -> int:
    rows = [_fact_row(result_set, fact) for fact in facts]
    db.add_all(rows)
    if commit:
        db.commit()
    else:
        db.flush()
    return len(rows)


def get_latest_result_set(db: Session, lecture_id: int) -> Optional[ResultSet]:
    return (
        db.query(ResultSet)
        .filter(ResultSet.lecture_id == int(lecture_id))
        .order_by(ResultSet.closed_at.desc(), ResultSet.result_set_id.desc())
        .first()
    )


def _facts_query(db: Session, result_set: ResultSet, stat_type: Optional[str] = None):
    query = db.query(ResultFact).filter(ResultFact.result_set_id == result_set.result_set_id)
    if stat_type is not None:
        query = query.filter(ResultFact.stat_type == stat_type)
    return query.order_by(ResultFact.fact_id.asc())


def get_latest_analysis(db: Session, lecture_id: int) -> Optional[Dict]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    return {"result_set": result_set, "facts": _facts_query(db, result_set).all()}


def get_simple_distribution(db: Session, lecture_id: int, question_code: str) -> Optional[List[ResultFact]]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    return (
        _facts_query(db, result_set, STAT_SIMPLE)
        .filter(ResultFact.dim1_question_code == question_code)
        .all()
    )


def get_cross_tabulation(
    db: Session,
    lecture_id: int,
    dim1_question_code: str,
    dim2_question_code: str,
) -> Optional[List[ResultFact]]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    return (
        _facts_query(db, result_set, STAT_CROSS)
        .filter(
            ResultFact.dim1_question_code == dim1_question_code,
            ResultFact.dim2_question_code == dim2_question_code,
        )
        .all()
    )


def get_summary_averages(db: Session, lecture_id: int, target_question_code: str) -> Optional[List[ResultFact]]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    return (
        _facts_query(db, result_set, STAT_SUMMARY)
        .filter(ResultFact.target_question_code == target_question_code)
        .all()
    )


def _total_average(summary_facts: Sequence[ResultFact], target_question_code: str) -> float:
    for fact in summary_facts:
        if (
            fact.target_question_code == target_question_code
            and fact.dim1_question_code == questions.TOTAL_DIMENSION
        ):
            return fact.avg_score or 0.0
    return 0.0


def get_basic_statistics(db: Session, lecture_id: int) -> Optional[Dict]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    simple_facts = _facts_query(db, result_set, STAT_SIMPLE).all()
    summary_facts = _facts_query(db, result_set, STAT_SUMMARY).all()
    return {
        "lecture_id": result_set.lecture_id,
        "result_set_id": result_set.result_set_id,
        "closed_at": result_set.closed_at,
        "total_responses": result_set.total_responses,
        "distributions": {
            question_code: [f for f in simple_facts if f.dim1_question_code == question_code]
            for question_code in questions.SIMPLE_QUESTIONS
        },
        "averages": {
            target: _total_average(summary_facts, target)
            for target in questions.RATING_QUESTIONS
        },
    }


CROSS_VIEW_KEYS = {
    (questions.UNDERSTANDING, questions.GENDER): "understanding_by_gender",
    (questions.UNDERSTANDING, questions.AGE_GROUP): "understanding_by_age_group",
    (questions.SATISFACTION, questions.GENDER): "satisfaction_by_gender",
    (questions.SATISFACTION, questions.AGE_GROUP): "satisfaction_by_age_group",
}


def get_cross_analysis(db: Session, lecture_id: int) -> Optional[Dict]:
    get_lecture(db, lecture_id)
    result_set = get_latest_result_set(db, lecture_id)
    if not result_set:
        return None
    cross_facts = _facts_query(db, result_set, STAT_CROSS).all()
    payload: Dict = {
        "lecture_id": result_set.lecture_id,
        "result_set_id": result_set.result_set_id,
        "closed_at": result_set.closed_at,
        "total_responses": result_set.total_responses,
    }
    for (dim1, dim2), key in CROSS_VIEW_KEYS.items():
        payload[key] = [
            f for f in cross_facts
            if f.dim1_question_code == dim1 and f.dim2_question_code == dim2
        ]
    return payload


def get_all_lectures_average(db: Session, user_id: int, target_question_code: str) -> Dict:
    """사용자의 분석 완료 강의별 최신 평균을 단순 평균한다(응답 수 가중치 없음)."""
    if target_question_code not in questions.RATING_QUESTIONS:
        raise ValueError(f"unsupported target question: {target_question_code}")

    analyzed_lectures = (
        db.query(Lecture)
        .filter(Lecture.created_by == int(user_id), Lecture.survey_status == SURVEY_ANALYZED)
        .all()
    )
    averages: List[float] = []
    for lecture in analyzed_lectures:
        result_set = get_latest_result_set(db, lecture.lecture_id)
        if not result_set:
            continue
        fact = (
            _facts_query(db, result_set, STAT_SUMMARY)
            .filter(
                ResultFact.dim1_question_code == questions.TOTAL_DIMENSION,
                ResultFact.target_question_code == target_question_code,
            )
            .first()
        )
        if fact and fact.avg_score is not None:
            averages.append(fact.avg_score)

    average = round_half_up(sum(averages) / len(averages), 2) if averages else 0.0
    return {
        "target_question": target_question_code,
        "average": average,
        "total_lectures": len(analyzed_lectures),
    }
