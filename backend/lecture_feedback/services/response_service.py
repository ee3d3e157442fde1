"""공개 설문 응답 제출/조회 서비스입니다."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lecture_feedback.models.lecture import SURVEY_ACTIVE
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.schemas.response import SurveyResponseCreate
from lecture_feedback.services.lifecycle_service import get_lecture, is_survey_deadline_passed
from lecture_feedback.utils.errors import (
    DuplicateResponseError,
    InvalidScheduleError,
    LectureNotFoundError,
    SurveyClosedError,
)

logger = logging.getLogger(__name__)


def _normalize_ip(ip_address: Optional[str]) -> Optional[str]:
    value = str(ip_address or "").strip()
    return value or None


def check_survey_available(db: Session, lecture_id: int, now: Optional[datetime] = None) -> Dict:
    try:
        lecture = get_lecture(db, lecture_id)
    except LectureNotFoundError:
        return {"available": False, "reason": "lecture_not_found"}
    if lecture.survey_status != SURVEY_ACTIVE:
        return {"available": False, "reason": "survey_not_active"}
    try:
        if is_survey_deadline_passed(lecture, now):
            return {"available": False, "reason": "deadline_passed"}
    except InvalidScheduleError:
        return {"available": False, "reason": "invalid_schedule"}
    return {"available": True, "reason": None, "lecture": lecture}


def has_response_from_ip(db: Session, lecture_id: int, ip_address: str) -> bool:
    return (
        db.query(SurveyResponse.response_id)
        .filter(
            SurveyResponse.lecture_id == int(lecture_id),
            SurveyResponse.ip_address == ip_address,
        )
        .first()
        is not None
    )


def submit_response(
    db: Session,
    lecture_id: int,
    data: SurveyResponseCreate,
    *,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> SurveyResponse:
    lecture = get_lecture(db, lecture_id)
    if lecture.survey_status != SURVEY_ACTIVE:
        raise SurveyClosedError("이 설문은 더 이상 응답을 받지 않습니다.")

    ip_address = _normalize_ip(ip_address)
    # IP가 없는 응답은 중복 판별하지 않는다.
    if ip_address and has_response_from_ip(db, lecture.lecture_id, ip_address):
        raise DuplicateResponseError("이미 응답한 설문입니다.")

    row = SurveyResponse(
        lecture_id=lecture.lecture_id,
        **data.model_dump(),
        user_agent=user_agent[:500] if user_agent else None,
        ip_address=ip_address,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateResponseError("이미 응답한 설문입니다.") from exc
    db.refresh(row)
    logger.info("[survey] response stored lecture_id=%s response_id=%s", lecture.lecture_id, row.response_id)
    return row


def get_responses_by_lecture(db: Session, lecture_id: int) -> List[SurveyResponse]:
    return (
        db.query(SurveyResponse)
        .filter(SurveyResponse.lecture_id == int(lecture_id))
        .order_by(SurveyResponse.response_id.asc())
        .all()
    )


def get_response_count(db: Session, lecture_id: int) -> int:
    return db.query(SurveyResponse).filter(SurveyResponse.lecture_id == int(lecture_id)).count()
