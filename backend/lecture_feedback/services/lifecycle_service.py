"""강의 설문 상태 전이(active -> closed -> analyzed) 서비스입니다."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from lecture_feedback.models.lecture import (
    SURVEY_ACTIVE,
    SURVEY_ANALYZED,
    SURVEY_CLOSED,
    Lecture,
)
from lecture_feedback.utils.errors import (
    InvalidLectureStateError,
    InvalidScheduleError,
    LectureNotFoundError,
    SurveyDeadlineNotReachedError,
)
from lecture_feedback.utils.timeutils import as_utc, local_schedule_to_utc, utc_now

logger = logging.getLogger(__name__)

ANALYZABLE_STATUSES = (SURVEY_CLOSED, SURVEY_ANALYZED)


def get_lecture(db: Session, lecture_id: int) -> Lecture:
    row = db.query(Lecture).filter(Lecture.lecture_id == int(lecture_id)).first()
    if not row:
        raise LectureNotFoundError(lecture_id)
    return row


def is_analyzable(lecture: Lecture) -> bool:
    return lecture.survey_status in ANALYZABLE_STATUSES


def survey_close_instant(lecture: Lecture) -> datetime:
    return local_schedule_to_utc(
        lecture.survey_close_date,
        lecture.survey_close_time,
        lecture.timezone,
    )


def is_survey_deadline_passed(lecture: Lecture, now: Optional[datetime] = None) -> bool:
    current = as_utc(now) if now is not None else utc_now()
    return survey_close_instant(lecture) <= current


def find_closable_lectures(db: Session, now: Optional[datetime] = None) -> List[Lecture]:
    current = as_utc(now) if now is not None else utc_now()
    active_lectures = (
        db.query(Lecture)
        .filter(Lecture.survey_status == SURVEY_ACTIVE)
        .order_by(Lecture.lecture_id.asc())
        .all()
    )
    closable = []
    for lecture in active_lectures:
        try:
            if is_survey_deadline_passed(lecture, current):
                closable.append(lecture)
        except InvalidScheduleError as exc:
            logger.warning("[closure] skip lecture %s with invalid schedule: %s", lecture.lecture_id, exc.detail)
    logger.info("[closure] active lectures=%s closable=%s", len(active_lectures), len(closable))
    return closable


def find_lectures_awaiting_analysis(db: Session) -> List[Lecture]:
    return (
        db.query(Lecture)
        .filter(Lecture.survey_status == SURVEY_CLOSED)
        .order_by(Lecture.lecture_id.asc())
        .all()
    )


def close_lecture(db: Session, lecture_id: int, closed_at: Optional[datetime] = None) -> Lecture:
    closed_at = as_utc(closed_at) if closed_at is not None else utc_now()
    lecture = get_lecture(db, lecture_id)
    if lecture.survey_status != SURVEY_ACTIVE:
        raise InvalidLectureStateError(
            f"진행 중인 설문만 마감할 수 있습니다. (survey_status={lecture.survey_status})"
        )
    if not is_survey_deadline_passed(lecture, closed_at):
        raise SurveyDeadlineNotReachedError(
            f"설문 마감 시각이 지나지 않았습니다. ({lecture.survey_close_date} {lecture.survey_close_time})"
        )
    lecture.survey_status = SURVEY_CLOSED
    lecture.closed_at = closed_at
    lecture.updated_at = closed_at
    db.commit()
    db.refresh(lecture)
    return lecture


def mark_lecture_analyzed(db: Session, lecture_id: int, analyzed_at: Optional[datetime] = None) -> Lecture:
    analyzed_at = as_utc(analyzed_at) if analyzed_at is not None else utc_now()
    lecture = get_lecture(db, lecture_id)
    if lecture.survey_status != SURVEY_CLOSED:
        raise InvalidLectureStateError(
            f"마감된 설문만 분석 완료로 전환할 수 있습니다. (survey_status={lecture.survey_status})"
        )
    lecture.survey_status = SURVEY_ANALYZED
    lecture.analyzed_at = analyzed_at
    lecture.updated_at = analyzed_at
    db.commit()
    db.refresh(lecture)
    return lecture
