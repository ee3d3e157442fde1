"""강의 CRUD 서비스 레이어입니다. 설문 상태 전이는 lifecycle_service가 담당합니다."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from lecture_feedback.models.lecture import SURVEY_ACTIVE, SURVEY_STATUSES, Lecture
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.models.user import User
from lecture_feedback.schemas.lecture import LectureCreate, LectureUpdate
from lecture_feedback.services.lifecycle_service import get_lecture
from lecture_feedback.utils.permissions import ensure_can_manage_lecture, is_admin
from lecture_feedback.utils.timeutils import local_schedule_to_utc


def _validate_schedule(
    *,
    lecture_date: str,
    lecture_time: str,
    survey_close_date: str,
    survey_close_time: str,
    timezone: Optional[str],
):
    lecture_at = local_schedule_to_utc(lecture_date, lecture_time, timezone)
    close_at = local_schedule_to_utc(survey_close_date, survey_close_time, timezone)
    if close_at <= lecture_at:
        raise HTTPException(status_code=400, detail="설문 마감 일시는 강의 일시보다 이후여야 합니다.")


def _attach_response_counts(db: Session, rows: List[Lecture]) -> List[Lecture]:
    if not rows:
        return rows
    counts = dict(
        db.query(SurveyResponse.lecture_id, func.count(SurveyResponse.response_id))
        .filter(SurveyResponse.lecture_id.in_([row.lecture_id for row in rows]))
        .group_by(SurveyResponse.lecture_id)
        .all()
    )
    for row in rows:
        setattr(row, "response_count", int(counts.get(row.lecture_id, 0)))
    return rows


def list_lectures(
    db: Session,
    *,
    current_user: User,
    survey_status: Optional[str] = None,
) -> List[Lecture]:
    if survey_status is not None and survey_status not in SURVEY_STATUSES:
        raise HTTPException(status_code=400, detail="지원하지 않는 설문 상태입니다.")
    query = db.query(Lecture)
    if not is_admin(current_user):
        query = query.filter(Lecture.created_by == current_user.user_id)
    if survey_status is not None:
        query = query.filter(Lecture.survey_status == survey_status)
    rows = query.order_by(Lecture.lecture_date.desc(), Lecture.lecture_time.desc(), Lecture.lecture_id.desc()).all()
    return _attach_response_counts(db, rows)


def get_lecture_for_user(db: Session, *, lecture_id: int, current_user: User) -> Lecture:
    row = get_lecture(db, lecture_id)
    ensure_can_manage_lecture(row, current_user)
    return _attach_response_counts(db, [row])[0]


def create_lecture(db: Session, data: LectureCreate, current_user: User) -> Lecture:
    _validate_schedule(
        lecture_date=data.lecture_date,
        lecture_time=data.lecture_time,
        survey_close_date=data.survey_close_date,
        survey_close_time=data.survey_close_time,
        timezone=data.timezone,
    )
    row = Lecture(
        **data.model_dump(),
        survey_status=SURVEY_ACTIVE,
        created_by=current_user.user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    setattr(row, "response_count", 0)
    return row


def update_lecture(
    db: Session,
    *,
    lecture_id: int,
    data: LectureUpdate,
    current_user: User,
) -> Lecture:
    row = get_lecture(db, lecture_id)
    ensure_can_manage_lecture(row, current_user)
    if row.survey_status != SURVEY_ACTIVE:
        raise HTTPException(status_code=409, detail="마감된 강의는 수정할 수 없습니다.")

    payload = data.model_dump(exclude_none=True)
    _validate_schedule(
        lecture_date=payload.get("lecture_date", row.lecture_date),
        lecture_time=payload.get("lecture_time", row.lecture_time),
        survey_close_date=payload.get("survey_close_date", row.survey_close_date),
        survey_close_time=payload.get("survey_close_time", row.survey_close_time),
        timezone=payload.get("timezone", row.timezone),
    )
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return _attach_response_counts(db, [row])[0]


def delete_lecture(db: Session, *, lecture_id: int, current_user: User):
    row = get_lecture(db, lecture_id)
    ensure_can_manage_lecture(row, current_user)
    db.delete(row)
    db.commit()
