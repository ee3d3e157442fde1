"""공개 설문(응답 제출) API 라우터입니다. 응답 제출은 인증 없이 호출됩니다."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lecture_feedback.database import get_db
from lecture_feedback.middleware.auth_middleware import get_managed_lecture
from lecture_feedback.models.lecture import Lecture
from lecture_feedback.schemas.response import (
    ResponseCountOut,
    SurveyAvailabilityOut,
    SurveyResponseCreate,
    SurveyResponseOut,
)
from lecture_feedback.services import response_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/surveys", tags=["surveys"])


def _client_ip(request: Request):
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


@router.get("/{lecture_id}", response_model=SurveyAvailabilityOut)
def check_survey_available(lecture_id: int, db: Session = Depends(get_db)):
    return response_service.check_survey_available(db, lecture_id)


@router.post("/{lecture_id}/responses", response_model=SurveyResponseOut)
def submit_response(
    lecture_id: int,
    data: SurveyResponseCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        return response_service.submit_response(
            db,
            lecture_id,
            data,
            user_agent=request.headers.get("user-agent"),
            ip_address=_client_ip(request),
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[survey] submit failed lecture_id=%s: %s", lecture_id, exc)
        raise HTTPException(status_code=503, detail="응답을 저장하지 못했습니다. 잠시 후 다시 시도해 주세요.") from exc


@router.get("/{lecture_id}/count", response_model=ResponseCountOut)
def get_response_count(
    db: Session = Depends(get_db),
    lecture: Lecture = Depends(get_managed_lecture),
):
    return ResponseCountOut(
        lecture_id=lecture.lecture_id,
        count=response_service.get_response_count(db, lecture.lecture_id),
    )
