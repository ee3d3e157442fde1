"""강의 CRUD API 라우터입니다."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lecture_feedback.database import get_db
from lecture_feedback.middleware.auth_middleware import get_current_user
from lecture_feedback.models.user import User
from lecture_feedback.schemas.lecture import LectureCreate, LectureOut, LectureUpdate
from lecture_feedback.services import lecture_service

router = APIRouter(prefix="/api/lectures", tags=["lectures"])


@router.get("", response_model=List[LectureOut])
def list_lectures(
    survey_status: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lecture_service.list_lectures(db, current_user=current_user, survey_status=survey_status)


@router.post("", response_model=LectureOut)
def create_lecture(
    data: LectureCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lecture_service.create_lecture(db, data, current_user)


@router.get("/{lecture_id}", response_model=LectureOut)
def get_lecture(
    lecture_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lecture_service.get_lecture_for_user(db, lecture_id=lecture_id, current_user=current_user)


@router.put("/{lecture_id}", response_model=LectureOut)
def update_lecture(
    lecture_id: int,
    data: LectureUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lecture_service.update_lecture(db, lecture_id=lecture_id, data=data, current_user=current_user)


@router.delete("/{lecture_id}")
def delete_lecture(
    lecture_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lecture_service.delete_lecture(db, lecture_id=lecture_id, current_user=current_user)
    return {"message": "삭제되었습니다."}
