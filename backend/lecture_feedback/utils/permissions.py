"""Permissions 관련 공용 유틸리티 헬퍼입니다."""

from fastapi import HTTPException

from lecture_feedback.models.lecture import Lecture
from lecture_feedback.models.user import User

ADMIN = "admin"
LECTURER = "lecturer"


def is_admin(user: User) -> bool:
    return user.role == ADMIN


def is_lecture_owner(lecture: Lecture, user: User) -> bool:
    return lecture.created_by == user.user_id


def can_manage_lecture(lecture: Lecture, user: User) -> bool:
    return is_admin(user) or is_lecture_owner(lecture, user)


def ensure_can_manage_lecture(lecture: Lecture, user: User) -> None:
    if not can_manage_lecture(lecture, user):
        raise HTTPException(status_code=403, detail="해당 강의에 접근할 권한이 없습니다.")
