"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from lecture_feedback.models.user import User
from lecture_feedback.models.lecture import Lecture
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.models.analysis import ResultFact, ResultSet

__all__ = [
    "User",
    "Lecture",
    "SurveyResponse",
    "ResultSet", "ResultFact",
]
