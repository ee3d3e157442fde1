"""공개 설문 응답 API 스키마입니다."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from lecture_feedback.utils.questions import RATING_MAX, RATING_MIN

Gender = Literal["male", "female", "other", "preferNotToSay"]
AgeGroup = Literal["10s", "20s", "30s", "40s", "50s", "60s", "70s"]


class SurveyResponseCreate(BaseModel):
    gender: Gender
    age_group: AgeGroup
    understanding: int = Field(ge=RATING_MIN, le=RATING_MAX)
    satisfaction: int = Field(ge=RATING_MIN, le=RATING_MAX)
    free_comment: Optional[str] = Field(default=None, max_length=1000)
    response_time: Optional[int] = Field(default=None, ge=0)


class SurveyResponseOut(BaseModel):
    response_id: int
    lecture_id: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SurveyLectureOut(BaseModel):
    lecture_id: int
    title: str
    description: Optional[str] = None
    lecture_date: str
    lecture_time: str
    survey_close_date: str
    survey_close_time: str

    model_config = {"from_attributes": True}


class SurveyAvailabilityOut(BaseModel):
    available: bool
    reason: Optional[str] = None
    lecture: Optional[SurveyLectureOut] = None


class ResponseCountOut(BaseModel):
    lecture_id: int
    count: int
