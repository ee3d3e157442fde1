"""강의 CRUD API 스키마입니다."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from lecture_feedback.utils.timeutils import DATE_PATTERN, TIME_PATTERN


class LectureBase(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    lecture_date: str = Field(pattern=DATE_PATTERN)
    lecture_time: str = Field(pattern=TIME_PATTERN)
    survey_close_date: str = Field(pattern=DATE_PATTERN)
    survey_close_time: str = Field(pattern=TIME_PATTERN)
    timezone: Optional[str] = Field(default=None, max_length=64)


class LectureCreate(LectureBase):
    pass


class LectureUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    lecture_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    lecture_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    survey_close_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    survey_close_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    timezone: Optional[str] = Field(default=None, max_length=64)


class LectureOut(LectureBase):
    lecture_id: int
    survey_status: str
    closed_at: Optional[datetime] = None
    analyzed_at: Optional[datetime] = None
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    response_count: int = 0

    model_config = {"from_attributes": True}
