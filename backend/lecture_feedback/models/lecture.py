"""강의 및 설문 상태(active/closed/analyzed) SQLAlchemy 모델입니다."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from lecture_feedback.database import Base

SURVEY_ACTIVE = "active"
SURVEY_CLOSED = "closed"
SURVEY_ANALYZED = "analyzed"
SURVEY_STATUSES = (SURVEY_ACTIVE, SURVEY_CLOSED, SURVEY_ANALYZED)


class Lecture(Base):
    __tablename__ = "lecture"

    lecture_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    lecture_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    lecture_time = Column(String(5), nullable=False)  # HH:MM
    survey_close_date = Column(String(10), nullable=False)
    survey_close_time = Column(String(5), nullable=False)
    timezone = Column(String(64), nullable=True)  # 비어 있으면 settings.SURVEY_TIMEZONE
    survey_status = Column(String(20), nullable=False, default=SURVEY_ACTIVE)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    analyzed_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    creator = relationship("User", back_populates="lectures")
    responses = relationship(
        "SurveyResponse",
        back_populates="lecture",
        cascade="all, delete-orphan",
    )
    result_sets = relationship(
        "ResultSet",
        back_populates="lecture",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_lecture_survey_status", "survey_status"),
        Index("idx_lecture_creator", "created_by"),
    )
