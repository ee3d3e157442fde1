"""익명 설문 응답(원본 응답 저장소) SQLAlchemy 모델입니다."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from lecture_feedback.database import Base


class SurveyResponse(Base):
    __tablename__ = "survey_response"

    response_id = Column(Integer, primary_key=True, autoincrement=True)
    lecture_id = Column(Integer, ForeignKey("lecture.lecture_id", ondelete="CASCADE"), nullable=False)
    gender = Column(String(20), nullable=False)
    age_group = Column(String(10), nullable=False)
    understanding = Column(Integer, nullable=False)  # 1-5
    satisfaction = Column(Integer, nullable=False)  # 1-5
    free_comment = Column(Text, nullable=True)
    # 중복 응답 판별 전용 메타데이터, 집계 결과에는 노출하지 않는다.
    user_agent = Column(String(500), nullable=True)
    ip_address = Column(String(64), nullable=True)
    response_time = Column(Integer, nullable=True)  # 응답 소요 시간(초)
    created_at = Column(DateTime, server_default=func.now())

    lecture = relationship("Lecture", back_populates="responses")

    __table_args__ = (
        Index("idx_survey_response_lecture", "lecture_id"),
        Index(
            "uq_survey_response_lecture_ip",
            "lecture_id",
            "ip_address",
            unique=True,
            sqlite_where=text("ip_address IS NOT NULL"),
            postgresql_where=text("ip_address IS NOT NULL"),
        ),
    )
