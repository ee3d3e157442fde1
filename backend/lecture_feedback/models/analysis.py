"""분석 결과 세트/결과 팩트 SQLAlchemy 모델입니다.

결과 세트는 (lecture_id, closed_at) 단위로 한 번만 생성되고, 결과 팩트는
simple/cross2/summary 통계를 하나의 테이블에 저장합니다. 두 테이블 모두
생성 후 갱신하지 않습니다.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from lecture_feedback.database import Base

STAT_SIMPLE = "simple"
STAT_CROSS = "cross2"
STAT_SUMMARY = "summary"


class ResultSet(Base):
    __tablename__ = "result_set"

    result_set_id = Column(Integer, primary_key=True, autoincrement=True)
    lecture_id = Column(Integer, ForeignKey("lecture.lecture_id", ondelete="CASCADE"), nullable=False)
    closed_at = Column(DateTime(timezone=True), nullable=False)
    total_responses = Column(Integer, nullable=False, default=0)
    # 집계 시점이 아닌 마감 시각과 같은 값
    created_at = Column(DateTime(timezone=True), nullable=False)

    lecture = relationship("Lecture", back_populates="result_sets")
    facts = relationship(
        "ResultFact",
        back_populates="result_set",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("lecture_id", "closed_at", name="uq_result_set_lecture_closed_at"),
        Index("idx_result_set_lecture_closed_at", "lecture_id", "closed_at"),
    )


class ResultFact(Base):
    __tablename__ = "result_fact"

    fact_id = Column(Integer, primary_key=True, autoincrement=True)
    result_set_id = Column(Integer, ForeignKey("result_set.result_set_id", ondelete="CASCADE"), nullable=False)
    lecture_id = Column(Integer, ForeignKey("lecture.lecture_id", ondelete="CASCADE"), nullable=False)
    stat_type = Column(String(20), nullable=False)  # simple/cross2/summary

    dim1_question_code = Column(String(50), nullable=False)
    dim1_option_code = Column(String(50), nullable=False)
    dim2_question_code = Column(String(50), nullable=True)  # cross2
    dim2_option_code = Column(String(50), nullable=True)  # cross2
    target_question_code = Column(String(50), nullable=True)  # summary

    n = Column(Integer, nullable=True)
    pct = Column(Float, nullable=True)
    base_n = Column(Integer, nullable=True)
    row_pct = Column(Float, nullable=True)
    row_base_n = Column(Integer, nullable=True)
    col_pct = Column(Float, nullable=True)
    col_base_n = Column(Integer, nullable=True)
    total_pct = Column(Float, nullable=True)
    total_base_n = Column(Integer, nullable=True)
    avg_score = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)

    result_set = relationship("ResultSet", back_populates="facts")

    __table_args__ = (
        Index("idx_result_fact_set_type_dim1", "result_set_id", "stat_type", "dim1_question_code"),
        Index("idx_result_fact_lecture", "lecture_id"),
    )
