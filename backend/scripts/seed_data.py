"""Seed the database with demo users, lectures and survey responses."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import random
from datetime import timedelta

from lecture_feedback.database import SessionLocal, engine, Base
import lecture_feedback.models  # noqa: F401

from lecture_feedback.models.lecture import SURVEY_ACTIVE, Lecture
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.models.user import User
from lecture_feedback.utils import questions
from lecture_feedback.utils.permissions import ADMIN, LECTURER
from lecture_feedback.utils.timeutils import utc_now


def _random_response(rng: random.Random, lecture_id: int, index: int) -> SurveyResponse:
    return SurveyResponse(
        lecture_id=lecture_id,
        gender=rng.choice(questions.GENDER_OPTIONS),
        age_group=rng.choice(questions.AGE_GROUP_OPTIONS),
        understanding=rng.randint(1, 5),
        satisfaction=rng.randint(1, 5),
        free_comment=None,
        ip_address=f"192.0.2.{index + 1}",
        response_time=rng.randint(30, 300),
    )


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(email="admin@example.com", name="관리자 김철수", role=ADMIN, organization_name="교육운영팀"),
            User(email="lecturer1@example.com", name="강사 이영희", role=LECTURER, organization_name="데이터아카데미"),
            User(email="lecturer2@example.com", name="강사 박민준", role=LECTURER, organization_name="AI연구회"),
        ]
        db.add_all(users)
        db.flush()

        today = utc_now().date()
        yesterday = today - timedelta(days=1)
        next_week = today + timedelta(days=7)
        lectures = [
            # 마감이 지난 강의: 다음 마감 배치에서 closed -> analyzed로 처리된다.
            Lecture(
                title="파이썬 데이터 분석 입문",
                description="pandas로 시작하는 데이터 분석",
                lecture_date=(yesterday - timedelta(days=1)).isoformat(),
                lecture_time="14:00",
                survey_close_date=yesterday.isoformat(),
                survey_close_time="18:00",
                survey_status=SURVEY_ACTIVE,
                created_by=users[1].user_id,
            ),
            Lecture(
                title="생성형 AI 활용 실습",
                description=None,
                lecture_date=next_week.isoformat(),
                lecture_time="10:00",
                survey_close_date=(next_week + timedelta(days=1)).isoformat(),
                survey_close_time="12:00",
                survey_status=SURVEY_ACTIVE,
                created_by=users[2].user_id,
            ),
        ]
        db.add_all(lectures)
        db.flush()

        rng = random.Random(42)
        db.add_all(_random_response(rng, lectures[0].lecture_id, i) for i in range(30))
        db.commit()
        print("Seed data created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
