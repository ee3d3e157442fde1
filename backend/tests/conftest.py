import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from lecture_feedback.database import Base, get_db
from lecture_feedback.main import app
from lecture_feedback.models.lecture import SURVEY_ACTIVE, Lecture
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.models.user import User

TEST_DB_URL = "sqlite:///./test_lecture_feedback.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@example.com", name="Admin", role="admin", organization_name="HQ"),
        "lecturer": User(email="lecturer@example.com", name="Lecturer", role="lecturer", organization_name="Academy"),
        "other": User(email="other@example.com", name="Other Lecturer", role="lecturer", organization_name="Lab"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def make_lecture(
    db,
    owner,
    *,
    title="데이터 분석 입문",
    lecture_date="2025-06-01",
    lecture_time="14:00",
    survey_close_date="2025-06-01",
    survey_close_time="18:00",
    timezone=None,
    survey_status=SURVEY_ACTIVE,
    closed_at=None,
):
    row = Lecture(
        title=title,
        lecture_date=lecture_date,
        lecture_time=lecture_time,
        survey_close_date=survey_close_date,
        survey_close_time=survey_close_time,
        timezone=timezone,
        survey_status=survey_status,
        closed_at=closed_at,
        created_by=owner.user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_responses(db, lecture, answers):
    """answers: (gender, age_group, understanding, satisfaction) 튜플 목록."""
    rows = [
        SurveyResponse(
            lecture_id=lecture.lecture_id,
            gender=gender,
            age_group=age_group,
            understanding=understanding,
            satisfaction=satisfaction,
            ip_address=f"10.0.0.{index + 1}",
        )
        for index, (gender, age_group, understanding, satisfaction) in enumerate(answers)
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def seed_lecture(db, seed_users):
    return make_lecture(db, seed_users["lecturer"])


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
