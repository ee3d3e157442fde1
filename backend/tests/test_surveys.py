"""공개 설문 조회/응답 제출 API 테스트입니다."""

import pytest

from lecture_feedback.models.lecture import SURVEY_CLOSED
from lecture_feedback.models.response import SurveyResponse
from lecture_feedback.schemas.response import SurveyResponseCreate
from lecture_feedback.services import response_service
from lecture_feedback.utils.errors import DuplicateResponseError, SurveyClosedError
from tests.conftest import auth_headers, make_lecture

ANSWER = {"gender": "female", "age_group": "30s", "understanding": 4, "satisfaction": 5}


@pytest.fixture
def open_lecture(db, seed_users):
    return make_lecture(
        db,
        seed_users["lecturer"],
        lecture_date="2099-01-01",
        survey_close_date="2099-01-02",
    )


def test_survey_available(client, open_lecture):
    resp = client.get(f"/api/surveys/{open_lecture.lecture_id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["available"] is True
    assert data["lecture"]["title"] == open_lecture.title
    assert "created_by" not in data["lecture"]


def test_survey_unavailable_reasons(client, db, seed_users, seed_lecture):
    closed = make_lecture(db, seed_users["lecturer"], survey_status=SURVEY_CLOSED)

    assert client.get("/api/surveys/9999").json() == {"available": False, "reason": "lecture_not_found", "lecture": None}
    assert client.get(f"/api/surveys/{closed.lecture_id}").json()["reason"] == "survey_not_active"
    assert client.get(f"/api/surveys/{seed_lecture.lecture_id}").json()["reason"] == "deadline_passed"


def test_submit_response(client, db, open_lecture):
    resp = client.post(
        f"/api/surveys/{open_lecture.lecture_id}/responses",
        json={**ANSWER, "free_comment": "좋았습니다", "response_time": 42},
        headers={"User-Agent": "pytest-agent", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert resp.status_code == 200, resp.text
    row = db.query(SurveyResponse).filter(SurveyResponse.response_id == resp.json()["response_id"]).one()
    assert row.ip_address == "203.0.113.7"
    assert row.user_agent == "pytest-agent"
    assert row.response_time == 42


def test_duplicate_ip_is_rejected(client, db, open_lecture):
    url = f"/api/surveys/{open_lecture.lecture_id}/responses"
    headers = {"X-Forwarded-For": "198.51.100.1"}
    assert client.post(url, json=ANSWER, headers=headers).status_code == 200

    resp = client.post(url, json=ANSWER, headers=headers)
    assert resp.status_code == 409
    assert db.query(SurveyResponse).count() == 1

    other = client.post(url, json=ANSWER, headers={"X-Forwarded-For": "198.51.100.2"})
    assert other.status_code == 200


def test_responses_without_ip_are_not_deduplicated(db, open_lecture):
    data = SurveyResponseCreate(**ANSWER)
    response_service.submit_response(db, open_lecture.lecture_id, data, ip_address=None)
    response_service.submit_response(db, open_lecture.lecture_id, data, ip_address="  ")
    assert response_service.get_response_count(db, open_lecture.lecture_id) == 2


def test_duplicate_ip_service_error(db, open_lecture):
    data = SurveyResponseCreate(**ANSWER)
    response_service.submit_response(db, open_lecture.lecture_id, data, ip_address="192.0.2.10")
    with pytest.raises(DuplicateResponseError):
        response_service.submit_response(db, open_lecture.lecture_id, data, ip_address="192.0.2.10")


def test_closed_survey_rejects_submission(client, db, seed_users):
    closed = make_lecture(db, seed_users["lecturer"], survey_status=SURVEY_CLOSED)
    resp = client.post(f"/api/surveys/{closed.lecture_id}/responses", json=ANSWER)
    assert resp.status_code == 409

    with pytest.raises(SurveyClosedError):
        response_service.submit_response(db, closed.lecture_id, SurveyResponseCreate(**ANSWER))


def test_submit_to_missing_lecture(client, seed_users):
    resp = client.post("/api/surveys/9999/responses", json=ANSWER)
    assert resp.status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {**ANSWER, "understanding": 6},
        {**ANSWER, "satisfaction": 0},
        {**ANSWER, "gender": "unknown"},
        {**ANSWER, "age_group": "80s"},
    ],
)
def test_invalid_answers_are_rejected(client, open_lecture, payload):
    resp = client.post(f"/api/surveys/{open_lecture.lecture_id}/responses", json=payload)
    assert resp.status_code == 422


def test_response_count_is_owner_only(client, db, open_lecture):
    response_service.submit_response(db, open_lecture.lecture_id, SurveyResponseCreate(**ANSWER), ip_address="192.0.2.1")

    owner = client.get(
        f"/api/surveys/{open_lecture.lecture_id}/count",
        headers=auth_headers(client, "lecturer@example.com"),
    )
    assert owner.status_code == 200
    assert owner.json() == {"lecture_id": open_lecture.lecture_id, "count": 1}

    stranger = client.get(
        f"/api/surveys/{open_lecture.lecture_id}/count",
        headers=auth_headers(client, "other@example.com"),
    )
    assert stranger.status_code == 403
