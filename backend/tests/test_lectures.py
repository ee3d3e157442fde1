"""강의 CRUD와 소유자 권한 테스트입니다."""

from lecture_feedback.models.lecture import SURVEY_CLOSED
from tests.conftest import auth_headers, make_lecture

PAYLOAD = {
    "title": "머신러닝 기초",
    "description": "회귀와 분류",
    "lecture_date": "2099-03-01",
    "lecture_time": "10:00",
    "survey_close_date": "2099-03-01",
    "survey_close_time": "18:00",
}


def test_create_and_get_lecture(client, seed_users):
    headers = auth_headers(client, "lecturer@example.com")
    resp = client.post("/api/lectures", json=PAYLOAD, headers=headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["survey_status"] == "active"
    assert data["created_by"] == seed_users["lecturer"].user_id
    assert data["response_count"] == 0

    detail = client.get(f"/api/lectures/{data['lecture_id']}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["title"] == PAYLOAD["title"]


def test_close_time_must_follow_lecture_time(client, seed_users):
    headers = auth_headers(client, "lecturer@example.com")
    resp = client.post(
        "/api/lectures",
        json={**PAYLOAD, "survey_close_time": "09:00"},
        headers=headers,
    )
    assert resp.status_code == 400


def test_schedule_format_is_validated(client, seed_users):
    headers = auth_headers(client, "lecturer@example.com")
    resp = client.post("/api/lectures", json={**PAYLOAD, "lecture_time": "25:00"}, headers=headers)
    assert resp.status_code == 422
    resp = client.post("/api/lectures", json={**PAYLOAD, "title": "x" * 101}, headers=headers)
    assert resp.status_code == 422


def test_list_is_scoped_to_owner(client, db, seed_users):
    make_lecture(db, seed_users["lecturer"], title="mine")
    make_lecture(db, seed_users["other"], title="theirs")

    mine = client.get("/api/lectures", headers=auth_headers(client, "lecturer@example.com")).json()
    assert [row["title"] for row in mine] == ["mine"]

    everything = client.get("/api/lectures", headers=auth_headers(client, "admin@example.com")).json()
    assert sorted(row["title"] for row in everything) == ["mine", "theirs"]


def test_list_filters_by_status(client, db, seed_users):
    make_lecture(db, seed_users["lecturer"], title="open")
    make_lecture(db, seed_users["lecturer"], title="done", survey_status=SURVEY_CLOSED)
    headers = auth_headers(client, "lecturer@example.com")

    rows = client.get("/api/lectures", params={"survey_status": "closed"}, headers=headers).json()
    assert [row["title"] for row in rows] == ["done"]
    assert client.get("/api/lectures", params={"survey_status": "bogus"}, headers=headers).status_code == 400


def test_other_lecturer_cannot_access(client, seed_lecture):
    headers = auth_headers(client, "other@example.com")
    assert client.get(f"/api/lectures/{seed_lecture.lecture_id}", headers=headers).status_code == 403
    assert client.delete(f"/api/lectures/{seed_lecture.lecture_id}", headers=headers).status_code == 403


def test_update_only_while_active(client, db, seed_users):
    headers = auth_headers(client, "lecturer@example.com")
    lecture = make_lecture(db, seed_users["lecturer"])
    resp = client.put(f"/api/lectures/{lecture.lecture_id}", json={"title": "새 제목"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "새 제목"

    closed = make_lecture(db, seed_users["lecturer"], survey_status=SURVEY_CLOSED)
    resp = client.put(f"/api/lectures/{closed.lecture_id}", json={"title": "변경"}, headers=headers)
    assert resp.status_code == 409


def test_delete_lecture(client, seed_lecture):
    headers = auth_headers(client, "lecturer@example.com")
    assert client.delete(f"/api/lectures/{seed_lecture.lecture_id}", headers=headers).status_code == 200
    assert client.get(f"/api/lectures/{seed_lecture.lecture_id}", headers=headers).status_code == 404
