"""분석 결과 조회 API와 관리자 마감 배치 트리거 테스트입니다."""

import asyncio
from datetime import datetime, timezone

import pytest

from lecture_feedback.models.lecture import SURVEY_ANALYZED, Lecture
from lecture_feedback.routers import admin as admin_router
from lecture_feedback.services import closure_service
from tests.conftest import TestingSession, add_responses, auth_headers

NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def analyzed_lecture(db, seed_lecture):
    add_responses(
        db,
        seed_lecture,
        [
            ("male", "20s", 3, 4),
            ("male", "30s", 4, 5),
            ("female", "20s", 4, 3),
            ("other", "40s", 5, 5),
        ],
    )
    asyncio.run(closure_service.run_closure_sweep(TestingSession, now=NOW))
    return seed_lecture


@pytest.fixture
def owner_headers(client):
    return auth_headers(client, "lecturer@example.com")


def test_latest_returns_null_before_analysis(client, seed_lecture, owner_headers):
    resp = client.get(f"/api/analysis/lectures/{seed_lecture.lecture_id}/latest", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json() is None


def test_latest_missing_lecture_is_404(client, seed_users, owner_headers):
    resp = client.get("/api/analysis/lectures/9999/latest", headers=owner_headers)
    assert resp.status_code == 404


def test_latest_analysis_payload(client, analyzed_lecture, owner_headers):
    resp = client.get(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/latest", headers=owner_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["result_set"]["total_responses"] == 4
    stat_types = {fact["stat_type"] for fact in data["facts"]}
    assert stat_types == {"simple", "cross2", "summary"}
    summary = [fact for fact in data["facts"] if fact["stat_type"] == "summary"]
    assert all("pct" not in fact for fact in summary)


def test_basic_statistics(client, analyzed_lecture, owner_headers):
    data = client.get(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/basic", headers=owner_headers).json()

    gender = {row["dim1_option_code"]: row for row in data["distributions"]["gender"]}
    assert (gender["male"]["n"], gender["male"]["pct"]) == (2, 50.0)
    assert (gender["preferNotToSay"]["n"], gender["preferNotToSay"]["pct"]) == (0, 0.0)
    assert len(data["distributions"]["age_group"]) == 7
    assert data["averages"] == {"understanding": 4.0, "satisfaction": 4.25}


def test_cross_analysis_slices(client, analyzed_lecture, owner_headers):
    data = client.get(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/cross", headers=owner_headers).json()
    assert len(data["understanding_by_gender"]) == 20
    assert len(data["satisfaction_by_age_group"]) == 35
    cell = next(
        row for row in data["understanding_by_gender"]
        if row["dim1_option_code"] == "4" and row["dim2_option_code"] == "male"
    )
    assert (cell["n"], cell["row_pct"], cell["col_pct"], cell["total_pct"]) == (1, 50.0, 50.0, 25.0)


def test_simple_cross_tab_and_summary_queries(client, analyzed_lecture, owner_headers):
    base = f"/api/analysis/lectures/{analyzed_lecture.lecture_id}"

    simple = client.get(f"{base}/simple", params={"question_code": "ageGroup"}, headers=owner_headers)
    assert simple.status_code == 200
    assert {row["dim1_option_code"]: row["n"] for row in simple.json()}["20s"] == 2

    cross = client.get(
        f"{base}/cross-tab",
        params={"row_question": "satisfaction", "col_question": "gender"},
        headers=owner_headers,
    )
    assert cross.status_code == 200
    assert len(cross.json()) == 20

    summary = client.get(f"{base}/summary", params={"target_question": "satisfaction"}, headers=owner_headers)
    assert summary.json()[0]["avg_score"] == 4.25

    assert client.get(f"{base}/simple", params={"question_code": "bogus"}, headers=owner_headers).status_code == 400
    assert client.get(
        f"{base}/cross-tab",
        params={"row_question": "gender", "col_question": "ageGroup"},
        headers=owner_headers,
    ).status_code == 400
    assert client.get(
        f"{base}/cross-tab",
        params={"row_question": "gender", "col_question": "understanding"},
        headers=owner_headers,
    ).status_code == 400
    assert client.get(f"{base}/summary", params={"target_question": "gender"}, headers=owner_headers).status_code == 400


def test_analysis_requires_ownership(client, analyzed_lecture):
    headers = auth_headers(client, "other@example.com")
    resp = client.get(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/basic", headers=headers)
    assert resp.status_code == 403

    admin = auth_headers(client, "admin@example.com")
    resp = client.get(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/basic", headers=admin)
    assert resp.status_code == 200


def test_manual_rerun(client, analyzed_lecture, owner_headers):
    resp = client.post(f"/api/analysis/lectures/{analyzed_lecture.lecture_id}/run", headers=owner_headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["total_responses"] == 4
    assert data["results_count"] == {"simple": 21, "cross": 110, "summary": 2}


def test_manual_run_on_active_lecture_conflicts(client, seed_lecture, owner_headers):
    resp = client.post(f"/api/analysis/lectures/{seed_lecture.lecture_id}/run", headers=owner_headers)
    assert resp.status_code == 409


def test_all_lectures_average(client, analyzed_lecture, owner_headers):
    resp = client.get("/api/analysis/average", params={"target_question": "understanding"}, headers=owner_headers)
    assert resp.json() == {"target_question": "understanding", "average": 4.0, "total_lectures": 1}

    resp = client.get("/api/analysis/average", params={"target_question": "ageGroup"}, headers=owner_headers)
    assert resp.status_code == 400


def test_admin_closure_sweep(client, db, monkeypatch, seed_lecture):
    monkeypatch.setattr(admin_router, "SessionLocal", TestingSession)

    forbidden = client.post("/api/admin/closure-sweep", headers=auth_headers(client, "lecturer@example.com"))
    assert forbidden.status_code == 403

    resp = client.post(
        "/api/admin/closure-sweep",
        params={"now": NOW.isoformat()},
        headers=auth_headers(client, "admin@example.com"),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert (data["closed_count"], data["analyzed_count"]) == (1, 1)
    assert data["analysis"]["failed_ids"] == []

    db.expire_all()
    assert db.query(Lecture).filter(Lecture.lecture_id == seed_lecture.lecture_id).one().survey_status == SURVEY_ANALYZED
