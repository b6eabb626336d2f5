from fastapi.testclient import TestClient

from gradetrack.config import get_settings


def _scheme(**overrides):
    payload = {
        "categories": [
            {"id": 1, "name": "Exams", "percentage": 60, "calculation_mode": "dynamic"},
            {"id": 2, "name": "Labs", "percentage": 40, "calculation_mode": "fixed", "total_activities": 2},
        ],
        "activities_by_category": {
            "1": [{"max_score": 100, "obtained_score": 80}],
            "2": [{"max_score": 100, "obtained_score": 100}, {"max_score": 100, "is_pending": True}],
        },
    }
    payload.update(overrides)
    return payload


def test_compute_grade(client: TestClient):
    response = client.post("/api/v2/grades/compute", json=_scheme())

    assert response.status_code == 200
    body = response.json()
    assert body["result"] == {
        "grade": 68.0,
        "letter": "D",
        "status": "Passed with warning",
        "percent_complete": 80,
    }
    assert body["style"] == "warning"
    assert body["issues"] == []
    assert [row["contribution"] for row in body["categories"]] == [48.0, 20.0]


def test_compute_empty_scheme(client: TestClient):
    response = client.post("/api/v2/grades/compute", json={})
    assert response.status_code == 200
    assert response.json()["result"]["letter"] == "N/A"
    assert response.json()["style"] == "neutral"


def test_compute_is_lenient_by_default(client: TestClient):
    payload = _scheme(
        activities_by_category={"1": [{"max_score": 100, "obtained_score": 150}]},
    )

    response = client.post("/api/v2/grades/compute", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["grade"] == 90.0
    assert [issue["code"] for issue in body["issues"]] == ["invalid_score"]


def test_compute_strict_rejects_issues(client: TestClient):
    payload = _scheme(
        activities_by_category={"1": [{"id": "q1", "max_score": 100, "obtained_score": 150}]},
    )

    response = client.post("/api/v2/grades/compute?strict=true", json=payload)

    assert response.status_code == 422
    issues = response.json()["detail"]
    assert [(issue["code"], issue["target"]) for issue in issues] == [("invalid_score", "q1")]
    assert "exceeds max_score" in issues[0]["message"]


def test_compute_strict_default_comes_from_settings(client: TestClient, monkeypatch):
    monkeypatch.setattr(get_settings(), "strict_grading", True)
    payload = _scheme(
        categories=[{"id": 1, "percentage": 50, "calculation_mode": "dynamic"}],
    )

    assert client.post("/api/v2/grades/compute", json=payload).status_code == 422
    assert client.post("/api/v2/grades/compute?strict=false", json=payload).status_code == 200


def test_compute_unknown_mode_fails_fast(client: TestClient):
    payload = _scheme(
        categories=[{"id": 1, "percentage": 100, "calculation_mode": "curve"}],
    )

    response = client.post("/api/v2/grades/compute", json=payload)

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_calculation_mode"
    assert response.json()["target"] == 1


def test_letter_endpoint(client: TestClient):
    response = client.get("/api/v2/grades/letter", params={"percentage": 91})
    assert response.json() == {
        "percentage": 91.0,
        "letter": "A",
        "status": "Excellent",
        "style": "success",
    }
    response = client.get("/api/v2/grades/letter", params={"percentage": 60.99})
    assert response.json()["letter"] == "F"
    assert response.json()["style"] == "danger"


def test_compute_lenient_with_huge_score_still_grades(client: TestClient):
    payload = {
        "categories": [{"id": 1, "percentage": 100, "calculation_mode": "dynamic"}],
        "activities_by_category": {"1": [{"max_score": 1, "obtained_score": 1e30}]},
    }

    response = client.post("/api/v2/grades/compute", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["grade"] > 1e31
    assert body["result"]["letter"] == "A"
    assert [issue["code"] for issue in body["issues"]] == ["invalid_score"]


def test_compute_lenient_fixed_without_total_reports_issue(client: TestClient):
    payload = {
        "categories": [
            {"id": 1, "percentage": 100, "calculation_mode": "fixed", "total_activities": 0}
        ],
        "activities_by_category": {"1": [{"max_score": 100, "obtained_score": 80}]},
    }

    response = client.post("/api/v2/grades/compute", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["grade"] == 0
    assert body["result"]["percent_complete"] == 0
    assert [(issue["code"], issue["target"]) for issue in body["issues"]] == [
        ("invalid_calculation_mode", 1)
    ]

    strict = client.post("/api/v2/grades/compute", json={**payload, "strict": True})
    assert strict.status_code == 422
