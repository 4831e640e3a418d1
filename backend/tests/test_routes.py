"""
Tests for the HTTP routes — payload validation, error mapping and response shapes.
"""

import os
import sys
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import config
from main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def scenario_payload():
    return {
        "records": [
            {"subject": "Math", "score": 75},
            {"subject": "Math", "score": 85},
            {"subject": "English", "score": 60},
        ]
    }


@pytest.fixture
def marks_payload():
    marks = [{"date": f"2025-03-{day:02d}", "status": "present"} for day in range(1, 19)]
    marks += [{"date": "2025-02-27", "status": "absent"}, {"date": "2025-02-28", "status": "Absent"}]
    return {"marks": marks}


class TestMeta:
    """Tests for health and config endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_config(self, client):
        body = client.get("/api/config").json()
        assert {"school_name", "pass_mark", "currency"} <= set(body)

    def test_config_matches_settings(self, client):
        body = client.get("/api/config").json()
        assert body == {
            "school_name": config.SCHOOL_NAME,
            "pass_mark": config.PASS_MARK,
            "currency": config.CURRENCY,
        }

    def test_routes_share_settings(self, client, scenario_payload):
        body = client.post("/api/grades/summary", json=scenario_payload).json()
        assert body["pass_mark"] == config.PASS_MARK
        fees = client.post("/api/fees/summary", json={"total_fees": 100, "payments": []}).json()
        assert fees["currency"] == config.CURRENCY


class TestGradeRoutes:
    """Tests for /api/grades."""

    def test_scale(self, client):
        body = client.get("/api/grades/scale").json()
        assert [g["label"] for g in body["grade_scale"]][:3] == ["A", "A-", "B+"]
        assert len(body["grade_scale"]) == 12

    def test_grade(self, client):
        body = client.post("/api/grades/grade", json={"score": 80}).json()
        assert body["label"] == "A"
        assert body["points"] == 12

    def test_grade_rejects_text(self, client):
        response = client.post("/api/grades/grade", json={"score": "eighty"})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_SCORE"

    def test_grade_without_score(self, client):
        assert client.post("/api/grades/grade", json={}).status_code == 400

    def test_summary(self, client, scenario_payload):
        response = client.post("/api/grades/summary", json=scenario_payload)
        assert response.status_code == 200
        body = response.json()
        assert body["average"] == 73.33
        assert body["count"] == 3
        assert body["distribution"]["A"] == 1
        assert body["distribution"]["A-"] == 1
        assert body["distribution"]["B-"] == 1
        assert len(body["distribution"]) == 12
        assert body["most_common_grade"] == "A"
        assert body["pass_rate"] == 100.0

    def test_summary_without_records(self, client):
        assert client.post("/api/grades/summary", json={"records": []}).status_code == 400

    def test_out_of_range_score_is_rejected(self, client):
        response = client.post("/api/grades/summary", json={"records": [{"subject": "Math", "score": 104}]})
        assert response.status_code == 422

    def test_supersede_option(self, client):
        payload = {
            "records": [
                {"student_id": "S001", "subject": "Math", "term": "Term 1, 2025", "score": 40},
                {"student_id": "S001", "subject": "Math", "term": "Term 1, 2025", "score": 60},
            ],
        }
        assert client.post("/api/grades/summary", json=payload).json()["count"] == 2
        payload["options"] = {"supersede": True}
        body = client.post("/api/grades/summary", json=payload).json()
        assert body["count"] == 1
        assert body["average"] == 60.0

    def test_group_averages(self, client, scenario_payload):
        body = client.post("/api/grades/group-averages", json=scenario_payload).json()
        assert body["group_by"] == "subject"
        assert body["groups"] == [
            {"group": "Math", "average": 80.0, "count": 2},
            {"group": "English", "average": 60.0, "count": 1},
        ]

    def test_group_by_unknown_field(self, client, scenario_payload):
        scenario_payload["group_by"] = "score"
        assert client.post("/api/grades/group-averages", json=scenario_payload).status_code == 400

    def test_group_by_missing_term(self, client, scenario_payload):
        scenario_payload["group_by"] = "term"
        response = client.post("/api/grades/group-averages", json=scenario_payload)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_GROUP_KEY"

    def test_rankings(self, client):
        payload = {"records": [
            {"student_id": "S001", "subject": "Math", "score": 50},
            {"student_id": "S002", "subject": "Math", "score": 90},
        ]}
        body = client.post("/api/grades/rankings", json=payload).json()
        assert [(r["student_id"], r["position"]) for r in body["rankings"]] == [("S002", 1), ("S001", 2)]

    def test_report_card(self, client, scenario_payload):
        body = client.post("/api/grades/report-card", json=scenario_payload).json()
        assert body["mean_grade"] == "B+"
        assert [s["subject"] for s in body["subjects"]] == ["Math", "English"]


class TestAttendanceRoutes:
    """Tests for /api/attendance."""

    def test_summary(self, client, marks_payload):
        body = client.post("/api/attendance/summary", json=marks_payload).json()
        assert body["summary"]["attendance_rate"] == 90.0
        assert body["summary"]["present"] == 18
        assert body["summary"]["absent"] == 2
        assert [m["period_label"] for m in body["monthly"]] == ["Feb 2025", "Mar 2025"]

    def test_bad_status(self, client):
        response = client.post("/api/attendance/summary", json={"marks": [{"date": "2025-01-01", "status": "holiday"}]})
        assert response.status_code == 422


class TestTrendRoutes:
    """Tests for /api/trends."""

    def test_build(self, client):
        payload = {"buckets": [
            {"period_label": "Jan 2025", "value": 92},
            {"period_label": "Dec 2024", "value": 95},
            {"period_label": "Feb 2025", "value": None},
        ]}
        body = client.post("/api/trends/build", json=payload).json()
        assert [p["period_label"] for p in body["points"]] == ["Dec 2024", "Jan 2025"]
        assert body["points"][1]["trend"] == "declining"
        assert body["overall"]["direction"] == "declining"

    def test_build_with_bad_label(self, client):
        response = client.post("/api/trends/build", json={"buckets": [{"period_label": "soon", "value": 1}]})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_GROUP_KEY"

    def test_build_with_non_numeric_value(self, client):
        response = client.post("/api/trends/build", json={"buckets": [{"period_label": "Mar 2025", "value": "n/a"}]})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_SCORE"

    def test_build_with_impossible_year(self, client):
        response = client.post("/api/trends/build", json={"buckets": [{"period_label": "Term 1, 0000", "value": 50}]})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_GROUP_KEY"

    def test_build_merges_named_series(self, client):
        payload = {"buckets": [
            {"period_label": "Mar 2025", "value": 70, "series": "performance"},
            {"period_label": "Mar 2025", "value": 95, "series": "attendance"},
            {"period_label": "Apr 2025", "value": 75, "series": "performance"},
        ]}
        body = client.post("/api/trends/build", json=payload).json()
        assert [p["series"] for p in body["points"]] == ["performance", "attendance", "performance"]
        assert body["points"][2]["delta"] == 5.0
        assert body["overall"] is None
        assert body["overall_by_series"]["performance"]["direction"] == "improving"
        assert body["overall_by_series"]["attendance"]["direction"] == "insufficient_data"

    def test_build_rejects_repeated_period_in_one_series(self, client):
        payload = {"buckets": [
            {"period_label": "Mar 2025", "value": 70},
            {"period_label": "Mar 2025", "value": 72},
        ]}
        response = client.post("/api/trends/build", json=payload)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_GROUP_KEY"

    def test_combined(self, client, marks_payload):
        payload = {
            "records": [
                {"subject": "Math", "term": "Term 1, 2025", "score": 60},
                {"subject": "Math", "term": "Term 2, 2025", "score": 70},
            ],
            **marks_payload,
        }
        body = client.post("/api/trends/combined", json=payload).json()
        assert [(p["period_label"], p["series"]) for p in body["points"]] == [
            ("Term 1, 2025", "performance"),
            ("Feb 2025", "attendance"),
            ("Mar 2025", "attendance"),
            ("Term 2, 2025", "performance"),
        ]
        assert body["points"][3]["delta"] == 10.0
        assert body["overall_by_series"]["attendance"]["direction"] == "improving"

    def test_build_without_buckets(self, client):
        assert client.post("/api/trends/build", json={}).status_code == 400

    def test_terms(self, client):
        payload = {"records": [
            {"subject": "Math", "term": "Term 2, 2025", "score": 70},
            {"subject": "Math", "term": "Term 1, 2025", "score": 60},
        ]}
        body = client.post("/api/trends/terms", json=payload).json()
        assert [p["period_label"] for p in body["points"]] == ["Term 1, 2025", "Term 2, 2025"]
        assert body["points"][1]["delta"] == 10.0

    def test_attendance(self, client, marks_payload):
        body = client.post("/api/trends/attendance", json=marks_payload).json()
        assert [(p["period_label"], p["value"]) for p in body["points"]] == [
            ("Feb 2025", 0.0),
            ("Mar 2025", 100.0),
        ]


class TestFeeRoutes:
    """Tests for /api/fees."""

    def test_summary(self, client):
        payload = {
            "total_fees": 45000,
            "payments": [
                {"amount_paid": 15000, "payment_date": "2025-01-10"},
                {"amount_paid": 10000, "payment_date": "2025-02-05"},
            ],
        }
        body = client.post("/api/fees/summary", json=payload).json()
        assert body["balance"] == 20000.0
        assert body["collection_rate"] == 55.56
        assert [m["period_label"] for m in body["monthly"]] == ["Jan 2025", "Feb 2025"]

    def test_nothing_billed(self, client):
        response = client.post("/api/fees/summary", json={"total_fees": 0, "payments": []})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "EMPTY_INPUT"

    def test_missing_total(self, client):
        assert client.post("/api/fees/summary", json={"payments": []}).status_code == 400


class TestReportRoutes:
    """Tests for /api/reports."""

    def test_grades_csv(self, client, scenario_payload):
        response = client.post("/api/reports/grades-csv", json=scenario_payload)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert response.text.splitlines()[0] == "Subject,Term,Exam,Score,Grade"
        assert len(response.text.splitlines()) == 4

    def test_attendance_csv(self, client, marks_payload):
        response = client.post("/api/reports/attendance-csv", json=marks_payload)
        assert response.text.splitlines()[1] == "Feb 2025,0,2,0,0.0"

    def test_analytics(self, client, scenario_payload, marks_payload):
        payload = {**scenario_payload, **marks_payload, "class_name": "Form 3"}
        body = client.post("/api/reports/analytics", json=payload).json()
        assert body["class"] == "Form 3"
        assert body["performance"]["average"] == 73.33
        assert body["attendance"]["attendance_rate"] == 90.0
        assert body["fees"] is None
        assert "term_trend" not in body["performance"]

    def test_analytics_without_data(self, client):
        assert client.post("/api/reports/analytics", json={}).status_code == 400

    def test_analytics_with_bare_term_numbers(self, client, marks_payload):
        payload = {
            "records": [
                {"subject": "Math", "term": "1", "score": 70},
                {"subject": "Math", "term": "2", "score": 80},
            ],
            **marks_payload,
        }
        response = client.post("/api/reports/analytics", json=payload)
        assert response.status_code == 200
        body = response.json()
        assert body["performance"]["average"] == 75.0
        assert "term_trend" not in body["performance"]
        assert body["attendance"]["attendance_rate"] == 90.0

    def test_analytics_with_placeable_terms_has_trend(self, client):
        payload = {"records": [
            {"subject": "Math", "term": "Term 2, 2025", "score": 80},
            {"subject": "Math", "term": "Term 1, 2025", "score": 70},
        ]}
        body = client.post("/api/reports/analytics", json=payload).json()
        trend = body["performance"]["term_trend"]
        assert [p["period_label"] for p in trend] == ["Term 1, 2025", "Term 2, 2025"]
