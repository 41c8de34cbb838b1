"""Tests for the HTTP surface of the finding register."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from conftest import AS_OF
from ehs_audit.api.routes import evaluation_instant
from ehs_audit.database import Base, get_db, make_engine
from ehs_audit.main import app
from ehs_audit.services.state_machine import START_WORK_REFUSED


@pytest.fixture
def client():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[evaluation_instant] = lambda: AS_OF
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def seeded(client, finding_payload):
    critical = dict(finding_payload, id="F-02", likelihood=5, severity=4, due_date="2024-01-05")
    response = client.post("/api/findings/analysis", json={
        "markdown_report": "",
        "action_register_json": [finding_payload, critical],
        "pdf_report_html": "",
    })
    assert response.status_code == 201
    return response.json()


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSeeding:
    def test_seed_returns_findings_in_creation_state(self, seeded):
        assert [f["id"] for f in seeded] == ["F-01", "F-02"]
        assert seeded[0]["risk_score"] == 12
        assert seeded[0]["risk_level"] == "High"
        assert seeded[0]["days_to_due"] == 10
        assert seeded[1]["overdue_flag"] is True

    def test_duplicate_seed_conflicts(self, client, seeded, finding_payload):
        response = client.post("/api/findings/analysis", json={"action_register_json": [finding_payload]})

        assert response.status_code == 409
        assert "F-01" in response.json()["detail"]

    def test_malformed_finding_rejected(self, client):
        response = client.post("/api/findings/analysis", json={
            "action_register_json": [{"id": "F-01", "likelihood": 6}],
        })

        assert response.status_code == 422


class TestFindings:
    def test_list_sorted_by_risk(self, client, seeded):
        response = client.get("/api/findings")

        assert response.status_code == 200
        assert [f["id"] for f in response.json()] == ["F-02", "F-01"]

    def test_get_unknown_finding(self, client):
        assert client.get("/api/findings/F-99").status_code == 404

    def test_patch_recomputes_risk(self, client, seeded):
        response = client.patch("/api/findings/F-01", json={"severity": 5, "owner": "EHS Manager"})

        assert response.status_code == 200
        body = response.json()
        assert body["risk_score"] == 15
        assert body["owner"] == "EHS Manager"

    def test_patch_unknown_field_rejected(self, client, seeded):
        response = client.patch("/api/findings/F-01", json={"risk_score": 1})

        assert response.status_code == 422

    def test_patch_unknown_finding(self, client):
        assert client.patch("/api/findings/F-99", json={"owner": "A"}).status_code == 404


class TestStatusChanges:
    def test_refusal_returns_conflict_with_message(self, client, seeded):
        response = client.post("/api/findings/F-01/status", json={"status": "In-progress"})

        assert response.status_code == 409
        assert response.json()["detail"]["message"] == START_WORK_REFUSED
        assert client.get("/api/findings/F-01").json()["status"] == "Open"

    def test_accepted_transition(self, client, seeded):
        client.patch("/api/findings/F-01", json={"owner_confirmed": True})

        response = client.post("/api/findings/F-01/status", json={"status": "In-progress"})

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["finding"]["status"] == "In-progress"

    def test_close_after_verification(self, client, seeded):
        client.patch("/api/findings/F-01", json={
            "verification_result": "Pass",
            "verifier": "Jane",
            "verification_date": "2024-01-09",
        })

        response = client.post("/api/findings/F-01/status", json={"status": "Closed"})

        assert response.status_code == 200
        finding = response.json()["finding"]
        assert finding["completion_date"] == "2024-01-10"
        assert finding["overdue_flag"] is False


class TestReports:
    def test_html_report(self, client, seeded):
        response = client.get("/api/reports/html", params={"site": "Factory A"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Finding #F-02" in response.text

    def test_markdown_report_language_mode(self, client, seeded):
        response = client.get("/api/reports/markdown", params={"language_mode": "en"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert "Fire extinguisher obstructed" in response.text
        assert "Bình chữa cháy bị che chắn" not in response.text

    def test_json_export(self, client, seeded):
        response = client.get("/api/reports/json")

        assert response.status_code == 200
        assert [f["id"] for f in response.json()] == ["F-01", "F-02"]
