import importlib

import pytest
from fastapi.testclient import TestClient

import rowplan.main
from rowplan.agents.errors import GenerationError, GenerationErrorKind
from rowplan.main import app, get_llm_client
from tests.conftest import FakeLLM


PERIODS_BODY = {
    "periods": [
        {
            "id": "p-1",
            "name": "Base block",
            "startDate": "2026-01-05",
            "endDate": "2026-01-11",
            "distribution": {"UT2": 70, "UT1": 20, "AT": 10, "TR": 0, "AN": 0},
        }
    ]
}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _use_llm(fake: FakeLLM) -> FakeLLM:
    app.dependency_overrides[get_llm_client] = lambda: fake
    return fake


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_generate_returns_typed_workouts(client, sample_reply):
    fake = _use_llm(FakeLLM(reply=sample_reply))
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 200
    workouts = res.json()["workouts"]
    assert len(workouts) == 2
    for w in workouts:
        assert isinstance(w["date"], str)
        assert isinstance(w["intensity"], str)
        assert isinstance(w["description"], str)
        assert isinstance(w["durationMinutes"], (int, float))
    assert workouts[0]["durationMinutes"] == 60
    assert len(fake.calls) == 1
    assert "Base block" in fake.calls[0]["user"]


def test_generate_accepts_empty_periods(client):
    fake = _use_llm(FakeLLM(reply={"workouts": []}))
    res = client.post("/api/generate-workouts", json={"periods": []})

    assert res.status_code == 200
    assert res.json() == {"workouts": []}
    assert len(fake.calls) == 1


def test_provider_failure_is_generic_500(client):
    _use_llm(FakeLLM(error=GenerationError(GenerationErrorKind.PROVIDER_UNAVAILABLE, "connection reset")))
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to generate workouts"}


def test_unexpected_exception_is_generic_500(client):
    _use_llm(FakeLLM(error=RuntimeError("boom")))
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to generate workouts"}
    assert "boom" not in res.text


def test_invalid_reply_is_generic_500(client):
    reply = {"workouts": [{"date": "2026-01-05", "intensity": "Z5", "description": "?", "durationMinutes": 60}]}
    _use_llm(FakeLLM(reply=reply))
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to generate workouts"}


def test_missing_api_key_is_generic_500(client, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to generate workouts"}


def test_malformed_body_is_rejected(client):
    _use_llm(FakeLLM(reply={"workouts": []}))
    res = client.post("/api/generate-workouts", json={"periods": [{"id": "x"}]})
    assert res.status_code == 422


def test_unbalanced_distribution_is_not_blocked(client):
    fake = _use_llm(FakeLLM(reply={"workouts": []}))
    body = {"periods": [dict(PERIODS_BODY["periods"][0], distribution={"UT2": 50, "UT1": 0, "AT": 0, "TR": 0, "AN": 0})]}
    res = client.post("/api/generate-workouts", json=body)

    assert res.status_code == 200
    assert len(fake.calls) == 1


def test_export_csv_download(client):
    body = {"workouts": [{"date": "2026-01-05", "intensity": "UT2", "description": 'Easy row, "steady state"', "durationMinutes": 60}]}
    res = client.post("/api/export-csv", json=body)

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert 'filename="rowing_plan_' in res.headers["content-disposition"]
    assert res.text == 'Date,Intensity,Workout Description,Duration (min)\n2026-01-05,UT2,"Easy row, ""steady state""",60'


def test_index_page_renders(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "RowPlan" in res.text
    assert "UT2: 60-70% HRmax" in res.text


def test_bad_timeout_config_is_generic_500(client, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_TIMEOUT_SECONDS", "sixty")
    res = client.post("/api/generate-workouts", json=PERIODS_BODY)

    assert res.status_code == 500
    assert res.json() == {"error": "Failed to generate workouts"}


def test_empty_end_date_is_rejected(client):
    fake = _use_llm(FakeLLM(reply={"workouts": []}))
    body = {"periods": [dict(PERIODS_BODY["periods"][0], endDate="")]}
    res = client.post("/api/generate-workouts", json=body)

    assert res.status_code == 422
    assert fake.calls == []


def test_production_mode_serves_editor_without_cors(monkeypatch):
    monkeypatch.setenv("ROWPLAN_ENV", "production")
    module = importlib.reload(rowplan.main)
    try:
        assert module.PRODUCTION
        with TestClient(module.app) as c:
            page = c.get("/")
            assert page.status_code == 200
            assert "RowPlan" in page.text
            assert c.get("/static/app.js").status_code == 200
            health = c.get("/health", headers={"Origin": "http://elsewhere.test"})
            assert "access-control-allow-origin" not in health.headers
    finally:
        monkeypatch.delenv("ROWPLAN_ENV")
        importlib.reload(rowplan.main)
