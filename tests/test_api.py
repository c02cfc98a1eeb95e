"""Tests for HTTP API endpoints."""

import json
from datetime import datetime

from fastapi.testclient import TestClient

from healthpal.api.app import create_app
from healthpal.domain.credentials import AIProvider
from tests.conftest import BERLIN, FakeGenerativeClient, http_status_error, jpeg_bytes


def test_health(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_scan_without_key_prompts_for_settings(
    container, generative_client: FakeGenerativeClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/scans?day=2025-08-31",
        content=jpeg_bytes(),
        headers={"Content-Type": "image/jpeg"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "no_credential"
    assert generative_client.calls == []


def test_scan_logs_food_and_day_overview_reflects_it(container) -> None:
    container.key_store.set(AIProvider.GEMINI, "key")
    client = TestClient(create_app(container))
    client.post(
        "/health-samples",
        json={
            "quantity": "active_energy",
            "value": 500,
            "recorded_at": datetime(2025, 8, 31, 12, tzinfo=BERLIN).isoformat(),
        },
    )

    scan = client.post(
        "/scans?day=2025-08-31",
        content=jpeg_bytes(),
        headers={"Content-Type": "image/jpeg"},
    )
    overview = client.get("/days/2025-08-31")

    assert scan.status_code == 200
    assert scan.json()["status"] == "logged"
    assert scan.json()["entry"]["title"] == "grilled chicken"
    data = overview.json()
    assert data["summary"] == {
        "intake": 320,
        "spent": 500,
        "net": -180,
        "status": "deficit",
    }
    assert data["metrics"]["active_energy"] == 500
    assert [entry["calories"] for entry in data["entries"]] == [320]


def test_unusable_scan_is_distinct_from_failure(
    container, generative_client: FakeGenerativeClient
) -> None:
    container.key_store.set(AIProvider.GEMINI, "key")
    client = TestClient(create_app(container))

    generative_client.reply = json.dumps({"error": "ErrorInScanning"})
    unusable = client.post("/scans", content=jpeg_bytes())
    generative_client.error = http_status_error(500)
    failed = client.post("/scans", content=jpeg_bytes())

    assert unusable.status_code == 200
    assert unusable.json()["status"] == "unusable"
    assert failed.status_code == 502
    assert failed.json()["error"] == "analysis_failed"
    assert container.food_log_store.entries == []


def test_scan_rejects_empty_body(container) -> None:
    container.key_store.set(AIProvider.GEMINI, "key")
    client = TestClient(create_app(container))

    assert client.post("/scans", content=b"").status_code == 400


def test_food_log_crud(container) -> None:
    client = TestClient(create_app(container))

    created = client.post(
        "/food-logs",
        json={"title": " Oats ", "calories": 300, "day": "2025-08-31", "notes": " "},
    )
    assert created.status_code == 201
    entry = created.json()["entry"]
    assert entry["title"] == "Oats"
    assert entry["notes"] is None

    updated = client.put(
        f"/food-logs/{entry['id']}",
        json={"title": "Oats with milk", "calories": 380, "notes": "whole milk"},
    )
    assert updated.status_code == 200
    assert updated.json()["entry"]["calories"] == 380

    listed = client.get("/days/2025-08-31/food-logs").json()["entries"]
    assert [item["title"] for item in listed] == ["Oats with milk"]

    assert client.delete(f"/food-logs/{entry['id']}").status_code == 204
    assert client.delete(f"/food-logs/{entry['id']}").status_code == 204
    assert client.get("/days/2025-08-31/food-logs").json()["entries"] == []


def test_food_log_validation(container) -> None:
    client = TestClient(create_app(container))
    entry = container.food_log_store.log(
        title="Soup", calories=100, day=datetime(2025, 8, 31).date()
    )

    negative = client.post(
        "/food-logs", json={"title": "Soup", "calories": -1, "day": "2025-08-31"}
    )
    blank_edit = client.put(
        f"/food-logs/{entry.id}", json={"title": "  ", "calories": 10}
    )
    missing = client.put(
        "/food-logs/5b0f1d7e-52f4-4f57-9d0c-8d2c6b1a0c11",
        json={"title": "Soup", "calories": 10},
    )

    assert negative.status_code == 422
    assert blank_edit.status_code == 422
    assert missing.status_code == 404


def test_key_settings_flow(
    container, generative_client: FakeGenerativeClient
) -> None:
    client = TestClient(create_app(container))

    assert client.get("/settings/keys").json() == {
        "providers": {"gemini": False},
        "configured": False,
    }

    saved = client.put("/settings/keys/gemini", json={"api_key": "good-key"})
    assert saved.status_code == 200
    assert client.get("/settings/keys").json()["configured"] is True

    generative_client.models_payload = {"error": "denied"}
    rejected = client.put("/settings/keys/gemini", json={"api_key": "bad-key"})
    assert rejected.status_code == 422
    assert container.key_store.get(AIProvider.GEMINI) == "good-key"

    assert client.delete("/settings/keys/gemini").status_code == 204
    assert client.get("/settings/keys").json()["configured"] is False


def test_unknown_provider_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    response = client.put("/settings/keys/unknown", json={"api_key": "k"})

    assert response.status_code == 422


def test_negative_health_sample_is_rejected(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/health-samples",
        json={
            "quantity": "steps",
            "value": -5,
            "recorded_at": "2025-08-31T08:00:00+02:00",
        },
    )

    assert response.status_code == 422
