import json
from unittest.mock import MagicMock, patch

from openai import OpenAIError

PLAN = {
    "destination": "Goa",
    "start_date": "2025-01-01",
    "end_date": "2025-01-05",
    "overall_budget": 1000,
    "style": "budget",
}


def test_plan_over_http(client, user):
    resp = client.post("/api/ai/plan", json=PLAN, headers=user["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert [s["budget"] for s in body["sections"]] == [80] * 5
    assert body["summary"]["budget_per_day"] == 80
    assert body["summary"]["days"] == 5


def test_plan_requires_auth(client):
    resp = client.post("/api/ai/plan", json=PLAN)

    assert resp.status_code == 401


def test_plan_rejects_reversed_dates(client, user):
    resp = client.post("/api/ai/plan", json={**PLAN, "end_date": "2024-12-30"}, headers=user["headers"])

    assert resp.status_code == 400
    assert "Invalid date range" in resp.json()["error"]


def test_plan_rejects_infinite_budget(client, user):
    body = json.dumps({**PLAN, "overall_budget": float("inf")})
    resp = client.post(
        "/api/ai/plan",
        content=body,
        headers={**user["headers"], "Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("overall_budget:")


def test_generate_over_http(client, user):
    reply = json.dumps({
        "tripTitle": "Goa Getaway",
        "estimatedBudget": 700,
        "sections": [{"title": "Day 1: Beaches", "description": "Sun.", "estimatedCost": 90}],
    })

    with patch("globetrotter.services.ai.llm_planner.get_ai_completion", return_value=reply):
        resp = client.post(
            "/api/ai/plan/generate",
            json={"prompt": "Plan Goa", "start_date": "2025-01-01", "end_date": "2025-01-03"},
            headers=user["headers"],
        )

    assert resp.status_code == 200
    body = resp.json()
    assert body["trip_title"] == "Goa Getaway"
    assert body["parsed_with"] == "json"
    assert body["sections"][0]["budget"] == 90
    assert body["sections"][0]["start_date"] == "2025-01-01"


def test_generate_reports_model_error_as_bad_gateway(client, user):
    llm = MagicMock()
    llm.chat.completions.create.side_effect = OpenAIError("upstream down")

    with patch("globetrotter.core.llm_client.get_llm_client", return_value=llm):
        resp = client.post("/api/ai/plan/generate", json={"prompt": "Plan Goa"}, headers=user["headers"])

    assert resp.status_code == 502
    assert resp.json() == {"error": "AI model is temporarily unavailable."}


def test_generate_without_model_is_unavailable(client, user):
    resp = client.post("/api/ai/plan/generate", json={"prompt": "Plan Goa"}, headers=user["headers"])

    assert resp.status_code == 503
    assert resp.json() == {"error": "AI model is not configured."}
