import json

import pytest

from conftest import trip_payload


@pytest.fixture
def trip(client, user):
    resp = client.post("/api/trips/", json=trip_payload(), headers=user["headers"])
    return resp.json()


def add_stop(client, headers, trip_id, **overrides):
    payload = {
        "trip_id": trip_id,
        "city": "Sintra",
        "category": "sightseeing",
        "start_date": "2030-05-02",
        "end_date": "2030-05-03",
        "location": {"type": "Point", "coordinates": [-9.39, 38.8]},
    }
    payload.update(overrides)
    return client.post("/api/stops/", json=payload, headers=headers)


def add_activity(client, headers, stop_id, **overrides):
    payload = {"stop_id": stop_id, "name": "Pena Palace", "type": "sightseeing", "cost": 20, "duration": 120}
    payload.update(overrides)
    return client.post("/api/activities/", json=payload, headers=headers)


def test_create_and_list_stops(client, user, trip):
    resp = add_stop(client, user["headers"], trip["id"])
    add_stop(client, user["headers"], trip["id"], city="Cascais", start_date="2030-05-01", end_date="2030-05-01")

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Stop created successfully"
    assert body["stop"]["location"]["coordinates"] == [-9.39, 38.8]

    listing = client.get(f"/api/stops/trip/{trip['id']}", headers=user["headers"]).json()
    assert listing["count"] == 2
    assert [s["city"] for s in listing["stops"]] == ["Cascais", "Sintra"]


def test_stop_validation(client, user, trip):
    blank = add_stop(client, user["headers"], trip["id"], city="  ")
    reversed_dates = add_stop(client, user["headers"], trip["id"], start_date="2030-05-03", end_date="2030-05-01")

    assert blank.status_code == 400
    assert "City name is required" in blank.json()["error"]
    assert reversed_dates.status_code == 400


def test_stops_require_trip_ownership(client, user, other_user, trip):
    resp = add_stop(client, other_user["headers"], trip["id"])

    assert resp.status_code == 403
    assert resp.json() == {"error": "Access denied to add stops to this trip"}


def test_update_stop_checks_merged_dates(client, user, trip):
    stop = add_stop(client, user["headers"], trip["id"]).json()["stop"]

    bad = client.put(f"/api/stops/{stop['id']}", json={"end_date": "2030-05-01"}, headers=user["headers"])
    good = client.put(f"/api/stops/{stop['id']}", json={"notes": "  Book tickets early "}, headers=user["headers"])

    assert bad.status_code == 400
    assert good.json()["stop"]["notes"] == "Book tickets early"


def test_stop_categories(client, user, other_user, trip):
    add_stop(client, user["headers"], trip["id"], category="dining", city="Lisbon")

    categories = client.get("/api/stops/categories", headers=user["headers"]).json()["categories"]
    mine = client.get("/api/stops/category/dining", headers=user["headers"]).json()
    theirs = client.get("/api/stops/category/dining", headers=other_user["headers"]).json()

    assert "accommodation" in categories and "dining" in categories
    assert [s["city"] for s in mine] == ["Lisbon"]
    assert theirs == []


def test_delete_stop_reports_removed_activities(client, user, trip):
    stop = add_stop(client, user["headers"], trip["id"]).json()["stop"]
    add_activity(client, user["headers"], stop["id"])
    add_activity(client, user["headers"], stop["id"], name="Moorish Castle")

    resp = client.delete(f"/api/stops/{stop['id']}", headers=user["headers"])

    assert resp.json()["deleted_activities_count"] == 2
    assert client.get(f"/api/activities/stop/{stop['id']}", headers=user["headers"]).status_code == 404


def test_activity_lifecycle(client, user, trip):
    stop = add_stop(client, user["headers"], trip["id"]).json()["stop"]

    created = add_activity(client, user["headers"], stop["id"], start_time="10:00")
    assert created.status_code == 201
    activity = created.json()
    assert activity["priority"] == "medium"
    assert activity["completed"] is False

    updated = client.put(
        f"/api/activities/{activity['id']}", json={"completed": True, "rating": 5}, headers=user["headers"],
    ).json()
    assert updated["completed"] is True
    assert updated["rating"] == 5

    listing = client.get(f"/api/activities/stop/{stop['id']}", headers=user["headers"]).json()
    assert [a["id"] for a in listing] == [activity["id"]]

    deleted = client.delete(f"/api/activities/{activity['id']}", headers=user["headers"])
    assert deleted.json() == {"message": "Activity deleted"}


def test_activity_validation(client, user, trip):
    stop = add_stop(client, user["headers"], trip["id"]).json()["stop"]

    assert add_activity(client, user["headers"], stop["id"], cost=-5).status_code == 400
    assert add_activity(client, user["headers"], stop["id"], duration=0).status_code == 400
    assert add_activity(client, user["headers"], stop["id"], start_time="25:00").status_code == 400


def test_activity_requires_stop_ownership(client, user, other_user, trip):
    stop = add_stop(client, user["headers"], trip["id"]).json()["stop"]

    resp = add_activity(client, other_user["headers"], stop["id"])

    assert resp.status_code == 403


def test_budget_upsert_recomputes_total(client, user, trip):
    first = client.post(
        "/api/budgets/",
        json={"trip_id": trip["id"], "transport": 100, "stay": 400, "meals": 150, "total": 1, "currency": "eur"},
        headers=user["headers"],
    )
    assert first.status_code == 201
    assert first.json()["total"] == 650
    assert first.json()["currency"] == "EUR"

    second = client.post(
        "/api/budgets/", json={"trip_id": trip["id"], "activities": 50}, headers=user["headers"],
    ).json()
    assert second["id"] == first.json()["id"]
    assert second["total"] == 50
    assert second["currency"] == "EUR"

    fetched = client.get(f"/api/budgets/trip/{trip['id']}", headers=user["headers"]).json()
    assert fetched["total"] == 50


def test_budget_missing_and_forbidden(client, user, other_user, trip):
    assert client.get(f"/api/budgets/trip/{trip['id']}", headers=user["headers"]).json() == {
        "error": "Budget not found"
    }
    resp = client.post("/api/budgets/", json={"trip_id": trip["id"], "stay": 10}, headers=other_user["headers"])
    assert resp.status_code == 403


def test_budget_rejects_infinite_amounts(client, user, trip):
    resp = client.post(
        "/api/budgets/",
        content=json.dumps({"trip_id": trip["id"], "stay": float("inf")}),
        headers={**user["headers"], "Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("stay:")
