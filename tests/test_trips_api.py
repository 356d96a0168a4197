import json

from conftest import trip_payload


def create_trip(client, headers, **overrides):
    resp = client.post("/api/trips/", json=trip_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_trip(client, user):
    trip = create_trip(client, user["headers"])

    assert trip["name"] == "Lisbon Escape"
    assert trip["user_id"] == user["id"]
    assert trip["status"] == "upcoming"
    assert trip["computed_budget"] == 350
    assert trip["planned_budget"] == 1200
    assert [s["title"] for s in trip["sections"]] == ["Alfama", "Belem"]


def test_create_trip_rejects_reversed_dates(client, user):
    resp = client.post(
        "/api/trips/", json=trip_payload(start_date="2030-05-05", end_date="2030-05-01"), headers=user["headers"],
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "End date must be after or equal to start date"}


def test_create_trip_from_multipart_form(client, user):
    form = {
        "name": "Form Trip",
        "start_date": "2030-01-10",
        "end_date": "2030-01-12",
        "planned_budget": "",
        "suggestions": json.dumps(["Nature Trek"]),
        "sections": json.dumps([{"title": "Day 1", "budget": 40}]),
    }
    resp = client.post(
        "/api/trips/",
        data=form,
        files={"cover_photo": ("cover.jpg", b"jpeg-bytes", "image/jpeg")},
        headers=user["headers"],
    )

    assert resp.status_code == 201, resp.text
    trip = resp.json()
    assert trip["suggestions"] == ["Nature Trek"]
    assert trip["computed_budget"] == 40
    assert trip["planned_budget"] == 0
    assert trip["cover_photo"] == "https://placehold.co/800x500"


def test_list_trips_is_per_user_and_ordered(client, user, other_user):
    create_trip(client, user["headers"], name="Later", start_date="2031-01-01", end_date="2031-01-02")
    create_trip(client, user["headers"], name="Sooner", start_date="2030-01-01", end_date="2030-01-02")
    create_trip(client, other_user["headers"], name="Not mine")

    resp = client.get("/api/trips/", headers=user["headers"])

    assert [t["name"] for t in resp.json()] == ["Sooner", "Later"]


def test_list_trips_cache_is_invalidated_on_create(client, user, fake_redis):
    create_trip(client, user["headers"], name="First")
    assert len(client.get("/api/trips/", headers=user["headers"]).json()) == 1
    assert f"trips:user:{user['id']}:all" in fake_redis.store

    create_trip(client, user["headers"], name="Second")
    assert len(client.get("/api/trips/", headers=user["headers"]).json()) == 2


def test_private_trip_hidden_from_other_users(client, user, other_user):
    trip = create_trip(client, user["headers"])

    assert client.get(f"/api/trips/{trip['id']}", headers=user["headers"]).status_code == 200
    resp = client.get(f"/api/trips/{trip['id']}", headers=other_user["headers"])
    assert resp.status_code == 404
    assert client.get(f"/api/trips/public/{trip['id']}").status_code == 404


def test_public_trip_readable_by_anyone(client, user, other_user):
    trip = create_trip(client, user["headers"], visibility="public")

    assert client.get(f"/api/trips/{trip['id']}", headers=other_user["headers"]).status_code == 200
    assert client.get(f"/api/trips/public/{trip['id']}").json()["name"] == "Lisbon Escape"


def test_update_trip(client, user):
    trip = create_trip(client, user["headers"])

    resp = client.put(
        f"/api/trips/{trip['id']}",
        json={"name": "Lisbon Again", "sections": [{"title": "Only", "budget": 75}]},
        headers=user["headers"],
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Lisbon Again"
    assert body["computed_budget"] == 75
    assert body["start_date"] == "2030-05-01"


def test_update_checks_dates_against_stored_values(client, user):
    trip = create_trip(client, user["headers"])

    resp = client.put(f"/api/trips/{trip['id']}", json={"end_date": "2030-04-01"}, headers=user["headers"])

    assert resp.status_code == 400
    assert resp.json() == {"error": "End date must be after or equal to start date"}


def test_only_owner_can_update_or_delete(client, user, other_user):
    trip = create_trip(client, user["headers"], visibility="public")

    update = client.put(f"/api/trips/{trip['id']}", json={"name": "Mine now"}, headers=other_user["headers"])
    delete = client.delete(f"/api/trips/{trip['id']}", headers=other_user["headers"])

    assert update.status_code == 403
    assert update.json() == {"error": "Access denied to modify this trip"}
    assert delete.status_code == 403


def test_missing_trip(client, user):
    assert client.get("/api/trips/999", headers=user["headers"]).json() == {"error": "Trip not found"}
    assert client.delete("/api/trips/999", headers=user["headers"]).status_code == 404


def test_delete_trip_removes_children(client, user):
    trip = create_trip(client, user["headers"])
    stop = client.post("/api/stops/", json={
        "trip_id": trip["id"], "city": "Sintra", "start_date": "2030-05-02", "end_date": "2030-05-02",
    }, headers=user["headers"]).json()["stop"]
    activity = client.post("/api/activities/", json={
        "stop_id": stop["id"], "name": "Pena Palace", "type": "sightseeing", "cost": 20, "duration": 120,
    }, headers=user["headers"]).json()
    client.post("/api/budgets/", json={"trip_id": trip["id"], "stay": 300}, headers=user["headers"])

    resp = client.delete(f"/api/trips/{trip['id']}", headers=user["headers"])

    assert resp.status_code == 200
    assert resp.json() == {"message": "Trip deleted", "image_deleted": False}
    assert client.get(f"/api/activities/stop/{stop['id']}", headers=user["headers"]).status_code == 404
    assert client.put(
        f"/api/activities/{activity['id']}", json={"completed": True}, headers=user["headers"],
    ).status_code == 404
    assert client.get(f"/api/budgets/trip/{trip['id']}", headers=user["headers"]).status_code == 404
    assert client.get("/api/trips/", headers=user["headers"]).json() == []


def test_public_feed_paginates_and_names_owner(client, user, other_user):
    for i in range(3):
        create_trip(client, user["headers"], name=f"Public {i}", visibility="public")
    create_trip(client, other_user["headers"], name="Private")

    resp = client.get("/api/trips/public", params={"page": 1, "limit": 2})

    body = resp.json()
    assert resp.status_code == 200
    assert body["pagination"] == {
        "current_page": 1, "total_pages": 2, "total": 3, "has_next_page": True, "has_prev_page": False,
    }
    assert [t["name"] for t in body["trips"]] == ["Public 2", "Public 1"]
    assert body["trips"][0]["user_name"] == "Asha"
    assert body["trips"][0]["is_anonymous"] is False


def test_public_feed_filters_by_status(client, user):
    create_trip(client, user["headers"], name="Done", start_date="2001-01-01", end_date="2001-01-03", visibility="public")
    create_trip(client, user["headers"], name="Ahead", visibility="public")
    create_trip(
        client, user["headers"], name="Now", start_date="2000-01-01", end_date="2999-12-31", visibility="public",
    )

    def names(status):
        return [t["name"] for t in client.get("/api/trips/public", params={"status": status}).json()["trips"]]

    assert names("completed") == ["Done"]
    assert names("upcoming") == ["Ahead"]
    assert names("ongoing") == ["Now"]


def test_budget_stats_and_range_filter(client, user):
    create_trip(client, user["headers"], name="Cheap", planned_budget=300)
    create_trip(client, user["headers"], name="Mid", planned_budget=900)
    create_trip(client, user["headers"], name="Unplanned", planned_budget=0)

    stats = client.get("/api/trips/budget-stats", headers=user["headers"]).json()
    assert stats == {
        "total_trips": 2, "total_budget": 1200, "avg_budget": 600, "min_budget": 300, "max_budget": 900,
    }

    ranged = client.get("/api/trips/by-budget", params={"min_budget": 500}, headers=user["headers"]).json()
    assert [t["name"] for t in ranged] == ["Mid"]

    bad = client.get("/api/trips/by-budget", params={"min_budget": -1}, headers=user["headers"])
    assert bad.status_code == 400
    assert bad.json() == {"error": "min_budget must be a positive number"}


def test_trip_with_stops(client, user):
    trip = create_trip(client, user["headers"], visibility="public")
    client.post("/api/stops/", json={
        "trip_id": trip["id"], "city": "Porto", "start_date": "2030-05-04", "end_date": "2030-05-05",
    }, headers=user["headers"])

    owner_view = client.get(f"/api/trips/{trip['id']}/with-stops", headers=user["headers"]).json()
    public_view = client.get(f"/api/trips/public/{trip['id']}/with-stops").json()

    assert owner_view["trip"]["id"] == trip["id"]
    assert [s["city"] for s in owner_view["stops"]] == ["Porto"]
    assert public_view["stops"] == owner_view["stops"]


def test_delete_image_skipped_without_cdn(client, user):
    resp = client.post(
        "/api/trips/image/delete", json={"url": "https://ik.imagekit.io/demo/trips/x.jpg"}, headers=user["headers"],
    )

    assert resp.status_code == 200
    assert resp.json() == {"message": "Image deleted", "skipped": True}


def test_create_trip_rejects_non_finite_budgets(client, user):
    headers = {**user["headers"], "Content-Type": "application/json"}
    planned = client.post("/api/trips/", content=json.dumps(trip_payload(planned_budget=float("inf"))), headers=headers)
    section = client.post(
        "/api/trips/",
        content=json.dumps(trip_payload(sections=[{"title": "Alfama", "budget": float("nan")}])),
        headers=headers,
    )

    assert planned.status_code == 400
    assert planned.json()["error"].startswith("planned_budget:")
    assert section.status_code == 400
    assert client.get("/api/trips/", headers=user["headers"]).json() == []
