"""HTTP tests for the habits API blueprint."""

from __future__ import annotations

import pytest

USER = {"X-User-Id": "1"}
OTHER = {"X-User-Id": "2"}


def create(client, title="Meditate", headers=USER):
    response = client.post("/api/habits", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.get_json()


def test_requests_without_user_are_unauthorized(client):
    assert client.get("/api/habits").status_code == 401
    assert client.get("/api/habits", headers={"X-User-Id": "abc"}).status_code == 401


def test_create_and_fetch(client):
    created = create(client)

    response = client.get(f"/api/habits/{created['id']}", headers=USER)

    assert response.status_code == 200
    body = response.get_json()
    assert body["title"] == "Meditate"
    assert body["isActive"] is True
    assert body["sortOrder"] == 0
    assert body["isCompletedToday"] is False
    assert body["lastCompletedAt"] is None
    assert body["currentStreak"] == 0
    assert body["totalCompletions"] == 0


def test_create_validates_title(client):
    response = client.post("/api/habits", json={"title": "   "}, headers=USER)

    assert response.status_code == 400
    assert "title" in response.get_json()["errors"]


def test_complete_then_duplicate_is_rejected(client):
    habit = create(client)
    url = f"/api/habits/{habit['id']}/complete?localDate=2024-03-10"

    first = client.post(url, headers=USER)
    second = client.post(url, headers=USER)

    assert first.status_code == 200
    assert first.get_json()["isCompletedToday"] is True
    assert first.get_json()["currentStreak"] == 1
    assert second.status_code == 400
    assert second.get_json()["message"] == "Habit already completed today"


def test_uncomplete(client):
    habit = create(client)
    url = f"/api/habits/{habit['id']}/complete?localDate=2024-03-10"

    missing = client.delete(url, headers=USER)
    client.post(url, headers=USER)
    removed = client.delete(url, headers=USER)

    assert missing.status_code == 400
    assert missing.get_json()["message"] == "Habit not completed today"
    assert removed.status_code == 200
    assert removed.get_json()["totalCompletions"] == 0


def test_other_users_habit_is_not_found(client):
    habit = create(client)
    base = f"/api/habits/{habit['id']}"

    assert client.get(base, headers=OTHER).status_code == 404
    assert client.post(f"{base}/complete", headers=OTHER).status_code == 404
    assert client.get(f"{base}/stats", headers=OTHER).status_code == 404
    assert client.put(base, json={"title": "x", "isActive": True}, headers=OTHER).status_code == 404
    assert client.delete(base, headers=OTHER).status_code == 404
    assert client.get(base, headers=USER).status_code == 200


def test_stats_window(client):
    habit = create(client)
    for local_date in ("2024-03-10", "2024-03-08", "2024-03-05"):
        client.post(f"/api/habits/{habit['id']}/complete?localDate={local_date}", headers=USER)

    response = client.get(
        f"/api/habits/{habit['id']}/stats?days=7&localDate=2024-03-10", headers=USER
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["habitTitle"] == "Meditate"
    assert body["totalCompletions"] == 3
    assert body["currentStreak"] == 1
    assert body["longestStreak"] == 1
    assert body["completionRateLastMonth"] == pytest.approx(300 / 7)
    assert len(body["completionHistory"]) == 8
    assert body["completionHistory"][0] == {"date": "2024-03-03", "completed": False}
    assert body["completionHistory"][-1] == {"date": "2024-03-10", "completed": True}


def test_stats_days_clamped_to_maximum(app, client):
    app.config["HABITSTREAK_CONFIG"].MAX_WINDOW_DAYS = 10
    habit = create(client)

    body = client.get(
        f"/api/habits/{habit['id']}/stats?days=5000&localDate=2024-03-10", headers=USER
    ).get_json()

    assert len(body["completionHistory"]) == 11


def test_completions_listing(client):
    habit = create(client)
    for local_date in ("2024-01-01", "2024-03-09", "2024-03-10"):
        client.post(f"/api/habits/{habit['id']}/complete?localDate={local_date}", headers=USER)

    body = client.get(
        f"/api/habits/{habit['id']}/completions?days=30&localDate=2024-03-10", headers=USER
    ).get_json()

    assert [c["completedDate"] for c in body] == ["2024-03-10", "2024-03-09"]
    assert all(c["habitId"] == habit["id"] for c in body)


def test_update_and_filter(client):
    walk = create(client, "Walk")
    read = create(client, "Read")

    response = client.put(
        f"/api/habits/{read['id']}", json={"title": "Read books", "isActive": False}, headers=USER
    )
    active = client.get("/api/habits?isActive=true", headers=USER).get_json()
    inactive = client.get("/api/habits?isActive=false", headers=USER).get_json()

    assert response.status_code == 200
    assert response.get_json()["title"] == "Read books"
    assert [h["id"] for h in active] == [walk["id"]]
    assert [h["title"] for h in inactive] == ["Read books"]


def test_reorder(client):
    ids = [create(client, title)["id"] for title in ("a", "b", "c")]

    response = client.post("/api/habits/reorder", json={"habitIds": ids[::-1]}, headers=USER)
    invalid = client.post("/api/habits/reorder", json={"habitIds": [ids[0], 999]}, headers=USER)
    duplicate = client.post("/api/habits/reorder", json={"habitIds": [ids[0], ids[0]]}, headers=USER)

    assert response.status_code == 200
    assert [h["id"] for h in response.get_json()] == ids[::-1]
    assert invalid.status_code == 400
    assert invalid.get_json()["message"] == "Some habit IDs are invalid"
    assert duplicate.status_code == 400


def test_delete(client):
    habit = create(client)

    assert client.delete(f"/api/habits/{habit['id']}", headers=USER).status_code == 204
    assert client.get(f"/api/habits/{habit['id']}", headers=USER).status_code == 404


def test_daily_rate(client):
    done = create(client, "Done")
    create(client, "Pending")
    client.post(f"/api/habits/{done['id']}/complete?localDate=2024-03-10", headers=USER)

    body = client.get("/api/habits/daily-rate?localDate=2024-03-10", headers=USER).get_json()

    assert body == {"completed": 1, "total": 2, "percentage": 50}


def test_invalid_local_date_falls_back_to_server_day(client):
    habit = create(client)

    response = client.post(f"/api/habits/{habit['id']}/complete?localDate=garbage", headers=USER)
    listed = client.get("/api/habits", headers=USER).get_json()

    assert response.status_code == 200
    assert listed[0]["isCompletedToday"] is True


def test_first_habit_for_new_user_on_fresh_database(client):
    headers = {"X-User-Id": "77"}

    response = client.post("/api/habits", json={"title": "Walk"}, headers=headers)
    listed = client.get("/api/habits", headers=headers).get_json()

    assert response.status_code == 201
    assert [h["title"] for h in listed] == ["Walk"]


def test_first_calendar_day_is_served(client):
    habit = create(client)

    listed = client.get("/api/habits?localDate=0001-01-01", headers=USER)
    stats = client.get(f"/api/habits/{habit['id']}/stats?localDate=0001-01-05", headers=USER)

    assert listed.status_code == 200
    assert stats.status_code == 200
    assert stats.get_json()["completionHistory"][0]["date"] == "0001-01-01"


def test_unparseable_active_filter_rejected(client):
    create(client)

    response = client.get("/api/habits?isActive=maybe", headers=USER)

    assert response.status_code == 400
    assert response.get_json()["message"] == "isActive must be true or false"
    assert client.get("/api/habits?isActive=", headers=USER).status_code == 200
