"""HTTP surface: auth, timer lifecycle, fast history and error envelopes."""

from datetime import datetime, timedelta, timezone

from app.services.fastcalc import parse_iso, to_utc_iso

from conftest import SERVICE_HEADERS


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_register_login_and_me(client, user):
    user_id, headers = user
    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == user_id
    assert me.json()["username"] == "faster"

    login = client.post("/api/auth/login", json={"username": "faster", "password": "correct-horse"})
    assert login.status_code == 200
    assert login.json()["user_id"] == user_id

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["user_id"] == user_id

    bad = client.post("/api/auth/login", json={"username": "faster", "password": "wrong-password"})
    assert bad.status_code == 401
    assert bad.json()["code"] == "unauthorized"

    dup = client.post("/api/auth/register", json={"username": "faster", "password": "another-pass"})
    assert dup.status_code == 409


def test_timer_requires_auth_and_ownership(client, user):
    user_id, headers = user
    assert client.get(f"/api/timer/{user_id}").status_code == 401
    assert client.get("/api/timer/someone-else", headers=headers).status_code == 403
    assert client.get(f"/api/timer/{user_id}", headers={"X-API-Key": "nope"}).status_code == 401
    # the service key may act for anyone
    assert client.get("/api/timer/someone-else", headers=SERVICE_HEADERS).status_code == 200


def test_timer_lifecycle(client, user):
    user_id, headers = user
    url = f"/api/timer/{user_id}"

    assert client.get(url, headers=headers).json() is None

    start = datetime.now(timezone.utc) - timedelta(hours=2)
    created = client.post(url, json={"startTime": to_utc_iso(start), "notes": "day one"}, headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["userId"] == user_id
    assert body["isPaused"] is False
    assert body["pausedAt"] is None
    assert 7199 <= body["elapsedSeconds"] <= 7201

    again = client.post(url, json={}, headers=headers)
    assert again.status_code == 409
    assert again.json()["code"] == "conflict"

    paused = client.patch(url, json={"isPaused": True, "pausedAt": to_utc_iso(start + timedelta(hours=1))}, headers=headers)
    assert paused.status_code == 200
    assert paused.json()["isPaused"] is True
    assert paused.json()["elapsedSeconds"] == 3600

    # reload from "another device" sees the frozen state
    loaded = client.get(url, headers=headers).json()
    assert loaded["isPaused"] is True
    assert loaded["elapsedSeconds"] == 3600

    resumed = client.patch(url, json={"isPaused": False, "pausedAt": None}, headers=headers)
    assert resumed.json()["isPaused"] is False
    assert 3599 <= resumed.json()["elapsedSeconds"] <= 3601
    assert parse_iso(resumed.json()["startTime"]) > start

    notes = client.patch(url, json={"notes": "still going"}, headers=headers)
    assert notes.json()["notes"] == "still going"

    assert client.delete(url, headers=headers).json() == {"status": "deleted"}
    assert client.get(url, headers=headers).json() is None
    assert client.delete(url, headers=headers).status_code == 404
    assert client.patch(url, json={"notes": "x"}, headers=headers).status_code == 404


def test_stop_endpoint_records_fast(client, user):
    user_id, headers = user
    start = datetime.now(timezone.utc) - timedelta(hours=16)
    client.post(f"/api/timer/{user_id}", json={"startTime": to_utc_iso(start), "notes": "done"}, headers=headers)

    stopped = client.post(f"/api/timer/{user_id}/stop", headers=headers)
    assert stopped.status_code == 201
    assert stopped.json()["notes"] == "done"
    assert 15.99 <= stopped.json()["durationHours"] <= 16.01

    assert client.get(f"/api/timer/{user_id}", headers=headers).json() is None
    history = client.get(f"/api/fasts/{user_id}", headers=headers).json()
    assert [f["id"] for f in history] == [stopped.json()["id"]]


def test_manual_fast_entry(client, user):
    user_id, headers = user
    url = f"/api/fasts/{user_id}"
    created = client.post(
        url,
        json={"startDate": "2024-05-01", "startHour": 20, "endDate": "2024-05-01", "endHour": 12, "notes": "overnight"},
        headers=headers,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["startTime"] == "2024-05-01T20:00:00.000Z"
    assert body["endTime"] == "2024-05-02T12:00:00.000Z"
    assert body["durationHours"] == 16.0

    backwards = client.post(
        url,
        json={"startTime": "2024-05-03T12:00:00Z", "endTime": "2024-05-03T08:00:00Z"},
        headers=headers,
    )
    assert backwards.status_code == 422
    assert backwards.json()["message"] == "End time must be after start time"

    bad_hour = client.post(
        url,
        json={"startDate": "2024-05-01", "startHour": 24, "endDate": "2024-05-01", "endHour": 12},
        headers=headers,
    )
    assert bad_hour.status_code == 422
    assert bad_hour.json()["code"] == "validation_error"

    mixed = client.post(url, json={"startTime": "2024-05-03T12:00:00Z"}, headers=headers)
    assert mixed.status_code == 422

    stats = client.get(f"{url}/stats", headers=headers).json()
    assert stats == {
        "count": 1,
        "totalHours": 16.0,
        "averageHours": 16.0,
        "longestHours": 16.0,
        "lastEndTime": "2024-05-02T12:00:00.000Z",
    }


def test_edit_and_delete_fast(client, user):
    user_id, headers = user
    fast = client.post(
        f"/api/fasts/{user_id}",
        json={"startTime": "2024-05-01T20:00:00Z", "endTime": "2024-05-02T12:00:00Z"},
        headers=headers,
    ).json()

    edited = client.patch(f"/api/fasts/{user_id}/{fast['id']}", json={"endTime": "2024-05-02T14:00:00Z"}, headers=headers)
    assert edited.status_code == 200
    assert edited.json()["durationHours"] == 18.0

    assert client.delete(f"/api/fasts/{user_id}/{fast['id']}", headers=headers).status_code == 200
    assert client.delete(f"/api/fasts/{user_id}/{fast['id']}", headers=headers).status_code == 404


def test_responses_carry_request_id_and_no_store(client, user):
    user_id, headers = user
    response = client.get(f"/api/timer/{user_id}", headers={**headers, "X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["Cache-Control"] == "no-store"
