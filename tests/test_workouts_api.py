from fastapi.testclient import TestClient

USER_A = {"X-User-Id": "user-a"}
USER_B = {"X-User-Id": "user-b"}


def _create(client: TestClient, headers=USER_A, **overrides) -> dict:
    payload = {"name": "Day 1", "date": "2025-09-01", "notes": "Legs", **overrides}
    r = client.post("/api/v1/workouts", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["value"]


def test_health(client: TestClient):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_workouts_crud_flow(client: TestClient):
    # List empty
    r_list = client.get("/api/v1/workouts", headers=USER_A)
    assert r_list.status_code == 200
    assert r_list.json() == []

    # Create
    created = _create(client)
    assert created["name"] == "Day 1"
    assert created["notes"] == "Legs"
    assert created["created_at"] == created["updated_at"]
    wid = created["id"]

    # Get
    r_get = client.get(f"/api/v1/workouts/{wid}", headers=USER_A)
    assert r_get.status_code == 200
    assert r_get.json()["id"] == wid
    assert r_get.json()["exercises"] == []

    # Update
    r_upd = client.put(f"/api/v1/workouts/{wid}", json={"name": "Day 1 - Updated"}, headers=USER_A)
    assert r_upd.status_code == 200, r_upd.text
    after = r_upd.json()["value"]
    assert after["name"] == "Day 1 - Updated"
    assert after["notes"] == "Legs"

    # Delete
    r_del = client.delete(f"/api/v1/workouts/{wid}", headers=USER_A)
    assert r_del.status_code == 204

    # Ensure 404
    r_404 = client.get(f"/api/v1/workouts/{wid}", headers=USER_A)
    assert r_404.status_code == 404
    assert r_404.json() == {"detail": "Workout not found"}


def test_list_by_date(client: TestClient):
    _create(client, name="Mon", date="2025-09-01")
    _create(client, name="Tue", date="2025-09-02")

    r = client.get("/api/v1/workouts", params={"date": "2025-09-02"}, headers=USER_A)

    assert r.status_code == 200
    assert [w["name"] for w in r.json()] == ["Tue"]


def test_other_users_cannot_see_or_touch_workouts(client: TestClient):
    wid = _create(client)["id"]

    assert client.get("/api/v1/workouts", headers=USER_B).json() == []
    assert client.get(f"/api/v1/workouts/{wid}", headers=USER_B).status_code == 404

    r_upd = client.put(f"/api/v1/workouts/{wid}", json={"name": "Mine now"}, headers=USER_B)
    assert r_upd.status_code == 404
    assert r_upd.json() == {"ok": False, "error": "Workout not found"}

    assert client.delete(f"/api/v1/workouts/{wid}", headers=USER_B).status_code == 404
    assert client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Fly"}, headers=USER_B).status_code == 404

    r_get = client.get(f"/api/v1/workouts/{wid}", headers=USER_A)
    assert r_get.json()["name"] == "Day 1"


def test_requests_without_identity_are_rejected(client: TestClient):
    r_list = client.get("/api/v1/workouts")
    assert r_list.status_code == 401
    assert r_list.json() == {"detail": "Unauthorized"}

    r = client.post("/api/v1/workouts", json={"name": "Day 1", "date": "2025-09-01"})
    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "Unauthorized"}


def test_invalid_payload_returns_field_errors(client: TestClient):
    r = client.post("/api/v1/workouts", json={"name": "", "date": "2025-13-01"}, headers=USER_A)

    assert r.status_code == 422
    body = r.json()
    assert body["ok"] is False
    assert body["error"] == "Invalid input"
    assert set(body["field_errors"]) == {"name", "date"}


def test_exercises_and_sets_build_the_aggregate(client: TestClient):
    wid = _create(client)["id"]
    r_second = client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Bench Press", "order": 2}, headers=USER_A)
    r_first = client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Back Squat", "order": 1}, headers=USER_A)
    assert r_second.status_code == 201, r_second.text
    squat_id = r_first.json()["value"]["id"]

    client.post(f"/api/v1/exercises/{squat_id}/sets", json={"set_number": 2, "reps": 5, "weight": 225}, headers=USER_A)
    r_set = client.post(f"/api/v1/exercises/{squat_id}/sets", json={"set_number": 1, "reps": 5}, headers=USER_A)
    assert r_set.status_code == 201, r_set.text

    detail = client.get(f"/api/v1/workouts/{wid}", headers=USER_A).json()
    assert [e["name"] for e in detail["exercises"]] == ["Back Squat", "Bench Press"]
    assert [s["set_number"] for s in detail["exercises"][0]["sets"]] == [1, 2]
    assert detail["exercises"][0]["sets"][0]["weight"] is None

    r_foreign = client.post(f"/api/v1/exercises/{squat_id}/sets", json={"reps": 5}, headers=USER_B)
    assert r_foreign.status_code == 404
    assert r_foreign.json()["error"] == "Exercise not found"


def test_delete_removes_children(client: TestClient):
    wid = _create(client)["id"]
    ex = client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Row"}, headers=USER_A).json()["value"]
    client.post(f"/api/v1/exercises/{ex['id']}/sets", json={"reps": 8}, headers=USER_A)

    assert client.delete(f"/api/v1/workouts/{wid}", headers=USER_A).status_code == 204

    r = client.post(f"/api/v1/exercises/{ex['id']}/sets", json={"reps": 8}, headers=USER_A)
    assert r.status_code == 404


def test_seed_exercise_library_present(client: TestClient):
    r = client.get("/api/v1/exercise-library")
    assert r.status_code == 200
    names = {item["name"] for item in r.json()}
    # Expect at least the big three
    assert {"Back Squat", "Bench Press", "Deadlift"}.issubset(names)

    legs = client.get("/api/v1/exercise-library", params={"muscle_group": "legs"}).json()
    assert legs and all(item["muscle_group"] == "legs" for item in legs)

    entry = legs[0]
    assert client.get(f"/api/v1/exercise-library/{entry['id']}").json()["name"] == entry["name"]
    assert client.get("/api/v1/exercise-library/999999").status_code == 404


def test_action_values_keep_null_fields(client: TestClient):
    r_create = client.post("/api/v1/workouts", json={"name": "No Notes", "date": "2025-09-01"}, headers=USER_A)
    body = r_create.json()
    assert set(body) == {"ok", "value"}
    assert body["value"]["notes"] is None

    wid = body["value"]["id"]
    ex = client.post(f"/api/v1/workouts/{wid}/exercises", json={"name": "Push-up"}, headers=USER_A).json()["value"]
    assert ex["notes"] is None
    assert ex["exercise_library_id"] is None

    r_set = client.post(f"/api/v1/exercises/{ex['id']}/sets", json={"reps": 20}, headers=USER_A)
    assert "weight" in r_set.json()["value"]
    assert r_set.json()["value"]["weight"] is None
    assert r_set.json()["value"]["workout_id"] == wid
