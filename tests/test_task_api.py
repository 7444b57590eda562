"""
Integration tests for the /api/tasks endpoints

Covers the assembled response shape, sparse updates, related-athlete
replacement and delete semantics.
"""
from datetime import datetime

from squadboard.database import SessionLocal
from squadboard.models.task import TaskAthlete


def stamp(task):
    return datetime.fromisoformat(task["updatedAt"])


def create(client, payload):
    response = client.post("/api/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateAndRead:
    def test_create_returns_assembled_task(self, client, people, task_payload):
        task = create(client, task_payload)

        assert task["id"]
        assert task["name"] == "Hamstring follow-up"
        assert task["assigneeId"] == "coach1"
        assert task["creatorId"] == "coach2"
        assert sorted(task["relatedAthleteIds"]) == ["a1", "a2"]
        assert task["createdAt"] and task["updatedAt"]
        assert task["deadline"].startswith("2024-03-12T09:00:00")

    def test_get_by_id_has_same_shape(self, client, people, task_payload):
        created = create(client, task_payload)

        response = client.get(f"/api/tasks/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_list_always_has_athlete_array(self, client, people, task_payload):
        create(client, task_payload)
        create(client, {**task_payload, "name": "Solo", "relatedAthleteIds": []})
        bare = dict(task_payload, name="Bare")
        bare.pop("relatedAthleteIds")
        create(client, bare)

        tasks = client.get("/api/tasks").json()
        assert len(tasks) == 3
        by_name = {task["name"]: task for task in tasks}
        assert sorted(by_name["Hamstring follow-up"]["relatedAthleteIds"]) == ["a1", "a2"]
        assert by_name["Solo"]["relatedAthleteIds"] == []
        assert by_name["Bare"]["relatedAthleteIds"] == []

    def test_creator_defaults_to_assignee(self, client, people, task_payload):
        payload = dict(task_payload)
        payload.pop("creatorId")
        assert create(client, payload)["creatorId"] == "coach1"

    def test_defaults_for_status_and_priority(self, client, people):
        task = create(client, {"name": "Call parents", "type": "admin", "assigneeId": "coach1"})
        assert task["status"] == "new"
        assert task["priority"] == "medium"
        assert task["deadline"] is None

    def test_snake_case_input_is_accepted(self, client, people):
        task = create(client, {"name": "Scan", "type": "medical", "assignee_id": "coach2", "related_athlete_ids": ["a3"]})
        assert task["assigneeId"] == "coach2"
        assert task["relatedAthleteIds"] == ["a3"]

    def test_missing_task_is_404(self, client):
        response = client.get("/api/tasks/does-not-exist")
        assert response.status_code == 404
        assert response.json()["detail"] == "Task not found"


class TestCreateValidation:
    def test_rejects_empty_name(self, client, people, task_payload):
        assert client.post("/api/tasks", json={**task_payload, "name": "  "}).status_code == 422

    def test_rejects_unknown_status(self, client, people, task_payload):
        assert client.post("/api/tasks", json={**task_payload, "status": "frobnicate"}).status_code == 422

    def test_rejects_unknown_priority(self, client, people, task_payload):
        assert client.post("/api/tasks", json={**task_payload, "priority": "urgent"}).status_code == 422

    def test_rejects_unknown_type(self, client, people, task_payload):
        assert client.post("/api/tasks", json={**task_payload, "type": "yoga"}).status_code == 422

    def test_requires_assignee(self, client, people, task_payload):
        payload = dict(task_payload)
        payload.pop("assigneeId")
        assert client.post("/api/tasks", json=payload).status_code == 422

    def test_related_ids_must_be_athletes(self, client, people, task_payload):
        response = client.post("/api/tasks", json={**task_payload, "relatedAthleteIds": ["a1", "coach2", "ghost"]})
        assert response.status_code == 422
        assert "coach2" in response.json()["detail"]
        assert client.get("/api/tasks").json() == []


class TestPartialUpdate:
    def test_only_provided_fields_change(self, client, people, task_payload):
        before = create(client, task_payload)

        response = client.put(f"/api/tasks/{before['id']}", json={"priority": "high"})
        assert response.status_code == 200
        after = response.json()

        assert after["priority"] == "high"
        assert stamp(after) > stamp(before)
        unchanged = {k: v for k, v in before.items() if k not in ("priority", "updatedAt")}
        assert {k: after[k] for k in unchanged} == unchanged

    def test_updated_at_strictly_increases_on_rapid_updates(self, client, people, task_payload):
        task = create(client, task_payload)
        stamps = [stamp(task)]
        for status in ("in_progress", "pending", "completed"):
            stamps.append(stamp(client.put(f"/api/tasks/{task['id']}", json={"status": status}).json()))
        assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))

    def test_patch_behaves_like_put(self, client, people, task_payload):
        task = create(client, task_payload)
        response = client.patch(f"/api/tasks/{task['id']}", json={"name": "Renamed"})
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["description"] == task_payload["description"]

    def test_related_athletes_are_replaced_not_merged(self, client, people, task_payload):
        task = create(client, task_payload)

        updated = client.put(f"/api/tasks/{task['id']}", json={"relatedAthleteIds": ["a3"]}).json()
        assert updated["relatedAthleteIds"] == ["a3"]

        db = SessionLocal()
        try:
            rows = db.query(TaskAthlete).filter(TaskAthlete.task_id == task["id"]).all()
            assert [row.athlete_id for row in rows] == ["a3"]
        finally:
            db.close()

    def test_absent_related_athletes_are_left_alone(self, client, people, task_payload):
        task = create(client, task_payload)
        updated = client.put(f"/api/tasks/{task['id']}", json={"name": "Still linked"}).json()
        assert sorted(updated["relatedAthleteIds"]) == ["a1", "a2"]

    def test_empty_related_list_clears_links(self, client, people, task_payload):
        task = create(client, task_payload)
        updated = client.put(f"/api/tasks/{task['id']}", json={"relatedAthleteIds": []}).json()
        assert updated["relatedAthleteIds"] == []

    def test_null_and_empty_assignee_unassign(self, client, people, task_payload):
        task = create(client, task_payload)
        assert client.put(f"/api/tasks/{task['id']}", json={"assigneeId": ""}).json()["assigneeId"] is None

        client.put(f"/api/tasks/{task['id']}", json={"assigneeId": "coach2"})
        assert client.put(f"/api/tasks/{task['id']}", json={"assigneeId": None}).json()["assigneeId"] is None

    def test_absent_assignee_is_no_change(self, client, people, task_payload):
        task = create(client, task_payload)
        assert client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}).json()["assigneeId"] == "coach1"

    def test_deadline_can_be_cleared(self, client, people, task_payload):
        task = create(client, task_payload)
        assert client.put(f"/api/tasks/{task['id']}", json={"deadline": None}).json()["deadline"] is None

    def test_timezone_aware_deadline_is_stored_as_utc(self, client, people, task_payload):
        task = create(client, task_payload)
        updated = client.put(f"/api/tasks/{task['id']}", json={"deadline": "2024-03-12T10:00:00+02:00"}).json()
        assert updated["deadline"].startswith("2024-03-12T08:00:00")

    def test_required_fields_cannot_be_nulled(self, client, people, task_payload):
        task = create(client, task_payload)
        for field in ("name", "status", "priority", "type"):
            assert client.put(f"/api/tasks/{task['id']}", json={field: None}).status_code == 422

    def test_creator_is_immutable(self, client, people, task_payload):
        task = create(client, task_payload)
        updated = client.put(f"/api/tasks/{task['id']}", json={"creatorId": "coach1"}).json()
        assert updated["creatorId"] == "coach2"

    def test_invalid_values_are_rejected(self, client, people, task_payload):
        task = create(client, task_payload)
        assert client.put(f"/api/tasks/{task['id']}", json={"status": "archived"}).status_code == 422
        assert client.put(f"/api/tasks/{task['id']}", json={"relatedAthleteIds": ["coach1"]}).status_code == 422
        assert sorted(client.get(f"/api/tasks/{task['id']}").json()["relatedAthleteIds"]) == ["a1", "a2"]

    def test_update_missing_task_is_404(self, client):
        assert client.put("/api/tasks/ghost", json={"name": "x"}).status_code == 404


class TestDelete:
    def test_delete_removes_task_and_links(self, client, people, task_payload):
        task = create(client, task_payload)

        assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
        assert client.get(f"/api/tasks/{task['id']}").status_code == 404

        db = SessionLocal()
        try:
            assert db.query(TaskAthlete).filter(TaskAthlete.task_id == task["id"]).count() == 0
        finally:
            db.close()

    def test_delete_is_idempotent(self, client):
        assert client.delete("/api/tasks/never-existed").status_code == 204
