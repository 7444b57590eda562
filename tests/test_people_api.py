"""
Integration tests for the people / athletes / coaches endpoints.
"""


class TestPeopleApi:
    def test_list_people(self, client, people):
        response = client.get("/api/people")
        assert response.status_code == 200
        assert {person["id"] for person in response.json()} == {"coach1", "coach2", "a1", "a2", "a3"}

    def test_filter_by_type(self, client, people):
        athletes = client.get("/api/people", params={"type": "athlete"}).json()
        assert {person["id"] for person in athletes} == {"a1", "a2", "a3"}
        assert client.get("/api/people", params={"type": "parent"}).status_code == 400

    def test_role_shortcuts(self, client, people):
        assert [p["id"] for p in client.get("/api/coaches").json()] == ["coach2", "coach1"]  # by name
        assert {p["id"] for p in client.get("/api/athletes").json()} == {"a1", "a2", "a3"}

    def test_get_person(self, client, people):
        person = client.get("/api/people/a1").json()
        assert person == {
            "id": "a1",
            "name": "Ana Pop",
            "type": "athlete",
            "sport": "Football",
            "team": "U21",
            "position": "Winger",
        }
        assert client.get("/api/people/nobody").status_code == 404

    def test_create_person(self, client):
        response = client.post("/api/people", json={"name": "Dee Grant", "type": "Athlete", "sport": "Rugby"})
        assert response.status_code == 201
        created = response.json()
        assert created["id"]
        assert created["type"] == "athlete"

    def test_create_person_with_existing_id_conflicts(self, client, people):
        response = client.post("/api/people", json={"id": "a1", "name": "Dup", "type": "athlete"})
        assert response.status_code == 409

    def test_create_person_validates_type(self, client):
        assert client.post("/api/people", json={"name": "X", "type": "parent"}).status_code == 422
