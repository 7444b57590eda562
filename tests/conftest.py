"""
Pytest configuration and fixtures

Every test runs against a fresh in-memory SQLite database: the schema is
dropped and recreated around each test so nothing leaks between them.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from fastapi.testclient import TestClient

from squadboard.main import app
from squadboard.database import Base, SessionLocal, engine
from squadboard.models.person import Person
from squadboard.client.api_client import TaskApiClient


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def people():
    """Two coaches and three athletes."""
    db = SessionLocal()
    try:
        db.add_all(
            [
                Person(id="coach1", name="Sarah Johnson", type="coach", sport="General", position="Head Coach"),
                Person(id="coach2", name="Mike Chen", type="coach", sport="Football", position="Physio"),
                Person(id="a1", name="Ana Pop", type="athlete", sport="Football", team="U21", position="Winger"),
                Person(id="a2", name="Ben Ortiz", type="athlete", sport="Football", team="U21", position="Keeper"),
                Person(id="a3", name="Cleo Marsh", type="athlete", sport="Football", team="First", position="Striker"),
            ]
        )
        db.commit()
    finally:
        db.close()
    return {"coaches": ["coach1", "coach2"], "athletes": ["a1", "a2", "a3"]}


@pytest.fixture
def task_payload():
    return {
        "name": "Hamstring follow-up",
        "description": "Check recovery after the weekend match",
        "type": "injury",
        "status": "new",
        "priority": "low",
        "deadline": "2024-03-12T09:00:00",
        "assigneeId": "coach1",
        "creatorId": "coach2",
        "relatedAthleteIds": ["a1", "a2"],
    }


@pytest.fixture
async def async_client():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
def api(async_client):
    return TaskApiClient(async_client)
