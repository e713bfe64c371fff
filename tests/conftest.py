import mongomock
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from perftrack.auth import create_access_token
from perftrack.db.mongo import DocumentStore
from perftrack.db.sql import MetricsStore
from perftrack.main import create_app
from perftrack.services.lookups import TAG_FIELDS
from perftrack.settings import Settings


@pytest.fixture
def settings():
    return Settings(secret_key="test-secret", mongo_db="test_db", database_url="sqlite://")


@pytest.fixture
def docs():
    # in-memory mongo
    return DocumentStore("mongodb://test", "test_db", client=mongomock.MongoClient())


@pytest.fixture
def metrics():
    # one shared in-memory sqlite connection for every thread
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    store = MetricsStore("sqlite://", engine=engine)
    store.create_all()
    return store


@pytest.fixture
def app(settings, docs, metrics):
    return create_app(settings=settings, docs=docs, metrics=metrics)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def _headers(settings, role, object_id=None, sub="user-1"):
    token = create_access_token(settings, sub, role, object_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(settings):
    return _headers(settings, "ADMIN", sub="admin-1")


@pytest.fixture
def coach(docs):
    coach = {"first_name": "Casey", "last_name": "Stone", "email": "casey@example.com", "teams": []}
    docs.coaches.insert_one(coach)
    return coach


@pytest.fixture
def coach_headers(settings, coach):
    return _headers(settings, "COACH", str(coach["_id"]), sub="coach-1")


@pytest.fixture
def athlete(docs):
    doc = {
        "first_name": "Jordan",
        "last_name": "Reyes",
        "email": "jordan@example.com",
        "level": "High School",
        "u": "org-1",
        "program_type": "Pitching",
        "weight": 170,
        "coaches_notes": [],
        "goals": [],
        "assessments": [],
    }
    for field in TAG_FIELDS.values():
        doc[field] = []
    docs.athletes.insert_one(doc)
    return doc


@pytest.fixture
def athlete_id(athlete):
    return str(athlete["_id"])


@pytest.fixture
def athlete_headers(settings, athlete_id):
    return _headers(settings, "ATHLETE", athlete_id, sub="athlete-1")
