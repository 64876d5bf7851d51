"""
Central pytest configuration for the Kingdom Hospital API tests.

The environment is set before any application module is imported so the
lazy engine is built on an in-memory SQLite database, file logging is off
and rate limiting is disabled.
"""

import os
import sys
from pathlib import Path

import pytest

# Add backend directory to sys.path for imports to work
backend_root = Path(__file__).parent.parent
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

TEST_DATABASE_URL = "sqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["LOG_TO_FILE"] = "0"
os.environ["SEED_ON_STARTUP"] = "true"

from kingdom_hospital.db.session import (  # noqa: E402
    SessionLocal,
    create_tables,
    drop_tables,
)
from tests.config.markers import *  # noqa: E402,F401,F403

# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def fresh_database():
    """Empty schema for every test (the in-memory database is shared)."""
    drop_tables()
    create_tables()
    yield
    drop_tables()


@pytest.fixture
def db_session(fresh_database):
    """A session on the freshly created schema, closed after the test."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# =====================================================
# FLASK APPLICATION FIXTURES
# =====================================================


@pytest.fixture
def app(fresh_database):
    """Flask application bound to the test database, specialties seeded."""
    from kingdom_hospital.main import create_app

    app = create_app()
    app.config.update({"TESTING": True})
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


# =====================================================
# API DATA FIXTURES
# =====================================================


@pytest.fixture
def specialty_id(client) -> int:
    """Id of a seeded specialty."""
    response = client.get("/api/specialties")
    return response.get_json()["data"][0]["id"]


@pytest.fixture
def doctor(client, specialty_id) -> dict:
    response = client.post(
        "/api/doctors",
        json={"firstName": "Gregory", "lastName": "House", "specialtyId": specialty_id},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def other_doctor(client, specialty_id) -> dict:
    response = client.post(
        "/api/doctors",
        json={"firstName": "Lisa", "lastName": "Cuddy", "specialtyId": specialty_id},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def patient(client) -> dict:
    response = client.post(
        "/api/patients",
        json={"firstName": "Alice", "lastName": "Martin", "birthDate": "1990-01-01"},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def other_patient(client) -> dict:
    response = client.post(
        "/api/patients",
        json={"firstName": "Bruno", "lastName": "Lefevre", "birthDate": "1975-06-30"},
    )
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def medication(client) -> dict:
    response = client.post(
        "/api/medications",
        json={
            "name": "Paracetamol",
            "dosageForm": "Tablet",
            "strength": "500 mg",
            "atcCode": "N02BE01",
        },
    )
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def consultation(client, doctor, patient) -> dict:
    response = client.post(
        "/api/consultations",
        json={
            "doctorId": doctor["id"],
            "patientId": patient["id"],
            "date": "2024-01-10",
            "hour": "09:00",
            "reason": "Chest pain",
        },
    )
    assert response.status_code == 201
    return response.get_json()["data"]
