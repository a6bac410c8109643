"""
Shared pytest fixtures.

Each test gets a fresh in-memory SQLite database wired into the app through a
``get_db`` override, plus helpers to register and log in users.
"""

import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the import-time database and startup seeding out of the way
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DATABASE", "false")

from medbook.database import Base, get_db, init_db  # noqa: E402
from medbook.main import app  # noqa: E402
from medbook.models.hospital import Hospital  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app_with_db(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(app_with_db):
    """Factory for independent clients; each keeps its own session cookie."""
    def factory() -> TestClient:
        return TestClient(app_with_db)

    return factory


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def hospital(db_session) -> Hospital:
    hospital = Hospital(
        name="City General Hospital",
        location="Downtown",
        contact="555-0123",
        specializations=["Cardiology", "Neurology"],
    )
    db_session.add(hospital)
    db_session.commit()
    db_session.refresh(hospital)
    return hospital


def patient_payload(username: str = "alice", password: str = "pw1", name: str = "Alice Johnson") -> dict:
    return {
        "username": username,
        "password": password,
        "role": "patient",
        "name": name,
        "email": f"{username}@example.com",
        "patientDetails": {"age": 30, "gender": "Female", "contact": "555-1001", "medicalHistory": "None"},
    }


def doctor_payload(
    username: str = "doctor1",
    password: str = "pw2",
    name: str = "Dr. Sarah Smith",
    specialization: str = "Cardiology",
    hospital_id=None,
    experience: int = 10,
    fee: int = 150,
) -> dict:
    return {
        "username": username,
        "password": password,
        "role": "doctor",
        "name": name,
        "email": f"{username}@example.com",
        "doctorDetails": {
            "specialization": specialization,
            "hospitalId": hospital_id,
            "experience": experience,
            "availability": ["Mon 09:00-17:00", "Wed 09:00-17:00"],
            "consultationFee": fee,
        },
    }


def register_and_login(client: TestClient, payload: dict) -> dict:
    response = client.post("/api/register", json=payload)
    assert response.status_code == 201, response.text
    response = client.post("/api/login", json={"username": payload["username"], "password": payload["password"]})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def patient_client(make_client) -> TestClient:
    client = make_client()
    register_and_login(client, patient_payload())
    return client


@pytest.fixture
def doctor_client(make_client) -> TestClient:
    client = make_client()
    register_and_login(client, doctor_payload())
    return client


@pytest.fixture
def other_doctor_client(make_client) -> TestClient:
    client = make_client()
    register_and_login(client, doctor_payload(username="doctor2", name="Dr. John Doe", specialization="Pediatrics"))
    return client


@pytest.fixture
def doctor_id(doctor_client) -> int:
    return doctor_client.get("/api/doctors", params={"search": "Sarah"}).json()[0]["id"]


@pytest.fixture
def appointment(patient_client, doctor_id) -> dict:
    response = patient_client.post(
        "/api/appointments",
        json={"doctorId": doctor_id, "date": "2025-01-10T09:00", "reason": "checkup"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def profileless_doctor_client(make_client) -> TestClient:
    """Doctor-role account registered without doctorDetails."""
    client = make_client()
    register_and_login(client, {
        "username": "drnoprofile",
        "password": "pw",
        "role": "doctor",
        "name": "Dr. Nobody",
        "email": "nobody@example.com",
    })
    return client
