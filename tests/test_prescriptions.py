import pytest
from sqlalchemy.exc import SQLAlchemyError

from medbook import storage
from medbook.models.appointment import Appointment, AppointmentStatus

MEDICINES = [
    {"name": "Aspirin", "dosage": "100mg", "frequency": "once daily"},
    {"name": "Atorvastatin", "dosage": "20mg", "frequency": "at night"},
]


def _prescribe(client, appointment_id, **extra):
    payload = {"appointmentId": appointment_id, "medicines": MEDICINES, "instructions": "Take with food"}
    payload.update(extra)
    return client.post("/api/prescriptions", json=payload)


@pytest.mark.parametrize("prior", [None, "confirmed", "rejected"])
def test_prescription_completes_appointment(doctor_client, patient_client, appointment, prior):
    if prior:
        doctor_client.patch(f"/api/appointments/{appointment['id']}/status", json={"status": prior})

    response = _prescribe(doctor_client, appointment["id"])
    assert response.status_code == 201
    body = response.json()
    assert body["appointmentId"] == appointment["id"]
    assert body["medicines"] == MEDICINES
    assert body["instructions"] == "Take with food"
    assert body["date"]

    current = patient_client.get(f"/api/appointments/{appointment['id']}").json()
    assert current["status"] == "completed"


def test_only_one_prescription_per_appointment(doctor_client, appointment):
    assert _prescribe(doctor_client, appointment["id"]).status_code == 201
    response = _prescribe(doctor_client, appointment["id"])
    assert response.status_code == 400
    assert response.json()["message"] == "Prescription already exists for this appointment"


def test_foreign_doctor_cannot_prescribe(other_doctor_client, patient_client, appointment):
    response = _prescribe(other_doctor_client, appointment["id"])
    assert response.status_code == 403

    assert patient_client.get("/api/prescriptions").json() == []
    assert patient_client.get(f"/api/appointments/{appointment['id']}").json()["status"] == "pending"


def test_doctor_without_profile_cannot_prescribe(profileless_doctor_client, patient_client, appointment):
    response = _prescribe(profileless_doctor_client, appointment["id"])
    assert response.status_code == 403
    assert response.json()["message"] == "Doctor profile required"

    assert patient_client.get("/api/prescriptions").json() == []
    assert patient_client.get(f"/api/appointments/{appointment['id']}").json()["status"] == "pending"


def test_patient_cannot_prescribe(patient_client, appointment):
    assert _prescribe(patient_client, appointment["id"]).status_code == 401


def test_prescribe_requires_session(client):
    assert _prescribe(client, 1).status_code == 401


def test_prescribe_unknown_appointment(doctor_client):
    assert _prescribe(doctor_client, 999).status_code == 404


def test_prescription_validation(doctor_client, appointment):
    response = _prescribe(doctor_client, appointment["id"], medicines=[{"name": "Aspirin"}])
    assert response.status_code == 400


def test_listing_is_scoped_to_caller(doctor_client, patient_client, other_doctor_client, appointment):
    created = _prescribe(doctor_client, appointment["id"]).json()

    assert [p["id"] for p in doctor_client.get("/api/prescriptions").json()] == [created["id"]]
    assert [p["id"] for p in patient_client.get("/api/prescriptions").json()] == [created["id"]]
    assert other_doctor_client.get("/api/prescriptions").json() == []

    filtered = patient_client.get("/api/prescriptions", params={"appointmentId": appointment["id"]}).json()
    assert len(filtered) == 1
    assert patient_client.get("/api/prescriptions", params={"appointmentId": 999}).json() == []


def test_listing_requires_session(client):
    assert client.get("/api/prescriptions").status_code == 401


def test_prescription_pdf(doctor_client, patient_client, other_doctor_client, appointment):
    created = _prescribe(doctor_client, appointment["id"]).json()
    url = f"/api/prescriptions/{created['id']}/pdf"

    for client in (doctor_client, patient_client):
        response = client.get(url)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    assert other_doctor_client.get(url).status_code == 403
    assert patient_client.get("/api/prescriptions/999/pdf").status_code == 404


def test_issue_prescription_rolls_back_both_writes(db_session, appointment, monkeypatch):
    """A failed commit must leave neither the prescription nor the status change behind."""
    record = db_session.get(Appointment, appointment["id"])

    def failing_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(SQLAlchemyError):
        storage.issue_prescription(db_session, record, MEDICINES)
    monkeypatch.undo()

    db_session.expire_all()
    assert db_session.get(Appointment, appointment["id"]).status == AppointmentStatus.PENDING
    assert storage.get_prescriptions_by_appointment(db_session, appointment["id"]) == []
