from medbook import storage
from medbook.core.seed import DEMO_PASSWORD, seed_database


def test_seed_is_idempotent(db_session):
    assert seed_database(db_session) is True
    assert seed_database(db_session) is False
    assert len(storage.get_hospitals(db_session)) == 2


def test_seeded_accounts_can_log_in(db_session, client):
    seed_database(db_session)

    response = client.post("/api/login", json={"username": "doctor1", "password": DEMO_PASSWORD})
    assert response.status_code == 200
    assert response.json()["role"] == "doctor"

    cardiology = client.get("/api/doctors", params={"specialization": "Cardiology"}).json()
    assert [d["user"]["name"] for d in cardiology] == ["Dr. Sarah Smith"]
    assert cardiology[0]["hospital"]["name"] == "City General Hospital"

    client.post("/api/login", json={"username": "patient1", "password": DEMO_PASSWORD})
    assert client.get("/api/appointments").json() == []
