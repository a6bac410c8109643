from conftest import doctor_payload, patient_payload, register_and_login


def test_register_returns_created_user_without_password(client):
    response = client.post("/api/register", json=patient_payload())
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "alice"
    assert body["role"] == "patient"
    assert body["email"] == "alice@example.com"
    assert "password" not in body
    assert "createdAt" in body


def test_register_duplicate_username(client):
    assert client.post("/api/register", json=patient_payload()).status_code == 201
    response = client.post("/api/register", json=patient_payload())
    assert response.status_code == 400
    assert response.json()["message"] == "Username already exists"


def test_register_validation_error_names_field(client):
    payload = patient_payload()
    del payload["name"]
    response = client.post("/api/register", json=payload)
    assert response.status_code == 400
    body = response.json()
    assert body["field"] == "name"
    assert body["message"]


def test_register_rejects_unknown_role(client):
    payload = patient_payload()
    payload["role"] = "nurse"
    assert client.post("/api/register", json=payload).status_code == 400


def test_register_rejects_details_for_other_role(client):
    payload = patient_payload()
    payload["doctorDetails"] = doctor_payload()["doctorDetails"]
    response = client.post("/api/register", json=payload)
    assert response.status_code == 400


def test_register_rejects_password_over_72_bytes(client):
    response = client.post("/api/register", json=patient_payload(password="x" * 100))
    assert response.status_code == 400
    assert response.json()["field"] == "password"

    # Multi-byte characters count by their encoded length
    response = client.post("/api/register", json=patient_payload(username="bob", password="é" * 37))
    assert response.status_code == 400

    assert client.post("/api/login", json={"username": "alice", "password": "x" * 100}).status_code == 401


def test_register_accepts_72_byte_password(make_client):
    client = make_client()
    register_and_login(client, patient_payload(password="x" * 72))
    assert client.get("/api/user").json()["username"] == "alice"


def test_register_doctor_with_unknown_hospital(client):
    response = client.post("/api/register", json=doctor_payload(hospital_id=999))
    assert response.status_code == 400
    assert response.json()["message"] == "Hospital not found"


def test_login_and_current_user(make_client):
    client = make_client()
    client.post("/api/register", json=patient_payload())
    client.post("/api/logout")

    assert client.get("/api/user").status_code == 401

    response = client.post("/api/login", json={"username": "alice", "password": "pw1"})
    assert response.status_code == 200
    assert response.json()["username"] == "alice"

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["name"] == "Alice Johnson"


def test_login_wrong_password(client):
    client.post("/api/register", json=patient_payload())
    response = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid username or password"


def test_login_unknown_user(client):
    response = client.post("/api/login", json={"username": "nobody", "password": "pw"})
    assert response.status_code == 401


def test_logout_clears_session(patient_client):
    assert patient_client.get("/api/user").status_code == 200
    assert patient_client.post("/api/logout").status_code == 200
    assert patient_client.get("/api/user").status_code == 401


def test_logout_without_session(client):
    assert client.post("/api/logout").status_code == 200


def test_password_is_stored_hashed(client, db_session):
    from medbook.models.user import User

    client.post("/api/register", json=patient_payload())
    user = db_session.query(User).filter(User.username == "alice").one()
    assert user.password != "pw1"
    assert user.password.startswith("$2")
