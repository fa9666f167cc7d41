import pytest
import psycopg2


def test_register_success(client, mock_db, mocker):
    mock_conn, mock_cursor = mock_db

    # Email lookup finds nothing, then RETURNING user_id, first_name, last_name, email
    mock_cursor.fetchone.side_effect = [
        None,
        {"user_id": 1, "first_name": "Test", "last_name": "User", "email": "test@example.com"},
    ]

    mock_ph = mocker.patch("eventqa.auth_service.credentials.ph")
    mock_ph.hash.return_value = "hashed_secret"

    payload = {
        "email": "test@example.com",
        "password": "password123",
        "first_name": "Test",
        "last_name": "User"
    }

    response = client.post("/api/user/register", json=payload)

    assert response.status_code == 201
    data = response.get_json()
    assert data["success"] is True
    assert data["error"] is None
    assert data["user"]["user_id"] == 1
    assert data["message"] == "User registered successfully."


def test_register_missing_fields(client, mock_db):
    response = client.post("/api/user/register", json={})
    assert response.status_code == 400
    data = response.get_json()
    assert data["success"] is False
    assert data["error"] == "All fields are required."


def test_register_duplicate_email(client, mock_db):
    mock_conn, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = {"user_id": 1}

    payload = {
        "email": "test@example.com",
        "password": "password123",
        "first_name": "Test",
        "last_name": "User"
    }
    response = client.post("/api/user/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "User with this email already exists."


@pytest.mark.parametrize("payload", [
    {"email": 123, "password": "password123", "first_name": "Test", "last_name": "User"},
    {"email": "test@example.com", "password": 12345678, "first_name": "Test", "last_name": "User"},
    {"email": "test@example.com", "password": "password123", "first_name": ["Test"], "last_name": "User"},
])
def test_register_non_string_field_is_400(client, mock_db, payload):
    mock_conn, mock_cursor = mock_db
    response = client.post("/api/user/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"].endswith("must be a string.")
    mock_cursor.execute.assert_not_called()


def test_register_long_first_name_is_400(client, mock_db):
    payload = {
        "email": "test@example.com",
        "password": "password123",
        "first_name": "T" * 101,
        "last_name": "User"
    }
    response = client.post("/api/user/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "First name must be 100 characters or less."


def test_register_json_array_body_is_400(client, mock_db):
    response = client.post("/api/user/register", json=["test@example.com"])
    assert response.status_code == 400
    assert response.get_json()["error"] == "All fields are required."


def test_login_non_string_email_is_400(client, mock_db):
    response = client.post("/api/user/login", json={"email": 123, "password": "password123"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Email must be a string."


def test_login_success(client, mock_db, mocker):
    mock_conn, mock_cursor = mock_db

    mock_cursor.fetchone.return_value = {
        "user_id": 1,
        "first_name": "Test",
        "last_name": "User",
        "email": "test@example.com",
        "password": "hashed_secret",
    }

    mock_ph = mocker.patch("eventqa.auth_service.credentials.ph")
    mock_ph.verify.return_value = True

    response = client.post("/api/user/login", json={
        "email": "test@example.com",
        "password": "password123"
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert "token" in data
    assert data["user"] == {
        "user_id": 1,
        "first_name": "Test",
        "last_name": "User",
        "email": "test@example.com",
    }


def test_login_invalid_credentials(client, mock_db):
    mock_conn, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = None

    response = client.post("/api/user/login", json={
        "email": "test@example.com",
        "password": "wrongpassword"
    })

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid email or password."


def test_get_me_success(client, mock_db, auth_header):
    mock_conn, mock_cursor = mock_db

    mock_cursor.fetchone.return_value = {
        "user_id": 1,
        "email": "test@example.com",
        "first_name": "Test",
        "last_name": "User",
    }

    response = client.get("/api/user/me", headers=auth_header(1))

    assert response.status_code == 200
    data = response.get_json()
    assert data["user"]["email"] == "test@example.com"
    args, _ = mock_cursor.execute.call_args
    assert args[1] == (1,)


def test_get_me_unauthorized(client):
    response = client.get("/api/user/me")
    assert response.status_code == 401
    assert response.get_json()["success"] is False
    assert response.get_json()["error"] == "Unauthorized."


def test_get_me_without_bearer_scheme(client):
    response = client.get("/api/user/me", headers={"Authorization": "Token abc"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "Unauthorized."


def test_get_me_invalid_token_is_401(client):
    response = client.get("/api/user/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid token."


def test_get_me_user_deleted(client, mock_db, auth_header):
    mock_conn, mock_cursor = mock_db
    mock_cursor.fetchone.return_value = None

    response = client.get("/api/user/me", headers=auth_header(5))
    assert response.status_code == 404
    assert response.get_json()["error"] == "User not found."


def test_database_error_is_hidden(client, mock_db):
    mock_conn, mock_cursor = mock_db
    mock_cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

    response = client.post("/api/user/login", json={
        "email": "test@example.com",
        "password": "password123"
    })

    assert response.status_code == 500
    data = response.get_json()
    assert data["error"] == "Database error."
    assert "server closed" not in response.get_data(as_text=True)
