import os

# Ensure SECRET is set before any token is issued
os.environ["SECRET"] = "test_secret"

import pytest
from unittest.mock import MagicMock

from eventqa.auth_service.utils import create_token
from eventqa.gateway.server import create_app


@pytest.fixture
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def build_mock_conn():
    """
    A connection/cursor pair that works with
    `with get_db() as conn:` and `with conn.cursor() as cur:`.
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()

    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


@pytest.fixture
def conn():
    """Mock connection handed straight to registry/ledger functions."""
    return build_mock_conn()


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor for every route module.
    """
    mock_conn, mock_cursor = build_mock_conn()

    mocker.patch("eventqa.auth_service.routes.get_db", return_value=mock_conn)
    mocker.patch("eventqa.events_service.routes.get_db", return_value=mock_conn)

    return mock_conn, mock_cursor


@pytest.fixture
def auth_header():
    """Build an Authorization header for the given user id."""
    def _make(user_id=1):
        return {"Authorization": f"Bearer {create_token(user_id)}"}
    return _make
