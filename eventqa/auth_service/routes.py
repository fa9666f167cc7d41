"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Current user retrieval (/me)

Token logic is delegated to `auth_service.utils`, persistence to
`auth_service.credentials`.
"""

import logging
from typing import Tuple

from flask import Blueprint, request, Response

from eventqa.auth_service.credentials import get_user_by_id, login_user, register_user
from eventqa.auth_service.utils import verify_token_from_request
from eventqa.common.errors import InvalidToken, Unauthorized
from eventqa.common.responses import register_error_handlers, success
from eventqa.database.db_connection import get_db

auth_bp = Blueprint("auth", __name__)
register_error_handlers(auth_bp)


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request to the authentication service.
    Headers are left out so tokens never reach the log.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - first_name (str)
    - last_name (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: JSON with the created user.
        400: Missing fields or email already exists.
        500: Database error.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    with get_db() as conn:
        user = register_user(
            conn,
            data.get("first_name"),
            data.get("last_name"),
            data.get("email"),
            data.get("password"),
        )

    return success(201, user=user, message="User registered successfully.")


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with token and user.
        400: Missing credentials.
        401: Invalid credentials (wrong password or email).
        500: Database error.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    with get_db() as conn:
        token, user = login_user(conn, data.get("email"), data.get("password"))

    return success(token=token, user=user)


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the current user's public profile.

    Requires Authorization header: Bearer <token>
    Every token failure here is a 401.

    Returns:
        200: User profile object.
        401: Authentication failure.
        404: User not found in DB (deleted after the token was issued).
        500: Database error.
    """
    try:
        user_id = verify_token_from_request()
    except InvalidToken:
        raise Unauthorized("Invalid token.")
    except Unauthorized:
        raise Unauthorized("Unauthorized.")

    with get_db() as conn:
        user = get_user_by_id(conn, user_id)

    return success(user=user)
