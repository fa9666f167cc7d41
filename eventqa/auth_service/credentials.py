"""
Credential store: user registration, login, and profile lookup.

Every function takes an open connection as its first argument; callers own
the connection's lifetime.
"""

import logging
import secrets
from typing import Any, Dict, Tuple

import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from eventqa.auth_service.utils import create_token
from eventqa.common.errors import Conflict, NotFound, Unauthorized
from eventqa.common.validation import clean_text

ph = PasswordHasher()

SALT_BYTES = 16

# Column limits from schema.sql
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PUBLIC_COLUMNS = "user_id, first_name, last_name, email"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_user(conn, first_name: str, last_name: str, email: str, password: str) -> Dict[str, Any]:
    """
    Create a user account.

    Args:
        conn: Open database connection.
        first_name (str), last_name (str), email (str), password (str): All required.

    Returns:
        dict: Public projection (user_id, first_name, last_name, email).

    Raises:
        ValidationError: A field is missing, not a string, or too long.
        Conflict: The email is already registered.
    """
    first_name = clean_text(first_name, "First name", NAME_MAX_LENGTH)
    last_name = clean_text(last_name, "Last name", NAME_MAX_LENGTH)
    email = normalize_email(clean_text(email, "Email", EMAIL_MAX_LENGTH))
    password = clean_text(password, "Password", strip=False)

    with conn.cursor() as cur:
        cur.execute("SELECT user_id FROM users WHERE email = %s;", (email,))
        if cur.fetchone():
            raise Conflict("User with this email already exists.")

    salt = secrets.token_bytes(SALT_BYTES)
    pw_hash = ph.hash(password, salt=salt)

    sql = f"""
        INSERT INTO users (first_name, last_name, email, password, salt)
        VALUES (%s, %s, %s, %s, %s)
        RETURNING {PUBLIC_COLUMNS};
    """

    try:
        with conn.cursor() as cur:
            cur.execute(sql, (first_name, last_name, email, pw_hash, salt.hex()))
            user = cur.fetchone()
        conn.commit()
    except psycopg2.errors.UniqueViolation:
        # Lost a race with a concurrent registration of the same email
        conn.rollback()
        raise Conflict("User with this email already exists.")

    logging.info(f"[Auth] Registered user_id={user['user_id']}")
    return dict(user)


def login_user(conn, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
    """
    Check credentials and issue a token.

    The token is also written to users.session_token. That column is
    bookkeeping only; token verification never reads it.

    Returns:
        tuple: (token, public user projection)

    Raises:
        ValidationError: Email or password missing or not a string.
        Unauthorized: Unknown email or wrong password.
    """
    missing = "Email and password are required."
    email = normalize_email(clean_text(email, "Email", missing_message=missing))
    password = clean_text(password, "Password", missing_message=missing, strip=False)

    with conn.cursor() as cur:
        cur.execute(
            f"SELECT {PUBLIC_COLUMNS}, password FROM users WHERE email = %s;",
            (email,)
        )
        user = cur.fetchone()

    if not user:
        raise Unauthorized("Invalid email or password.")

    try:
        ph.verify(user["password"], password)
    except (VerificationError, InvalidHashError):
        raise Unauthorized("Invalid email or password.")

    token = create_token(user["user_id"])

    with conn.cursor() as cur:
        cur.execute(
            "UPDATE users SET session_token = %s WHERE user_id = %s;",
            (token, user["user_id"])
        )
    conn.commit()

    public = {key: user[key] for key in ("user_id", "first_name", "last_name", "email")}
    return token, public


def get_user_by_id(conn, user_id: int) -> Dict[str, Any]:
    """
    Fetch the public projection of a user.

    Raises:
        NotFound: No such user.
    """
    with conn.cursor() as cur:
        cur.execute(f"SELECT {PUBLIC_COLUMNS} FROM users WHERE user_id = %s;", (user_id,))
        user = cur.fetchone()

    if not user:
        raise NotFound("User not found.")
    return dict(user)
