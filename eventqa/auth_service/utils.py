"""
Shared authentication helpers.
Provides token creation, verification, and the bearer-token gate.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Callable, Optional

import jwt
from flask import g, request

from eventqa.common.errors import InvalidToken, Unauthorized
from eventqa.config import TOKEN_EXPIRATION_DAYS, get_secret

ALGORITHM = "HS256"


# --- JWT CREATION ---
def create_token(user_id: int, expires_in: Optional[timedelta] = None) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.
        expires_in (timedelta, optional): Lifetime override. Defaults to
            TOKEN_EXPIRATION_DAYS days.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(days=TOKEN_EXPIRATION_DAYS)

    payload = {
        "id": user_id,
        "exp": now + lifetime,
        "iat": now
    }

    return jwt.encode(payload, get_secret(), algorithm=ALGORITHM)


# --- JWT VALIDATION ---
def decode_token(token: str) -> int:
    """
    Check a token's signature and expiry and return the user id it carries.

    Args:
        token (str): JWT string.

    Returns:
        int: user_id claim.

    Raises:
        InvalidToken: Bad signature, malformed token, missing claim, or expired.
    """
    try:
        payload = jwt.decode(token, get_secret(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logging.info("JWT verification error: token expired")
        raise InvalidToken()
    except jwt.InvalidTokenError as e:
        logging.info(f"JWT verification error: {e}")
        raise InvalidToken()

    user_id = payload.get("id")
    if user_id is None:
        raise InvalidToken()
    return user_id


def verify_token(token: str) -> Optional[int]:
    """
    Validate a JWT without raising.

    Args:
        token (str): JWT string.

    Returns:
        int: user_id if valid, None otherwise.
    """
    try:
        return decode_token(token)
    except InvalidToken:
        return None


# --- BEARER GATE ---
def get_bearer_token() -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Raises:
        Unauthorized: Header absent, or no token after the scheme.
    """
    auth = request.headers.get("Authorization", "")
    if not auth:
        raise Unauthorized("Unauthorized: No token provided.")

    scheme, _, token = auth.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Unauthorized: Bearer token missing.")
    return token


def verify_token_from_request() -> int:
    """
    Verify the JWT in the Authorization header of the current request.

    Returns:
        int: The authenticated user's id.

    Raises:
        Unauthorized: No header or no bearer token (401).
        InvalidToken: Verification failed (403).
    """
    return decode_token(get_bearer_token())


def login_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """
    Route decorator: reject the request unless it carries a valid bearer
    token, otherwise expose the caller's id as `g.user_id`.
    """
    @wraps(view)
    def wrapped(*args: Any, **kwargs: Any) -> Any:
        g.user_id = verify_token_from_request()
        return view(*args, **kwargs)

    return wrapped
