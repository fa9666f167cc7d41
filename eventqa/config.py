"""
Application configuration.

Values come from the process environment, with a local `.env` file loaded
once here. Secrets are read lazily so importing a module never requires them.
"""

import os
from typing import List

from dotenv import load_dotenv

# Load .env only once here
load_dotenv()

TOKEN_EXPIRATION_DAYS = int(os.getenv("TOKEN_EXPIRATION_DAYS", 7))
PORT = int(os.getenv("PORT", 3344))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def get_secret() -> str:
    """
    Return the token signing secret.

    `SECRET` is the canonical name; `JWT_SECRET` is accepted as a fallback.

    Raises:
        RuntimeError: If neither variable is set.
    """
    secret = os.getenv("SECRET") or os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("SECRET is missing. Set it in .env")
    return secret


def get_database_url() -> str:
    """
    Return the PostgreSQL connection string.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")
    return url


def get_cors_origins() -> List[str]:
    """Comma-separated CORS_ORIGINS, defaulting to every origin."""
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
