"""
Uniform response envelope helpers.

Every endpoint answers with:
    {"success": bool, "error": str | None, <payload keys>...}

The payload key differs per endpoint (`user`, `token`, `event`, `events`,
`questions`, `message`), so callers pass them as keyword arguments.
"""

import logging
from typing import Any, Tuple, Union

import psycopg2
from flask import Blueprint, Flask, jsonify, Response
from werkzeug.exceptions import HTTPException

from eventqa.common.errors import ApiError, Internal


def success(status: int = 200, **payload: Any) -> Tuple[Response, int]:
    """
    Build a success envelope.

    Args:
        status (int): HTTP status code, 200 unless a resource was created.
        **payload: Endpoint-specific top-level keys.

    Returns:
        tuple: (JSON response, status code)
    """
    body = {"success": True, "error": None}
    body.update(payload)
    return jsonify(body), status


def failure(message: str, status: int) -> Tuple[Response, int]:
    """Build an error envelope with the given message and status."""
    return jsonify({"success": False, "error": message, "status": status}), status


def handle_api_error(err: ApiError) -> Tuple[Response, int]:
    return failure(err.message, err.status)


def handle_database_error(err: psycopg2.Error) -> Tuple[Response, int]:
    """
    Translate an unexpected storage failure into a generic 500.

    The driver's message is logged, never returned to the caller.
    """
    logging.exception(f"Database error: {err}")
    internal = Internal()
    return failure(internal.message, internal.status)


def handle_http_error(err: HTTPException) -> Tuple[Response, int]:
    """Routing-level failures (unknown path, wrong method) in envelope form."""
    if err.code == 404:
        return failure("Route not found", 404)
    return failure(err.description or err.name, err.code or 500)


def handle_unexpected_error(err: Exception) -> Tuple[Response, int]:
    logging.exception(f"Unhandled error: {err}")
    return failure("Internal server error.", 500)


def register_error_handlers(target: Union[Flask, Blueprint]) -> None:
    """Attach the envelope error handlers to an app or a blueprint."""
    target.register_error_handler(ApiError, handle_api_error)
    target.register_error_handler(psycopg2.Error, handle_database_error)


def register_app_error_handlers(app: Flask) -> None:
    """
    App-wide handlers: everything a blueprint handles, plus routing errors
    and a last-resort 500, so no request ends in a non-envelope crash page.
    """
    register_error_handlers(app)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)
