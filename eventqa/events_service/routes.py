"""
Events service routes: event CRUD, attendance, questions and votes.

Open endpoints: /all-events and /questions. Everything else goes through
`login_required`, which puts the caller's id on `g.user_id`.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, g, request, Response

from eventqa.auth_service.utils import login_required
from eventqa.common.responses import register_error_handlers, success
from eventqa.database.db_connection import get_db
from eventqa.events_service.engagement import (
    ask_question,
    attend_event,
    list_questions,
    vote_question,
)
from eventqa.events_service.registry import (
    create_event,
    delete_event,
    get_event_detail,
    list_all_events,
    list_events_by_creator,
    update_event,
)

events_bp = Blueprint("events", __name__)
register_error_handlers(events_bp)


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


def get_json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


# --- EVENTS ---
@events_bp.route("/", methods=["POST"], strict_slashes=False)
@login_required
def create() -> Tuple[Response, int]:
    """
    Create an event owned by the caller.

    Expects JSON with name, description, location, start_date,
    close_registration and max_attendees.

    Returns:
        201: { "event_id": int, "event": {...} }
        400: Validation error.
    """
    with get_db() as conn:
        event = create_event(conn, g.user_id, get_json_body())

    return success(
        201,
        message="Event created successfully",
        event_id=event["event_id"],
        event=event,
    )


@events_bp.route("/", methods=["GET"], strict_slashes=False)
@login_required
def list_own_events() -> Tuple[Response, int]:
    """Events created by the caller."""
    with get_db() as conn:
        events = list_events_by_creator(conn, g.user_id)
    return success(events=events)


@events_bp.route("/all-events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """Every event. Public."""
    with get_db() as conn:
        events = list_all_events(conn)
    return success(events=events)


@events_bp.route("/<int(max=2147483647):event_id>", methods=["GET"])
@login_required
def get_event(event_id: int) -> Tuple[Response, int]:
    """
    Get a single event by ID.

    Includes attendee_count, whether the caller has joined (is_joined), and
    the event's questions, each flagged with whether the caller voted.

    Returns:
        200: Event detail object.
        404: Event not found.
    """
    with get_db() as conn:
        event = get_event_detail(conn, event_id, g.user_id)
    return success(event=event)


@events_bp.route("/<int(max=2147483647):event_id>", methods=["PUT"])
@login_required
def update(event_id: int) -> Tuple[Response, int]:
    """
    Update an event. Requires the full field set and that the caller
    created the event.

    Returns:
        200: Updated event.
        400: Validation error.
        404: Event not found or caller is not the creator.
    """
    with get_db() as conn:
        event = update_event(conn, event_id, g.user_id, get_json_body())
    return success(message="Event updated successfully", event=event)


@events_bp.route("/<int(max=2147483647):event_id>", methods=["DELETE"])
@login_required
def delete(event_id: int) -> Tuple[Response, int]:
    """
    Delete an event if the caller created it.
    """
    with get_db() as conn:
        delete_event(conn, event_id, g.user_id)
    return success(message="Event deleted successfully")


# --- ATTENDANCE ---
@events_bp.route("/attend", methods=["POST"])
@login_required
def attend() -> Tuple[Response, int]:
    """
    Join an event.

    Expects JSON: { "event_id": int }

    Returns:
        200: Joined.
        400: Missing event_id, or already attending.
        404: Event not found.
    """
    data = get_json_body()
    with get_db() as conn:
        attend_event(conn, data.get("event_id"), g.user_id)
    return success(message="Successfully joined the event.")


# --- QUESTIONS ---
@events_bp.route("/questions", methods=["GET"])
def questions_for_event() -> Tuple[Response, int]:
    """
    List questions for ?event_id=<id>. Public.
    """
    with get_db() as conn:
        questions = list_questions(conn, request.args.get("event_id"))
    return success(questions=questions)


@events_bp.route("/question", methods=["POST"])
@login_required
def create_question() -> Tuple[Response, int]:
    """
    Ask a question on an event.

    Expects JSON: { "event_id": int, "question": str }

    Returns:
        201: The stored question.
        400: Missing event_id or question text.
        404: Event not found.
    """
    data = get_json_body()
    with get_db() as conn:
        question = ask_question(conn, data.get("event_id"), g.user_id, data.get("question"))
    return success(201, message="Question added successfully.", question=question)


# --- VOTES ---
@events_bp.route("/vote", methods=["POST"])
@login_required
def vote() -> Tuple[Response, int]:
    """
    Vote on a question. One vote per user per question.

    Expects JSON: { "question_id": int }

    Returns:
        200: Vote recorded, with the updated question.
        400: Missing question_id, or already voted.
        404: Question not found.
    """
    data = get_json_body()
    with get_db() as conn:
        question = vote_question(conn, data.get("question_id"), g.user_id)
    return success(message="Vote recorded.", question=question)
