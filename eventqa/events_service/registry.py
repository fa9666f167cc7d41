"""
Event registry: create, read, update and delete events.

Writes are ownership-conditional: update and delete match on both the
event id and the creator id in a single statement, so "missing" and
"not yours" are the same outcome.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from eventqa.common.errors import NotFound, NotFoundOrForbidden, ValidationError
from eventqa.common.validation import clean_text, parse_positive_int

# --- CONSTANTS FOR VALIDATION ---
EVENT_FIELDS = (
    "name",
    "description",
    "location",
    "start_date",
    "close_registration",
    "max_attendees",
)
DATE_FIELDS = ("start_date", "close_registration")
NAME_MAX_LENGTH = 200
LOCATION_MAX_LENGTH = 255


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 or datetime-local string to a datetime object.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val or not isinstance(val, str):
        return None
    try:
        # Handles 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith('Z'):
            val = val[:-1] + '+00:00'
        return datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None


def serialize_row(row: Any) -> Dict[str, Any]:
    """Convert a DictRow to a plain dict with ISO-formatted dates."""
    out = dict(row)
    for key, value in out.items():
        if isinstance(value, (datetime, date)):
            out[key] = value.isoformat()
    return out


def validate_event_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check that a create/update payload carries the full field set.

    Returns:
        dict: Cleaned values keyed by EVENT_FIELDS.

    Raises:
        ValidationError: A field is missing or malformed.
    """
    if any(data.get(field) in (None, "") for field in EVENT_FIELDS):
        raise ValidationError("All fields are required.")

    cleaned = {
        "name": clean_text(data["name"], "Name", NAME_MAX_LENGTH, strip=False),
        "description": clean_text(data["description"], "Description", strip=False),
        "location": clean_text(data["location"], "Location", LOCATION_MAX_LENGTH, strip=False),
    }

    for field in DATE_FIELDS:
        parsed = parse_dt(data[field])
        if not parsed:
            raise ValidationError("Invalid date format. Use ISO-8601.")
        cleaned[field] = parsed

    max_attendees = parse_positive_int(data["max_attendees"])
    if max_attendees is None:
        raise ValidationError("max_attendees must be a positive integer.")
    cleaned["max_attendees"] = max_attendees

    return cleaned


def create_event(conn, creator_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create an event owned by `creator_id`.

    Returns:
        dict: The stored event row.
    """
    fields = validate_event_fields(data)

    sql = """
        INSERT INTO events (
            name, description, location, start_date,
            close_registration, max_attendees, creator_id
        ) VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING *;
    """

    with conn.cursor() as cur:
        cur.execute(sql, (
            fields["name"], fields["description"], fields["location"],
            fields["start_date"], fields["close_registration"],
            fields["max_attendees"], creator_id
        ))
        event = cur.fetchone()
    conn.commit()

    logging.info(f"[Events] user_id={creator_id} created event_id={event['event_id']}")
    return serialize_row(event)


def list_events_by_creator(conn, user_id: int) -> List[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute(
            "SELECT * FROM events WHERE creator_id = %s ORDER BY start_date, event_id;",
            (user_id,)
        )
        return [serialize_row(row) for row in cur.fetchall()]


def list_all_events(conn) -> List[Dict[str, Any]]:
    with conn.cursor() as cur:
        cur.execute("SELECT * FROM events ORDER BY start_date, event_id;")
        return [serialize_row(row) for row in cur.fetchall()]


def get_event_detail(conn, event_id: int, requester_id: Optional[int] = None) -> Dict[str, Any]:
    """
    Get a single event with its attendance and questions.

    Lookups run in order and stop at the first failure: the event itself,
    then the attendee count, then whether the requester has joined, then
    the questions with per-question `user_voted` flags.

    Args:
        conn: Open database connection.
        event_id (int): Event to load.
        requester_id (int, optional): Caller's id. Without it `is_joined`
            and every `user_voted` are False.

    Returns:
        dict: Event fields plus attendee_count, is_joined, questions.

    Raises:
        NotFound: The event does not exist.
    """
    with conn.cursor() as cur:
        cur.execute("SELECT * FROM events WHERE event_id = %s;", (event_id,))
        event = cur.fetchone()
        if not event:
            raise NotFound("Event not found.")

        detail = serialize_row(event)

        cur.execute(
            "SELECT COUNT(*) AS attendee_count FROM attendees WHERE event_id = %s;",
            (event_id,)
        )
        detail["attendee_count"] = cur.fetchone()["attendee_count"]

        is_joined = False
        if requester_id is not None:
            cur.execute(
                "SELECT 1 FROM attendees WHERE event_id = %s AND user_id = %s;",
                (event_id, requester_id)
            )
            is_joined = cur.fetchone() is not None
        detail["is_joined"] = is_joined

        # EXISTS against a NULL requester is always false
        cur.execute(
            """
            SELECT
                q.question_id, q.event_id, q.asked_by, q.question, q.votes, q.created_at,
                u.first_name AS asked_by_first_name, u.last_name AS asked_by_last_name,
                EXISTS (
                    SELECT 1 FROM votes v
                    WHERE v.question_id = q.question_id AND v.user_id = %s
                ) AS user_voted
            FROM questions q
            LEFT JOIN users u ON q.asked_by = u.user_id
            WHERE q.event_id = %s
            ORDER BY q.votes DESC, q.question_id ASC;
            """,
            (requester_id, event_id)
        )
        questions = [serialize_row(row) for row in cur.fetchall()]

    for question in questions:
        question["user_voted"] = bool(question["user_voted"])
    detail["questions"] = questions
    return detail


def update_event(conn, event_id: int, requester_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace every editable field of an event the requester created.

    Raises:
        ValidationError: Incomplete or malformed payload.
        NotFoundOrForbidden: No event with this id owned by the requester.
    """
    fields = validate_event_fields(data)

    sql = """
        UPDATE events
        SET name = %s, description = %s, location = %s, start_date = %s,
            close_registration = %s, max_attendees = %s
        WHERE event_id = %s AND creator_id = %s
        RETURNING *;
    """

    with conn.cursor() as cur:
        cur.execute(sql, (
            fields["name"], fields["description"], fields["location"],
            fields["start_date"], fields["close_registration"],
            fields["max_attendees"], event_id, requester_id
        ))
        updated = cur.fetchone()

    if not updated:
        conn.rollback()
        raise NotFoundOrForbidden()

    conn.commit()
    logging.info(f"[Events] user_id={requester_id} updated event_id={event_id}")
    return serialize_row(updated)


def delete_event(conn, event_id: int, requester_id: int) -> None:
    """
    Delete an event the requester created. Attendance, questions and votes
    go with it through ON DELETE CASCADE.

    Raises:
        NotFoundOrForbidden: No event with this id owned by the requester.
    """
    with conn.cursor() as cur:
        cur.execute(
            "DELETE FROM events WHERE event_id = %s AND creator_id = %s;",
            (event_id, requester_id)
        )
        deleted = cur.rowcount

    if deleted == 0:
        conn.rollback()
        raise NotFoundOrForbidden()

    conn.commit()
    logging.info(f"[Events] user_id={requester_id} deleted event_id={event_id}")
