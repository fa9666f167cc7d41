"""
Engagement ledger: attendance, questions, and question votes.

Uniqueness of (event, user) attendance and (question, user) votes is left to
the primary keys in schema.sql. A losing insert raises UniqueViolation,
which is rolled back and surfaced as a Conflict subclass.
"""

import logging
from typing import Any, Dict, List

import psycopg2.errors

from eventqa.common.errors import AlreadyAttending, AlreadyVoted, NotFound, ValidationError
from eventqa.common.validation import clean_text, parse_positive_int
from eventqa.events_service.registry import serialize_row


def require_id(value: Any, name: str) -> int:
    """
    Coerce a request-supplied id to an int.

    Raises:
        ValidationError: Missing or not a positive integer.
    """
    if value in (None, ""):
        raise ValidationError(f"{name} is required.")
    parsed = parse_positive_int(value)
    if parsed is None:
        raise ValidationError(f"{name} must be a positive integer.")
    return parsed


# --- ATTENDANCE ---
def attend_event(conn, event_id: Any, user_id: int) -> None:
    """
    Join an event. A user can join a given event once.

    Raises:
        ValidationError: event_id missing or malformed.
        NotFound: The event does not exist.
        AlreadyAttending: The user already joined this event.
    """
    event_id = require_id(event_id, "event_id")

    with conn.cursor() as cur:
        cur.execute("SELECT event_id FROM events WHERE event_id = %s;", (event_id,))
        if not cur.fetchone():
            raise NotFound("Event not found.")

    try:
        with conn.cursor() as cur:
            cur.execute(
                "INSERT INTO attendees (event_id, user_id) VALUES (%s, %s);",
                (event_id, user_id)
            )
        conn.commit()
    except psycopg2.errors.UniqueViolation:
        conn.rollback()
        raise AlreadyAttending()
    except psycopg2.errors.ForeignKeyViolation:
        # Event deleted between the lookup and the insert
        conn.rollback()
        raise NotFound("Event not found.")

    logging.info(f"[Events] user_id={user_id} joined event_id={event_id}")


# --- QUESTIONS ---
def ask_question(conn, event_id: Any, asked_by: int, text: Any) -> Dict[str, Any]:
    """
    Post a question to an event. New questions start with zero votes.

    The event is not looked up first; the foreign key on questions.event_id
    rejects unknown events.

    Raises:
        ValidationError: Text or event_id missing, or text not a string.
        NotFound: The event does not exist.
    """
    missing = "event_id and question are required."
    if event_id in (None, ""):
        raise ValidationError(missing)
    text = clean_text(text, "Question", missing_message=missing)
    event_id = require_id(event_id, "event_id")

    sql = """
        INSERT INTO questions (event_id, asked_by, question, votes)
        VALUES (%s, %s, %s, 0)
        RETURNING *;
    """

    try:
        with conn.cursor() as cur:
            cur.execute(sql, (event_id, asked_by, text))
            question = cur.fetchone()
        conn.commit()
    except psycopg2.errors.ForeignKeyViolation:
        conn.rollback()
        raise NotFound("Event not found.")

    logging.info(f"[Events] user_id={asked_by} asked question_id={question['question_id']}")
    return serialize_row(question)


def list_questions(conn, event_id: Any) -> List[Dict[str, Any]]:
    """
    All questions for an event, most-voted first.

    Raises:
        ValidationError: event_id missing or malformed.
    """
    event_id = require_id(event_id, "event_id")

    with conn.cursor() as cur:
        cur.execute(
            """
            SELECT question_id, event_id, asked_by, question, votes, created_at
            FROM questions
            WHERE event_id = %s
            ORDER BY votes DESC, question_id ASC;
            """,
            (event_id,)
        )
        return [serialize_row(row) for row in cur.fetchall()]


# --- VOTES ---
def vote_question(conn, question_id: Any, voter_id: int) -> Dict[str, Any]:
    """
    Record one vote on a question and bump its counter.

    The existence check, the vote insert and the `votes + 1` update share one
    transaction: it commits once after all three, and any failure rolls the
    whole unit back, so questions.votes always equals its count of vote rows.

    Returns:
        dict: The question row after the increment.

    Raises:
        ValidationError: question_id missing or malformed.
        NotFound: The question does not exist.
        AlreadyVoted: This user already voted on this question.
    """
    question_id = require_id(question_id, "question_id")

    try:
        with conn.cursor() as cur:
            cur.execute("SELECT question_id FROM questions WHERE question_id = %s;", (question_id,))
            if not cur.fetchone():
                raise NotFound("Question not found.")

            cur.execute(
                "INSERT INTO votes (question_id, user_id) VALUES (%s, %s);",
                (question_id, voter_id)
            )
            cur.execute(
                "UPDATE questions SET votes = votes + 1 WHERE question_id = %s RETURNING *;",
                (question_id,)
            )
            question = cur.fetchone()
        conn.commit()
    except psycopg2.errors.UniqueViolation:
        conn.rollback()
        raise AlreadyVoted()
    except psycopg2.errors.ForeignKeyViolation:
        # Question deleted between the lookup and the insert
        conn.rollback()
        raise NotFound("Question not found.")
    except Exception:
        conn.rollback()
        raise

    logging.info(f"[Events] user_id={voter_id} voted question_id={question_id}")
    return serialize_row(question)
