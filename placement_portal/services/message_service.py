"""
Message Service - admin announcements and their email notification.
"""

import logging
from typing import List

from fastapi import HTTPException
from sqlalchemy import text

from placement_portal.db.postgres import get_db_session, execute_raw_sql
from placement_portal.schemas.schemas import ALL_DEPARTMENTS
from placement_portal.services.job_service import get_student_department
from placement_portal.services.notification_service import EmailService, FanOutResult, fan_out
from placement_portal.services.visibility import (
    encode_departments, filter_visible, normalize_departments
)

logger = logging.getLogger(__name__)

NOTIFY_SUBJECT = "New Message from Placement Cell"
NOTIFY_BODY = "A new message has been posted. Please check your dashboard."


def _row_to_message(row: dict) -> dict:
    message = dict(row)
    message["departments"] = sorted(normalize_departments(message["departments"]))
    return message


def create_message(content: str, departments: List[str]) -> dict:
    with get_db_session() as db:
        row = db.execute(
            text("""
                INSERT INTO messages (content, departments)
                VALUES (:content, :departments)
                RETURNING id, content, departments, created_at
            """),
            {"content": content, "departments": encode_departments(departments)}
        ).mappings().first()

    logger.info("Message %s posted", row["id"])
    return _row_to_message(row)


def delete_message(message_id: int) -> None:
    with get_db_session() as db:
        result = db.execute(
            text("DELETE FROM messages WHERE id = :id"),
            {"id": message_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Message not found")


def list_messages() -> List[dict]:
    rows = execute_raw_sql(
        "SELECT id, content, departments, created_at FROM messages ORDER BY created_at DESC, id DESC"
    )
    return [_row_to_message(r) for r in rows]


def messages_for_student(student_id: int) -> List[dict]:
    """Announcements visible to the student's department, newest first."""
    department = get_student_department(student_id)
    rows = execute_raw_sql(
        "SELECT id, content, departments, created_at FROM messages ORDER BY created_at DESC, id DESC"
    )
    return [_row_to_message(r) for r in filter_visible(rows, department)]


def notification_recipients(raw_departments) -> List[str]:
    """Emails of students in the message's departments (all students for "all")."""
    departments = normalize_departments(raw_departments)
    if not departments:
        return []

    students = execute_raw_sql(
        "SELECT email, department FROM users WHERE role = 'student' ORDER BY id"
    )
    if ALL_DEPARTMENTS in departments:
        return [s["email"] for s in students]
    return [s["email"] for s in students if s["department"] in departments]


def notify_students(message_id: int, email_service: EmailService) -> FanOutResult:
    """Email every student who can see the message."""
    rows = execute_raw_sql(
        "SELECT departments FROM messages WHERE id = :id",
        {"id": message_id}
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Message not found")

    recipients = notification_recipients(rows[0]["departments"])
    result = fan_out(email_service, recipients, NOTIFY_SUBJECT, lambda _: NOTIFY_BODY)
    logger.info(
        "Message %s notification: %d sent, %d failed",
        message_id, len(result.succeeded), len(result.failed)
    )
    return result
