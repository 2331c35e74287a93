"""
Application Service - a student applies to a job at most once.

The unique (student_id, job_id) constraint is what guarantees it; the
pre-check only avoids tripping the constraint in the common case.
"""

import logging
from datetime import date
from typing import List

from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.db.postgres import get_db_session, execute_raw_sql
from placement_portal.services.visibility import normalize_departments
from placement_portal.utils.json_fields import as_date

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already applied for this job"


def apply_for_job(student_id: int, job_id: int) -> None:
    """
    Create a pending application.

    Raises:
        HTTPException 404 (no such job), 400 (deadline passed),
        409 (already applied)
    """
    with get_db_session() as db:
        job = db.execute(
            text("SELECT deadline FROM jobs WHERE id = :jid"),
            {"jid": job_id}
        ).fetchone()
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")

        deadline = as_date(job[0])
        if deadline and deadline < date.today():
            raise HTTPException(status_code=400, detail="Application deadline has passed")

        existing = db.execute(
            text("SELECT id FROM job_applications WHERE student_id = :sid AND job_id = :jid"),
            {"sid": student_id, "jid": job_id}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail=ALREADY_APPLIED)

        try:
            db.execute(
                text("INSERT INTO job_applications (student_id, job_id, status) VALUES (:sid, :jid, 'pending')"),
                {"sid": student_id, "jid": job_id}
            )
            db.flush()
        except IntegrityError:
            raise HTTPException(status_code=409, detail=ALREADY_APPLIED)

    logger.info("Student %s applied to job %s", student_id, job_id)


def applied_jobs(student_id: int) -> List[dict]:
    """Jobs the student applied to, with the application status."""
    rows = execute_raw_sql("""
        SELECT j.id, j.title, j.company, j.location, j.salary, j.description, j.departments,
               j.deadline, j.pdf_path, j.posted_date, ja.status
        FROM job_applications ja
        JOIN jobs j ON ja.job_id = j.id
        WHERE ja.student_id = :sid
        ORDER BY ja.created_at DESC, ja.id DESC
    """, {"sid": student_id})

    for r in rows:
        r["departments"] = sorted(normalize_departments(r["departments"]))
        r["deadline"] = as_date(r["deadline"])
    return rows


def application_statuses(student_id: int) -> List[dict]:
    return execute_raw_sql(
        "SELECT job_id, status FROM job_applications WHERE student_id = :sid ORDER BY job_id",
        {"sid": student_id}
    )


def applications_for_job(job_id: int) -> List[dict]:
    """Applicants for a job with their profile details (admin view)."""
    if not execute_raw_sql("SELECT id FROM jobs WHERE id = :jid", {"jid": job_id}):
        raise HTTPException(status_code=404, detail="Job not found")

    rows = execute_raw_sql("""
        SELECT ja.id, ja.student_id, ja.status,
               p.full_name, p.roll_number, p.department, p.cgpa, p.backlogs, p.phone_number,
               u.email
        FROM job_applications ja
        JOIN users u ON ja.student_id = u.id
        LEFT JOIN profile p ON ja.student_id = p.user_id
        WHERE ja.job_id = :jid
        ORDER BY ja.id
    """, {"jid": job_id})

    return [
        {
            "id": r["id"],
            "studentId": r["student_id"],
            "status": r["status"],
            "studentProfile": {
                "full_name": r["full_name"],
                "roll_number": r["roll_number"],
                "department": r["department"],
                "cgpa": r["cgpa"],
                "backlogs": r["backlogs"],
                "phone_number": r["phone_number"],
                "email": r["email"],
            },
        }
        for r in rows
    ]


def update_application_status(application_id: int, status: str) -> None:
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE job_applications SET status = :status WHERE id = :id"),
            {"status": status, "id": application_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Application not found")

    logger.info("Application %s set to %s", application_id, status)
