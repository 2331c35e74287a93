"""
Job Service - postings, per-student job lists, deletion with cleanup.

Department filtering goes through services.visibility so jobs and messages
follow the same rule.
"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import text

from placement_portal.db.postgres import get_db_session, execute_raw_sql
from placement_portal.services.visibility import filter_visible, normalize_departments
from placement_portal.services.profile_service import get_placement_status
from placement_portal.utils.file_upload import remove_document
from placement_portal.utils.json_fields import dump_list, load_list, as_date

logger = logging.getLogger(__name__)

PLACED_STATUS = "Placed"

JOB_COLUMNS = """
    id, title, company, location, salary, description, requirements, departments,
    min_cgpa, deadline, exclude_placed, pdf_path, posted_date
"""


def row_to_job(row: dict) -> dict:
    """Decode a jobs row for responses."""
    job = dict(row)
    job["requirements"] = load_list(job.get("requirements"))
    job["departments"] = sorted(normalize_departments(job.get("departments")))
    job["deadline"] = as_date(job.get("deadline"))
    job["exclude_placed"] = bool(job.get("exclude_placed"))
    return job


def create_job(
    title: str,
    company: str,
    departments_json: str,
    location: Optional[str] = None,
    salary: Optional[str] = None,
    description: Optional[str] = None,
    requirements: Optional[List[str]] = None,
    min_cgpa: Optional[float] = None,
    deadline: Optional[date] = None,
    exclude_placed: bool = True,
    pdf_path: Optional[str] = None,
) -> dict:
    """Insert a job. departments_json comes from visibility.encode_departments."""
    with get_db_session() as db:
        result = db.execute(
            text(f"""
                INSERT INTO jobs (title, company, location, salary, description, requirements,
                    departments, min_cgpa, deadline, exclude_placed, pdf_path)
                VALUES (:title, :company, :location, :salary, :description, :requirements,
                    :departments, :min_cgpa, :deadline, :exclude_placed, :pdf_path)
                RETURNING {JOB_COLUMNS}
            """),
            {
                "title": title, "company": company, "location": location, "salary": salary,
                "description": description, "requirements": dump_list(requirements),
                "departments": departments_json, "min_cgpa": min_cgpa,
                "deadline": deadline.isoformat() if deadline else None,
                "exclude_placed": exclude_placed, "pdf_path": pdf_path
            }
        )
        row = result.mappings().first()

    logger.info("Job %s created: %s at %s", row["id"], title, company)
    return row_to_job(row)


def list_jobs() -> List[dict]:
    """All jobs, newest first."""
    rows = execute_raw_sql(f"SELECT {JOB_COLUMNS} FROM jobs ORDER BY posted_date DESC, id DESC")
    return [row_to_job(r) for r in rows]


def get_student_department(student_id: int) -> str:
    """
    Department of a student account.

    User.department is authoritative for visibility; Profile.department is
    informational only.
    """
    rows = execute_raw_sql(
        "SELECT department FROM users WHERE id = :id AND role = 'student'",
        {"id": student_id}
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Student not found")
    return rows[0]["department"]


def jobs_for_student(student_id: int) -> List[dict]:
    """
    Jobs a student may see: department match, and jobs flagged
    exclude_placed are hidden from students already placed.
    """
    department = get_student_department(student_id)
    rows = execute_raw_sql(f"SELECT {JOB_COLUMNS} FROM jobs ORDER BY posted_date DESC, id DESC")
    visible = filter_visible(rows, department)

    if get_placement_status(student_id) == PLACED_STATUS:
        visible = [r for r in visible if not r["exclude_placed"]]

    return [row_to_job(r) for r in visible]


def delete_job(job_id: int) -> None:
    """
    Delete a job, its applications and its document.

    Rows go in one transaction: applications, then the job. The document
    file is removed only after the commit, and a failure there is logged.
    """
    with get_db_session() as db:
        db.execute(
            text("DELETE FROM job_applications WHERE job_id = :id"),
            {"id": job_id}
        )

        job = db.execute(
            text("SELECT pdf_path FROM jobs WHERE id = :id"),
            {"id": job_id}
        ).fetchone()
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        pdf_path = job[0]

        db.execute(text("DELETE FROM jobs WHERE id = :id"), {"id": job_id})

    logger.info("Job %s deleted", job_id)

    if pdf_path:
        remove_document(pdf_path)
