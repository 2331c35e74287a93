"""
Table definitions.

Queries elsewhere are plain parameterized SQL; these definitions exist so the
schema can be created on startup (and against SQLite in tests).

Tables:
- users            - accounts for students and admins
- profile          - one detailed profile per student (upsert by user_id)
- jobs             - postings, department-set stored as JSON text
- job_applications - one row per (student, job)
- messages         - admin announcements, department-set stored as JSON text
"""

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Float, Boolean,
    Date, DateTime, ForeignKey, UniqueConstraint, func
)

from placement_portal.db.postgres import engine

metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    # NULL until an invited student completes basic info
    Column("password", String(255), nullable=True),
    Column("role", String(20), nullable=False),
    Column("department", String(100)),
    Column("name", String(200)),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
)

profile = Table(
    "profile", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False, unique=True),
    Column("full_name", String(200)),
    Column("phone_number", String(50)),
    Column("address", Text),
    Column("department", String(100)),
    Column("roll_number", String(50)),
    Column("current_year", String(20)),
    Column("cgpa", Float),
    Column("backlogs", Integer, nullable=False, server_default="0"),
    Column("placement_status", String(50), nullable=False, server_default="Not Placed"),
    Column("education_history", Text, nullable=False, server_default="[]"),
    Column("skills", Text, nullable=False, server_default="[]"),
    Column("projects", Text, nullable=False, server_default="[]"),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
)

jobs = Table(
    "jobs", metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(200), nullable=False),
    Column("company", String(200), nullable=False),
    Column("location", String(200)),
    Column("salary", String(100)),
    Column("description", Text),
    Column("requirements", Text, nullable=False, server_default="[]"),
    Column("departments", Text, nullable=False),
    Column("min_cgpa", Float),
    Column("deadline", Date),
    Column("exclude_placed", Boolean, nullable=False, server_default="1"),
    Column("pdf_path", String(500)),
    Column("posted_date", DateTime, server_default=func.now(), nullable=False),
)

job_applications = Table(
    "job_applications", metadata,
    Column("id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("job_id", Integer, ForeignKey("jobs.id"), nullable=False),
    Column("status", String(30), nullable=False, server_default="pending"),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    UniqueConstraint("student_id", "job_id", name="uq_job_applications_student_job"),
)

messages = Table(
    "messages", metadata,
    Column("id", Integer, primary_key=True),
    Column("content", Text, nullable=False),
    Column("departments", Text, nullable=False),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
)


def init_db() -> None:
    """Create any missing tables. Safe to call on every startup."""
    metadata.create_all(engine)


def drop_db() -> None:
    metadata.drop_all(engine)
