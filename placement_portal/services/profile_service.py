"""
Profile Service - detailed student profile, upserted by user id.

The first submission inserts the row; later submissions overwrite every
field. Range checks (cgpa in [0, 10], backlogs >= 0) live on the request
schema, so anything reaching here is already valid.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.db.postgres import get_db_session
from placement_portal.schemas.schemas import ProfileData
from placement_portal.utils.json_fields import dump_list, load_list

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (
    "full_name", "phone_number", "address", "department", "roll_number",
    "current_year", "cgpa", "backlogs", "placement_status",
    "education_history", "skills", "projects",
)

JSON_COLUMNS = ("education_history", "skills", "projects")


def _profile_params(user_id: int, data: ProfileData) -> dict:
    params = {column: getattr(data, column) for column in PROFILE_COLUMNS}
    for column in JSON_COLUMNS:
        params[column] = dump_list(params[column])
    params["user_id"] = user_id
    return params


def upsert_profile(user_id: int, data: ProfileData) -> bool:
    """
    Insert or update the profile for user_id.

    Returns:
        True if a new row was created, False if an existing one was updated

    Raises:
        HTTPException 404 for an unknown user, 400 for a non-student account,
        409 if a concurrent submission inserted the row first
    """
    params = _profile_params(user_id, data)

    with get_db_session() as db:
        user = db.execute(
            text("SELECT role FROM users WHERE id = :id"),
            {"id": user_id}
        ).fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if user[0] != "student":
            raise HTTPException(status_code=400, detail="Profiles are only kept for student accounts")

        existing = db.execute(
            text("SELECT id FROM profile WHERE user_id = :user_id"),
            {"user_id": user_id}
        ).fetchone()

        if existing:
            assignments = ", ".join(f"{column} = :{column}" for column in PROFILE_COLUMNS)
            db.execute(
                text(f"UPDATE profile SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :user_id"),
                params
            )
            logger.info("Profile updated for user %s", user_id)
            return False

        columns = ", ".join(PROFILE_COLUMNS)
        placeholders = ", ".join(f":{column}" for column in PROFILE_COLUMNS)
        try:
            db.execute(
                text(f"INSERT INTO profile (user_id, {columns}) VALUES (:user_id, {placeholders})"),
                params
            )
            db.flush()
        except IntegrityError:
            raise HTTPException(status_code=409, detail="Profile already exists")

    logger.info("Profile created for user %s", user_id)
    return True


def get_profile(user_id: int) -> Optional[dict]:
    """Profile row joined with the account email, nested lists decoded."""
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT p.*, u.email FROM profile p
                JOIN users u ON p.user_id = u.id
                WHERE p.user_id = :user_id
            """),
            {"user_id": user_id}
        ).mappings().fetchone()

    if not row:
        return None

    profile = dict(row)
    for column in JSON_COLUMNS:
        profile[column] = load_list(profile[column])
    return profile


def get_placement_status(user_id: int) -> Optional[str]:
    with get_db_session() as db:
        row = db.execute(
            text("SELECT placement_status FROM profile WHERE user_id = :user_id"),
            {"user_id": user_id}
        ).fetchone()
    return row[0] if row else None
