"""
Registration Service - invitations and account creation.

Student onboarding runs in two steps:
1. basic info  - account row with email, password hash, department, name
2. detailed info - profile upsert (see profile_service)

Admins invite students first. An invitation creates the account row without
a password and emails a signed registration link; step 1 then completes
that row. Students who were never invited may still register directly.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from email_validator import validate_email, EmailNotValidError
from fastapi import HTTPException
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.core.auth import (
    hash_password, create_session_token, create_invitation_token, decode_invitation_token
)
from placement_portal.core.config import get_settings
from placement_portal.db.postgres import get_db_session
from placement_portal.schemas.schemas import (
    DEPARTMENT_NAMES, StudentRegistrationRequest, AdminRegistrationRequest
)
from placement_portal.services.notification_service import (
    EmailService, EmailDeliveryError, FanOutResult
)

settings = get_settings()
logger = logging.getLogger(__name__)

INVITE_SUBJECT = "Complete Your Registration"


def _invitation_body(email: str, department: str) -> str:
    token = create_invitation_token(email, department)
    link = f"{settings.frontend_url}/student-registration?token={token}"
    return f"""
<h2>Welcome to the Placement Portal!</h2>
<p>You have been invited to register for the placement portal ({department}).</p>
<p>Please click the link below to complete your registration:</p>
<a href="{link}">Complete Registration</a>
<p>This link will expire in {settings.invitation_expire_hours} hours.</p>
"""


def _ensure_invited_account(email: str, department: str) -> None:
    """
    Create a password-less student row for an invitee.

    An existing invited row is refreshed with the new department; an
    account that already has a password is a conflict.
    """
    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, password, role FROM users WHERE email = :email"),
            {"email": email}
        ).fetchone()

        if row and (row[1] or row[2] != "student"):
            raise HTTPException(status_code=409, detail=f"{email} is already registered")

        if row:
            db.execute(
                text("UPDATE users SET department = :department WHERE id = :id"),
                {"department": department, "id": row[0]}
            )
            return

        try:
            db.execute(
                text("INSERT INTO users (email, role, department) VALUES (:email, 'student', :department)"),
                {"email": email, "department": department}
            )
            db.flush()
        except IntegrityError:
            raise HTTPException(status_code=409, detail=f"{email} is already registered")


def invite_student(email: str, department: str, email_service: EmailService) -> None:
    """Create the invited account and send the registration link."""
    _ensure_invited_account(email, department)
    try:
        email_service.send(email, INVITE_SUBJECT, _invitation_body(email, department), html=True)
    except EmailDeliveryError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=502, detail="Failed to send invitation email")
    logger.info("Invited %s (%s)", email, department)


def _check_invitee(email: str, department: str) -> Tuple[str, Optional[str]]:
    """
    Normalized address and the reason the row is unusable (None if usable).

    The domain is lowercased the same way EmailStr does it at registration,
    so the invited row is the one registration later completes.
    """
    try:
        email = validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email, "invalid email"
    if department not in DEPARTMENT_NAMES:
        return email, "unknown department"
    return email, None


def invite_students(
    invitees: Iterable[Tuple[str, str]],
    email_service: EmailService,
) -> Tuple[FanOutResult, List[str]]:
    """
    Bulk invitation.

    Each row is handled on its own; a bad or failing row never stops the
    batch. Returns the aggregate plus a human-readable reason per failure.
    """
    result = FanOutResult()
    reasons = []
    for raw_email, department in invitees:
        email, problem = _check_invitee(raw_email, department)
        if problem is None:
            try:
                invite_student(email, department, email_service)
            except HTTPException as e:
                problem = e.detail

        if problem is None:
            result.succeeded.append(email)
        else:
            result.failed.append(email)
            reasons.append(f"{email or '<blank>'}: {problem}")

    logger.info("Bulk invitation: %d sent, %d failed", len(result.succeeded), len(result.failed))
    return result, reasons


def register_student(data: StudentRegistrationRequest) -> Tuple[str, dict]:
    """
    Basic-info step. Returns (session_token, user).

    Completes an invited row when one exists, otherwise creates the account.
    """
    email = str(data.email)
    department = data.department.value

    if data.token:
        invite = decode_invitation_token(data.token)
        if not invite:
            raise HTTPException(status_code=400, detail="Invalid or expired invitation link")
        if invite.get("email", "").lower() != email.lower():
            raise HTTPException(status_code=400, detail="Invitation was issued for a different email")

    password_hash = hash_password(data.password)

    with get_db_session() as db:
        row = db.execute(
            text("SELECT id, password, role FROM users WHERE email = :email"),
            {"email": email}
        ).fetchone()

        if row and (row[1] or row[2] != "student"):
            raise HTTPException(status_code=409, detail="Email already registered")

        params = {
            "email": email, "password": password_hash,
            "department": department, "name": data.name
        }
        try:
            if row:
                params["id"] = row[0]
                result = db.execute(
                    text("""
                        UPDATE users SET password = :password, department = :department, name = :name
                        WHERE id = :id
                        RETURNING id, email, role, department, name
                    """),
                    params
                )
            else:
                result = db.execute(
                    text("""
                        INSERT INTO users (email, password, role, department, name)
                        VALUES (:email, :password, 'student', :department, :name)
                        RETURNING id, email, role, department, name
                    """),
                    params
                )
            user = dict(result.mappings().first())
        except IntegrityError:
            raise HTTPException(status_code=409, detail="Email already registered")

    logger.info("Student account %s registered (%s)", user["id"], department)
    return create_session_token(user["id"], user["role"]), user


def register_admin(data: AdminRegistrationRequest) -> Tuple[str, dict]:
    """Create an admin account. Returns (session_token, user)."""
    with get_db_session() as db:
        existing = db.execute(
            text("SELECT id FROM users WHERE email = :email"),
            {"email": str(data.email)}
        ).fetchone()
        if existing:
            raise HTTPException(status_code=409, detail="Email already registered")

        try:
            result = db.execute(
                text("""
                    INSERT INTO users (email, password, role, department, name)
                    VALUES (:email, :password, 'admin', :department, :name)
                    RETURNING id, email, role, department, name
                """),
                {
                    "email": str(data.email), "password": hash_password(data.password),
                    "department": data.department, "name": data.name
                }
            )
            user = dict(result.mappings().first())
        except IntegrityError:
            raise HTTPException(status_code=409, detail="Email already registered")

    logger.info("Admin account %s registered", user["id"])
    return create_session_token(user["id"], user["role"]), user
