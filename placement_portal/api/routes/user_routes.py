"""
User Routes

POST /users/register - Invite one student by email (admin only)
POST /users/student-registration - Student basic-info registration
POST /users/register-admin - Create an admin account
GET /users/students - List student accounts (admin only)
GET /users/all - List all accounts (admin only)
"""

from fastapi import APIRouter, HTTPException, Depends, Response
from typing import List, Optional

from placement_portal.db.postgres import execute_raw_sql
from placement_portal.core.auth import get_current_admin, get_optional_user, set_session_cookie
from placement_portal.services.notification_service import EmailService, get_email_service
from placement_portal.services.registration_service import (
    invite_student, register_student, register_admin
)
from placement_portal.schemas.schemas import (
    InviteRequest, InviteResponse, StudentRegistrationRequest, AdminRegistrationRequest,
    RegistrationResponse, UserResponse
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", response_model=InviteResponse)
async def invite(
    request: InviteRequest,
    admin: dict = Depends(get_current_admin),
    email_service: EmailService = Depends(get_email_service)
):
    """Send a registration link to one student."""
    invite_student(str(request.email), request.department.value, email_service)
    return InviteResponse(
        message="Invitation sent successfully",
        email=str(request.email),
        department=request.department.value
    )


@router.post("/student-registration", response_model=RegistrationResponse, status_code=201)
async def student_registration(request: StudentRegistrationRequest, response: Response):
    """
    Registration step 1: create the student account.

    Follow with POST /student/profile to complete the profile.
    """
    token, user = register_student(request)
    set_session_cookie(response, token)
    return RegistrationResponse(
        message="Student registered successfully",
        access_token=token,
        user=UserResponse(**user)
    )


@router.post("/register-admin", response_model=RegistrationResponse, status_code=201)
async def admin_registration(
    request: AdminRegistrationRequest,
    response: Response,
    caller: Optional[dict] = Depends(get_optional_user)
):
    """
    Create an admin account.

    Open while no admin exists (bootstrap); after that only admins may add admins.
    """
    admin_exists = execute_raw_sql("SELECT id FROM users WHERE role = 'admin' LIMIT 1")
    if admin_exists and (caller is None or caller["role"] != "admin"):
        raise HTTPException(status_code=403, detail="Admins only")

    token, user = register_admin(request)
    set_session_cookie(response, token)
    return RegistrationResponse(
        message="Admin registered successfully",
        access_token=token,
        user=UserResponse(**user)
    )


@router.get("/students", response_model=List[UserResponse])
async def list_students(admin: dict = Depends(get_current_admin)):
    return execute_raw_sql(
        "SELECT id, email, role, name, department FROM users WHERE role = 'student' ORDER BY id"
    )


@router.get("/all", response_model=List[UserResponse])
async def list_users(admin: dict = Depends(get_current_admin)):
    return execute_raw_sql("SELECT id, email, role, name, department FROM users ORDER BY id")
