"""
Authentication Routes

POST /auth/login - Login, get JWT (body and authToken cookie)
POST /auth/logout - Clear the session cookie
GET /auth/me - Get current user info
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, Response
from sqlalchemy import text

from placement_portal.db.postgres import get_db_session
from placement_portal.core.auth import (
    verify_password, create_session_token, set_session_cookie, get_current_user, AUTH_COOKIE
)
from placement_portal.schemas.schemas import (
    LoginRequest, TokenResponse, UserResponse, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, response: Response):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, password, role FROM users WHERE email = :email AND role = :role"),
            {"email": request.email, "role": request.role.value}
        )
        user = result.fetchone()

    # Invited students have no password until they register
    if not user or not user[1]:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user_id, password_hash, role = user

    if not verify_password(request.password, password_hash):
        logger.info("Failed login for user %s", user_id)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_session_token(user_id, role)
    set_session_cookie(response, token)

    return TokenResponse(message="Login successful", access_token=token, user_id=user_id, role=role)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return UserResponse(
        id=user["user_id"], email=user["email"], role=user["role"],
        name=user["name"], department=user["department"]
    )
