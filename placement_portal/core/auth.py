"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT session and invitation token creation/verification
- FastAPI dependencies for protected routes

The session token is read from the Authorization header first and from the
authToken cookie second, so both API clients and the browser SPA work.
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from placement_portal.core.config import get_settings
from placement_portal.db.postgres import get_db_session

settings = get_settings()

AUTH_COOKIE = "authToken"
INVITATION_PURPOSE = "invitation"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (cookie is the fallback, so don't auto-reject)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def create_session_token(user_id: int, role: str) -> str:
    return create_access_token(data={"sub": str(user_id), "role": role})


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session token as an httpOnly cookie."""
    response.set_cookie(
        AUTH_COOKIE,
        token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=settings.jwt_expire_minutes * 60,
    )


def create_invitation_token(email: str, department: str) -> str:
    """Signed registration-link token, valid for invitation_expire_hours."""
    return create_access_token(
        data={"email": email, "department": department, "purpose": INVITATION_PURPOSE},
        expires_delta=timedelta(hours=settings.invitation_expire_hours),
    )


def decode_invitation_token(token: str) -> Optional[dict]:
    payload = decode_token(token)
    if not payload or payload.get("purpose") != INVITATION_PURPOSE:
        return None
    return payload


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(AUTH_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    # Verify user exists
    with get_db_session() as db:
        result = db.execute(
            text("SELECT id, email, role, department, name FROM users WHERE id = :id"),
            {"id": int(user_id)}
        )
        user = result.fetchone()

    if not user:
        raise credentials_exception

    return {
        "user_id": user[0], "email": user[1], "role": user[2],
        "department": user[3], "name": user[4]
    }


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[dict]:
    """Like get_current_user, but None when no token was sent."""
    if not _extract_token(request, credentials):
        return None
    return await get_current_user(request, credentials)


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role."""
    if user["role"] != "student":
        raise HTTPException(status_code=403, detail="Students only")
    return user


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Admins only")
    return user
