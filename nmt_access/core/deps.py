"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from nmt_access.core.security import decode_session_token
from nmt_access.db.enums import Role
from nmt_access.db.models import User
from nmt_access.db.session import SessionLocal
from nmt_access.schemas.auth import UserSession


# Cookie and header names
COOKIE_NAME = "nmt_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Get authenticated user from session cookie.

    Raises:
        HTTPException 401: Authentication failed
    """
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")

    user_id = payload.get("sub")
    user = db.get(User, user_id) if user_id else None
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")

    return user


def get_current_session(request: Request, db: Session = Depends(get_db)) -> UserSession:
    """
    Get full session context: user id, role and organizational claims.

    This is the PRIMARY auth dependency for most endpoints.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Unknown role
    """
    user = get_current_user(request, db)

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(user.role):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{user.role}'. Contact administrator.",
        )

    return UserSession(
        user_id=user.user_id,
        role=Role(user.role),
        email=user.email,
        user_name=user.user_name,
        corporate_client_id=user.corporate_client_id,
        program_id=user.primary_program_id,
        authorized_programs=list(user.authorized_programs or []),
    )


def require_roles(allowed_roles: set | list):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(ROLES_CAN_MANAGE_PERMISSIONS))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)) -> UserSession:
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action",
            )
        return session
    return dependency


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )
