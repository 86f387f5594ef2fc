"""FastAPI dependencies: database session, staff session, role and CSRF checks."""

from typing import Collection, Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from carehome.core.security import decode_session_token
from carehome.db.enums import Role
from carehome.db.models import Membership, User
from carehome.db.session import SessionLocal
from carehome.schemas.auth import UserSession


COOKIE_NAME = "carehome_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _load_session(request: Request, db: Session) -> UserSession:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        claims = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session")

    user = db.get(User, claims.sub)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account disabled")
    # Revocation: the CLI bumps users.token_version
    if user.token_version != claims.token_version:
        raise HTTPException(status_code=401, detail="Session revoked")

    membership = (
        db.query(Membership)
        .filter(Membership.user_id == user.id, Membership.is_active.is_(True))
        .first()
    )
    if not membership:
        raise HTTPException(status_code=403, detail="No care home membership")
    # Token minted for another tenant (user moved homes); force a new login
    if membership.organization_id != claims.org_id:
        raise HTTPException(status_code=401, detail="Session organization changed")
    if not Role.has_value(membership.role):
        raise HTTPException(
            status_code=403,
            detail=f"Unknown role '{membership.role}'. Contact administrator.",
        )

    return UserSession(
        user_id=user.id,
        org_id=membership.organization_id,
        role=Role(membership.role),
        email=user.email,
        display_name=user.display_name,
    )


def get_current_session(request: Request, db: Session = Depends(get_db)) -> UserSession:
    """
    Resolve the session cookie to the staff member and their care home.

    The role comes from the membership row, not the token, so role changes
    apply on the next request.

    Raises:
        HTTPException 401: missing, invalid, expired or revoked session
        HTTPException 403: no active membership or unknown role
    """
    return _load_session(request, db)


def require_roles(allowed_roles: Collection[Role]):
    """
    Dependency factory for role-gated actions.

    Usage:
        session: UserSession = Depends(require_roles(ROLES_CAN_REVIEW))
    """

    def dependency(request: Request, db: Session = Depends(get_db)) -> UserSession:
        session = _load_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{session.role.value}' not authorized for this action",
            )
        return session

    return dependency


def require_csrf_header(request: Request) -> None:
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'",
        )
