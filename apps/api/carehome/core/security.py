"""Session tokens: HS256 JWTs carried in the session cookie."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from pydantic import ValidationError

from carehome.core.config import settings
from carehome.schemas.auth import TokenPayload

ALGORITHM = "HS256"


class InvalidSessionError(jwt.InvalidTokenError):
    """Signature checked out but the claims are not a usable session."""


def create_session_token(
    user_id: UUID,
    org_id: UUID,
    role: str,
    token_version: int,
) -> str:
    """
    Sign a session for one user in one organization.

    token_version must match users.token_version when the token is used;
    bumping the column revokes every outstanding session.
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "org_id": str(org_id),
        "role": role,
        "token_version": token_version,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_session_token(token: str) -> TokenPayload:
    """
    Verify a session token and return its claims.

    The current secret is tried first, then JWT_SECRET_PREVIOUS while a
    rotation is in progress.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or malformed claims
    """
    last_error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            raw = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
            break
        except jwt.InvalidSignatureError as e:
            last_error = e
    else:
        raise last_error or jwt.InvalidTokenError("No signing secret configured")

    try:
        return TokenPayload.model_validate(raw)
    except ValidationError as e:
        raise InvalidSessionError("Session claims are incomplete") from e
