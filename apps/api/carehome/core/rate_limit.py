"""Rate limiting (slowapi) for the care home API."""

import hashlib
import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from carehome.core.config import settings
from carehome.core.deps import COOKIE_NAME

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")


def rate_limit_key(request: Request) -> str:
    """Bucket per signed-in staff session; staff on one home network share an IP."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return "session:" + hashlib.sha256(token.encode()).hexdigest()[:32]
    return get_remote_address(request)


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri="memory://" if IS_TESTING else settings.RATE_LIMIT_STORAGE_URI,
    default_limits=(
        [] if IS_TESTING or settings.RATE_LIMIT_API <= 0 else [f"{settings.RATE_LIMIT_API}/minute"]
    ),
)
