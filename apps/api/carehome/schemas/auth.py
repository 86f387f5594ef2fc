"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from carehome.db.enums import Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""

    sub: UUID  # user_id
    org_id: UUID
    role: str
    token_version: int


class UserSession(BaseModel):
    """
    Full session context for authenticated requests.

    Returned by the get_current_session dependency; contains everything
    needed for tenant scoping and role checks.
    """

    user_id: UUID
    org_id: UUID
    role: Role
    email: str
    display_name: str

    @property
    def actor(self) -> str:
        """String user id recorded as created_by / last_modified_by."""
        return str(self.user_id)
