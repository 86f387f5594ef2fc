"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    Care home staff roles with increasing privilege levels.

    - CARE_ASSISTANT: Day-to-day care notes and draft assessments
    - NURSE: Registered nurse (clinical sign-off, reviews)
    - MANAGER: Home manager (reviews, deletions, trust reports)
    - ADMIN: Organization admin
    """

    CARE_ASSISTANT = "care_assistant"
    NURSE = "nurse"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


ROLES_CAN_REVIEW = {Role.NURSE, Role.MANAGER, Role.ADMIN}
ROLES_CAN_DELETE = {Role.MANAGER, Role.ADMIN}
