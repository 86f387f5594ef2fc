"""Incident and trust report enums."""

from enum import Enum


class IncidentLevel(str, Enum):
    """Severity of an incident."""

    DEATH = "death"
    PERMANENT_HARM = "permanent_harm"
    MINOR_INJURY = "minor_injury"
    NO_HARM = "no_harm"
    NEAR_MISS = "near_miss"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class TrustName(str, Enum):
    """Health and Social Care Trusts that receive incident reports."""

    BHSCT = "BHSCT"
    SEHSCT = "SEHSCT"


TRUST_FULL_NAMES = {
    TrustName.BHSCT: "Belfast Health and Social Care Trust",
    TrustName.SEHSCT: "South Eastern Health and Social Care Trust",
}


class TrustReportStatus(str, Enum):
    """Lifecycle of a trust incident report."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


# Incident types counted as falls in statistics
FALL_INCIDENT_TYPES = {"FallWitnessed", "FallUnwitnessed"}
MEDICATION_INCIDENT_TYPE = "Medication"
