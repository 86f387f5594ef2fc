"""Enum definitions for application constants."""

from carehome.db.enums.auth import ROLES_CAN_DELETE, ROLES_CAN_REVIEW, Role
from carehome.db.enums.care_files import (
    DEFAULT_CARE_FILE_STATUS,
    CareFileStatus,
    PdfStatus,
)
from carehome.db.enums.incidents import (
    FALL_INCIDENT_TYPES,
    MEDICATION_INCIDENT_TYPE,
    TRUST_FULL_NAMES,
    IncidentLevel,
    TrustName,
    TrustReportStatus,
)
from carehome.db.enums.jobs import DEFAULT_JOB_STATUS, JobStatus, JobType

__all__ = [
    "CareFileStatus",
    "DEFAULT_CARE_FILE_STATUS",
    "DEFAULT_JOB_STATUS",
    "FALL_INCIDENT_TYPES",
    "IncidentLevel",
    "JobStatus",
    "JobType",
    "MEDICATION_INCIDENT_TYPE",
    "PdfStatus",
    "ROLES_CAN_DELETE",
    "ROLES_CAN_REVIEW",
    "Role",
    "TRUST_FULL_NAMES",
    "TrustName",
    "TrustReportStatus",
]
