"""SQLAlchemy ORM models."""

from carehome.db.models.auth import Membership, Organization, User
from carehome.db.models.care_files import CareFileRecord
from carehome.db.models.incidents import Incident, TrustReport
from carehome.db.models.jobs import Job
from carehome.db.models.residents import Resident

__all__ = [
    "CareFileRecord",
    "Incident",
    "Job",
    "Membership",
    "Organization",
    "Resident",
    "TrustReport",
    "User",
]
