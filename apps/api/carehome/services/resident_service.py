"""Resident service - CRUD for care home residents."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from carehome.core.structured_logging import build_log_context
from carehome.db.models import Resident
from carehome.schemas.resident import ResidentCreate, ResidentUpdate

logger = logging.getLogger(__name__)


class ResidentServiceError(Exception):
    """Base exception for resident service errors."""

    pass


class ResidentNotFoundError(ResidentServiceError):
    """Resident not found in the organization."""

    pass


def create_resident(
    db: Session, org_id: UUID, data: ResidentCreate, created_by: str
) -> Resident:
    resident = Resident(
        organization_id=org_id,
        created_by=created_by,
        **data.model_dump(),
    )
    db.add(resident)
    db.commit()
    db.refresh(resident)
    logger.info(
        "Resident created",
        extra=build_log_context(user_id=created_by, org_id=org_id, resident_id=resident.id),
    )
    return resident


def get_resident(db: Session, resident_id: UUID, org_id: UUID) -> Resident | None:
    """Get a resident by ID (org-scoped). Returns None when missing."""
    return (
        db.query(Resident)
        .filter(Resident.id == resident_id, Resident.organization_id == org_id)
        .first()
    )


def require_resident(db: Session, resident_id: UUID, org_id: UUID) -> Resident:
    resident = get_resident(db, resident_id, org_id)
    if not resident:
        raise ResidentNotFoundError(f"Resident {resident_id} not found")
    return resident


def list_residents(
    db: Session,
    org_id: UUID,
    team_id: str | None = None,
    active_only: bool = True,
) -> list[Resident]:
    """List residents for an organization, sorted by name."""
    query = db.query(Resident).filter(Resident.organization_id == org_id)
    if team_id:
        query = query.filter(Resident.team_id == team_id)
    if active_only:
        query = query.filter(Resident.is_active.is_(True))
    return query.order_by(Resident.last_name, Resident.first_name).all()


def update_resident(
    db: Session, resident_id: UUID, org_id: UUID, data: ResidentUpdate
) -> Resident:
    """Partial update; only fields present in the request are written."""
    resident = require_resident(db, resident_id, org_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(resident, field, value)
    db.commit()
    db.refresh(resident)
    return resident


def set_resident_status(
    db: Session, resident_id: UUID, org_id: UUID, is_active: bool
) -> Resident:
    """Activate or deactivate (discharge) a resident. Records are kept."""
    resident = require_resident(db, resident_id, org_id)
    resident.is_active = is_active
    db.commit()
    db.refresh(resident)
    return resident
