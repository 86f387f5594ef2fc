"""Incident service - incident/falls reports and statistics."""

import logging
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from carehome.core.structured_logging import build_log_context
from carehome.db.enums import FALL_INCIDENT_TYPES, MEDICATION_INCIDENT_TYPE, IncidentLevel
from carehome.db.models import Incident, Resident
from carehome.schemas.incident import IncidentCreate, IncidentLevelBreakdown, IncidentStats

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
RECENT_WINDOW_DAYS = 30


class IncidentServiceError(Exception):
    """Base exception for incident service errors."""

    pass


class IncidentResidentNotFoundError(IncidentServiceError):
    """Referenced resident does not exist in the organization."""

    pass


def create_incident(
    db: Session, org_id: UUID, data: IncidentCreate, created_by: str
) -> Incident:
    """
    Record an incident.

    If a resident is referenced it must belong to the same organization.
    """
    if data.resident_id:
        resident = db.get(Resident, data.resident_id)
        if not resident or resident.organization_id != org_id:
            raise IncidentResidentNotFoundError(f"Resident {data.resident_id} not found")

    incident = Incident(
        organization_id=org_id,
        team_id=data.team_id,
        resident_id=data.resident_id,
        home_name=data.home_name,
        unit=data.unit,
        incident_date=data.incident_date,
        incident_time=data.incident_time,
        incident_level=data.incident_level,
        incident_types=list(data.incident_types),
        payload=data.model_dump(mode="json", exclude_none=True),
        created_by=created_by,
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)
    logger.info(
        "Incident recorded",
        extra=build_log_context(user_id=created_by, org_id=org_id, incident_id=incident.id),
    )
    return incident


def get_incident(db: Session, incident_id: UUID, org_id: UUID) -> Incident | None:
    return (
        db.query(Incident)
        .filter(Incident.id == incident_id, Incident.organization_id == org_id)
        .first()
    )


def _newest_first(query):
    return query.order_by(Incident.incident_date.desc(), Incident.created_at.desc())


def list_incidents(
    db: Session,
    org_id: UUID,
    limit: int = DEFAULT_LIST_LIMIT,
    home_name: str | None = None,
) -> list[Incident]:
    query = db.query(Incident).filter(Incident.organization_id == org_id)
    if home_name:
        query = query.filter(Incident.home_name == home_name)
    return _newest_first(query).limit(limit).all()


def list_incidents_for_resident(db: Session, resident_id: UUID, org_id: UUID) -> list[Incident]:
    query = db.query(Incident).filter(
        Incident.organization_id == org_id,
        Incident.resident_id == resident_id,
    )
    return _newest_first(query).all()


def get_incident_stats(
    db: Session,
    org_id: UUID,
    resident_id: UUID | None = None,
    home_name: str | None = None,
    today: date | None = None,
) -> IncidentStats:
    """Counts by type and level, scoped to a resident, a home, or the whole org."""
    query = db.query(Incident).filter(Incident.organization_id == org_id)
    if resident_id:
        query = query.filter(Incident.resident_id == resident_id)
    elif home_name:
        query = query.filter(Incident.home_name == home_name)
    incidents = query.all()

    today = today or date.today()
    window_start = today - timedelta(days=RECENT_WINDOW_DAYS)

    breakdown = IncidentLevelBreakdown()
    falls = 0
    medication = 0
    recent = 0
    for incident in incidents:
        types = set(incident.incident_types or [])
        if types & FALL_INCIDENT_TYPES:
            falls += 1
        if MEDICATION_INCIDENT_TYPE in types:
            medication += 1
        if IncidentLevel.has_value(incident.incident_level):
            level = incident.incident_level
            setattr(breakdown, level, getattr(breakdown, level) + 1)
        if incident.incident_date >= window_start:
            recent += 1

    last_date = max((i.incident_date for i in incidents), default=None)
    return IncidentStats(
        total_incidents=len(incidents),
        falls_count=falls,
        medication_errors=medication,
        level_breakdown=breakdown,
        recent_incidents=recent,
        last_incident_date=last_date,
        days_since_last_incident=(today - last_date).days if last_date else None,
    )
