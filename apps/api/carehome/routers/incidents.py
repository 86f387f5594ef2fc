"""Incident API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from carehome.core.deps import get_current_session, get_db, require_csrf_header
from carehome.schemas.auth import UserSession
from carehome.schemas.incident import IncidentCreate, IncidentRead, IncidentStats
from carehome.services import incident_service
from carehome.services.incident_service import IncidentResidentNotFoundError

router = APIRouter(tags=["incidents"])


@router.post(
    "/incidents",
    response_model=IncidentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_incident(
    data: IncidentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        return incident_service.create_incident(db, session.org_id, data, session.actor)
    except IncidentResidentNotFoundError:
        raise HTTPException(status_code=404, detail="Resident not found")


@router.get("/incidents", response_model=list[IncidentRead])
def list_incidents(
    limit: int = Query(incident_service.DEFAULT_LIST_LIMIT, ge=1, le=500),
    home_name: str | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return incident_service.list_incidents(db, session.org_id, limit=limit, home_name=home_name)


@router.get("/incidents/stats", response_model=IncidentStats)
def get_incident_stats(
    resident_id: UUID | None = None,
    home_name: str | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Totals, falls, medication errors and level breakdown."""
    return incident_service.get_incident_stats(
        db, session.org_id, resident_id=resident_id, home_name=home_name
    )


@router.get("/incidents/{incident_id}", response_model=IncidentRead)
def get_incident(
    incident_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    incident = incident_service.get_incident(db, incident_id, session.org_id)
    if not incident:
        raise HTTPException(status_code=404, detail="Incident not found")
    return incident


@router.get("/residents/{resident_id}/incidents", response_model=list[IncidentRead])
def list_resident_incidents(
    resident_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return incident_service.list_incidents_for_resident(db, resident_id, session.org_id)
