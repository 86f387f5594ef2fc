"""Resident API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from carehome.core.deps import get_current_session, get_db, require_csrf_header
from carehome.schemas.auth import UserSession
from carehome.schemas.resident import (
    ResidentCreate,
    ResidentListItem,
    ResidentRead,
    ResidentStatusUpdate,
    ResidentUpdate,
)
from carehome.services import resident_service
from carehome.services.resident_service import ResidentNotFoundError

router = APIRouter()


@router.post(
    "",
    response_model=ResidentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_resident(
    data: ResidentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return resident_service.create_resident(db, session.org_id, data, session.actor)


@router.get("", response_model=list[ResidentListItem])
def list_residents(
    team_id: str | None = None,
    include_inactive: bool = False,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List residents for the organization (active only by default)."""
    return resident_service.list_residents(
        db, session.org_id, team_id=team_id, active_only=not include_inactive
    )


@router.get("/{resident_id}", response_model=ResidentRead)
def get_resident(
    resident_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    resident = resident_service.get_resident(db, resident_id, session.org_id)
    if not resident:
        raise HTTPException(status_code=404, detail="Resident not found")
    return resident


@router.patch(
    "/{resident_id}",
    response_model=ResidentRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_resident(
    resident_id: UUID,
    data: ResidentUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        return resident_service.update_resident(db, resident_id, session.org_id, data)
    except ResidentNotFoundError:
        raise HTTPException(status_code=404, detail="Resident not found")


@router.post(
    "/{resident_id}/status",
    response_model=ResidentRead,
    dependencies=[Depends(require_csrf_header)],
)
def set_resident_status(
    resident_id: UUID,
    data: ResidentStatusUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Activate or deactivate a resident."""
    try:
        return resident_service.set_resident_status(
            db, resident_id, session.org_id, data.is_active
        )
    except ResidentNotFoundError:
        raise HTTPException(status_code=404, detail="Resident not found")
