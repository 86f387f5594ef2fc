"""Trust incident report API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from carehome.core.deps import get_current_session, get_db, require_csrf_header
from carehome.db.enums import TrustName
from carehome.schemas.auth import UserSession
from carehome.schemas.trust_report import (
    TrustReportCreate,
    TrustReportRead,
    TrustReportSubmit,
    TrustReportUpdate,
)
from carehome.services import trust_report_service
from carehome.services.trust_report_service import (
    IncidentMissingResidentError,
    IncidentNotFoundError,
    TrustReportNotFoundError,
    TrustReportStateError,
)

router = APIRouter(tags=["trust-reports"])


@router.post(
    "/incidents/{incident_id}/trust-reports",
    response_model=TrustReportRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def create_trust_report(
    incident_id: UUID,
    data: TrustReportCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Generate a draft trust report pre-filled from the incident."""
    try:
        return trust_report_service.create_from_incident(
            db, incident_id, session.org_id, TrustName(data.trust_name), session.actor
        )
    except IncidentNotFoundError:
        raise HTTPException(status_code=404, detail="Incident not found")
    except IncidentMissingResidentError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/incidents/{incident_id}/trust-reports", response_model=list[TrustReportRead])
def list_trust_reports(
    incident_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return trust_report_service.list_for_incident(db, incident_id, session.org_id)


@router.get("/trust-reports/{report_id}", response_model=TrustReportRead)
def get_trust_report(
    report_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    report = trust_report_service.get_report(db, report_id, session.org_id)
    if not report:
        raise HTTPException(status_code=404, detail="Trust report not found")
    return report


@router.patch(
    "/trust-reports/{report_id}",
    response_model=TrustReportRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_trust_report(
    report_id: UUID,
    data: TrustReportUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    updates = data.report_data.model_dump(exclude_unset=True)
    try:
        return trust_report_service.update_report(db, report_id, session.org_id, updates)
    except TrustReportNotFoundError:
        raise HTTPException(status_code=404, detail="Trust report not found")
    except TrustReportStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post(
    "/trust-reports/{report_id}/submit",
    response_model=TrustReportRead,
    dependencies=[Depends(require_csrf_header)],
)
def submit_trust_report(
    report_id: UUID,
    data: TrustReportSubmit,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Record that the report was sent to the trust."""
    try:
        return trust_report_service.mark_submitted(
            db, report_id, session.org_id, session.actor, data.reference_number
        )
    except TrustReportNotFoundError:
        raise HTTPException(status_code=404, detail="Trust report not found")
    except TrustReportStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post(
    "/trust-reports/{report_id}/complete",
    response_model=TrustReportRead,
    dependencies=[Depends(require_csrf_header)],
)
def complete_trust_report(
    report_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        return trust_report_service.mark_completed(db, report_id, session.org_id)
    except TrustReportNotFoundError:
        raise HTTPException(status_code=404, detail="Trust report not found")
    except TrustReportStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete(
    "/trust-reports/{report_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_trust_report(
    report_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        trust_report_service.delete_report(db, report_id, session.org_id)
    except TrustReportNotFoundError:
        raise HTTPException(status_code=404, detail="Trust report not found")
