"""Care file API endpoints (every assessment form kind)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from carehome.core.deps import (
    get_current_session,
    get_db,
    require_csrf_header,
    require_roles,
)
from carehome.db.enums import ROLES_CAN_DELETE, ROLES_CAN_REVIEW
from carehome.db.models import CareFileRecord
from carehome.schemas.auth import UserSession
from carehome.schemas.care_files import (
    CareFileDraftRequest,
    CareFileIdResponse,
    CareFileOverviewItem,
    CareFileRead,
    CareFileSubmitRequest,
    CareFileSummary,
    CareFileUpdateRequest,
    PdfUrlResponse,
)
from carehome.services import care_file_service
from carehome.services.care_file_forms import FormKindSpec, get_form_kind
from carehome.services.care_file_service import (
    CareFileConflictError,
    CareFileError,
    CareFileNotFoundError,
    CareFileStateError,
    CareFileValidationError,
    ResidentNotFoundError,
    TenantMismatchError,
    UnknownFormKindError,
)

router = APIRouter(tags=["care-files"])


# =============================================================================
# Helpers
# =============================================================================


def get_kind_spec(kind: str) -> FormKindSpec:
    try:
        return get_form_kind(kind)
    except UnknownFormKindError:
        raise HTTPException(status_code=404, detail=f"Unknown care file type '{kind}'")


def _raise_http(exc: CareFileError):
    if isinstance(exc, CareFileValidationError):
        raise HTTPException(status_code=422, detail=exc.errors)
    if isinstance(exc, (CareFileNotFoundError, ResidentNotFoundError, UnknownFormKindError)):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, TenantMismatchError):
        raise HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, (CareFileStateError, CareFileConflictError)):
        raise HTTPException(status_code=409, detail=str(exc))
    raise HTTPException(status_code=400, detail=str(exc))


def _to_read(record: CareFileRecord) -> CareFileRead:
    return CareFileRead(
        id=record.id,
        form_kind=record.form_kind,
        resident_id=record.resident_id,
        organization_id=record.organization_id,
        team_id=record.team_id,
        version=record.version,
        previous_version_id=record.previous_version_id,
        payload=record.payload or {},
        status=record.effective_status,
        submitted_at=record.submitted_at,
        reviewed_at=record.reviewed_at,
        reviewed_by=record.reviewed_by,
        created_by=record.created_by,
        last_modified_by=record.last_modified_by,
        created_at=record.created_at,
        last_modified_at=record.last_modified_at,
        pdf_status=record.pdf_status,
        pdf_error=record.pdf_error,
        pdf_file_id=record.pdf_file_id,
        pdf_generated_at=record.pdf_generated_at,
    )


def _to_summary(record: CareFileRecord) -> CareFileSummary:
    return CareFileSummary(
        id=record.id,
        form_kind=record.form_kind,
        resident_id=record.resident_id,
        version=record.version,
        status=record.effective_status,
        submitted_at=record.submitted_at,
        created_by=record.created_by,
        created_at=record.created_at,
        pdf_status=record.pdf_status,
        has_pdf=bool(record.pdf_file_id),
        summary=care_file_service.summarize(record),
    )


# =============================================================================
# Resident views
# =============================================================================


@router.get("/residents/{resident_id}/care-files", response_model=list[CareFileOverviewItem])
def get_care_file_overview(
    resident_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Latest version of every form kind for a resident."""
    overview = care_file_service.get_care_file_overview(db, resident_id, session.org_id)
    return [
        CareFileOverviewItem(
            form_kind=item.spec.name,
            label=item.spec.label,
            latest=_to_summary(item.latest) if item.latest else None,
            version_count=item.version_count,
        )
        for item in overview
    ]


@router.get(
    "/care-files/{kind}/residents/{resident_id}",
    response_model=list[CareFileSummary],
)
def list_for_resident(
    resident_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """All versions for a resident, newest first."""
    records = care_file_service.list_for_resident(db, spec.name, resident_id, session.org_id)
    return [_to_summary(r) for r in records]


@router.get(
    "/care-files/{kind}/residents/{resident_id}/latest",
    response_model=CareFileRead,
)
def get_latest_for_resident(
    resident_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    record = care_file_service.get_latest_for_resident(
        db, spec.name, resident_id, session.org_id
    )
    if not record:
        raise HTTPException(status_code=404, detail="No care file recorded")
    return _to_read(record)


@router.get(
    "/care-files/{kind}/residents/{resident_id}/archived",
    response_model=list[CareFileRead],
)
def get_archived_for_resident(
    resident_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Previous versions (everything except the newest)."""
    records = care_file_service.get_archived_for_resident(
        db, spec.name, resident_id, session.org_id
    )
    return [_to_read(r) for r in records]


# =============================================================================
# Writes
# =============================================================================


@router.post(
    "/care-files/{kind}",
    response_model=CareFileIdResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
def submit_care_file(
    data: CareFileSubmitRequest,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Submit a new care file (or save it as a draft)."""
    try:
        record = care_file_service.submit_care_file(
            db,
            kind=spec.name,
            resident_id=data.resident_id,
            org_id=session.org_id,
            team_id=data.team_id,
            payload=data.payload,
            actor=session.actor,
            saved_as_draft=data.saved_as_draft,
        )
    except CareFileError as e:
        _raise_http(e)
    return CareFileIdResponse(id=record.id)


@router.put(
    "/care-files/{kind}/drafts",
    response_model=CareFileIdResponse,
    dependencies=[Depends(require_csrf_header)],
)
def save_draft(
    data: CareFileDraftRequest,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create or update the resident's draft for this form."""
    try:
        record = care_file_service.save_draft(
            db,
            kind=spec.name,
            resident_id=data.resident_id,
            org_id=session.org_id,
            team_id=data.team_id,
            payload=data.payload,
            actor=session.actor,
            draft_id=data.draft_id,
        )
    except CareFileError as e:
        _raise_http(e)
    return CareFileIdResponse(id=record.id)


@router.put(
    "/care-files/{kind}/{record_id}",
    response_model=CareFileIdResponse,
    dependencies=[Depends(require_csrf_header)],
)
def update_care_file(
    record_id: UUID,
    data: CareFileUpdateRequest,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Edit a care file.

    Returns the id holding the edit: the same id when a draft is patched,
    a new id when a new version was created.
    """
    try:
        record = care_file_service.update_care_file(
            db,
            record_id=record_id,
            org_id=session.org_id,
            payload=data.payload,
            actor=session.actor,
            saved_as_draft=data.saved_as_draft,
            kind=spec.name,
        )
    except CareFileError as e:
        _raise_http(e)
    return CareFileIdResponse(id=record.id)


@router.post(
    "/care-files/{kind}/{record_id}/review",
    response_model=CareFileRead,
    dependencies=[Depends(require_csrf_header)],
)
def review_care_file(
    record_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(require_roles(ROLES_CAN_REVIEW)),
    db: Session = Depends(get_db),
):
    try:
        record = care_file_service.review_care_file(
            db, record_id, session.org_id, session.actor, kind=spec.name
        )
    except CareFileError as e:
        _raise_http(e)
    return _to_read(record)


@router.delete(
    "/care-files/{kind}/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_header)],
)
def delete_care_file(
    record_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(require_roles(ROLES_CAN_DELETE)),
    db: Session = Depends(get_db),
):
    """Delete a single version."""
    try:
        care_file_service.delete_care_file(db, record_id, session.org_id, kind=spec.name)
    except CareFileError as e:
        _raise_http(e)


# =============================================================================
# Reads and documents
# =============================================================================


@router.get("/care-files/{kind}/{record_id}", response_model=CareFileRead)
def get_care_file(
    record_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    record = care_file_service.get_care_file(db, record_id, org_id=session.org_id, kind=spec.name)
    if not record:
        raise HTTPException(status_code=404, detail="Care file not found")
    return _to_read(record)


@router.get("/care-files/{kind}/{record_id}/pdf-url", response_model=PdfUrlResponse)
def get_pdf_url(
    record_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Download URL for this version's PDF; null until generated."""
    url = care_file_service.get_pdf_url(db, record_id, session.org_id, kind=spec.name)
    return PdfUrlResponse(url=url)


@router.post(
    "/care-files/{kind}/{record_id}/pdf/regenerate",
    response_model=CareFileRead,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_csrf_header)],
)
def regenerate_pdf(
    record_id: UUID,
    spec: FormKindSpec = Depends(get_kind_spec),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Queue another PDF generation attempt after a failure."""
    try:
        record = care_file_service.regenerate_pdf(db, record_id, session.org_id, kind=spec.name)
    except CareFileError as e:
        _raise_http(e)
    return _to_read(record)
