"""Care file service - versioned assessment records for every form kind.

Write rules:
- Submitted and reviewed versions are never modified. Editing one inserts a
  new row (version + 1) pointing back at the row it supersedes.
- A resident has at most one draft per form kind; draft saves patch it.
- Every non-draft insert schedules exactly one PDF generation job. Only that
  job writes pdf_file_id / pdf_generated_at.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from carehome.core.config import settings
from carehome.core.structured_logging import build_log_context
from carehome.db.enums import CareFileStatus, JobType, PdfStatus
from carehome.db.models import CareFileRecord, Resident
from carehome.services import job_service, storage_service
from carehome.services.care_file_forms import (
    FORM_KINDS,
    CareFileError,
    CareFileValidationError,
    FormKindSpec,
    UnknownFormKindError,
    get_form_kind,
    summarize_payload,
    validate_payload,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CareFileConflictError",
    "CareFileError",
    "CareFileNotFoundError",
    "CareFileStateError",
    "CareFileValidationError",
    "ResidentNotFoundError",
    "TenantMismatchError",
    "UnknownFormKindError",
]


class CareFileNotFoundError(CareFileError):
    pass


class ResidentNotFoundError(CareFileError):
    pass


class TenantMismatchError(CareFileError):
    """Record organization differs from the owning resident's organization."""


class CareFileStateError(CareFileError):
    """Operation not allowed in the record's current status."""


class CareFileConflictError(CareFileError):
    """Concurrent write lost the race for a version number or the draft slot."""


@dataclass
class CareFileOverview:
    spec: FormKindSpec
    latest: CareFileRecord | None
    version_count: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Record store
# =============================================================================


def get_care_file(
    db: Session,
    record_id: UUID,
    org_id: UUID | None = None,
    kind: str | None = None,
) -> CareFileRecord | None:
    """Fetch one version. Returns None when missing or outside the scope."""
    query = db.query(CareFileRecord).filter(CareFileRecord.id == record_id)
    if org_id:
        query = query.filter(CareFileRecord.organization_id == org_id)
    if kind:
        query = query.filter(CareFileRecord.form_kind == kind)
    return query.first()


def _require_care_file(
    db: Session, record_id: UUID, org_id: UUID, kind: str | None
) -> CareFileRecord:
    record = get_care_file(db, record_id, org_id=org_id, kind=kind)
    if not record:
        raise CareFileNotFoundError(f"Care file record {record_id} not found")
    return record


def list_for_resident(
    db: Session, kind: str, resident_id: UUID, org_id: UUID
) -> list[CareFileRecord]:
    """All versions of one form kind for a resident, newest first."""
    get_form_kind(kind)
    return (
        db.query(CareFileRecord)
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.form_kind == kind,
            CareFileRecord.organization_id == org_id,
        )
        .order_by(CareFileRecord.version.desc())
        .all()
    )


def get_latest_for_resident(
    db: Session, kind: str, resident_id: UUID, org_id: UUID
) -> CareFileRecord | None:
    """The current version (highest version number)."""
    get_form_kind(kind)
    return (
        db.query(CareFileRecord)
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.form_kind == kind,
            CareFileRecord.organization_id == org_id,
        )
        .order_by(CareFileRecord.version.desc())
        .first()
    )


def get_archived_for_resident(
    db: Session, kind: str, resident_id: UUID, org_id: UUID
) -> list[CareFileRecord]:
    """Every version except the newest. Empty for zero or one version."""
    return list_for_resident(db, kind, resident_id, org_id)[1:]


def get_care_file_overview(
    db: Session, resident_id: UUID, org_id: UUID
) -> list[CareFileOverview]:
    """Latest version and version count per registered form kind."""
    records = (
        db.query(CareFileRecord)
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.organization_id == org_id,
        )
        .order_by(CareFileRecord.form_kind, CareFileRecord.version.desc())
        .all()
    )
    latest: dict[str, CareFileRecord] = {}
    counts: dict[str, int] = {}
    for record in records:
        latest.setdefault(record.form_kind, record)
        counts[record.form_kind] = counts.get(record.form_kind, 0) + 1

    return [
        CareFileOverview(spec=spec, latest=latest.get(name), version_count=counts.get(name, 0))
        for name, spec in FORM_KINDS.items()
    ]


def summarize(record: CareFileRecord) -> dict[str, Any]:
    return summarize_payload(record.form_kind, record.payload or {})


def delete_care_file(db: Session, record_id: UUID, org_id: UUID, kind: str | None = None) -> None:
    """Remove exactly one version. Other versions and stored files are untouched."""
    record = _require_care_file(db, record_id, org_id, kind)
    db.delete(record)
    db.commit()
    logger.info(
        "Care file record deleted",
        extra=build_log_context(org_id=str(org_id), record_id=str(record_id), form_kind=kind),
    )


# =============================================================================
# Write path
# =============================================================================


def _load_resident(db: Session, resident_id: UUID, org_id: UUID) -> Resident:
    """Residents of other organizations read as missing."""
    resident = db.get(Resident, resident_id)
    if not resident or resident.organization_id != org_id:
        raise ResidentNotFoundError(f"Resident {resident_id} not found")
    return resident


def _resident_of(db: Session, record: CareFileRecord) -> Resident:
    """The record's resident, which must share the record's organization."""
    resident = db.get(Resident, record.resident_id)
    if not resident:
        raise ResidentNotFoundError(f"Resident {record.resident_id} not found")
    if resident.organization_id != record.organization_id:
        raise TenantMismatchError("Record and resident belong to different organizations")
    return resident


def _next_version(db: Session, resident_id: UUID, kind: str) -> int:
    current = (
        db.query(func.max(CareFileRecord.version))
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.form_kind == kind,
        )
        .scalar()
    )
    return (current or 0) + 1


def _find_draft(db: Session, resident_id: UUID, kind: str) -> CareFileRecord | None:
    return (
        db.query(CareFileRecord)
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.form_kind == kind,
            CareFileRecord.status == CareFileStatus.DRAFT.value,
        )
        .first()
    )


def _latest_final_id(db: Session, resident_id: UUID, kind: str) -> UUID | None:
    return (
        db.query(CareFileRecord.id)
        .filter(
            CareFileRecord.resident_id == resident_id,
            CareFileRecord.form_kind == kind,
            or_(
                CareFileRecord.status.is_(None),
                CareFileRecord.status != CareFileStatus.DRAFT.value,
            ),
        )
        .order_by(CareFileRecord.version.desc())
        .limit(1)
        .scalar()
    )


def _commit(db: Session, *, flush_only: bool = False) -> None:
    """Commit (or flush), turning a lost version or draft race into a conflict."""
    try:
        if flush_only:
            db.flush()
        else:
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise CareFileConflictError("Care file was modified concurrently, retry") from exc


def _schedule_pdf(db: Session, record: CareFileRecord) -> None:
    """Queue document generation for a non-draft record (same transaction)."""
    record.pdf_status = PdfStatus.PENDING.value
    record.pdf_error = None
    job_service.run_after(
        db,
        settings.PDF_GENERATION_DELAY_MS,
        JobType.GENERATE_CARE_FILE_PDF,
        {"record_id": str(record.id), "form_kind": record.form_kind},
        org_id=record.organization_id,
        max_attempts=1,
        commit=False,
    )


def _insert_version(
    db: Session,
    *,
    kind: str,
    resident_id: UUID,
    org_id: UUID,
    team_id: str,
    payload: dict[str, Any],
    status: CareFileStatus,
    actor: str,
    previous_version_id: UUID | None,
) -> CareFileRecord:
    now = _now()
    record = CareFileRecord(
        form_kind=kind,
        resident_id=resident_id,
        organization_id=org_id,
        team_id=team_id,
        version=_next_version(db, resident_id, kind),
        previous_version_id=previous_version_id,
        payload=payload,
        status=status.value,
        submitted_at=now if status == CareFileStatus.SUBMITTED else None,
        created_by=actor,
        last_modified_by=actor,
        created_at=now,
        last_modified_at=now,
    )
    db.add(record)
    _commit(db, flush_only=True)
    if status != CareFileStatus.DRAFT:
        _schedule_pdf(db, record)
    return record


def _patch_draft(
    db: Session, draft: CareFileRecord, payload: dict[str, Any], actor: str
) -> CareFileRecord:
    draft.payload = {**(draft.payload or {}), **payload}
    draft.last_modified_by = actor
    draft.last_modified_at = _now()
    return draft


def submit_care_file(
    db: Session,
    *,
    kind: str,
    resident_id: UUID,
    org_id: UUID,
    team_id: str | None,
    payload: dict[str, Any],
    actor: str,
    saved_as_draft: bool = False,
) -> CareFileRecord:
    """
    Create a record for a resident.

    Drafts go through the draft upsert. Non-draft submissions always insert
    a new submitted version and schedule PDF generation.

    Raises:
        CareFileValidationError, ResidentNotFoundError
    """
    if saved_as_draft:
        return save_draft(
            db,
            kind=kind,
            resident_id=resident_id,
            org_id=org_id,
            team_id=team_id,
            payload=payload,
            actor=actor,
        )

    validated = validate_payload(kind, payload)
    resident = _load_resident(db, resident_id, org_id)

    record = _insert_version(
        db,
        kind=kind,
        resident_id=resident.id,
        org_id=org_id,
        team_id=team_id or resident.team_id,
        payload=validated,
        status=CareFileStatus.SUBMITTED,
        actor=actor,
        previous_version_id=_latest_final_id(db, resident.id, kind),
    )
    _commit(db)
    db.refresh(record)
    logger.info(
        "Care file submitted",
        extra=build_log_context(
            user_id=actor,
            org_id=org_id,
            resident_id=resident_id,
            record_id=record.id,
            form_kind=kind,
        ),
    )
    return record


def save_draft(
    db: Session,
    *,
    kind: str,
    resident_id: UUID,
    org_id: UUID,
    team_id: str | None,
    payload: dict[str, Any],
    actor: str,
    draft_id: UUID | None = None,
) -> CareFileRecord:
    """
    Upsert the resident's single draft for a form kind.

    With draft_id the named draft is patched; otherwise the draft is located
    by (resident, kind). The partial unique index on drafts makes a lost
    race surface as CareFileConflictError instead of a second draft.
    """
    validated = validate_payload(kind, payload, draft=True)
    resident = _load_resident(db, resident_id, org_id)

    if draft_id:
        draft = _require_care_file(db, draft_id, org_id, kind)
        if draft.effective_status != CareFileStatus.DRAFT.value:
            raise CareFileStateError("Only drafts can be saved in place")
        if draft.resident_id != resident.id:
            raise CareFileStateError("Draft belongs to a different resident")
    else:
        draft = _find_draft(db, resident.id, kind)

    if draft:
        _patch_draft(db, draft, validated, actor)
    else:
        draft = _insert_version(
            db,
            kind=kind,
            resident_id=resident.id,
            org_id=org_id,
            team_id=team_id or resident.team_id,
            payload=validated,
            status=CareFileStatus.DRAFT,
            actor=actor,
            previous_version_id=_latest_final_id(db, resident.id, kind),
        )
    _commit(db)
    db.refresh(draft)
    logger.info(
        "Care file draft saved",
        extra=build_log_context(
            user_id=actor, org_id=str(org_id), record_id=str(draft.id), form_kind=kind
        ),
    )
    return draft


def update_care_file(
    db: Session,
    *,
    record_id: UUID,
    org_id: UUID,
    payload: dict[str, Any],
    actor: str,
    saved_as_draft: bool = False,
    kind: str | None = None,
) -> CareFileRecord:
    """
    Apply an edit to an existing record.

    - draft edited as draft: patched in place
    - submitted/reviewed edited as draft: goes to the resident's draft
    - anything finalised: new submitted version, old row untouched

    Returns the record that now holds the edit (same id only for drafts).

    Raises:
        CareFileNotFoundError, CareFileValidationError, TenantMismatchError
    """
    existing = _require_care_file(db, record_id, org_id, kind)
    kind = existing.form_kind
    validated = validate_payload(kind, payload, draft=saved_as_draft)
    resident = _resident_of(db, existing)
    is_draft = existing.effective_status == CareFileStatus.DRAFT.value

    if saved_as_draft:
        if is_draft:
            target = _patch_draft(db, existing, validated, actor)
        else:
            target = _find_draft(db, resident.id, kind)
            if target:
                _patch_draft(db, target, validated, actor)
            else:
                target = _insert_version(
                    db,
                    kind=kind,
                    resident_id=resident.id,
                    org_id=org_id,
                    team_id=existing.team_id,
                    payload=validated,
                    status=CareFileStatus.DRAFT,
                    actor=actor,
                    previous_version_id=existing.id,
                )
    else:
        previous_version_id = existing.id
        if is_draft:
            # Finalising: the draft slot is consumed by the new version
            previous_version_id = existing.previous_version_id
            db.delete(existing)
            db.flush()
        target = _insert_version(
            db,
            kind=kind,
            resident_id=resident.id,
            org_id=org_id,
            team_id=existing.team_id,
            payload=validated,
            status=CareFileStatus.SUBMITTED,
            actor=actor,
            previous_version_id=previous_version_id,
        )

    _commit(db)
    db.refresh(target)
    logger.info(
        "Care file updated",
        extra=build_log_context(
            user_id=actor,
            org_id=str(org_id),
            record_id=str(target.id),
            form_kind=kind,
        ),
    )
    return target


def review_care_file(
    db: Session, record_id: UUID, org_id: UUID, actor: str, kind: str | None = None
) -> CareFileRecord:
    """Mark a submitted record as reviewed."""
    record = _require_care_file(db, record_id, org_id, kind)
    if record.effective_status != CareFileStatus.SUBMITTED.value:
        raise CareFileStateError(
            f"Only submitted records can be reviewed (status: {record.effective_status})"
        )
    now = _now()
    record.status = CareFileStatus.REVIEWED.value
    record.reviewed_at = now
    record.reviewed_by = actor
    db.commit()
    db.refresh(record)
    return record


# =============================================================================
# PDF linkage
# =============================================================================


def regenerate_pdf(
    db: Session, record_id: UUID, org_id: UUID, kind: str | None = None
) -> CareFileRecord:
    """Queue a new generation attempt for a finalised record without a PDF."""
    record = _require_care_file(db, record_id, org_id, kind)
    if record.effective_status == CareFileStatus.DRAFT.value:
        raise CareFileStateError("Drafts do not have documents")
    if record.pdf_file_id:
        raise CareFileStateError("Document already generated")
    _schedule_pdf(db, record)
    db.commit()
    db.refresh(record)
    return record


def get_pdf_url(
    db: Session, record_id: UUID, org_id: UUID, kind: str | None = None
) -> str | None:
    """Download URL for this exact version's document, None if not generated."""
    record = get_care_file(db, record_id, org_id=org_id, kind=kind)
    if not record or not record.pdf_file_id:
        return None
    return storage_service.get_url(record.pdf_file_id)


def link_pdf(db: Session, record: CareFileRecord, storage_id: str) -> bool:
    """
    Attach a generated document to the record.

    Returns False without writing when a document is already linked.
    """
    if record.pdf_file_id:
        return False
    record.pdf_file_id = storage_id
    record.pdf_generated_at = _now()
    record.pdf_status = PdfStatus.SUCCEEDED.value
    record.pdf_error = None
    db.commit()
    return True


def mark_pdf_failed(db: Session, record: CareFileRecord, reason: str) -> None:
    record.pdf_status = PdfStatus.FAILED.value
    record.pdf_error = reason[:1000]
    db.commit()
