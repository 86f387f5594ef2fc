"""Care file PDF generation job handler."""

from __future__ import annotations

import logging
from uuid import UUID

import httpx

from carehome.core.structured_logging import build_log_context
from carehome.db.models import Resident
from carehome.services import care_file_service, pdf_render_service, storage_service
from carehome.services.care_file_forms import UnknownFormKindError, get_form_kind

logger = logging.getLogger(__name__)


async def process_generate_care_file_pdf(
    db, job, transport: httpx.AsyncBaseTransport | None = None
) -> None:
    """
    Render, store and link the PDF for one record version.

    Best effort: renderer and storage failures are recorded on the record
    (pdf_status=failed, pdf_error) and logged, never raised, so the job is
    not retried.
    """
    record_id = (job.payload or {}).get("record_id")
    if not record_id:
        raise ValueError("Missing record_id in job payload")

    # Fresh read: the submitting transaction has committed by now
    record = care_file_service.get_care_file(db, UUID(record_id))
    log_context = build_log_context(
        org_id=str(job.organization_id), record_id=record_id, job_id=str(job.id)
    )
    if not record:
        logger.warning("Care file record gone before PDF generation", extra=log_context)
        return
    log_context["form_kind"] = record.form_kind

    if record.pdf_file_id:
        logger.info("Care file PDF already generated", extra=log_context)
        return

    try:
        spec = get_form_kind(record.form_kind)
    except UnknownFormKindError:
        logger.error("No renderer registered for form kind", extra=log_context)
        care_file_service.mark_pdf_failed(db, record, "Unknown form kind")
        return

    resident = db.get(Resident, record.resident_id) if spec.include_resident_snapshot else None
    body = pdf_render_service.build_render_body(record, resident)

    try:
        pdf_bytes = await pdf_render_service.render_pdf(
            spec.renderer_path, body, transport=transport
        )
    except pdf_render_service.PdfRenderError as exc:
        logger.error("Care file PDF generation failed: %s", exc, extra=log_context)
        care_file_service.mark_pdf_failed(db, record, str(exc))
        return

    try:
        storage_id = storage_service.store_bytes(
            pdf_bytes, "application/pdf", record.organization_id
        )
    except (storage_service.StorageError, OSError) as exc:
        logger.error("Care file PDF storage failed: %s", exc, extra=log_context)
        care_file_service.mark_pdf_failed(db, record, f"Storage failed: {exc}")
        return

    if care_file_service.link_pdf(db, record, storage_id):
        logger.info("Care file PDF generated", extra=log_context)
    else:
        # Lost the link race; the stored copy is an orphan
        try:
            storage_service.delete_file(storage_id)
        except (storage_service.StorageError, OSError) as exc:
            logger.warning("Orphan care file PDF not deleted: %s", exc, extra=log_context)
