"""Client for the external PDF renderer.

The renderer is a template service: POST a record as JSON to a form-kind
specific path, get a PDF body back on 2xx or a text error otherwise.
"""

import logging
from typing import Any

import httpx

from carehome.core.config import settings
from carehome.db.models import CareFileRecord, Resident
from carehome.schemas.resident import ResidentRead

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_CHARS = 500


class PdfRenderError(Exception):
    """Renderer unreachable, misconfigured, or returned a non-2xx status."""


class PdfRendererNotConfiguredError(PdfRenderError):
    pass


def build_render_body(
    record: CareFileRecord, resident: Resident | None = None
) -> dict[str, Any]:
    """Full record as the renderer expects it: form fields plus record metadata."""
    body: dict[str, Any] = dict(record.payload or {})
    body.update(
        {
            "id": str(record.id),
            "form_kind": record.form_kind,
            "resident_id": str(record.resident_id),
            "organization_id": str(record.organization_id),
            "team_id": record.team_id,
            "version": record.version,
            "status": record.effective_status,
            "submitted_at": record.submitted_at.isoformat() if record.submitted_at else None,
            "created_by": record.created_by,
            "created_at": record.created_at.isoformat() if record.created_at else None,
        }
    )
    if resident is not None:
        body["resident"] = ResidentRead.model_validate(resident).model_dump(mode="json")
    return body


def _build_headers() -> dict[str, str]:
    headers = {"Content-Type": "application/json", "Accept": "application/pdf"}
    if settings.PDF_API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.PDF_API_TOKEN}"
    return headers


async def render_pdf(
    renderer_path: str,
    body: dict[str, Any],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """
    Render a document and return the PDF bytes.

    Raises:
        PdfRendererNotConfiguredError: PDF_API_URL is not an https:// URL
        PdfRenderError: transport failure or non-2xx response
    """
    if not settings.pdf_generation_enabled:
        raise PdfRendererNotConfiguredError("PDF renderer not configured")

    url = f"{settings.PDF_API_URL.rstrip('/')}{renderer_path}"
    try:
        async with httpx.AsyncClient(
            timeout=settings.PDF_API_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.post(url, json=body, headers=_build_headers())
    except httpx.HTTPError as exc:
        raise PdfRenderError(f"Renderer request failed: {type(exc).__name__}") from exc

    if not response.is_success:
        detail = response.text[:MAX_ERROR_BODY_CHARS]
        raise PdfRenderError(f"Renderer returned {response.status_code}: {detail}")

    if not response.content:
        raise PdfRenderError("Renderer returned an empty document")
    return response.content
