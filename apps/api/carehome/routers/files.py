"""Local file download endpoint (dev storage backend only)."""

from fastapi import APIRouter, Depends, HTTPException, Response

from carehome.core.config import settings
from carehome.core.deps import get_current_session
from carehome.schemas.auth import UserSession
from carehome.services import storage_service

router = APIRouter(tags=["files"])


@router.get("/files/local/{storage_id:path}")
def download_local_file(
    storage_id: str,
    session: UserSession = Depends(get_current_session),
):
    """Serve a locally stored document. Files are scoped by organization prefix."""
    if settings.STORAGE_BACKEND != "local":
        raise HTTPException(status_code=404, detail="Not found")
    if not storage_id.startswith(f"{session.org_id}/"):
        raise HTTPException(status_code=404, detail="Not found")

    try:
        data = storage_service.read_local_file(storage_id)
    except storage_service.StorageError:
        raise HTTPException(status_code=404, detail="Not found")
    if data is None:
        raise HTTPException(status_code=404, detail="Not found")

    media_type = "application/pdf" if storage_id.endswith(".pdf") else "application/octet-stream"
    return Response(content=data, media_type=media_type)
