"""Object storage for generated care file documents.

Backends: local filesystem (dev/tests) or S3-compatible buckets. Storage ids
are opaque keys of the form ``{org_id}/care-files/{uuid}.pdf``.
"""

import logging
import os
import uuid

from botocore.exceptions import BotoCoreError, ClientError

from carehome.core.config import settings
from carehome.services.storage_client import get_s3_client

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "application/pdf": "pdf",
    "text/html": "html",
}


class StorageError(Exception):
    """Raised when a storage backend operation fails."""


# =============================================================================
# Backend selection
# =============================================================================


def _get_storage_backend() -> str:
    return (settings.STORAGE_BACKEND or "local").strip().lower()


def _get_local_storage_path() -> str:
    path = settings.LOCAL_STORAGE_PATH
    os.makedirs(path, exist_ok=True)
    return path


def _local_path_for(storage_id: str) -> str:
    """Resolve a storage id under the local root, rejecting traversal."""
    root = os.path.realpath(_get_local_storage_path())
    path = os.path.realpath(os.path.join(root, storage_id))
    if os.path.commonpath([root, path]) != root:
        raise StorageError("Invalid storage id")
    return path


def build_storage_id(org_id: uuid.UUID, content_type: str) -> str:
    ext = CONTENT_TYPE_EXTENSIONS.get(content_type, "bin")
    return f"{org_id}/care-files/{uuid.uuid4()}.{ext}"


# =============================================================================
# File operations
# =============================================================================


def store_bytes(data: bytes, content_type: str, org_id: uuid.UUID) -> str:
    """Store a binary blob and return its storage id."""
    storage_id = build_storage_id(org_id, content_type)
    backend = _get_storage_backend()

    if backend == "s3":
        try:
            s3 = get_s3_client()
            s3.put_object(
                Bucket=settings.S3_BUCKET,
                Key=storage_id,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 upload failed: {exc}") from exc
    else:
        path = _local_path_for(storage_id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    logger.info(
        "Stored file",
        extra={"storage_id": storage_id, "size": len(data), "backend": backend},
    )
    return storage_id


def get_url(storage_id: str | None) -> str | None:
    """Return a download URL for a stored file, or None when unavailable."""
    if not storage_id:
        return None

    if _get_storage_backend() == "s3":
        try:
            s3 = get_s3_client()
            return s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": settings.S3_BUCKET, "Key": storage_id},
                ExpiresIn=settings.SIGNED_URL_EXPIRY_SECONDS,
            )
        except (ClientError, BotoCoreError):
            logger.warning("Failed to presign URL", extra={"storage_id": storage_id})
            return None

    # Local: served by the files router (dev only)
    return f"/files/local/{storage_id}"


def read_local_file(storage_id: str) -> bytes | None:
    """Read a file from the local backend. Returns None when missing."""
    path = _local_path_for(storage_id)
    if not os.path.isfile(path):
        return None
    with open(path, "rb") as f:
        return f.read()


def delete_file(storage_id: str) -> None:
    """Delete a stored file. Missing files are ignored."""
    if _get_storage_backend() == "s3":
        try:
            s3 = get_s3_client()
            s3.delete_object(Bucket=settings.S3_BUCKET, Key=storage_id)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 delete failed: {exc}") from exc
        return

    path = _local_path_for(storage_id)
    if os.path.exists(path):
        os.remove(path)
