"""boto3 client for the care file document archive (S3 or S3-compatible)."""

from __future__ import annotations

from urllib.parse import urlparse

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from carehome.core.config import settings

# Rendered PDFs are small; fail fast rather than hold a worker slot
ARCHIVE_CONNECT_TIMEOUT = 5
ARCHIVE_READ_TIMEOUT = 30
ARCHIVE_MAX_ATTEMPTS = 3


def _archive_endpoint() -> str | None:
    endpoint = (settings.S3_ENDPOINT_URL or "").strip()
    return endpoint.rstrip("/") or None


def _is_gcs_interop(endpoint_url: str | None) -> bool:
    host = (urlparse(endpoint_url or "").hostname or "").lower()
    return host == "storage.googleapis.com" or host.endswith(".storage.googleapis.com")


def _signing_region(endpoint_url: str | None) -> str | None:
    region = settings.S3_REGION or None
    if _is_gcs_interop(endpoint_url) and region in (None, "us-east-1"):
        # GCS interoperability signs SigV4 requests with region "auto"
        return "auto"
    return region


def _archive_config() -> Config:
    options: dict = {
        "connect_timeout": ARCHIVE_CONNECT_TIMEOUT,
        "read_timeout": ARCHIVE_READ_TIMEOUT,
        "retries": {"max_attempts": ARCHIVE_MAX_ATTEMPTS, "mode": "standard"},
    }
    style = (settings.S3_URL_STYLE or "").strip().lower()
    if style in {"path", "virtual"}:
        options["s3"] = {"addressing_style": style}
    return Config(**options)


def get_s3_client() -> BaseClient:
    """Client for the bucket holding generated care file PDFs."""
    endpoint = _archive_endpoint()
    return boto3.client(
        "s3",
        region_name=_signing_region(endpoint),
        endpoint_url=endpoint,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        config=_archive_config(),
    )
