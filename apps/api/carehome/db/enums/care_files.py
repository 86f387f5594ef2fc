"""Care file (assessment record) enums."""

from enum import Enum


class CareFileStatus(str, Enum):
    """Lifecycle status of one care file record version."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"


class PdfStatus(str, Enum):
    """Document generation state for a non-draft record version."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Legacy rows without a status are treated as submitted
DEFAULT_CARE_FILE_STATUS = CareFileStatus.SUBMITTED
