"""Care file record model (one table shared by every form kind)."""

import uuid
from datetime import datetime

from sqlalchemy import (
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from carehome.db.base import Base
from carehome.db.enums import DEFAULT_CARE_FILE_STATUS
from carehome.db.types import JSONType


class CareFileRecord(Base):
    """
    One immutable version of a resident's assessment form.

    Editing a submitted record inserts a new row with version + 1; only drafts
    (and the PDF linkage columns) are ever updated in place.
    """

    __tablename__ = "care_file_records"
    __table_args__ = (
        UniqueConstraint(
            "resident_id", "form_kind", "version", name="uq_care_file_records_version"
        ),
        Index("idx_care_file_records_resident", "resident_id", "form_kind", "version"),
        Index("idx_care_file_records_org", "organization_id", "created_at"),
        # At most one draft per resident per form kind
        Index(
            "uq_care_file_records_one_draft",
            "resident_id",
            "form_kind",
            unique=True,
            postgresql_where=text("status = 'draft'"),
            sqlite_where=text("status = 'draft'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    form_kind: Mapped[str] = mapped_column(String(50), nullable=False)
    resident_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("residents.id", ondelete="CASCADE"),
        nullable=False,
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    team_id: Mapped[str] = mapped_column(String(100), nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    # Plain id, no FK: deleting a version must not rewrite its successor
    previous_version_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    # NULL on legacy rows, read as submitted
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    last_modified_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    last_modified_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), nullable=False
    )

    # Written only by the PDF job handler
    pdf_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pdf_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    pdf_file_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pdf_generated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    @property
    def effective_status(self) -> str:
        return self.status or DEFAULT_CARE_FILE_STATUS.value
