"""Incident and trust report models."""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from carehome.db.base import Base
from carehome.db.types import JSONType


class Incident(Base):
    """
    An incident or fall report.

    Summary columns are denormalized from the validated form for filtering
    and statistics; the full form lives in `payload`.
    """

    __tablename__ = "incidents"
    __table_args__ = (
        Index("idx_incidents_org_date", "organization_id", "incident_date"),
        Index("idx_incidents_resident", "resident_id", "incident_date"),
        Index("idx_incidents_home", "organization_id", "home_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    team_id: Mapped[str] = mapped_column(String(100), nullable=False)
    resident_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("residents.id", ondelete="SET NULL"),
        nullable=True,
    )

    home_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(100), nullable=True)
    incident_date: Mapped[date] = mapped_column(Date, nullable=False)
    incident_time: Mapped[str] = mapped_column(String(10), nullable=False)
    incident_level: Mapped[str] = mapped_column(String(30), nullable=False)
    incident_types: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


class TrustReport(Base):
    """
    A Health and Social Care Trust variant of an incident report.

    `report_data` holds the trust-specific field set derived from the incident.
    """

    __tablename__ = "trust_reports"
    __table_args__ = (
        Index("idx_trust_reports_incident", "incident_id"),
        Index("idx_trust_reports_org_status", "organization_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    incident_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("incidents.id", ondelete="CASCADE"),
        nullable=False,
    )
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

    trust_name: Mapped[str] = mapped_column(String(20), nullable=False)
    trust_full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    report_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    submitted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )
