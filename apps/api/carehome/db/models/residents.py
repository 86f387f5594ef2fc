"""Resident model."""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from carehome.db.base import Base


class Resident(Base):
    """
    A person living in a care home.

    Owns every care file record, incident and trust report written about them.
    """

    __tablename__ = "residents"
    __table_args__ = (
        Index("idx_residents_org_team", "organization_id", "team_id"),
        Index("idx_residents_org_active", "organization_id", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    team_id: Mapped[str] = mapped_column(String(100), nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    room_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    admission_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    nhs_health_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # GP
    gp_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gp_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    gp_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Care manager
    care_manager_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    care_manager_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    care_manager_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Clinical
    allergies: Mapped[str | None] = mapped_column(Text, nullable=True)
    medical_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
