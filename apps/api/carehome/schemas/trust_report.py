"""Trust incident report Pydantic schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TrustReportCreate(BaseModel):
    trust_name: Literal["BHSCT", "SEHSCT"]


class TrustReportData(BaseModel):
    """Editable trust report fields. All optional for partial updates."""

    model_config = ConfigDict(extra="forbid")

    # Patient demographics
    patient_first_name: str | None = None
    patient_surname: str | None = None
    patient_dob: str | None = None
    nhs_number: str | None = None
    patient_address: str | None = None
    patient_postcode: str | None = None

    # Incident details
    incident_date: str | None = None
    incident_time: str | None = None
    location_ward: str | None = None
    location_site: str | None = None

    # Classification
    incident_type: str | None = None
    incident_category: str | None = None
    severity_level: str | None = None
    harm_level: str | None = None

    # Description
    incident_description: str | None = None
    injury_details: str | None = None
    body_part_affected: str | None = None
    treatment_given: str | None = None
    immediate_actions: str | None = None

    # Reporter
    reporter_name: str | None = None
    reporter_job_title: str | None = None
    reporter_email: str | None = None
    reporter_phone: str | None = None

    # Witnesses
    witness1_name: str | None = None
    witness1_contact: str | None = None
    witness2_name: str | None = None
    witness2_contact: str | None = None

    # Notifications
    manager_informed: str | None = None
    manager_informed_date_time: str | None = None
    next_of_kin_informed: str | None = None
    next_of_kin_informed_date_time: str | None = None

    # Trust specific
    cqc_notification_required: bool | None = None
    cqc_notification_reason: str | None = None
    police_informed: bool | None = None
    police_reference_number: str | None = None
    safeguarding_concern: bool | None = None
    safeguarding_reference_number: str | None = None
    gp_name: str | None = None
    gp_practice: str | None = None
    additional_notes: str | None = None


class TrustReportUpdate(BaseModel):
    report_data: TrustReportData


class TrustReportSubmit(BaseModel):
    reference_number: str | None = Field(None, max_length=100)


class TrustReportRead(BaseModel):
    id: UUID
    incident_id: UUID
    resident_id: UUID
    organization_id: UUID
    team_id: str
    trust_name: str
    trust_full_name: str
    report_data: dict[str, Any]
    status: str
    reference_number: str | None
    submitted_at: datetime | None
    submitted_by: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
