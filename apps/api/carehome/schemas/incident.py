"""Incident Pydantic schemas."""

from datetime import date, datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictBool


IncidentLevelValue = Literal["death", "permanent_harm", "minor_injury", "no_harm", "near_miss"]


class IncidentCreate(BaseModel):
    """
    Incident / falls report form.

    Sections 1, 2, 4, 7, 8 and 20 are required; everything else is optional.
    """

    model_config = ConfigDict(extra="forbid")

    team_id: str = Field(..., min_length=1, max_length=100)

    # Section 1: Incident details
    incident_date: date
    incident_time: str = Field(..., min_length=1, max_length=10)
    home_name: str = Field(..., min_length=1, max_length=255)
    unit: str = Field(..., min_length=1, max_length=100)

    # Section 2: Injured person
    injured_person_first_name: str = Field(..., min_length=1)
    injured_person_surname: str = Field(..., min_length=1)
    injured_person_dob: str = Field(..., min_length=1)
    resident_id: UUID | None = None
    resident_internal_id: str | None = None
    date_of_admission: str | None = None
    health_care_number: str | None = None

    # Section 3: Status of injured person
    injured_person_status: list[str] | None = None
    contractor_employer: str | None = None

    # Section 4: Type of incident
    incident_types: list[str] = Field(..., min_length=1)
    type_other_details: str | None = None

    # Sections 5-6: Falls
    anticoagulant_medication: str | None = None
    fall_pathway: str | None = None

    # Section 7: Description
    detailed_description: str = Field(..., min_length=1)

    # Section 8: Level
    incident_level: IncidentLevelValue

    # Section 9: Injury
    injury_description: str | None = None
    body_part_injured: str | None = None

    # Sections 10-11: Treatment
    treatment_types: list[str] | None = None
    treatment_details: str | None = None
    vital_signs: str | None = None
    treatment_refused: StrictBool | None = None

    # Section 12: Witnesses
    witness1_name: str | None = None
    witness1_contact: str | None = None
    witness2_name: str | None = None
    witness2_contact: str | None = None

    # Sections 13-15: Follow-up
    nurse_actions: list[str] | None = None
    further_actions_advised: str | None = None
    prevention_measures: str | None = None

    # Sections 16-18: Notifications
    home_manager_informed_by: str | None = None
    home_manager_informed_date_time: str | None = None
    on_call_manager_name: str | None = None
    on_call_contacted_date_time: str | None = None
    nok_informed_who: str | None = None
    nok_informed_by: str | None = None
    nok_informed_date_time: str | None = None

    # Section 19: Trust form recipients
    care_manager_name: str | None = None
    care_manager_email: str | None = None
    key_worker_name: str | None = None
    key_worker_email: str | None = None

    # Section 20: Completion
    completed_by_full_name: str = Field(..., min_length=1)
    completed_by_job_title: str = Field(..., min_length=1)
    completed_by_signature: str | None = None
    date_completed: str = Field(..., min_length=1)


class IncidentRead(BaseModel):
    id: UUID
    organization_id: UUID
    team_id: str
    resident_id: UUID | None
    home_name: str
    unit: str | None
    incident_date: date
    incident_time: str
    incident_level: str
    incident_types: list[str]
    payload: dict[str, Any]
    created_by: str
    created_at: datetime

    model_config = {"from_attributes": True}


class IncidentLevelBreakdown(BaseModel):
    death: int = 0
    permanent_harm: int = 0
    minor_injury: int = 0
    no_harm: int = 0
    near_miss: int = 0


class IncidentStats(BaseModel):
    total_incidents: int
    falls_count: int
    medication_errors: int
    level_breakdown: IncidentLevelBreakdown
    recent_incidents: int  # last 30 days
    last_incident_date: date | None
    days_since_last_incident: int | None
