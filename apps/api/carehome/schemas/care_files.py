"""Care file (assessment) Pydantic schemas.

One strict payload model per form kind. Enumerated values must match one of
the listed literals exactly; numbers and booleans are never coerced from
strings. Dates inside payloads are epoch milliseconds, as sent by the forms.
"""

from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr


RequiredText = Annotated[StrictStr, Field(min_length=1)]
Timestamp = Annotated[StrictInt, Field(gt=0)]
BradenScore = Annotated[StrictInt, Field(ge=1, le=4)]
FrictionShearScore = Annotated[StrictInt, Field(ge=1, le=3)]


class CareFilePayload(BaseModel):
    """Base for form payloads. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# Admission
# =============================================================================


class AdmissionPayload(CareFilePayload):
    # Resident information
    first_name: RequiredText
    last_name: RequiredText
    date_of_birth: StrictInt
    bedroom_number: RequiredText
    admitted_from: StrictStr | None = None
    religion: StrictStr | None = None
    telephone_number: StrictStr | None = None
    gender: Literal["MALE", "FEMALE"] | None = None
    nhs_number: RequiredText
    ethnicity: StrictStr | None = None

    # Next of kin
    kin_first_name: RequiredText
    kin_last_name: RequiredText
    kin_relationship: RequiredText
    kin_telephone_number: RequiredText
    kin_address: RequiredText
    kin_email: Annotated[StrictStr, Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")]

    # Emergency contact
    emergency_contact_name: RequiredText
    emergency_contact_telephone_number: RequiredText
    emergency_contact_relationship: RequiredText
    emergency_contact_phone_number: RequiredText

    # Care manager
    care_manager_name: StrictStr | None = None
    care_manager_telephone_number: StrictStr | None = None
    care_manager_relationship: StrictStr | None = None
    care_manager_phone_number: StrictStr | None = None
    care_manager_address: StrictStr | None = None
    care_manager_job_role: StrictStr | None = None

    # GP
    gp_name: StrictStr | None = None
    gp_address: StrictStr | None = None
    gp_phone_number: StrictStr | None = None

    # Clinical background
    allergies: StrictStr | None = None
    medical_history: StrictStr | None = None
    prescribed_medications: StrictStr | None = None
    consent_capacity_rights: StrictStr | None = None
    medication: StrictStr | None = None

    # Skin integrity
    skin_integrity_equipment: StrictStr | None = None
    skin_integrity_wounds: StrictStr | None = None

    # Sleep
    bedtime_routine: StrictStr | None = None

    # Infection control
    current_infection: StrictStr | None = None
    antibiotics_prescribed: StrictBool

    # Breathing
    prescribed_breathing: StrictStr | None = None

    # Mobility
    mobility_independent: StrictBool
    assistance_required: StrictStr | None = None
    equipment_required: StrictStr | None = None

    # Nutrition
    weight: RequiredText
    height: RequiredText
    iddsi_food: RequiredText
    iddsi_fluid: RequiredText
    diet_type: RequiredText
    nutritional_supplements: StrictStr | None = None
    nutritional_assistance_required: StrictStr | None = None
    choking_risk: StrictBool
    additional_comments: StrictStr | None = None

    # Continence / hygiene
    continence: StrictStr | None = None
    hygiene: StrictStr | None = None


# =============================================================================
# Dependency
# =============================================================================


class DependencyPayload(CareFilePayload):
    dependency_level: Literal["A", "B", "C", "D"]
    completed_by: RequiredText
    completed_by_signature: RequiredText
    date: Timestamp


# =============================================================================
# DNACPR
# =============================================================================


class DnacprPayload(CareFilePayload):
    resident_name: RequiredText
    bedroom_number: RequiredText
    date_of_birth: StrictInt

    dnacpr: StrictBool
    dnacpr_comments: StrictStr | None = None
    reason: Literal["TERMINAL-PROGRESSIVE", "UNSUCCESSFUL-CPR", "OTHER"]
    date: Timestamp

    # Discussed with
    discussed_resident: StrictBool
    discussed_resident_comments: StrictStr | None = None
    discussed_resident_date: StrictInt | None = None
    discussed_relatives: StrictBool
    discussed_relatives_comments: StrictStr | None = None
    discussed_relative_date: StrictInt | None = None
    discussed_noks: StrictBool
    discussed_noks_comments: StrictStr | None = None
    discussed_noks_date: StrictInt | None = None
    comments: StrictStr | None = None

    # Signatures
    gp_date: Timestamp
    gp_signature: RequiredText
    resident_nok_signature: RequiredText
    registered_nurse_signature: RequiredText


# =============================================================================
# Skin integrity (Braden scale)
# =============================================================================


class SkinIntegrityPayload(CareFilePayload):
    resident_name: RequiredText
    bedroom_number: RequiredText
    date: Timestamp

    sensory_perception: BradenScore
    moisture: BradenScore
    activity: BradenScore
    mobility: BradenScore
    nutrition: BradenScore
    friction_shear: FrictionShearScore


# =============================================================================
# PEEP (personal emergency evacuation plan)
# =============================================================================


class PeepStep(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: RequiredText
    description: RequiredText


class PeepPayload(CareFilePayload):
    resident_name: RequiredText
    resident_date_of_birth: StrictInt
    bedroom_number: RequiredText

    understands: StrictBool
    staff_needed: Annotated[StrictInt, Field(ge=0)]
    equipment_needed: StrictStr | None = None
    communication_needs: StrictStr | None = None

    steps: list[PeepStep] | None = None

    # Safety
    oxygen_in_use: StrictBool
    oxygen_comments: StrictStr | None = None
    resident_smokes: StrictBool
    resident_smokes_comments: StrictStr | None = None
    furniture_fire_retardant: StrictBool
    furniture_fire_retardant_comments: StrictStr | None = None

    completed_by: RequiredText
    completed_by_signature: RequiredText
    date: Timestamp


# =============================================================================
# Photography consent
# =============================================================================


class PhotographyConsentPayload(CareFilePayload):
    resident_name: RequiredText
    bedroom_number: RequiredText
    date_of_birth: StrictInt

    healthcare_records: StrictBool
    social_activities_internal: StrictBool
    social_activities_external: StrictBool

    resident_signature: StrictStr | None = None

    representative_name: StrictStr | None = None
    representative_relationship: StrictStr | None = None
    representative_signature: StrictStr | None = None
    representative_date: StrictInt | None = None

    name_staff: RequiredText
    staff_signature: RequiredText
    date: Timestamp


# =============================================================================
# Requests
# =============================================================================


class CareFileSubmitRequest(BaseModel):
    resident_id: UUID
    team_id: str | None = None  # Defaults to the resident's team
    saved_as_draft: bool = False
    payload: dict[str, Any]


class CareFileUpdateRequest(BaseModel):
    saved_as_draft: bool = False
    payload: dict[str, Any]


class CareFileDraftRequest(BaseModel):
    resident_id: UUID
    team_id: str | None = None
    draft_id: UUID | None = None
    payload: dict[str, Any]


# =============================================================================
# Responses
# =============================================================================


class CareFileIdResponse(BaseModel):
    id: UUID


class CareFileRead(BaseModel):
    """Full record version."""

    id: UUID
    form_kind: str
    resident_id: UUID
    organization_id: UUID
    team_id: str
    version: int
    previous_version_id: UUID | None
    payload: dict[str, Any]
    status: str
    submitted_at: datetime | None
    reviewed_at: datetime | None
    reviewed_by: str | None
    created_by: str
    last_modified_by: str
    created_at: datetime
    last_modified_at: datetime
    pdf_status: str | None
    pdf_error: str | None
    pdf_file_id: str | None
    pdf_generated_at: datetime | None


class CareFileSummary(BaseModel):
    """List item for a resident's versions."""

    id: UUID
    form_kind: str
    resident_id: UUID
    version: int
    status: str
    submitted_at: datetime | None
    created_by: str
    created_at: datetime
    pdf_status: str | None
    has_pdf: bool
    summary: dict[str, Any] = Field(default_factory=dict)


class CareFileOverviewItem(BaseModel):
    form_kind: str
    label: str
    latest: CareFileSummary | None = None
    version_count: int = 0


class PdfUrlResponse(BaseModel):
    url: str | None
