"""Resident Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ResidentCreate(BaseModel):
    team_id: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    room_number: str | None = Field(None, max_length=20)
    admission_date: date | None = None
    nhs_health_number: str | None = Field(None, max_length=20)
    phone_number: str | None = Field(None, max_length=50)
    gp_name: str | None = None
    gp_address: str | None = None
    gp_phone: str | None = None
    care_manager_name: str | None = None
    care_manager_address: str | None = None
    care_manager_phone: str | None = None
    allergies: str | None = None
    medical_conditions: str | None = None


class ResidentUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""

    team_id: str | None = Field(None, min_length=1, max_length=100)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    date_of_birth: date | None = None
    room_number: str | None = Field(None, max_length=20)
    admission_date: date | None = None
    nhs_health_number: str | None = Field(None, max_length=20)
    phone_number: str | None = Field(None, max_length=50)
    gp_name: str | None = None
    gp_address: str | None = None
    gp_phone: str | None = None
    care_manager_name: str | None = None
    care_manager_address: str | None = None
    care_manager_phone: str | None = None
    allergies: str | None = None
    medical_conditions: str | None = None


class ResidentStatusUpdate(BaseModel):
    is_active: bool


class ResidentRead(BaseModel):
    id: UUID
    organization_id: UUID
    team_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    room_number: str | None
    admission_date: date | None
    nhs_health_number: str | None
    phone_number: str | None
    gp_name: str | None
    gp_address: str | None
    gp_phone: str | None
    care_manager_name: str | None
    care_manager_address: str | None
    care_manager_phone: str | None
    allergies: str | None
    medical_conditions: str | None
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResidentListItem(BaseModel):
    id: UUID
    team_id: str
    first_name: str
    last_name: str
    date_of_birth: date
    room_number: str | None
    is_active: bool

    model_config = {"from_attributes": True}
