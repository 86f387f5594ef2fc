"""Shared builders for tests (residents, staff, tokens, form payloads)."""
import uuid
from datetime import date

from sqlalchemy.orm import Session

from carehome.core.security import create_session_token
from carehome.db.enums import Role
from carehome.db.models import Membership, Organization, Resident, User


EPOCH_MS = 1_700_000_000_000
DOB_MS = EPOCH_MS - 86_400_000 * 365 * 85


def create_member(db: Session, org: Organization, role: Role) -> User:
    """Create a user with an active membership in `org`."""
    user = User(
        id=uuid.uuid4(),
        email=f"staff-{uuid.uuid4().hex[:8]}@test.com",
        display_name=f"Test {role.value}",
    )
    db.add(user)
    db.flush()
    db.add(
        Membership(
            id=uuid.uuid4(),
            user_id=user.id,
            organization_id=org.id,
            role=role.value,
        )
    )
    db.commit()
    return user


def create_resident(db: Session, org: Organization, **overrides) -> Resident:
    values = {
        "organization_id": org.id,
        "team_id": "team-a",
        "first_name": "Mary",
        "last_name": "Smith",
        "date_of_birth": date(1938, 4, 2),
        "room_number": "12",
        "nhs_health_number": "4857773456",
        "gp_name": "Dr Patel",
        "created_by": "seed",
    }
    values.update(overrides)
    resident = Resident(**values)
    db.add(resident)
    db.commit()
    return resident


def mint_token(user: User, org: Organization, role: Role) -> str:
    return create_session_token(
        user_id=user.id,
        org_id=org.id,
        role=role.value,
        token_version=user.token_version,
    )


_PAYLOADS = {
    "admission": {
        "first_name": "Mary",
        "last_name": "Smith",
        "date_of_birth": DOB_MS,
        "bedroom_number": "12",
        "gender": "FEMALE",
        "nhs_number": "4857773456",
        "kin_first_name": "Anne",
        "kin_last_name": "Smith",
        "kin_relationship": "Daughter",
        "kin_telephone_number": "07700900123",
        "kin_address": "1 High Street, Belfast",
        "kin_email": "anne@example.com",
        "emergency_contact_name": "Anne Smith",
        "emergency_contact_telephone_number": "07700900123",
        "emergency_contact_relationship": "Daughter",
        "emergency_contact_phone_number": "02890123456",
        "antibiotics_prescribed": False,
        "mobility_independent": True,
        "weight": "58kg",
        "height": "160cm",
        "iddsi_food": "Level 7",
        "iddsi_fluid": "Level 0",
        "diet_type": "Normal",
        "choking_risk": False,
    },
    "dependency": {
        "dependency_level": "B",
        "completed_by": "Nurse Jane",
        "completed_by_signature": "J. Jones",
        "date": EPOCH_MS,
    },
    "dnacpr": {
        "resident_name": "Mary Smith",
        "bedroom_number": "12",
        "date_of_birth": DOB_MS,
        "dnacpr": True,
        "reason": "TERMINAL-PROGRESSIVE",
        "date": EPOCH_MS,
        "discussed_resident": True,
        "discussed_relatives": True,
        "discussed_noks": False,
        "gp_date": EPOCH_MS,
        "gp_signature": "Dr Patel",
        "resident_nok_signature": "Anne Smith",
        "registered_nurse_signature": "J. Jones",
    },
    "skin-integrity": {
        "resident_name": "Mary Smith",
        "bedroom_number": "12",
        "date": EPOCH_MS,
        "sensory_perception": 3,
        "moisture": 2,
        "activity": 1,
        "mobility": 4,
        "nutrition": 3,
        "friction_shear": 2,
    },
    "peep": {
        "resident_name": "Mary Smith",
        "resident_date_of_birth": DOB_MS,
        "bedroom_number": "12",
        "understands": True,
        "staff_needed": 2,
        "steps": [{"name": "Alert", "description": "Sound the alarm and go to room 12"}],
        "oxygen_in_use": False,
        "resident_smokes": False,
        "furniture_fire_retardant": True,
        "completed_by": "Nurse Jane",
        "completed_by_signature": "J. Jones",
        "date": EPOCH_MS,
    },
    "photography-consent": {
        "resident_name": "Mary Smith",
        "bedroom_number": "12",
        "date_of_birth": DOB_MS,
        "healthcare_records": True,
        "social_activities_internal": True,
        "social_activities_external": False,
        "name_staff": "Nurse Jane",
        "staff_signature": "J. Jones",
        "date": EPOCH_MS,
    },
}

FORM_KIND_NAMES = tuple(_PAYLOADS)


def valid_payload(kind: str) -> dict:
    """A complete, valid payload for a care file form kind (fresh copy)."""
    return {
        key: [dict(item) for item in value] if isinstance(value, list) else value
        for key, value in _PAYLOADS[kind].items()
    }


def incident_form(**overrides) -> dict:
    """A valid incident report form body."""
    form = {
        "team_id": "team-a",
        "incident_date": "2026-10-01",
        "incident_time": "14:30",
        "home_name": "Oakview",
        "unit": "Rose Unit",
        "injured_person_first_name": "Mary",
        "injured_person_surname": "Smith",
        "injured_person_dob": "1938-04-02",
        "incident_types": ["FallUnwitnessed"],
        "detailed_description": "Found on the floor beside the bed.",
        "incident_level": "minor_injury",
        "completed_by_full_name": "Jane Jones",
        "completed_by_job_title": "Staff Nurse",
        "date_completed": "2026-10-01",
    }
    form.update(overrides)
    return form
