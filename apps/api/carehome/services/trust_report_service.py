"""Trust report service - Health and Social Care Trust incident report variants.

A trust report is generated from an incident, pre-filled with the incident
and resident details in the trust's format, then edited, submitted to the
trust (with their reference number) and finally completed.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from carehome.core.structured_logging import build_log_context
from carehome.db.enums import TRUST_FULL_NAMES, IncidentLevel, TrustName, TrustReportStatus
from carehome.db.models import Incident, Resident, TrustReport
from carehome.services import incident_service

logger = logging.getLogger(__name__)


class TrustReportError(Exception):
    """Base exception for trust report errors."""

    pass


class TrustReportNotFoundError(TrustReportError):
    pass


class IncidentNotFoundError(TrustReportError):
    pass


class IncidentMissingResidentError(TrustReportError):
    """Trust reports can only be raised for incidents involving a resident."""

    pass


class TrustReportStateError(TrustReportError):
    pass


HARM_LEVELS = {
    IncidentLevel.DEATH.value: "Death",
    IncidentLevel.PERMANENT_HARM.value: "Severe Harm",
    IncidentLevel.MINOR_INJURY.value: "Moderate Harm",
    IncidentLevel.NO_HARM.value: "Low/No Harm",
    IncidentLevel.NEAR_MISS.value: "Near Miss",
}

CQC_NOTIFICATION_REASONS = {
    IncidentLevel.DEATH.value: "Death of service user",
    IncidentLevel.PERMANENT_HARM.value: "Serious injury to service user",
}


def map_harm_level(incident_level: str | None) -> str:
    return HARM_LEVELS.get(incident_level or "", "Unknown")


def requires_cqc_notification(incident_level: str | None) -> bool:
    return incident_level in CQC_NOTIFICATION_REASONS


def _join(*parts: str | None, sep: str = " | ") -> str | None:
    joined = sep.join(p for p in parts if p)
    return joined or None


def build_report_data(incident: Incident, resident: Resident) -> dict[str, Any]:
    """Map an incident (and its resident) into the trust report field set."""
    form = incident.payload or {}
    nurse_actions = form.get("nurse_actions") or []
    data = {
        # Patient demographics
        "patient_first_name": form.get("injured_person_first_name"),
        "patient_surname": form.get("injured_person_surname"),
        "patient_dob": form.get("injured_person_dob"),
        "nhs_number": form.get("health_care_number") or resident.nhs_health_number,
        "patient_address": resident.gp_address,
        # Incident details
        "incident_date": incident.incident_date.isoformat(),
        "incident_time": incident.incident_time,
        "location_ward": incident.unit,
        "location_site": incident.home_name,
        # Classification
        "incident_type": _join(*(incident.incident_types or []), sep=", "),
        "incident_category": form.get("type_other_details"),
        "severity_level": incident.incident_level,
        "harm_level": map_harm_level(incident.incident_level),
        # Description
        "incident_description": form.get("detailed_description"),
        "injury_details": form.get("injury_description"),
        "body_part_affected": form.get("body_part_injured"),
        "treatment_given": form.get("treatment_details"),
        "immediate_actions": _join(
            form.get("further_actions_advised"), ", ".join(nurse_actions) or None
        ),
        # Reporter
        "reporter_name": form.get("completed_by_full_name"),
        "reporter_job_title": form.get("completed_by_job_title"),
        # Witnesses
        "witness1_name": form.get("witness1_name"),
        "witness1_contact": form.get("witness1_contact"),
        "witness2_name": form.get("witness2_name"),
        "witness2_contact": form.get("witness2_contact"),
        # Notifications
        "manager_informed": form.get("home_manager_informed_by"),
        "manager_informed_date_time": form.get("home_manager_informed_date_time"),
        "next_of_kin_informed": form.get("nok_informed_who"),
        "next_of_kin_informed_date_time": form.get("nok_informed_date_time"),
        # Trust specific (completed by staff)
        "cqc_notification_required": requires_cqc_notification(incident.incident_level),
        "cqc_notification_reason": CQC_NOTIFICATION_REASONS.get(incident.incident_level),
        "gp_name": resident.gp_name,
    }
    return {key: value for key, value in data.items() if value is not None}


# =============================================================================
# CRUD
# =============================================================================


def create_from_incident(
    db: Session,
    incident_id: UUID,
    org_id: UUID,
    trust_name: TrustName,
    created_by: str,
) -> TrustReport:
    """
    Generate a draft trust report from an incident.

    Raises:
        IncidentNotFoundError: incident missing or in another organization
        IncidentMissingResidentError: incident does not reference a resident
    """
    incident = incident_service.get_incident(db, incident_id, org_id)
    if not incident:
        raise IncidentNotFoundError(f"Incident {incident_id} not found")
    if not incident.resident_id:
        raise IncidentMissingResidentError("Incident does not reference a resident")

    resident = db.get(Resident, incident.resident_id)
    if not resident or resident.organization_id != org_id:
        raise IncidentMissingResidentError("Incident resident not found")

    report = TrustReport(
        incident_id=incident.id,
        resident_id=resident.id,
        organization_id=org_id,
        team_id=incident.team_id,
        trust_name=trust_name.value,
        trust_full_name=TRUST_FULL_NAMES[trust_name],
        report_data=build_report_data(incident, resident),
        status=TrustReportStatus.DRAFT.value,
        created_by=created_by,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(
        "Trust report created",
        extra=build_log_context(
            user_id=created_by, org_id=org_id, incident_id=incident_id, report_id=report.id
        ),
    )
    return report


def get_report(db: Session, report_id: UUID, org_id: UUID) -> TrustReport | None:
    return (
        db.query(TrustReport)
        .filter(TrustReport.id == report_id, TrustReport.organization_id == org_id)
        .first()
    )


def _require_report(db: Session, report_id: UUID, org_id: UUID) -> TrustReport:
    report = get_report(db, report_id, org_id)
    if not report:
        raise TrustReportNotFoundError(f"Trust report {report_id} not found")
    return report


def list_for_incident(db: Session, incident_id: UUID, org_id: UUID) -> list[TrustReport]:
    return (
        db.query(TrustReport)
        .filter(
            TrustReport.incident_id == incident_id,
            TrustReport.organization_id == org_id,
        )
        .order_by(TrustReport.created_at.desc())
        .all()
    )


def update_report(
    db: Session, report_id: UUID, org_id: UUID, updates: dict[str, Any]
) -> TrustReport:
    """Merge edited fields into report_data. Completed reports are frozen."""
    report = _require_report(db, report_id, org_id)
    if report.status == TrustReportStatus.COMPLETED.value:
        raise TrustReportStateError("Completed reports cannot be edited")
    report.report_data = {**(report.report_data or {}), **updates}
    db.commit()
    db.refresh(report)
    return report


def mark_submitted(
    db: Session,
    report_id: UUID,
    org_id: UUID,
    submitted_by: str,
    reference_number: str | None = None,
) -> TrustReport:
    report = _require_report(db, report_id, org_id)
    if report.status == TrustReportStatus.COMPLETED.value:
        raise TrustReportStateError("Report already completed")
    report.status = TrustReportStatus.SUBMITTED.value
    report.submitted_at = datetime.now(timezone.utc)
    report.submitted_by = submitted_by
    if reference_number:
        report.reference_number = reference_number
    db.commit()
    db.refresh(report)
    return report


def mark_completed(db: Session, report_id: UUID, org_id: UUID) -> TrustReport:
    report = _require_report(db, report_id, org_id)
    if report.status != TrustReportStatus.SUBMITTED.value:
        raise TrustReportStateError("Only submitted reports can be completed")
    report.status = TrustReportStatus.COMPLETED.value
    db.commit()
    db.refresh(report)
    return report


def delete_report(db: Session, report_id: UUID, org_id: UUID) -> None:
    report = _require_report(db, report_id, org_id)
    db.delete(report)
    db.commit()
