import uuid

import pytest

from carehome.db.enums import TrustName, TrustReportStatus
from carehome.schemas.incident import IncidentCreate
from carehome.services import incident_service, trust_report_service

from helpers import incident_form


@pytest.fixture
def resident_incident(db, test_org, test_resident):
    data = IncidentCreate(
        **incident_form(
            resident_id=str(test_resident.id),
            incident_level="permanent_harm",
            incident_types=["FallUnwitnessed", "Other"],
            injury_description="Fractured wrist",
            further_actions_advised="Refer to falls team",
            nurse_actions=["First aid", "Observations"],
            witness1_name="Tom Brown",
        )
    )
    return incident_service.create_incident(db, test_org.id, data, "user-1")


def test_harm_level_mapping():
    assert trust_report_service.map_harm_level("death") == "Death"
    assert trust_report_service.map_harm_level("permanent_harm") == "Severe Harm"
    assert trust_report_service.map_harm_level("minor_injury") == "Moderate Harm"
    assert trust_report_service.map_harm_level("no_harm") == "Low/No Harm"
    assert trust_report_service.map_harm_level("near_miss") == "Near Miss"
    assert trust_report_service.map_harm_level("other") == "Unknown"
    assert trust_report_service.map_harm_level(None) == "Unknown"


def test_cqc_notification_only_for_serious_levels():
    assert trust_report_service.requires_cqc_notification("death")
    assert trust_report_service.requires_cqc_notification("permanent_harm")
    assert not trust_report_service.requires_cqc_notification("minor_injury")


def test_create_from_incident_prefills_report(db, test_org, test_resident, resident_incident):
    report = trust_report_service.create_from_incident(
        db, resident_incident.id, test_org.id, TrustName.BHSCT, "user-1"
    )

    assert report.status == TrustReportStatus.DRAFT.value
    assert report.trust_full_name == "Belfast Health and Social Care Trust"
    assert report.resident_id == test_resident.id
    data = report.report_data
    assert data["patient_first_name"] == "Mary"
    assert data["incident_type"] == "FallUnwitnessed, Other"
    assert data["harm_level"] == "Severe Harm"
    assert data["injury_details"] == "Fractured wrist"
    assert data["immediate_actions"] == "Refer to falls team | First aid, Observations"
    assert data["cqc_notification_required"] is True
    assert data["cqc_notification_reason"] == "Serious injury to service user"
    assert data["nhs_number"] == test_resident.nhs_health_number
    assert data["gp_name"] == "Dr Patel"
    assert "witness2_name" not in data


def test_create_requires_resident(db, test_org):
    incident = incident_service.create_incident(
        db, test_org.id, IncidentCreate(**incident_form()), "user-1"
    )

    with pytest.raises(trust_report_service.IncidentMissingResidentError):
        trust_report_service.create_from_incident(
            db, incident.id, test_org.id, TrustName.SEHSCT, "user-1"
        )


def test_create_for_unknown_incident(db, test_org, other_org, resident_incident):
    with pytest.raises(trust_report_service.IncidentNotFoundError):
        trust_report_service.create_from_incident(
            db, uuid.uuid4(), test_org.id, TrustName.SEHSCT, "user-1"
        )
    with pytest.raises(trust_report_service.IncidentNotFoundError):
        trust_report_service.create_from_incident(
            db, resident_incident.id, other_org.id, TrustName.SEHSCT, "user-1"
        )


def test_report_lifecycle(db, test_org, resident_incident):
    report = trust_report_service.create_from_incident(
        db, resident_incident.id, test_org.id, TrustName.SEHSCT, "user-1"
    )

    report = trust_report_service.update_report(
        db, report.id, test_org.id, {"police_informed": False, "harm_level": "Moderate Harm"}
    )
    assert report.report_data["harm_level"] == "Moderate Harm"
    assert report.report_data["police_informed"] is False
    assert report.report_data["patient_first_name"] == "Mary"

    with pytest.raises(trust_report_service.TrustReportStateError):
        trust_report_service.mark_completed(db, report.id, test_org.id)

    report = trust_report_service.mark_submitted(
        db, report.id, test_org.id, "user-2", reference_number="SE-123"
    )
    assert report.status == TrustReportStatus.SUBMITTED.value
    assert report.submitted_by == "user-2"
    assert report.submitted_at is not None
    assert report.reference_number == "SE-123"

    report = trust_report_service.mark_completed(db, report.id, test_org.id)
    assert report.status == TrustReportStatus.COMPLETED.value

    with pytest.raises(trust_report_service.TrustReportStateError):
        trust_report_service.update_report(db, report.id, test_org.id, {"additional_notes": "x"})
    with pytest.raises(trust_report_service.TrustReportStateError):
        trust_report_service.mark_submitted(db, report.id, test_org.id, "user-2")


def test_reports_are_org_scoped(db, test_org, other_org, resident_incident):
    report = trust_report_service.create_from_incident(
        db, resident_incident.id, test_org.id, TrustName.BHSCT, "user-1"
    )

    assert trust_report_service.get_report(db, report.id, other_org.id) is None
    assert trust_report_service.list_for_incident(db, resident_incident.id, other_org.id) == []
    with pytest.raises(trust_report_service.TrustReportNotFoundError):
        trust_report_service.delete_report(db, report.id, other_org.id)

    trust_report_service.delete_report(db, report.id, test_org.id)
    assert trust_report_service.get_report(db, report.id, test_org.id) is None


# =============================================================================
# API
# =============================================================================

@pytest.mark.asyncio
async def test_trust_report_api_flow(authed_client, resident_incident):
    res = await authed_client.post(
        f"/incidents/{resident_incident.id}/trust-reports", json={"trust_name": "BHSCT"}
    )
    assert res.status_code == 201
    report_id = res.json()["id"]
    assert res.json()["report_data"]["harm_level"] == "Severe Harm"

    res = await authed_client.patch(
        f"/trust-reports/{report_id}",
        json={"report_data": {"safeguarding_concern": True}},
    )
    assert res.status_code == 200
    assert res.json()["report_data"]["safeguarding_concern"] is True

    res = await authed_client.post(
        f"/trust-reports/{report_id}/submit", json={"reference_number": "BH-9"}
    )
    assert res.status_code == 200
    assert res.json()["status"] == "submitted"

    res = await authed_client.post(f"/trust-reports/{report_id}/complete")
    assert res.status_code == 200
    assert res.json()["status"] == "completed"

    res = await authed_client.patch(
        f"/trust-reports/{report_id}", json={"report_data": {"additional_notes": "late"}}
    )
    assert res.status_code == 409

    res = await authed_client.get(f"/incidents/{resident_incident.id}/trust-reports")
    assert [r["id"] for r in res.json()] == [report_id]


@pytest.mark.asyncio
async def test_trust_report_api_rejects_unknown_trust_and_fields(authed_client, resident_incident):
    res = await authed_client.post(
        f"/incidents/{resident_incident.id}/trust-reports", json={"trust_name": "NHSCT"}
    )
    assert res.status_code == 422

    res = await authed_client.post(
        f"/incidents/{resident_incident.id}/trust-reports", json={"trust_name": "SEHSCT"}
    )
    report_id = res.json()["id"]
    res = await authed_client.patch(
        f"/trust-reports/{report_id}", json={"report_data": {"not_a_field": "x"}}
    )
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_trust_report_api_incident_without_resident(authed_client):
    res = await authed_client.post("/incidents", json=incident_form())
    incident_id = res.json()["id"]

    res = await authed_client.post(
        f"/incidents/{incident_id}/trust-reports", json={"trust_name": "BHSCT"}
    )
    assert res.status_code == 409


@pytest.mark.asyncio
async def test_trust_report_delete(authed_client, resident_incident):
    res = await authed_client.post(
        f"/incidents/{resident_incident.id}/trust-reports", json={"trust_name": "BHSCT"}
    )
    report_id = res.json()["id"]

    res = await authed_client.delete(f"/trust-reports/{report_id}")
    assert res.status_code == 204

    res = await authed_client.get(f"/trust-reports/{report_id}")
    assert res.status_code == 404
