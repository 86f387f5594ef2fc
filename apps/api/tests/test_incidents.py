from datetime import date

import pytest

from carehome.schemas.incident import IncidentCreate
from carehome.services import incident_service

from helpers import incident_form


def _record(db, org_id, **overrides):
    return incident_service.create_incident(
        db, org_id, IncidentCreate(**incident_form(**overrides)), "user-1"
    )


def test_create_incident_keeps_full_form(db, test_org, test_resident):
    incident = _record(
        db,
        test_org.id,
        resident_id=str(test_resident.id),
        injury_description="Bruised hip",
    )

    assert incident.resident_id == test_resident.id
    assert incident.incident_date == date(2026, 10, 1)
    assert incident.incident_types == ["FallUnwitnessed"]
    assert incident.payload["injury_description"] == "Bruised hip"
    assert "witness1_name" not in incident.payload


def test_incident_for_other_org_resident_rejected(db, test_org, other_resident):
    with pytest.raises(incident_service.IncidentResidentNotFoundError):
        _record(db, test_org.id, resident_id=str(other_resident.id))


def test_incident_form_requires_types_and_level():
    with pytest.raises(ValueError):
        IncidentCreate(**incident_form(incident_types=[]))
    with pytest.raises(ValueError):
        IncidentCreate(**incident_form(incident_level="catastrophic"))
    with pytest.raises(ValueError):
        IncidentCreate(**incident_form(unexpected="field"))


def test_list_incidents_newest_first(db, test_org, other_org):
    older = _record(db, test_org.id, incident_date="2026-09-01")
    newer = _record(db, test_org.id, incident_date="2026-10-05")
    _record(db, other_org.id)

    assert [i.id for i in incident_service.list_incidents(db, test_org.id)] == [newer.id, older.id]
    assert [i.id for i in incident_service.list_incidents(db, test_org.id, limit=1)] == [newer.id]


def test_list_incidents_by_home(db, test_org):
    _record(db, test_org.id, home_name="Oakview")
    riverside = _record(db, test_org.id, home_name="Riverside")

    listed = incident_service.list_incidents(db, test_org.id, home_name="Riverside")
    assert [i.id for i in listed] == [riverside.id]


def test_incident_stats(db, test_org, test_resident):
    _record(db, test_org.id, incident_date="2026-10-10", incident_types=["FallWitnessed"],
            incident_level="no_harm", resident_id=str(test_resident.id))
    _record(db, test_org.id, incident_date="2026-09-20", incident_types=["Medication"],
            incident_level="near_miss", resident_id=str(test_resident.id))
    _record(db, test_org.id, incident_date="2026-06-01",
            incident_types=["FallUnwitnessed", "Medication"], incident_level="minor_injury")

    stats = incident_service.get_incident_stats(db, test_org.id, today=date(2026, 10, 18))

    assert stats.total_incidents == 3
    assert stats.falls_count == 2
    assert stats.medication_errors == 2
    assert stats.level_breakdown.no_harm == 1
    assert stats.level_breakdown.near_miss == 1
    assert stats.level_breakdown.minor_injury == 1
    assert stats.level_breakdown.death == 0
    assert stats.recent_incidents == 2
    assert stats.last_incident_date == date(2026, 10, 10)
    assert stats.days_since_last_incident == 8

    resident_stats = incident_service.get_incident_stats(
        db, test_org.id, resident_id=test_resident.id, today=date(2026, 10, 18)
    )
    assert resident_stats.total_incidents == 2
    assert resident_stats.falls_count == 1


def test_incident_stats_empty(db, test_org):
    stats = incident_service.get_incident_stats(db, test_org.id)

    assert stats.total_incidents == 0
    assert stats.last_incident_date is None
    assert stats.days_since_last_incident is None


# =============================================================================
# API
# =============================================================================

@pytest.mark.asyncio
async def test_create_and_fetch_incident(authed_client, test_resident):
    res = await authed_client.post(
        "/incidents", json=incident_form(resident_id=str(test_resident.id))
    )
    assert res.status_code == 201
    incident_id = res.json()["id"]

    res = await authed_client.get(f"/incidents/{incident_id}")
    assert res.status_code == 200
    assert res.json()["incident_level"] == "minor_injury"

    res = await authed_client.get(f"/residents/{test_resident.id}/incidents")
    assert [i["id"] for i in res.json()] == [incident_id]


@pytest.mark.asyncio
async def test_create_incident_invalid_form(authed_client):
    res = await authed_client.post("/incidents", json=incident_form(incident_types=[]))
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_create_incident_other_org_resident(authed_client, other_resident):
    res = await authed_client.post(
        "/incidents", json=incident_form(resident_id=str(other_resident.id))
    )
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_incident_stats_endpoint(authed_client):
    await authed_client.post("/incidents", json=incident_form())
    await authed_client.post(
        "/incidents", json=incident_form(incident_types=["Medication"], incident_level="no_harm")
    )

    res = await authed_client.get("/incidents/stats")
    assert res.status_code == 200
    body = res.json()
    assert body["total_incidents"] == 2
    assert body["falls_count"] == 1
    assert body["medication_errors"] == 1
    assert body["level_breakdown"]["minor_injury"] == 1


@pytest.mark.asyncio
async def test_other_org_incident_hidden(authed_client, db, other_org):
    incident = _record(db, other_org.id)

    res = await authed_client.get(f"/incidents/{incident.id}")
    assert res.status_code == 404
