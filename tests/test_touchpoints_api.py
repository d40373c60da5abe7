"""
Tests for the touchpoint endpoints.
"""
from datetime import datetime

import pytest

from lead_manager.models import District, Lead


class TestCreateTouchpoint:

    @pytest.mark.asyncio
    async def test_completed_touchpoint_updates_lead(self, client, factory, db_session, admin):
        lead = await factory.lead()

        response = await client.post("/api/touchpoints", json={
            "lead_id": str(lead.id),
            "type": "call",
            "completed_at": "2026-05-01T16:30:00Z",
            "outcome": "voicemail",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Touchpoint created successfully"
        assert data["touchpoint"]["type"] == "call"
        assert data["touchpoint"]["created_by"] == str(admin.id)

        refreshed = await db_session.get(Lead, lead.id)
        assert refreshed.last_contacted_at == datetime(2026, 5, 1, 16, 30)

    @pytest.mark.asyncio
    async def test_scheduled_defaults_to_now(self, client, factory):
        lead = await factory.lead()
        before = datetime.utcnow()

        response = await client.post("/api/touchpoints", json={"lead_id": str(lead.id), "type": "email"})

        scheduled_at = datetime.fromisoformat(response.json()["touchpoint"]["scheduled_at"])
        assert scheduled_at >= before.replace(microsecond=0)
        assert response.json()["touchpoint"]["completed_at"] is None

    @pytest.mark.asyncio
    async def test_blank_outcome_is_stored_as_null(self, client, factory):
        lead = await factory.lead()
        response = await client.post(
            "/api/touchpoints", json={"lead_id": str(lead.id), "type": "note", "outcome": ""}
        )
        assert response.json()["touchpoint"]["outcome"] is None

    @pytest.mark.asyncio
    async def test_contact_touchpoint_updates_district(self, client, factory, db_session):
        district = await factory.district()
        contact = await factory.contact(district)

        response = await client.post("/api/touchpoints", json={
            "district_contact_id": str(contact.id),
            "type": "email",
            "completed_at": "2026-05-02T09:00:00",
            "outcome": "replied",
        })

        assert response.status_code == 201
        refreshed = await db_session.get(District, district.id)
        assert refreshed.last_contacted_at == datetime(2026, 5, 2, 9, 0)

    @pytest.mark.asyncio
    async def test_requires_exactly_one_parent(self, client, factory):
        district = await factory.district()
        contact = await factory.contact(district)
        lead = await factory.lead()

        neither = await client.post("/api/touchpoints", json={"type": "call"})
        both = await client.post("/api/touchpoints", json={
            "type": "call", "lead_id": str(lead.id), "district_contact_id": str(contact.id)
        })

        assert neither.status_code == 422
        assert both.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, client, factory):
        lead = await factory.lead()
        response = await client.post("/api/touchpoints", json={"lead_id": str(lead.id), "type": "fax"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_lead_is_404(self, client):
        response = await client.post(
            "/api/touchpoints",
            json={"lead_id": "00000000-0000-0000-0000-000000000000", "type": "call"},
        )
        assert response.status_code == 404


class TestListTouchpoints:

    @pytest.mark.asyncio
    async def test_newest_first_for_one_lead(self, client, factory):
        lead, other = await factory.lead(), await factory.lead()
        first = await factory.touchpoint(lead_id=lead.id)
        second = await factory.touchpoint(lead_id=lead.id)
        await factory.touchpoint(lead_id=other.id)

        response = await client.get("/api/touchpoints", params={"lead_id": str(lead.id)})

        assert [t["id"] for t in response.json()["touchpoints"]] == [str(second.id), str(first.id)]

    @pytest.mark.asyncio
    async def test_needs_a_parent(self, client):
        response = await client.get("/api/touchpoints")
        assert response.status_code == 400


class TestTouchpointCounts:

    @pytest.mark.asyncio
    async def test_scheduled_per_day(self, client, factory):
        campaign = await factory.campaign()
        lead = await factory.lead(campaign_id=campaign.id)
        avalern = await factory.contact(await factory.district())

        await factory.touchpoint(lead_id=lead.id, scheduled_at=datetime(2026, 6, 1, 9))
        await factory.touchpoint(lead_id=lead.id, scheduled_at=datetime(2026, 6, 1, 15))
        await factory.touchpoint(lead_id=lead.id, scheduled_at=datetime(2026, 6, 2, 9))
        await factory.touchpoint(
            lead_id=lead.id, scheduled_at=datetime(2026, 6, 2, 10), completed_at=datetime(2026, 6, 2, 10)
        )
        await factory.touchpoint(lead_id=lead.id, scheduled_at=datetime(2026, 7, 1, 9))
        await factory.touchpoint(district_contact_id=avalern.id, scheduled_at=datetime(2026, 6, 3, 9))

        params = {"startDate": "2026-06-01", "endDate": "2026-06-30"}
        everything = await client.get("/api/touchpoint-counts", params=params)
        crafty = await client.get(
            "/api/touchpoint-counts", params={**params, "company": "CraftyCode", "campaignId": str(campaign.id)}
        )

        assert everything.json()["counts"] == {"2026-06-01": 2, "2026-06-02": 1, "2026-06-03": 1}
        assert crafty.json()["counts"] == {"2026-06-01": 2, "2026-06-02": 1}

    @pytest.mark.asyncio
    async def test_end_date_is_inclusive(self, client, factory):
        lead = await factory.lead()
        await factory.touchpoint(lead_id=lead.id, scheduled_at=datetime(2026, 6, 30, 23, 59))

        response = await client.get(
            "/api/touchpoint-counts", params={"startDate": "2026-06-30", "endDate": "2026-06-30"}
        )

        assert response.json()["counts"] == {"2026-06-30": 1}
