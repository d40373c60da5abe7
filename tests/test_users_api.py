"""
Tests for user assignment and per-user touchpoint endpoints.
"""
from datetime import datetime

import pytest


class TestAssignments:

    @pytest.mark.asyncio
    async def test_assign_is_idempotent(self, client, factory, member):
        district = await factory.district()
        lead = await factory.lead()
        body = {"action": "assign", "districtIds": [str(district.id)], "leadIds": [str(lead.id)]}

        first = await client.post(f"/api/users/{member.id}/leads", json=body)
        second = await client.post(f"/api/users/{member.id}/leads", json=body)

        assert first.status_code == 200
        assert first.json() == {"success": True, "action": "assign", "districts": 1, "leads": 1}
        assert second.json()["districts"] == 0
        assert second.json()["leads"] == 0

    @pytest.mark.asyncio
    async def test_unassign(self, client, factory, member):
        district = await factory.district()
        await factory.assign_district(member, district)

        response = await client.post(
            f"/api/users/{member.id}/leads", json={"action": "unassign", "districtIds": [str(district.id)]}
        )

        assert response.json()["districts"] == 1
        listing = await client.get(f"/api/users/{member.id}/leads")
        assert listing.json()["districts"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"action": "assign"},
        {"action": "assign", "districtIds": [], "leadIds": []},
        {"districtIds": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"]},
    ])
    async def test_needs_action_and_ids(self, client, member, body):
        response = await client.post(f"/api/users/{member.id}/leads", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request. Provide leadIds or districtIds and action."

    @pytest.mark.asyncio
    async def test_only_admins_assign(self, member_client, member):
        response = await member_client.post(
            f"/api/users/{member.id}/leads",
            json={"action": "assign", "districtIds": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"]},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        response = await client.post(
            "/api/users/00000000-0000-0000-0000-000000000000/leads",
            json={"action": "assign", "districtIds": ["3fa85f64-5717-4562-b3fc-2c963f66afa6"]},
        )
        assert response.status_code == 404


class TestUserLeads:

    @pytest.mark.asyncio
    async def test_lists_everything_assigned(self, member_client, factory, member, db_session):
        from lead_manager.models import UserLeadAssignment

        district = await factory.district()
        contact = await factory.contact(district)
        await factory.contact(await factory.district(district_name="Unassigned"))
        lead = await factory.lead(tenant="Avalern")
        await factory.assign_district(member, district)
        db_session.add(UserLeadAssignment(user_id=member.id, lead_id=lead.id))
        await db_session.commit()

        response = await member_client.get(f"/api/users/{member.id}/leads")

        assert response.status_code == 200
        data = response.json()
        assert [lead["id"] for lead in data["leads"]] == [str(lead.id)]
        assert [d["id"] for d in data["districts"]] == [str(district.id)]
        assert data["districts"][0]["assigned_to_me"] is True
        assert [c["id"] for c in data["districtContacts"]] == [str(contact.id)]
        assert data["count"] == {"leads": 1, "districts": 1, "districtContacts": 1}

    @pytest.mark.asyncio
    async def test_members_see_only_themselves(self, member_client, admin):
        response = await member_client.get(f"/api/users/{admin.id}/leads")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_sees_anyone(self, client, member):
        response = await client.get(f"/api/users/{member.id}/leads")
        assert response.status_code == 200
        assert response.json()["count"]["leads"] == 0


class TestUserTouchpoints:

    @pytest.mark.asyncio
    async def test_summary_by_type_in_range(self, member_client, factory, member, admin):
        lead = await factory.lead()
        await factory.touchpoint(lead_id=lead.id, type="call", created_by=member.id, created_at=datetime(2026, 4, 1, 9))
        await factory.touchpoint(lead_id=lead.id, type="call", created_by=member.id, created_at=datetime(2026, 4, 2, 23))
        await factory.touchpoint(lead_id=lead.id, type="email", created_by=member.id, created_at=datetime(2026, 4, 2, 8))
        await factory.touchpoint(lead_id=lead.id, type="email", created_by=member.id, created_at=datetime(2026, 4, 3, 8))
        await factory.touchpoint(lead_id=lead.id, type="email", created_by=admin.id, created_at=datetime(2026, 4, 2, 8))

        response = await member_client.get(
            f"/api/users/{member.id}/touchpoints", params={"startDate": "2026-04-01", "endDate": "2026-04-02"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["by_type"] == {"call": 2, "email": 1}
        assert [t["created_at"][:10] for t in data["touchpoints"]] == ["2026-04-02", "2026-04-02", "2026-04-01"]

    @pytest.mark.asyncio
    async def test_members_cannot_read_others(self, member_client, admin):
        response = await member_client.get(f"/api/users/{admin.id}/touchpoints")
        assert response.status_code == 403
