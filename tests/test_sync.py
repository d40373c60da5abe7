"""
Tests for the Instantly client and the sync endpoint.
"""
import json
from datetime import datetime

import httpx
import pytest
from sqlmodel import select

from lead_manager.api.deps import get_outreach_provider
from lead_manager.models import Lead, Touchpoint
from lead_manager.services.integrations.base import OutreachProvider
from lead_manager.services.integrations.instantly import InstantlyClient, InstantlyError


def instantly(handler) -> InstantlyClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return InstantlyClient(api_key="test-key", base_url="https://instantly.test/api/v2", client=client)


class TestInstantlyClient:

    @pytest.mark.asyncio
    async def test_get_emails_sends_auth_and_filters(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"emails": [{"id": "e1", "email": "a@b.co"}]})

        client = instantly(handler)
        emails = await client.get_emails(campaign_id="c1", status="replied")
        await client.aclose()

        assert emails == [{"id": "e1", "email": "a@b.co"}]
        assert seen["url"] == "https://instantly.test/api/v2/emails?campaign_id=c1&status=replied"
        assert seen["auth"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_add_leads_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "added": 1, "failed": 0})

        client = instantly(handler)
        result = await client.add_leads_to_campaign("c1", [{"email": "a@b.co"}])

        assert result["added"] == 1
        assert seen["path"] == "/api/v2/campaigns/c1/leads"
        assert seen["body"] == {"leads": [{"email": "a@b.co"}]}

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = instantly(lambda request: httpx.Response(401, json={"message": "bad key"}))

        with pytest.raises(InstantlyError) as exc_info:
            await client.get_emails()

        assert exc_info.value.status == 401
        assert exc_info.value.response == {"message": "bad key"}
        assert "401" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_json_raises(self):
        client = instantly(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        with pytest.raises(InstantlyError, match="Expected JSON"):
            await client.get_emails()

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(InstantlyError, match="Network error"):
            await instantly(handler).get_emails()

    def test_requires_api_key(self, monkeypatch):
        from lead_manager.config import settings

        monkeypatch.setattr(settings, "INSTANTLY_API_KEY", None)
        with pytest.raises(ValueError):
            InstantlyClient()


class FakeProvider(OutreachProvider):
    """Records pushed leads and serves canned emails per campaign."""

    def __init__(self, emails=None, failing=()):
        self.emails = emails or {}
        self.failing = set(failing)
        self.pushed = {}

    async def add_leads_to_campaign(self, campaign_id, leads):
        if campaign_id in self.failing:
            raise InstantlyError("Instantly API error: 500 Internal Server Error", status=500)
        self.pushed[campaign_id] = leads
        return {"success": True, "added": len(leads), "failed": 0}

    async def get_emails(self, campaign_id=None, status=None, limit=None, offset=None,
                         start_date=None, end_date=None):
        return self.emails.get(campaign_id, [])


@pytest.fixture
def use_provider(app):
    def install(provider):
        async def _provider():
            yield provider
        app.dependency_overrides[get_outreach_provider] = _provider
        return provider
    return install


class TestSyncEndpoint:

    @pytest.mark.asyncio
    async def test_pushes_leads_and_records_emails(self, client, factory, use_provider, db_session):
        campaign = await factory.campaign(instantly_campaign_id="inst-1")
        ana = await factory.lead(email="ana@realty.com", campaign_id=campaign.id)
        ben = await factory.lead(email="ben@realty.com", campaign_id=campaign.id)
        provider = use_provider(FakeProvider(emails={"inst-1": [
            {"id": "m1", "email": "ANA@realty.com", "status": "replied", "subject": "Hi",
             "sent_at": "2026-05-01T10:00:00Z"},
            {"id": "m2", "email": "ben@realty.com", "status": "sent", "sent_at": "2026-05-02T10:00:00Z"},
            {"id": "m3", "email": "stranger@realty.com", "status": "sent"},
        ]}))

        response = await client.post("/api/sync-instantly", json={"leadIds": [str(ana.id), str(ben.id)]})

        assert response.status_code == 200
        assert response.json() == {"syncedCount": 2, "totalEmails": 2, "errors": []}
        assert {lead["email"] for lead in provider.pushed["inst-1"]} == {"ana@realty.com", "ben@realty.com"}

        touchpoints = (await db_session.exec(select(Touchpoint).order_by(Touchpoint.external_id))).all()
        assert [(t.external_id, t.outcome) for t in touchpoints] == [("m1", "replied"), ("m2", None)]
        assert touchpoints[0].completed_at == datetime(2026, 5, 1, 10, 0)
        assert (await db_session.get(Lead, ana.id)).last_contacted_at == datetime(2026, 5, 1, 10, 0)

    @pytest.mark.asyncio
    async def test_resync_does_not_duplicate_touchpoints(self, client, factory, use_provider, db_session):
        campaign = await factory.campaign(instantly_campaign_id="inst-1")
        ana = await factory.lead(email="ana@realty.com", campaign_id=campaign.id)
        use_provider(FakeProvider(emails={"inst-1": [{"id": "m1", "email": "ana@realty.com", "status": "sent"}]}))

        for _ in range(2):
            await client.post("/api/sync-instantly", json={"leadIds": [str(ana.id)]})

        touchpoints = (await db_session.exec(select(Touchpoint))).all()
        assert len(touchpoints) == 1

    @pytest.mark.asyncio
    async def test_failures_are_reported_per_campaign(self, client, factory, use_provider):
        linked = await factory.campaign(name="Linked", instantly_campaign_id="inst-ok")
        broken = await factory.campaign(name="Broken", instantly_campaign_id="inst-down")
        unlinked = await factory.campaign(name="Unlinked")
        ok = await factory.lead(campaign_id=linked.id)
        down = await factory.lead(campaign_id=broken.id)
        orphan = await factory.lead(campaign_id=unlinked.id)
        loose = await factory.lead(email="loose@realty.com")
        use_provider(FakeProvider(failing={"inst-down"}))

        response = await client.post(
            "/api/sync-instantly", json={"leadIds": [str(i.id) for i in (ok, down, orphan, loose)]}
        )

        data = response.json()
        assert data["syncedCount"] == 1
        assert "loose@realty.com: lead is not assigned to a campaign" in data["errors"]
        assert "Campaign 'Unlinked' is not linked to an Instantly campaign" in data["errors"]
        assert any(error.startswith("Campaign 'Broken': Instantly call failed") for error in data["errors"])
        assert len(data["errors"]) == 3

    @pytest.mark.asyncio
    async def test_empty_selection_is_400(self, client, use_provider):
        use_provider(FakeProvider())
        response = await client.post("/api/sync-instantly", json={"leadIds": []})
        assert response.status_code == 400
        assert response.json() == {"error": "No leads selected for sync"}

    @pytest.mark.asyncio
    async def test_unconfigured_is_503(self, client, use_provider):
        use_provider(None)
        response = await client.post("/api/sync-instantly", json={"leadIds": []})
        assert response.status_code == 503
        assert response.json() == {"error": "Instantly API key is not configured"}
